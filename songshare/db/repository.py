# ============================================================================
# FILE: songshare/db/repository.py
# ============================================================================
# Every entity read goes through a repository so the "exclude deleted" rule
# lives in exactly one place. Joins reuse live() for their ON clause.
# ============================================================================
from typing import Dict, Generic, Iterable, List, Optional, Type, TypeVar
from sqlalchemy.orm import Query, Session
from songshare.db.models.user import User
from songshare.db.models.song import Song
from songshare.db.models.favorite import Favorite
from songshare.db.models.playlist import Playlist
from songshare.db.models.history import History

ModelT = TypeVar("ModelT")

class SoftDeleteRepository(Generic[ModelT]):
    """Query helpers for a soft-deletable model"""

    def __init__(self, model: Type[ModelT]):
        self.model = model

    def live(self):
        """Predicate matching rows that are not soft-deleted"""
        return self.model.is_deleted.is_(False)

    def query(self, db: Session, include_deleted: bool = False) -> Query:
        query = db.query(self.model)
        if include_deleted:
            return query
        return query.filter(self.live())

    def get(self, db: Session, entity_id: int) -> Optional[ModelT]:
        return self.query(db).filter(self.model.id == entity_id).first()

    def get_many(self, db: Session, ids: Iterable[int]) -> Dict[int, ModelT]:
        """Batched lookup keyed by id; missing or deleted ids are simply absent"""
        ids = set(ids)
        if not ids:
            return {}
        rows = self.query(db).filter(self.model.id.in_(ids)).all()
        return {row.id: row for row in rows}

    def find_one(self, db: Session, **filters) -> Optional[ModelT]:
        return self.query(db).filter_by(**filters).first()

    def find(self, db: Session, **filters) -> List[ModelT]:
        return self.query(db).filter_by(**filters).all()

    def count(self, db: Session, **filters) -> int:
        return self.query(db).filter_by(**filters).count()

    def soft_delete(self, db: Session, entity: ModelT) -> ModelT:
        """Flag the row as deleted; caller commits"""
        entity.is_deleted = True
        db.add(entity)
        return entity

user_repository = SoftDeleteRepository(User)
song_repository = SoftDeleteRepository(Song)
favorite_repository = SoftDeleteRepository(Favorite)
playlist_repository = SoftDeleteRepository(Playlist)
history_repository = SoftDeleteRepository(History)
