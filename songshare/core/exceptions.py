# ============================================================================
# FILE: songshare/core/exceptions.py
# ============================================================================
# Error taxonomy shared by services and the HTTP layer.
# Every error renders as {"message": ...} with its own status code.
# ============================================================================
from typing import Any, Dict

class SongShareError(Exception):
    """Base exception for all expected application failures"""

    status_code: int = 500

    def __init__(self, message: str, status_code: int = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to API response body"""
        return {"message": self.message}

class ValidationError(SongShareError):
    """Missing or malformed input"""
    status_code = 400

class UnauthorizedError(SongShareError):
    """No authenticated principal on a protected operation"""
    status_code = 401

class ForbiddenError(SongShareError):
    """Principal is neither the owner nor an administrator"""
    status_code = 403

class NotFoundError(SongShareError):
    """Referenced entity is absent or soft-deleted"""
    status_code = 404

    def __init__(self, entity: str, entity_id: Any = None):
        message = f"{entity} not found"
        super().__init__(message)
        self.entity = entity
        self.entity_id = entity_id

class ConflictError(SongShareError):
    """Uniqueness violation, e.g. a live duplicate username"""
    status_code = 409

class DependencyError(SongShareError):
    """Blob store or datastore failed unexpectedly"""
    status_code = 500
