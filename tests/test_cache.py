"""Tests for the Redis cache helper and the cached public profile."""

import json
from unittest.mock import MagicMock

from songshare.core import cache as cache_module
from songshare.core.cache import RedisCache, public_user_key
from songshare.services.user_service import user_service


class TestRedisCache:
    def test_empty_url_disables_cache(self) -> None:
        cache = RedisCache(url="")

        assert not cache.enabled
        assert cache.set_cache("k", {"a": 1}) is False
        assert cache.get_cache("k") is None
        assert cache.delete_cache("k") is False

    def test_round_trips_json_through_client(self) -> None:
        cache = RedisCache(url="")
        cache.redis_client = MagicMock()
        cache.redis_client.get.return_value = json.dumps({"a": 1})

        assert cache.set_cache("k", {"a": 1}, expire=60) is True
        cache.redis_client.setex.assert_called_once_with("k", 60, json.dumps({"a": 1}))
        assert cache.get_cache("k") == {"a": 1}

    def test_client_errors_are_swallowed(self) -> None:
        cache = RedisCache(url="")
        cache.redis_client = MagicMock()
        cache.redis_client.get.side_effect = ConnectionError("down")

        assert cache.get_cache("k") is None


class TestPublicProfileCache:
    def test_profile_is_cached_and_served_from_cache(self, db, make_user, monkeypatch) -> None:
        user = make_user()
        fake = MagicMock()
        fake.get_cache.return_value = None
        monkeypatch.setattr("songshare.services.user_service.cache", fake)

        profile = user_service.get_public_user(db, user.id)

        assert profile["username"] == "alice"
        assert profile["imgUrl"] == user.img_url
        fake.set_cache.assert_called_once()
        assert fake.set_cache.call_args[0][0] == public_user_key(user.id)

        fake.get_cache.return_value = {"id": user.id, "username": "cached"}
        assert user_service.get_public_user(db, user.id)["username"] == "cached"

    def test_admin_update_invalidates_profile(self, db, make_user, monkeypatch) -> None:
        from songshare.schemas.user import AdminUserUpdate

        user = make_user()
        fake = MagicMock()
        monkeypatch.setattr("songshare.services.user_service.cache", fake)

        user_service.update_user(db, user.id, AdminUserUpdate(name="Renamed"))

        fake.delete_cache.assert_called_once_with(public_user_key(user.id))

    def test_module_singleton_is_disabled_in_tests(self) -> None:
        assert not cache_module.cache.enabled
