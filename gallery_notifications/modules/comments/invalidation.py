"""Page-cache invalidation after a comment changes what public pages show."""

from __future__ import annotations

from typing import List, Optional

from gallery_notifications.core.cache.redis_cache import RedisCache, cache_manager

from .common import logger
from .entities import EntityKind, ResolvedEntity

GALLERY_SCOPE = "gallery:*"


def comment_list_key(kind: EntityKind, entity_id: str) -> str:
    return f"comments:{kind.value}:{entity_id}:list"


def comment_list_scope(kind: EntityKind, entity_id: str) -> str:
    return f"comments:{kind.value}:{entity_id}:*"


class CacheInvalidator:
    """Translate a commented entity into cache scopes and drop them.

    Photos and albums are cached per owner nickname; events, challenges and
    anything without a nickname fall back to the broad gallery scope.
    """

    def __init__(self, cache: RedisCache = cache_manager):
        self.cache = cache

    def scopes_for(
        self, kind: EntityKind, entity_id: str, entity: Optional[ResolvedEntity] = None
    ) -> List[str]:
        owner = entity.owner if entity else None
        if kind.notifies_admin_group or owner is None or not owner.nickname:
            page_scope = GALLERY_SCOPE
        else:
            page_scope = f"profile:{owner.nickname}:*"
        return [page_scope, comment_list_scope(kind, entity_id)]

    async def invalidate(self, scopes: List[str]) -> None:
        for scope in scopes:
            try:
                await self.cache.invalidate(scope)
            except Exception as exc:
                logger.warning("Cache invalidation for %s failed: %s", scope, exc)


def get_cache_invalidator() -> CacheInvalidator:
    return CacheInvalidator(cache_manager)


__all__ = [
    "CacheInvalidator",
    "GALLERY_SCOPE",
    "comment_list_key",
    "comment_list_scope",
    "get_cache_invalidator",
]
