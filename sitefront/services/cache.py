"""
Redis cache for public site configs

- One entry per resolved key (site:subdomain:<v> / site:domain:<v>), short TTL
- Every entry is registered under invalidation tags so admin edits can drop
  all keys of a site at once (a site is reachable by subdomain and by each of
  its custom domains)
- Redis down → caching disabled, reads go straight to the registry
"""

import json
import logging
from typing import Iterable, List, Optional

import redis

logger = logging.getLogger("sitefront.cache")

DEFAULT_TTL = 120        # seconds
KEY_PREFIX = "sitecfg:"
TAG_PREFIX = "sitecfg:tag:"


def cache_key(*parts: str) -> str:
    return KEY_PREFIX + ":".join(str(p) for p in parts)


def site_tags(subdomain: str) -> List[str]:
    return ["site", f"site:{subdomain}"]


def domain_tag(domain: str) -> str:
    return f"domain:{domain}"


class SiteConfigCache:
    def __init__(self, client: Optional["redis.Redis"], ttl: int = DEFAULT_TTL):
        self._client = client
        self.ttl = ttl

    @classmethod
    def from_url(cls, url: str, ttl: int = DEFAULT_TTL) -> "SiteConfigCache":
        try:
            client = redis.Redis.from_url(
                url,
                decode_responses=True,
                socket_connect_timeout=2,
                socket_timeout=2,
            )
            client.ping()
            logger.info("Site config cache connected: %s", url)
        except redis.RedisError as e:
            logger.warning("Site config cache unavailable: %s, caching disabled", e)
            client = None
        return cls(client, ttl)

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def get(self, key: str) -> Optional[dict]:
        if self._client is None:
            return None
        try:
            data = self._client.get(cache_key(key))
            return json.loads(data) if data else None
        except (redis.RedisError, ValueError) as e:
            logger.debug("Cache get error: %s", e)
            return None

    def set(self, key: str, value: dict, tags: Iterable[str] = ()) -> None:
        if self._client is None:
            return
        full_key = cache_key(key)
        try:
            self._client.setex(full_key, self.ttl, json.dumps(value, default=str))
            for tag in tags:
                tag_key = TAG_PREFIX + tag
                self._client.sadd(tag_key, full_key)
                # tag sets outlive their members by one window at most
                self._client.expire(tag_key, self.ttl * 2)
        except redis.RedisError as e:
            logger.debug("Cache set error: %s", e)

    def invalidate_tags(self, *tags: str) -> int:
        """Drop every entry registered under any of `tags`; returns keys removed."""
        if self._client is None:
            return 0
        removed = 0
        try:
            for tag in tags:
                tag_key = TAG_PREFIX + tag
                members = list(self._client.smembers(tag_key))
                if members:
                    removed += self._client.delete(*members)
                self._client.delete(tag_key)
        except redis.RedisError as e:
            logger.debug("Cache invalidate error: %s", e)
        if removed:
            logger.info("Invalidated %d cached site configs for tags %s", removed, ", ".join(tags))
        return removed
