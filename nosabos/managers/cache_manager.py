# nosabos/managers/cache_manager.py - Exercise answer keys and scaffolded levels, in Redis when reachable
import asyncio
import json
import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional

import redis.asyncio as redis

from nosabos.config import settings

logger = logging.getLogger(__name__)

SKILL_TREE_TTL_SECONDS = 86400


def exercise_key(exercise_id: str) -> str:
    return f"exercise:{exercise_id}"


def skill_tree_key(level: str) -> str:
    return f"skill_tree:{level.upper()}"


class InMemoryCache:
    """Process-local stand-in for Redis with per-key expiry"""

    def __init__(self):
        self._values: Dict[str, str] = {}
        self._expires_at: Dict[str, datetime] = {}

    def _sweep(self):
        now = datetime.utcnow()
        for key in [k for k, expires_at in self._expires_at.items() if now > expires_at]:
            self._values.pop(key, None)
            self._expires_at.pop(key, None)

    async def set(self, key: str, value: str, ex: int = None):
        self._sweep()
        self._values[key] = value
        if ex:
            self._expires_at[key] = datetime.utcnow() + timedelta(seconds=ex)
        else:
            self._expires_at.pop(key, None)

    async def get(self, key: str) -> Optional[str]:
        expires_at = self._expires_at.get(key)
        if expires_at and datetime.utcnow() > expires_at:
            await self.delete(key)
            return None
        return self._values.get(key)

    async def delete(self, key: str):
        self._values.pop(key, None)
        self._expires_at.pop(key, None)

    async def close(self):
        self._values.clear()
        self._expires_at.clear()

    def __len__(self):
        return len(self._values)


class CacheManager:
    """JSON values in Redis, or in memory when no Redis host answers.

    Generated exercises live here until they are graded; scaffolded skill tree
    levels are shared between workers. A Redis error mid-flight switches the
    manager to the in-memory cache for the rest of the process.
    """

    def __init__(self, host: str = None, port: int = None, db: int = None):
        self.redis = None
        self.fallback_cache = InMemoryCache()
        self.using_fallback = False
        self.connection_tested = False
        self._lock = asyncio.Lock()

        self.host = host or settings.redis_host
        self.port = port or settings.redis_port
        self.db = db or settings.redis_db

        logger.info(f"Cache manager targeting Redis at {self.host}:{self.port}/{self.db}")

    async def _connect(self, host: str) -> Optional[redis.Redis]:
        client = redis.Redis(
            host=host,
            port=self.port,
            db=self.db,
            password=settings.redis_password,
            ssl=settings.redis_ssl,
            decode_responses=True,
            socket_timeout=settings.redis_socket_timeout,
            socket_connect_timeout=settings.redis_connection_timeout,
            retry_on_timeout=True,
            health_check_interval=30
        )
        try:
            await asyncio.wait_for(client.ping(), timeout=settings.redis_connection_timeout)
        except Exception as e:
            logger.debug(f"❌ Redis at {host}:{self.port} unavailable: {e}")
            await client.close()
            return None

        logger.info(f"✅ Redis connected: {host}:{self.port}")
        return client

    async def _ensure_backend(self):
        if self.connection_tested:
            return

        async with self._lock:
            if self.connection_tested:
                return

            if settings.mock_redis:
                logger.info("🔄 mock_redis set, using in-memory cache")
            else:
                for host in settings.get_redis_hosts_to_try():
                    self.redis = await self._connect(host)
                    if self.redis:
                        break
                if not self.redis:
                    logger.warning("🔄 No Redis host answered, using in-memory cache")

            self.using_fallback = self.redis is None
            self.connection_tested = True

    def _fail_over(self, action: str, key: str, error: Exception):
        logger.error(f"Redis {action} failed for {key}: {error}")
        if not self.using_fallback:
            logger.warning("Switching to in-memory cache after Redis error")
            self.using_fallback = True

    # ==================== RAW KEY ACCESS ====================

    async def _set(self, key: str, value: Any, ex: int):
        await self._ensure_backend()
        payload = json.dumps(value, default=str)

        if not self.using_fallback:
            try:
                await self.redis.set(key, payload, ex=ex)
                return
            except Exception as e:
                self._fail_over("set", key, e)
        await self.fallback_cache.set(key, payload, ex=ex)

    async def _get(self, key: str) -> Optional[Any]:
        await self._ensure_backend()

        payload = None
        if not self.using_fallback:
            try:
                payload = await self.redis.get(key)
            except Exception as e:
                self._fail_over("get", key, e)
        if self.using_fallback:
            payload = await self.fallback_cache.get(key)
        return json.loads(payload) if payload else None

    async def _delete(self, key: str):
        await self._ensure_backend()

        if not self.using_fallback:
            try:
                await self.redis.delete(key)
                return
            except Exception as e:
                self._fail_over("delete", key, e)
        await self.fallback_cache.delete(key)

    # ==================== EXERCISES ====================

    async def set_exercise(self, exercise_id: str, exercise: Dict[str, Any]):
        """Keep a generated exercise, answer key included, until it is graded or expires"""
        await self._set(
            exercise_key(exercise_id),
            {**exercise, "cachedAt": datetime.utcnow().isoformat()},
            settings.exercise_ttl_seconds,
        )
        logger.debug(f"Exercise {exercise_id} cached for {settings.exercise_ttl_seconds}s")

    async def get_exercise(self, exercise_id: str) -> Optional[Dict[str, Any]]:
        return await self._get(exercise_key(exercise_id))

    async def delete_exercise(self, exercise_id: str):
        await self._delete(exercise_key(exercise_id))

    # ==================== SKILL TREE ====================

    async def set_skill_tree(self, level: str, units: List[Dict[str, Any]]):
        await self._set(skill_tree_key(level), units, SKILL_TREE_TTL_SECONDS)

    async def get_skill_tree(self, level: str) -> Optional[List[Dict[str, Any]]]:
        return await self._get(skill_tree_key(level))

    async def get_connection_status(self) -> Dict[str, Any]:
        await self._ensure_backend()

        if self.using_fallback:
            return {"type": "fallback", "connected": True, "keys": len(self.fallback_cache)}

        status = {"type": "redis", "connected": True, "host": self.host, "port": self.port}
        try:
            await self.redis.ping()
        except Exception as e:
            status["connected"] = False
            status["error"] = str(e)
        return status

    async def close(self):
        if self.redis:
            try:
                await self.redis.close()
                logger.info("Redis connection closed")
            except Exception as e:
                logger.error(f"Error closing Redis connection: {e}")
        await self.fallback_cache.close()
