# ============================================================================
# FILE: tunetip/core/cache.py
# ============================================================================
import redis
from typing import Dict, Mapping, Optional
from tunetip.config import settings
import logging

logger = logging.getLogger(__name__)

class RankSnapshotCache:
    """
    Last known leaderboard positions, one Redis hash per board.

    The connection is opened on first use. When Redis cannot be reached the
    cache reports no history and drops writes, so ranking keeps working
    without it.
    """

    def __init__(self, url: Optional[str] = None, prefix: str = "tunetip:ranking"):
        self.url = url or settings.REDIS_URL
        self.prefix = prefix
        self._redis: Optional[redis.Redis] = None
        self._unavailable = False

    def _key(self, board_key: str) -> str:
        return f"{self.prefix}:{board_key}"

    def _client(self) -> Optional[redis.Redis]:
        if self._redis is None and not self._unavailable:
            try:
                client = redis.from_url(self.url, decode_responses=True, socket_connect_timeout=2)
                client.ping()
                self._redis = client
                logger.info("Redis connection established")
            except redis.RedisError as e:
                self._unavailable = True
                logger.warning(f"Redis connection failed: {e}. Rank history disabled.")
        return self._redis

    @property
    def enabled(self) -> bool:
        return self._client() is not None

    def load_ranks(self, board_key: str) -> Dict[str, int]:
        """Previous rank per item id (empty when unknown or Redis is down)"""
        client = self._client()
        if client is None:
            return {}

        try:
            stored = client.hgetall(self._key(board_key))
        except redis.RedisError as e:
            logger.error(f"Rank snapshot read failed for {board_key}: {e}")
            return {}
        return {item_id: int(rank) for item_id, rank in stored.items()}

    def save_ranks(self, board_key: str, ranks: Mapping[str, int], ttl: Optional[int] = None) -> bool:
        """Replace the board's snapshot atomically"""
        client = self._client()
        if client is None:
            return False

        key = self._key(board_key)
        try:
            pipe = client.pipeline(transaction=True)
            pipe.delete(key)
            if ranks:
                pipe.hset(key, mapping=dict(ranks))
                if ttl:
                    pipe.expire(key, ttl)
            pipe.execute()
            return True
        except redis.RedisError as e:
            logger.error(f"Rank snapshot write failed for {board_key}: {e}")
            return False

# Singleton instance
rank_snapshots = RankSnapshotCache()
