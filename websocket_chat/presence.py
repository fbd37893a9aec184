"""
Presence tracking: which users currently hold live realtime connections.

``InMemoryPresenceStore`` is local to one process; a user connected to another
instance is invisible to it. Deployments running several ASGI workers set
``PRESENCE_BACKEND`` to ``RedisPresenceStore`` so every instance shares one view.
"""

import logging
import threading
from typing import Optional, Set

import redis
from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


class PresenceStore:
    """Maps a user id to the set of its live connection ids."""

    def register(self, user_id, connection_id) -> None:
        raise NotImplementedError

    def unregister(self, user_id, connection_id) -> bool:
        """Remove one connection; return True when the user has none left."""
        raise NotImplementedError

    def lookup(self, user_id) -> Set[str]:
        raise NotImplementedError

    def online_users(self) -> Set[int]:
        raise NotImplementedError

    def clear(self) -> None:
        raise NotImplementedError

    def is_online(self, user_id) -> bool:
        return bool(self.lookup(user_id))


class InMemoryPresenceStore(PresenceStore):
    def __init__(self):
        self._connections = {}
        self._lock = threading.Lock()

    def register(self, user_id, connection_id):
        with self._lock:
            self._connections.setdefault(user_id, set()).add(connection_id)

    def unregister(self, user_id, connection_id):
        with self._lock:
            connections = self._connections.get(user_id)
            if connections is None:
                return True
            connections.discard(connection_id)
            if not connections:
                del self._connections[user_id]
                return True
            return False

    def lookup(self, user_id):
        with self._lock:
            return set(self._connections.get(user_id, ()))

    def online_users(self):
        with self._lock:
            return set(self._connections)

    def clear(self):
        with self._lock:
            self._connections.clear()


class RedisPresenceStore(PresenceStore):
    """Presence shared by every instance through Redis sets."""

    key_prefix = "presence:user:"
    index_key = "presence:online"

    # Keys: [user_connections_key, online_index_key]
    # Args: [connection_id, user_id]
    LUA_UNREGISTER = """
    redis.call('SREM', KEYS[1], ARGV[1])
    if redis.call('SCARD', KEYS[1]) == 0 then
        redis.call('SREM', KEYS[2], ARGV[2])
        return 1
    end
    return 0
    """

    def __init__(self, client: Optional[redis.Redis] = None):
        self.client = client or redis.from_url(settings.PRESENCE_REDIS_URL, decode_responses=True)
        self._lua_unregister = self.client.register_script(self.LUA_UNREGISTER)

    def _key(self, user_id):
        return f"{self.key_prefix}{user_id}"

    def register(self, user_id, connection_id):
        pipe = self.client.pipeline()
        pipe.sadd(self._key(user_id), connection_id)
        pipe.sadd(self.index_key, user_id)
        pipe.execute()

    def unregister(self, user_id, connection_id):
        # Connection removal, the emptiness check and the index update are one atomic step
        removed = self._lua_unregister(
            keys=[self._key(user_id), self.index_key],
            args=[connection_id, user_id],
        )
        return bool(removed)

    def lookup(self, user_id):
        return set(self.client.smembers(self._key(user_id)))

    def online_users(self):
        return {int(user_id) for user_id in self.client.smembers(self.index_key)}

    def clear(self):
        keys = list(self.client.scan_iter(match=f"{self.key_prefix}*"))
        if keys:
            self.client.delete(*keys)
        self.client.delete(self.index_key)


_presence_store = None
_presence_lock = threading.Lock()


def get_presence_store() -> PresenceStore:
    """Return the process-wide presence store configured by PRESENCE_BACKEND."""
    global _presence_store
    if _presence_store is None:
        with _presence_lock:
            if _presence_store is None:
                backend = getattr(settings, 'PRESENCE_BACKEND', 'websocket_chat.presence.InMemoryPresenceStore')
                _presence_store = import_string(backend)()
                logger.info(f"Presence backend initialised: {backend}")
    return _presence_store
