"""Process-wide store of authenticated sessions keyed by bearer token."""
import hashlib
import threading
import time
import logging
from typing import Any, Callable, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)

SessionListener = Callable[[str, Dict[str, Any]], None]

SIGNED_IN = "signed_in"
SIGNED_OUT = "signed_out"
EXPIRED = "expired"


class SessionStore:
    def __init__(self, ttl_seconds: float = 60, max_size: int = 500):
        self.ttl_seconds = ttl_seconds
        self.max_size = max_size
        self._lock = threading.Lock()
        self._sessions: Dict[str, Tuple[Dict[str, Any], float]] = {}
        self._listeners: List[SessionListener] = []

    @staticmethod
    def _key(token: str) -> str:
        return hashlib.sha256(token.encode()).hexdigest()

    def subscribe(self, listener: SessionListener) -> Callable[[], None]:
        """Register a listener for session events. Returns a callable that unsubscribes it."""
        with self._lock:
            self._listeners.append(listener)
        return lambda: self.unsubscribe(listener)

    def unsubscribe(self, listener: SessionListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def _emit(self, event: str, user_data: Dict[str, Any]) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event, user_data)
            except Exception as e:
                logger.error(f"Session listener failed on {event}: {e}")

    def get(self, token: str) -> Optional[Dict[str, Any]]:
        key = self._key(token)
        now = time.monotonic()
        with self._lock:
            entry = self._sessions.get(key)
            if entry is None:
                return None
            user_data, expiry = entry
            if now < expiry:
                return user_data
            del self._sessions[key]
        self._emit(EXPIRED, user_data)
        return None

    def _make_room(self, now: float) -> List[Dict[str, Any]]:
        """Drop expired entries, then the soonest to expire, until one slot is free. Caller holds the lock."""
        dropped = []
        for key, (user_data, expiry) in list(self._sessions.items()):
            if expiry <= now:
                del self._sessions[key]
                dropped.append(user_data)
        while self._sessions and len(self._sessions) >= self.max_size:
            key = min(self._sessions, key=lambda k: self._sessions[k][1])
            dropped.append(self._sessions.pop(key)[0])
        return dropped

    def put(self, token: str, user_data: Dict[str, Any]) -> None:
        """
        Cache a verified session.

        When the store is full, expired entries go first and then the oldest
        live ones. Every dropped entry is reported as expired, since its next
        request verifies the token again.
        """
        key = self._key(token)
        now = time.monotonic()
        dropped = []
        with self._lock:
            is_new = key not in self._sessions
            if is_new and len(self._sessions) >= self.max_size:
                dropped = self._make_room(now)
            self._sessions[key] = (user_data, now + self.ttl_seconds)
        for old in dropped:
            self._emit(EXPIRED, old)
        if is_new:
            self._emit(SIGNED_IN, user_data)

    def invalidate(self, token: str) -> bool:
        with self._lock:
            entry = self._sessions.pop(self._key(token), None)
        if entry is None:
            return False
        self._emit(SIGNED_OUT, entry[0])
        return True

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)


session_store = SessionStore()
