import hashlib
import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from storage.interface import SessionStore
from storage.records import SessionRecord


def _hash_token(token: str) -> str:
    # SHA-256 is fine for hashing random session tokens
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


class SessionManager:
    """
    Issues opaque cookie tokens and maps them to account ids.
    Only the token hash is handed to the store.
    """

    def __init__(self, store: SessionStore, lifetime_seconds: int, clock: Callable[[], datetime] = datetime.utcnow):
        self.store = store
        self.lifetime_seconds = lifetime_seconds
        self.clock = clock

    def create_session(self, user_id: int, ip: str = None, user_agent: str = None) -> str:
        """
        Creates a server-side session and returns the RAW token (to set as cookie).
        """
        raw_token = secrets.token_urlsafe(32)
        expires_at = self.clock() + timedelta(seconds=self.lifetime_seconds)
        self.store.create_session(
            user_id=user_id,
            token_hash=_hash_token(raw_token),
            expires_at=expires_at,
            ip=ip,
            user_agent=(user_agent or "")[:255] or None,
        )
        return raw_token

    def get_session(self, raw_token: Optional[str]) -> Optional[SessionRecord]:
        if not raw_token:
            return None
        sess = self.store.get_session(_hash_token(raw_token))
        if not sess or not sess.is_live(self.clock()):
            return None
        return sess

    def revoke_session(self, raw_token: Optional[str]) -> bool:
        if not raw_token:
            return False
        return self.store.revoke_session(_hash_token(raw_token))
