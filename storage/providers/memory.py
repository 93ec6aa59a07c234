from dataclasses import replace
from datetime import datetime
from threading import RLock
from typing import Dict, Optional

from storage.exceptions import DuplicateRecordError
from storage.interface import AccountStore, SessionStore
from storage.records import ACCOUNT_FIELDS, AccountRecord, SessionRecord


class MemoryStore(AccountStore, SessionStore):
    """
    Process-local store backed by dictionaries.
    Every read returns a copy so callers never mutate stored state.
    """

    def __init__(self) -> None:
        self._users: Dict[int, AccountRecord] = {}
        self._sessions: Dict[str, SessionRecord] = {}
        self._lock = RLock()
        self._user_id_counter = 1
        self._session_id_counter = 1

    # ---------- accounts ----------

    def get_user(self, user_id: int) -> Optional[AccountRecord]:
        with self._lock:
            user = self._users.get(user_id)
            return replace(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[AccountRecord]:
        with self._lock:
            for user in self._users.values():
                if user.email == email:
                    return replace(user)
        return None

    def get_user_by_username(self, username: str) -> Optional[AccountRecord]:
        with self._lock:
            for user in self._users.values():
                if user.username == username:
                    return replace(user)
        return None

    def create_user(self, fields: dict) -> AccountRecord:
        with self._lock:
            if self.get_user_by_email(fields["email"]):
                raise DuplicateRecordError("email")
            if self.get_user_by_username(fields["username"]):
                raise DuplicateRecordError("username")

            values = {k: v for k, v in fields.items() if k in ACCOUNT_FIELDS}
            values["login_attempts"] = 0
            values["lock_until"] = None

            now = datetime.utcnow()
            user = AccountRecord(id=self._user_id_counter, created_at=now, updated_at=now, **values)
            self._users[user.id] = user
            self._user_id_counter += 1
            return replace(user)

    def update_user(self, user_id: int, fields: dict) -> Optional[AccountRecord]:
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            values = {k: v for k, v in fields.items() if k in ACCOUNT_FIELDS}
            updated = replace(user, updated_at=datetime.utcnow(), **values)
            self._users[user_id] = updated
            return replace(updated)

    def register_failed_login(
        self, user_id: int, max_attempts: int, lock_until: datetime, now: datetime
    ) -> Optional[AccountRecord]:
        with self._lock:
            user = self._users.get(user_id)
            if not user:
                return None
            attempts = user.login_attempts + 1
            updated = replace(
                user,
                login_attempts=attempts,
                lock_until=lock_until if attempts >= max_attempts else user.lock_until,
                updated_at=now,
            )
            self._users[user_id] = updated
            return replace(updated)

    # ---------- sessions ----------

    def create_session(
        self,
        user_id: int,
        token_hash: str,
        expires_at: datetime,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> SessionRecord:
        with self._lock:
            sess = SessionRecord(
                id=self._session_id_counter,
                user_id=user_id,
                token_hash=token_hash,
                expires_at=expires_at,
                ip=ip,
                user_agent=user_agent,
            )
            self._sessions[token_hash] = sess
            self._session_id_counter += 1
            return replace(sess)

    def get_session(self, token_hash: str) -> Optional[SessionRecord]:
        with self._lock:
            sess = self._sessions.get(token_hash)
            return replace(sess) if sess else None

    def revoke_session(self, token_hash: str) -> bool:
        with self._lock:
            sess = self._sessions.get(token_hash)
            if not sess:
                return False
            sess.revoked = True
            return True
