"""
Credential checks and failed-login lockout for storefront accounts.

Lockout states per account:
    Unlocked(n) --fail--> Unlocked(n + 1)       while n + 1 < max_attempts
    Unlocked(n) --fail--> Locked(now + lockout) when n + 1 reaches max_attempts
    Locked(until)         rejects every attempt while now < until, counter untouched
    any state --success-> Unlocked(0)

An expired lock does not reset the counter; the next failure keeps counting
from the stored value.
"""
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

from security.errors import (
    AccountLocked,
    DuplicateEmail,
    DuplicateUsername,
    InvalidCredentials,
    NotAuthenticated,
)
from security.password import hash_password, verify_password
from security.session import SessionManager
from storage.exceptions import DuplicateRecordError
from storage.interface import AccountStore
from storage.records import PROFILE_FIELDS, AccountRecord


@dataclass
class AuthResult:
    account: dict
    session_token: str


class AccountGuard:
    def __init__(
        self,
        store: AccountStore,
        sessions: SessionManager,
        max_attempts: int = 5,
        lockout_minutes: int = 30,
        hash_scheme: str = "scrypt",
        clock: Callable[[], datetime] = datetime.utcnow,
    ):
        self.store = store
        self.sessions = sessions
        self.max_attempts = max_attempts
        self.lockout_minutes = lockout_minutes
        self.hash_scheme = hash_scheme
        self.clock = clock
        # compared against on unknown emails so both paths pay for a hash
        self._dummy_hash = hash_password(secrets.token_hex(16), scheme=hash_scheme)

    def register(
        self,
        email: str,
        username: str,
        password: str,
        profile: Optional[dict] = None,
        ip: str = None,
        user_agent: str = None,
    ) -> AuthResult:
        if self.store.get_user_by_email(email):
            raise DuplicateEmail()
        if self.store.get_user_by_username(username):
            raise DuplicateUsername()

        fields = {k: v for k, v in (profile or {}).items() if k in PROFILE_FIELDS}
        fields.update(
            email=email,
            username=username,
            password_hash=hash_password(password, scheme=self.hash_scheme),
        )

        try:
            user = self.store.create_user(fields)
        except DuplicateRecordError as exc:
            # lost a race with a concurrent registration
            if exc.field == "email":
                raise DuplicateEmail()
            raise DuplicateUsername()

        token = self.sessions.create_session(user.id, ip=ip, user_agent=user_agent)
        return AuthResult(account=user.to_public(), session_token=token)

    def login(self, email: str, password: str, ip: str = None, user_agent: str = None) -> AuthResult:
        user = self.store.get_user_by_email(email)
        if not user:
            verify_password(password, self._dummy_hash)
            raise InvalidCredentials()

        now = self.clock()
        if user.is_locked(now):
            raise AccountLocked(retry_after_seconds=self._seconds_left(user, now))

        if not verify_password(password, user.password_hash):
            raise self._register_failure(user, now)

        user = self.store.update_user(user.id, {"login_attempts": 0, "lock_until": None})
        token = self.sessions.create_session(user.id, ip=ip, user_agent=user_agent)
        return AuthResult(account=user.to_public(), session_token=token)

    def logout(self, session_token: Optional[str]) -> bool:
        """Revokes the session if there is one; never fails."""
        return self.sessions.revoke_session(session_token)

    def current_account(self, session_token: Optional[str]) -> dict:
        sess = self.sessions.get_session(session_token)
        if not sess:
            raise NotAuthenticated()
        user = self.store.get_user(sess.user_id)
        if not user:
            raise NotAuthenticated()
        return user.to_public()

    def unlock(self, email: str) -> bool:
        user = self.store.get_user_by_email(email)
        if not user:
            return False
        self.store.update_user(user.id, {"login_attempts": 0, "lock_until": None})
        return True

    def _register_failure(self, user: AccountRecord, now: datetime) -> Exception:
        """Persists the failed attempt and returns the error to raise."""
        lock_until = now + timedelta(minutes=self.lockout_minutes)
        updated = self.store.register_failed_login(user.id, self.max_attempts, lock_until, now)
        if updated and updated.login_attempts >= self.max_attempts:
            return AccountLocked(
                f"Account locked for {self.lockout_minutes} minutes due to too many failed attempts",
                lockout_minutes=self.lockout_minutes,
                locked_now=True,
            )
        return InvalidCredentials()

    @staticmethod
    def _seconds_left(user: AccountRecord, now: datetime) -> int:
        seconds = int((user.lock_until - now).total_seconds())
        return max(seconds, 1)
