from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from storage.records import AccountRecord, SessionRecord


class AccountStore(ABC):
    """
    The account operations the auth layer needs, independent of storage technology.
    """

    @abstractmethod
    def get_user(self, user_id: int) -> Optional[AccountRecord]:
        pass

    @abstractmethod
    def get_user_by_email(self, email: str) -> Optional[AccountRecord]:
        pass

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[AccountRecord]:
        pass

    @abstractmethod
    def create_user(self, fields: dict) -> AccountRecord:
        """
        Create an account with login_attempts=0 and no lock.

        Raises:
            DuplicateRecordError: If the email or username is already taken
        """
        pass

    @abstractmethod
    def update_user(self, user_id: int, fields: dict) -> Optional[AccountRecord]:
        """
        Partially update an account. Returns None if the account does not exist.
        """
        pass

    @abstractmethod
    def register_failed_login(
        self, user_id: int, max_attempts: int, lock_until: datetime, now: datetime
    ) -> Optional[AccountRecord]:
        """
        Atomically increment login_attempts and, if the new count reaches
        max_attempts, set lock_until in the same write. updated_at becomes now.
        """
        pass


class SessionStore(ABC):
    """
    Server-side sessions keyed by the hash of the cookie token.
    """

    @abstractmethod
    def create_session(
        self,
        user_id: int,
        token_hash: str,
        expires_at: datetime,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> SessionRecord:
        pass

    @abstractmethod
    def get_session(self, token_hash: str) -> Optional[SessionRecord]:
        pass

    @abstractmethod
    def revoke_session(self, token_hash: str) -> bool:
        pass
