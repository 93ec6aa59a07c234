from datetime import datetime
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError

from models import db
from models.session import Session
from models.user import User
from storage.exceptions import DuplicateRecordError
from storage.interface import AccountStore, SessionStore
from storage.records import ACCOUNT_FIELDS, AccountRecord, SessionRecord


def _to_account(row: User) -> AccountRecord:
    return AccountRecord(
        id=row.id,
        email=row.email,
        username=row.username,
        password_hash=row.password_hash,
        first_name=row.first_name,
        last_name=row.last_name,
        phone=row.phone,
        role=row.role,
        login_attempts=row.login_attempts,
        lock_until=row.lock_until,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_session(row: Session) -> SessionRecord:
    return SessionRecord(
        id=row.id,
        user_id=row.user_id,
        token_hash=row.token_hash,
        expires_at=row.expires_at,
        created_at=row.created_at,
        revoked=row.revoked,
        ip=row.ip,
        user_agent=row.user_agent,
    )


class DatabaseStore(AccountStore, SessionStore):
    """
    SQL store on top of the Flask-SQLAlchemy models. Needs an app context.
    """

    # ---------- accounts ----------

    def get_user(self, user_id: int) -> Optional[AccountRecord]:
        row = db.session.get(User, user_id)
        return _to_account(row) if row else None

    def get_user_by_email(self, email: str) -> Optional[AccountRecord]:
        row = User.query.filter_by(email=email).first()
        return _to_account(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[AccountRecord]:
        row = User.query.filter_by(username=username).first()
        return _to_account(row) if row else None

    def create_user(self, fields: dict) -> AccountRecord:
        values = {k: v for k, v in fields.items() if k in ACCOUNT_FIELDS}
        values["login_attempts"] = 0
        values["lock_until"] = None

        row = User(**values)
        db.session.add(row)
        try:
            db.session.commit()
        except IntegrityError:
            db.session.rollback()
            if User.query.filter_by(email=values.get("email")).first():
                raise DuplicateRecordError("email")
            raise DuplicateRecordError("username")
        return _to_account(row)

    def update_user(self, user_id: int, fields: dict) -> Optional[AccountRecord]:
        row = db.session.get(User, user_id)
        if not row:
            return None
        for key, value in fields.items():
            if key in ACCOUNT_FIELDS:
                setattr(row, key, value)
        db.session.commit()
        return _to_account(row)

    def register_failed_login(
        self, user_id: int, max_attempts: int, lock_until: datetime, now: datetime
    ) -> Optional[AccountRecord]:
        if db.session.get(User, user_id) is None:
            return None

        # Increment in SQL so concurrent failures cannot overwrite each other;
        # both statements commit in one transaction.
        db.session.execute(
            update(User)
            .where(User.id == user_id)
            .values(login_attempts=User.login_attempts + 1, updated_at=now)
        )
        db.session.execute(
            update(User)
            .where(User.id == user_id, User.login_attempts >= max_attempts)
            .values(lock_until=lock_until, updated_at=now)
        )
        db.session.commit()
        return self.get_user(user_id)

    # ---------- sessions ----------

    def create_session(
        self,
        user_id: int,
        token_hash: str,
        expires_at: datetime,
        ip: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> SessionRecord:
        row = Session(
            user_id=user_id,
            token_hash=token_hash,
            expires_at=expires_at,
            ip=ip,
            user_agent=user_agent,
        )
        db.session.add(row)
        db.session.commit()
        return _to_session(row)

    def get_session(self, token_hash: str) -> Optional[SessionRecord]:
        row = Session.query.filter_by(token_hash=token_hash).first()
        return _to_session(row) if row else None

    def revoke_session(self, token_hash: str) -> bool:
        row = Session.query.filter_by(token_hash=token_hash).first()
        if not row:
            return False
        row.revoked = True
        db.session.commit()
        return True
