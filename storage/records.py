from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Optional

# Fields a caller may pass to create_user / update_user.
ACCOUNT_FIELDS = (
    "email",
    "username",
    "password_hash",
    "first_name",
    "last_name",
    "phone",
    "role",
    "login_attempts",
    "lock_until",
)

PROFILE_FIELDS = ("first_name", "last_name", "phone")

# JSON keys the browser client expects
_PUBLIC_KEYS = {
    "first_name": "firstName",
    "last_name": "lastName",
    "login_attempts": "loginAttempts",
    "lock_until": "lockUntil",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
}


@dataclass
class AccountRecord:
    id: int
    email: str
    username: str
    password_hash: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: str = "user"
    login_attempts: int = 0
    lock_until: Optional[datetime] = None
    created_at: datetime = field(default_factory=datetime.utcnow)
    updated_at: datetime = field(default_factory=datetime.utcnow)

    def is_locked(self, now: datetime) -> bool:
        return self.lock_until is not None and self.lock_until > now

    def to_public(self) -> dict:
        """Everything except the password hash, datetimes as ISO strings."""
        data = asdict(self)
        data.pop("password_hash", None)
        public = {}
        for key, value in data.items():
            if isinstance(value, datetime):
                value = value.isoformat()
            public[_PUBLIC_KEYS.get(key, key)] = value
        return public


@dataclass
class SessionRecord:
    id: int
    user_id: int
    token_hash: str
    expires_at: datetime
    created_at: datetime = field(default_factory=datetime.utcnow)
    revoked: bool = False
    ip: Optional[str] = None
    user_agent: Optional[str] = None

    def is_live(self, now: datetime) -> bool:
        return not self.revoked and self.expires_at > now
