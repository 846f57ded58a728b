"""User records and credential helpers - no I/O."""

import hashlib
import hmac
import secrets
import uuid
from dataclasses import dataclass
from datetime import datetime

from .errors import ValidationError
from .records import created_date, decode_date

PBKDF2_ITERATIONS = 240_000
HASH_SCHEME = "pbkdf2_sha256"


@dataclass
class User:
    """A registered account."""

    id: str
    username: str
    password_hash: str
    token: str
    created_at: datetime
    updated_at: datetime

    def public_record(self) -> dict:
        """Record without credentials, for the session pointer and exports."""
        return {
            "id": self.id,
            "username": self.username,
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    def to_record(self) -> dict:
        record = self.public_record()
        record["passwordHash"] = self.password_hash
        record["token"] = self.token
        return record

    @classmethod
    def from_record(cls, data: dict) -> "User":
        created = created_date(data)
        return cls(
            id=str(data["id"]),
            username=data["username"],
            password_hash=data.get("passwordHash", ""),
            token=data.get("token", ""),
            created_at=created,
            updated_at=decode_date(data.get("updatedAt")) or created,
        )


def hash_password(password: str, salt: str | None = None) -> str:
    """Salted PBKDF2 hash in the form scheme$iterations$salt$digest."""
    salt = salt or secrets.token_hex(16)
    digest = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), PBKDF2_ITERATIONS
    ).hex()
    return f"{HASH_SCHEME}${PBKDF2_ITERATIONS}${salt}${digest}"


def verify_password(password: str, password_hash: str) -> bool:
    """Check a password against a stored hash."""
    try:
        scheme, iterations, salt, digest = password_hash.split("$")
    except ValueError:
        return False
    if scheme != HASH_SCHEME:
        return False
    candidate = hashlib.pbkdf2_hmac(
        "sha256", password.encode(), salt.encode(), int(iterations)
    ).hex()
    return hmac.compare_digest(candidate, digest)


def generate_token() -> str:
    """Opaque recovery token."""
    return secrets.token_urlsafe(24)


def clean_username(username: str) -> str:
    username = (username or "").strip()
    if not username:
        raise ValidationError("Username cannot be empty")
    return username


def new_user(username: str, password: str, now: datetime) -> User:
    """Build a user with a hashed password and fresh token."""
    if not password:
        raise ValidationError("Password cannot be empty")
    return User(
        id=str(uuid.uuid4()),
        username=clean_username(username),
        password_hash=hash_password(password),
        token=generate_token(),
        created_at=now,
        updated_at=now,
    )
