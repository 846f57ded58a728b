"""Auth gate - accounts, sessions and recovery tokens."""

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable

from .core.errors import (
    AnynoteError,
    DuplicateUsername,
    InvalidCredential,
    InvalidToken,
    NotAuthenticated,
    Result,
    StorageError,
    ValidationError,
)
from .core.records import bump, upsert, utcnow
from .core.users import (
    User,
    clean_username,
    generate_token,
    hash_password,
    new_user,
    verify_password,
)
from .ports.record_store import USERS, RecordStore

logger = logging.getLogger(__name__)


class AuthGate:
    """
    Issues sessions and tells the rest of the app who is signed in.

    The session pointer holds the user's public record only; the users
    namespace stays authoritative for credentials.
    """

    def __init__(self, store: RecordStore, clock: Callable[[], datetime] = utcnow):
        self.store = store
        self.clock = clock

    # ---- session ----

    def current_user_id(self) -> str | None:
        session = self.store.load_session()
        if not session:
            return None
        return session.get("id")

    def current_user(self) -> User | None:
        """The signed-in user, re-read from the users namespace."""
        user_id = self.current_user_id()
        if user_id is None:
            return None
        return next((u for u in self._users() if u.id == user_id), None)

    def logout(self) -> None:
        self.store.save_session(None)
        logger.debug("Session cleared")

    # ---- flows ----

    def register(self, username: str, password: str) -> Result:
        """Create an account and sign it in."""
        try:
            username = clean_username(username)
            if self._find_by_username(username):
                raise DuplicateUsername(f"Username '{username}' is already taken")
            user = new_user(username, password, self.clock())
            self._save_user(user)
            self._start_session(user)
        except AnynoteError as e:
            return Result.failure(e)
        logger.info("Registered user %s", user.username)
        return Result.success(user)

    def login(self, username: str, password: str) -> Result:
        """Check credentials, rotate the recovery token, sign in."""
        try:
            user = self._find_by_username((username or "").strip())
            if user is None or not verify_password(password or "", user.password_hash):
                raise InvalidCredential("Invalid username or password")
            user = replace(
                user,
                token=generate_token(),
                updated_at=bump(user.updated_at, self.clock()),
            )
            self._save_user(user)
            self._start_session(user)
        except AnynoteError as e:
            return Result.failure(e)
        logger.info("User %s logged in", user.username)
        return Result.success(user)

    def recover_by_token(self, token: str) -> Result:
        """Sign in with a recovery token instead of a password."""
        try:
            token = (token or "").strip()
            user = next((u for u in self._users() if token and u.token == token), None)
            if user is None:
                raise InvalidToken("Invalid or expired recovery token")
            self._start_session(user)
        except AnynoteError as e:
            return Result.failure(e)
        logger.info("User %s recovered a session by token", user.username)
        return Result.success(user)

    def update_profile(self, username: str | None = None, password: str | None = None) -> Result:
        """Change the signed-in user's username and/or password."""
        try:
            user = self.current_user()
            if user is None:
                raise NotAuthenticated("Not logged in")

            changes = {}
            if username is not None:
                username = clean_username(username)
                if username != user.username:
                    if self._find_by_username(username):
                        raise DuplicateUsername(f"Username '{username}' is already taken")
                    changes["username"] = username
            if password is not None:
                if not password:
                    raise ValidationError("Password cannot be empty")
                changes["password_hash"] = hash_password(password)

            user = replace(user, **changes, updated_at=bump(user.updated_at, self.clock()))
            self._save_user(user)
            self._start_session(user)
        except AnynoteError as e:
            return Result.failure(e)
        return Result.success(user)

    # ---- internals ----

    def _users(self) -> list[User]:
        try:
            return [User.from_record(r) for r in self.store.load(USERS)]
        except (KeyError, TypeError, ValueError) as e:
            raise StorageError(f"Unreadable user record: {e}") from e

    def _find_by_username(self, username: str) -> User | None:
        return next((u for u in self._users() if u.username == username), None)

    def _save_user(self, user: User) -> None:
        records, _ = upsert(self.store.load(USERS), user.to_record())
        self.store.save_all(USERS, records)

    def _start_session(self, user: User) -> None:
        self.store.save_session(user.public_record())
