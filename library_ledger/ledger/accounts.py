"""
Account Directory

Owns the registered users: registration, login and permission checks.

DESIGN DECISION: Authentication never says WHY it failed. An unknown
username and a wrong password produce the same InvalidCredentialsError,
and both paths compute one hash, so callers cannot enumerate accounts.
"""

import warnings
from typing import Optional, Union

import structlog

from library_ledger.audit import AuditLogger
from library_ledger.config import BootstrapSettings
from library_ledger.errors import (
    DuplicateKeyError,
    InvalidCredentialsError,
    InvalidInputError,
    PermissionDeniedError,
)
from library_ledger.models.user import Permission, Role, User
from library_ledger.services import credential
from library_ledger.services.storage import RecordStore, StorageWriteError
from library_ledger.validation import InputValidator


logger = structlog.get_logger(__name__)

# Hashed against when the username is unknown, so both failure paths cost the same
_DUMMY_SALT = bytes(credential.SALT_BYTES)


class AccountDirectory:
    """
    Registered users, backed by one store.

    Usernames are unique case-insensitively. Lookup for login is exact.
    """

    def __init__(
        self,
        user_store: RecordStore[User],
        bootstrap_settings: Optional[BootstrapSettings] = None,
        validator: Optional[InputValidator] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._store = user_store
        self._bootstrap_settings = bootstrap_settings or BootstrapSettings()
        self._validator = validator or InputValidator()
        self._audit_logger = audit_logger or AuditLogger()
        self._users: list[User] = self._store.load()

        skipped = self._store.skipped
        if skipped:
            self._audit_logger.log_malformed_records(
                store=self._store.name,
                line_numbers=[line.line_number for line in skipped],
            )

    def bootstrap(self) -> Optional[User]:
        """
        Create the default admin if no user exists yet.

        The default credentials are well known, so creation is announced
        with a warning.

        Returns:
            The created admin, or None if users already exist
        """
        if self._users:
            return None

        username = self._bootstrap_settings.admin_username
        admin = self._add(username, self._bootstrap_settings.admin_password, Role.ADMIN)

        self._audit_logger.log_default_admin_created(username=username)
        warnings.warn(
            f"Default admin created (username: {username}). "
            "Change its password before real use.",
            stacklevel=2,
        )
        return admin

    def register(self, username: str, password: str, role: Union[Role, str] = Role.MEMBER) -> User:
        """
        Register a new user.

        Raises:
            InvalidInputError: If username or password is unusable
            DuplicateKeyError: If the username exists in any casing
            StorageWriteError: If the users store could not be written
        """
        self._validator.validate_username(username)
        self._validator.validate_password(password)
        try:
            role = Role(role)
        except ValueError as e:
            raise InvalidInputError(f"Unknown role: {role}", field="role", key=str(role)) from e

        if self.exists(username):
            raise DuplicateKeyError(f"Username {username} already exists", key=username)

        user = self._add(username, password, role)
        self._audit_logger.log_user_registered(username=user.username, role=role.value)
        return user

    def authenticate(self, username: str, password: str) -> User:
        """
        Return the user for a correct username/password pair.

        Raises:
            InvalidCredentialsError: For an unknown user or a wrong password alike
        """
        user = next((u for u in self._users if u.username == username), None)

        if user is None:
            credential.hash_password(password, _DUMMY_SALT)
            verified = False
        else:
            verified = credential.verify(password, user.credential)

        self._audit_logger.log_authentication(username=username, succeeded=verified)
        if not verified:
            raise InvalidCredentialsError("Invalid username or password")
        return user.model_copy()

    def exists(self, username: str) -> bool:
        """Case-insensitive username check."""
        key = username.strip().casefold()
        return any(u.key == key for u in self._users)

    def authorize(self, user: User, permission: Permission) -> None:
        """
        Check that the user's role grants ``permission``.

        Raises:
            PermissionDeniedError: If it does not
        """
        if not user.can(permission):
            self._audit_logger.log_permission_denied(username=user.username, permission=permission.value)
            raise PermissionDeniedError(
                f"{user.role.value} accounts may not {permission.value.replace('_', ' ')}",
                key=user.username,
            )

    def _add(self, username: str, password: str, role: Role) -> User:
        user = User(username=username, credential=credential.derive(password), role=role)
        self._users.append(user)
        try:
            self._store.save_all(self._users)
        except StorageWriteError as e:
            self._audit_logger.log_store_write_failed(store=self._store.name, error_message=e.message)
            raise
        logger.info("user_added", username=user.username, role=role.value)
        return user.model_copy()
