"""
Account Models

Users, their roles and the salted credential that protects them.

DESIGN DECISION: Role is a closed enumeration and permissions are looked
up by role, never by comparing role strings.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Permission(str, Enum):
    """Actions a role may be granted."""
    MANAGE_BOOKS = "manage_books"      # add / delete
    VIEW_REPORTS = "view_reports"
    BROWSE = "browse"                  # list / search
    BORROW = "borrow"                  # borrow / return
    VIEW_OWN_HISTORY = "view_own_history"


class Role(str, Enum):
    """User role. Values are the on-disk labels."""
    ADMIN = "Admin"
    MEMBER = "Member"

    @classmethod
    def _missing_(cls, value: object) -> Optional["Role"]:
        # Accept any casing, and the legacy "User" label for members
        if isinstance(value, str):
            folded = value.strip().casefold()
            if folded == "user":
                return cls.MEMBER
            for member in cls:
                if member.value.casefold() == folded:
                    return member
        return None

    @property
    def permissions(self) -> frozenset[Permission]:
        return _ROLE_PERMISSIONS[self]

    def allows(self, permission: Permission) -> bool:
        return permission in self.permissions


_MEMBER_PERMISSIONS = frozenset({
    Permission.BROWSE,
    Permission.BORROW,
    Permission.VIEW_OWN_HISTORY,
})

_ROLE_PERMISSIONS: dict[Role, frozenset[Permission]] = {
    Role.ADMIN: _MEMBER_PERMISSIONS | {Permission.MANAGE_BOOKS, Permission.VIEW_REPORTS},
    Role.MEMBER: _MEMBER_PERMISSIONS,
}


class Credential(BaseModel):
    """
    Salted one-way password hash.

    The hash is stored as 64 lowercase hex characters (SHA-256).
    The salt is raw bytes; the users store renders it as base64.
    """
    model_config = ConfigDict(frozen=True)

    password_hash: str = Field(
        ...,
        pattern="^[0-9a-f]{64}$",
        description="Lowercase hex SHA-256 of salt + password"
    )
    salt: bytes = Field(
        ...,
        min_length=16,
        description="Per-credential random salt"
    )


class User(BaseModel):
    """A registered account."""
    model_config = ConfigDict(str_strip_whitespace=True)

    username: str = Field(
        ...,
        min_length=1,
        description="Identity key, unique case-insensitively"
    )
    credential: Credential
    role: Role = Field(
        default=Role.MEMBER,
        description="Admin or Member"
    )

    @property
    def key(self) -> str:
        """Case-insensitive identity key."""
        return self.username.casefold()

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN

    def can(self, permission: Permission) -> bool:
        return self.role.allows(permission)
