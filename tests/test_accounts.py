"""Tests for the account directory."""

import pytest

from library_ledger.errors import (
    DuplicateKeyError,
    InvalidCredentialsError,
    InvalidInputError,
    PermissionDeniedError,
)
from library_ledger.ledger import AccountDirectory
from library_ledger.models.audit import AuditEventType
from library_ledger.models.user import Permission, Role
from library_ledger.services import credential


class TestBootstrap:
    """Tests for the default admin account."""

    def test_bootstrap_creates_default_admin(self, directory, user_store):
        with pytest.warns(UserWarning, match="Default admin created"):
            admin = directory.bootstrap()

        assert admin.username == "admin"
        assert admin.role == Role.ADMIN
        assert directory.authenticate("admin", "admin123").is_admin
        assert [u.username for u in user_store.load()] == ["admin"]

    def test_bootstrap_is_audited_as_warning(self, directory, audit_events):
        with pytest.warns(UserWarning):
            directory.bootstrap()
        assert any(e.event_type == AuditEventType.DEFAULT_ADMIN_CREATED for e in audit_events)

    def test_bootstrap_skipped_when_users_exist(self, directory):
        directory.register("bob", "pw1")
        assert directory.bootstrap() is None
        assert not directory.exists("admin")

    def test_bootstrap_only_once_across_restarts(self, directory, user_store):
        with pytest.warns(UserWarning):
            directory.bootstrap()

        restarted = AccountDirectory(user_store)
        assert restarted.bootstrap() is None


class TestRegister:
    """Tests for AccountDirectory.register."""

    def test_register_persists_hashed_credential(self, directory, user_store):
        user = directory.register("bob", "pw1", "Member")

        assert user.role == Role.MEMBER
        stored = user_store.load()[0]
        assert stored.username == "bob"
        assert "pw1" not in user_store.path.read_text(encoding="utf-8")
        assert credential.verify("pw1", stored.credential)

    def test_duplicate_username_rejected(self, directory):
        directory.register("bob", "pw1", "Member")
        with pytest.raises(DuplicateKeyError):
            directory.register("bob", "pw2", "Member")

    def test_duplicate_check_is_case_insensitive(self, directory):
        directory.register("bob", "pw1")
        with pytest.raises(DuplicateKeyError):
            directory.register("BoB", "pw2")

    def test_register_with_role_enum(self, directory):
        assert directory.register("carol", "pw", Role.ADMIN).is_admin

    def test_unknown_role_rejected(self, directory):
        with pytest.raises(InvalidInputError) as exc_info:
            directory.register("dave", "pw", "Librarian")
        assert exc_info.value.field == "role"

    def test_username_with_delimiter_rejected(self, directory):
        with pytest.raises(InvalidInputError):
            directory.register("bob,admin", "pw")

    @pytest.mark.parametrize("username", [" bob", "bob ", "\tbob"])
    def test_padded_username_rejected(self, directory, username):
        with pytest.raises(InvalidInputError) as exc_info:
            directory.register(username, "pw")
        assert exc_info.value.field == "username"
        assert not directory.exists("bob")

    def test_password_keeps_surrounding_spaces(self, directory):
        directory.register("bob", " pw ")
        assert directory.authenticate("bob", " pw ").username == "bob"
        with pytest.raises(InvalidCredentialsError):
            directory.authenticate("bob", "pw")

    def test_empty_password_rejected(self, directory):
        with pytest.raises(InvalidInputError):
            directory.register("bob", "")


class TestAuthenticate:
    """Tests for AccountDirectory.authenticate."""

    def test_register_and_login_scenario(self, directory):
        """Duplicate registration fails, wrong password fails, right password works."""
        directory.register("bob", "pw1", "Member")
        with pytest.raises(DuplicateKeyError):
            directory.register("bob", "pw2", "Member")
        with pytest.raises(InvalidCredentialsError):
            directory.authenticate("bob", "wrongpw")

        user = directory.authenticate("bob", "pw1")
        assert user.username == "bob"
        assert user.role == Role.MEMBER

    def test_unknown_user_and_wrong_password_look_the_same(self, directory):
        directory.register("bob", "pw1")

        with pytest.raises(InvalidCredentialsError) as unknown:
            directory.authenticate("nobody", "pw1")
        with pytest.raises(InvalidCredentialsError) as wrong:
            directory.authenticate("bob", "nope")

        assert str(unknown.value) == str(wrong.value)
        assert unknown.value.code == wrong.value.code == "invalid_credentials"

    def test_login_lookup_is_exact(self, directory):
        directory.register("bob", "pw1")
        with pytest.raises(InvalidCredentialsError):
            directory.authenticate("BOB", "pw1")

    def test_login_after_restart(self, directory, user_store):
        directory.register("bob", "pw1")
        restarted = AccountDirectory(user_store)
        assert restarted.authenticate("bob", "pw1").username == "bob"

    def test_failed_login_is_audited(self, directory, audit_events):
        with pytest.raises(InvalidCredentialsError):
            directory.authenticate("ghost", "pw")
        assert audit_events[-1].event_type == AuditEventType.AUTHENTICATION_FAILED


class TestExistsAndAuthorize:
    """Tests for AccountDirectory.exists and authorize."""

    def test_exists_is_case_insensitive(self, directory):
        directory.register("Alice", "pw")
        assert directory.exists("alice")
        assert directory.exists("ALICE")
        assert not directory.exists("bob")

    def test_member_cannot_manage_books(self, directory, audit_events):
        member = directory.register("bob", "pw")
        with pytest.raises(PermissionDeniedError):
            directory.authorize(member, Permission.MANAGE_BOOKS)
        assert audit_events[-1].event_type == AuditEventType.PERMISSION_DENIED

    def test_member_can_borrow(self, directory):
        member = directory.register("bob", "pw")
        directory.authorize(member, Permission.BORROW)

    def test_admin_can_view_reports(self, directory):
        admin = directory.register("root", "pw", Role.ADMIN)
        directory.authorize(admin, Permission.VIEW_REPORTS)
