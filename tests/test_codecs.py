"""Tests for the delimited line codecs."""

import pytest
from datetime import date

from library_ledger.models.book import Book, BookStatus
from library_ledger.models.transaction import Transaction
from library_ledger.models.user import Role, User
from library_ledger.services import credential
from library_ledger.services.storage import (
    BookCodec,
    MalformedRecordError,
    TransactionCodec,
    UserCodec,
)


class TestBookCodec:
    """Tests for the books line format."""

    def test_encode_layout(self):
        """Fields are title, author, isbn, status."""
        book = Book(title="Dune", author="Herbert", isbn="111", status=BookStatus.ISSUED)
        assert BookCodec().encode(book) == "Dune,Herbert,111,Issued"

    def test_round_trip(self):
        codec = BookCodec()
        book = Book(title="The Left Hand of Darkness", author="Le Guin", isbn="0441478123")
        assert codec.decode(codec.encode(book)) == book

    def test_custom_delimiter(self):
        codec = BookCodec("|")
        book = Book(title="Dune, Part One", author="Herbert", isbn="111")
        assert codec.encode(book) == "Dune, Part One|Herbert|111|Available"
        assert codec.decode(codec.encode(book)) == book

    def test_too_few_fields_is_malformed(self):
        with pytest.raises(MalformedRecordError):
            BookCodec().decode("Dune,Herbert,111")

    def test_too_many_fields_is_malformed(self):
        """An unescaped delimiter in a title shows up as an extra field."""
        with pytest.raises(MalformedRecordError):
            BookCodec().decode("Dune, Part One,Herbert,111,Available")

    def test_unknown_status_is_malformed(self):
        with pytest.raises(MalformedRecordError):
            BookCodec().decode("Dune,Herbert,111,Lost")

    def test_empty_isbn_is_malformed(self):
        with pytest.raises(MalformedRecordError):
            BookCodec().decode("Dune,Herbert,,Available")


class TestUserCodec:
    """Tests for the users line format."""

    def test_round_trip(self):
        codec = UserCodec()
        user = User(username="alice", credential=credential.derive("pw1"), role=Role.ADMIN)
        assert codec.decode(codec.encode(user)) == user

    def test_encode_layout(self):
        """Hash is hex, salt is base64, role is the label."""
        user = User(username="alice", credential=credential.derive("pw1"))
        fields = UserCodec().encode(user).split(",")
        assert fields[0] == "alice"
        assert len(fields[1]) == 64
        assert fields[2].endswith("==")  # 16 bytes in base64
        assert fields[3] == "Member"

    def test_legacy_user_role_decodes_as_member(self):
        codec = UserCodec()
        user = User(username="bob", credential=credential.derive("pw"))
        line = codec.encode(user).replace(",Member", ",User")
        assert codec.decode(line).role == Role.MEMBER

    def test_bad_base64_salt_is_malformed(self):
        line = "alice," + "a" * 64 + ",not*base64,Member"
        with pytest.raises(MalformedRecordError):
            UserCodec().decode(line)

    def test_bad_hash_is_malformed(self):
        line = "alice,xyz,AAAAAAAAAAAAAAAAAAAAAA==,Member"
        with pytest.raises(MalformedRecordError):
            UserCodec().decode(line)


class TestTransactionCodec:
    """Tests for the transactions line format."""

    def test_open_loan_encodes_empty_return_date(self):
        t = Transaction(username="alice", isbn="111", issue_date=date(2024, 3, 1), due_date=date(2024, 3, 8))
        assert TransactionCodec().encode(t) == "alice,111,01-03-2024,08-03-2024,,0"

    def test_empty_return_date_decodes_to_none(self):
        """An absent optional field comes back as None, not an empty string."""
        t = TransactionCodec().decode("alice,111,01-03-2024,08-03-2024,,0")
        assert t.return_date is None
        assert t.is_open

    def test_closed_loan_round_trip(self):
        codec = TransactionCodec()
        t = Transaction(
            username="alice",
            isbn="111",
            issue_date=date(2024, 3, 1),
            due_date=date(2024, 3, 8),
            return_date=date(2024, 3, 11),
            fine=30,
        )
        line = codec.encode(t)
        assert line == "alice,111,01-03-2024,08-03-2024,11-03-2024,30"
        assert codec.decode(line) == t

    def test_custom_date_format(self):
        codec = TransactionCodec(date_format="%Y-%m-%d")
        t = codec.decode("alice,111,2024-03-01,2024-03-08,,0")
        assert t.issue_date == date(2024, 3, 1)

    @pytest.mark.parametrize("fine", ["abc", "-5", "1.5", "", "+5"])
    def test_unparsable_fine_is_malformed(self, fine):
        with pytest.raises(MalformedRecordError):
            TransactionCodec().decode(f"alice,111,01-03-2024,08-03-2024,,{fine}")

    def test_unparsable_date_is_malformed(self):
        with pytest.raises(MalformedRecordError):
            TransactionCodec().decode("alice,111,2024/03/01,08-03-2024,,0")

    def test_wrong_field_count_is_malformed(self):
        with pytest.raises(MalformedRecordError):
            TransactionCodec().decode("alice,111,01-03-2024,08-03-2024,0")

    def test_due_before_issue_is_malformed(self):
        with pytest.raises(MalformedRecordError):
            TransactionCodec().decode("alice,111,08-03-2024,01-03-2024,,0")
