"""Tests for Identity textual encoding and well-known identities."""

import pytest

from principal_signer.identity import ANONYMOUS, MANAGEMENT, MAX_IDENTITY_BYTES, Identity


class TestWellKnown:
    def test_anonymous_text(self) -> None:
        assert ANONYMOUS.to_text() == "2vxsx-fae"
        assert ANONYMOUS.is_anonymous

    def test_management_text(self) -> None:
        assert MANAGEMENT.to_text() == "aaaaa-aa"
        assert not MANAGEMENT.is_anonymous

    def test_parse_anonymous(self) -> None:
        assert Identity.from_text("2vxsx-fae") == ANONYMOUS


class TestEncoding:
    def test_round_trip(self) -> None:
        identity = Identity(bytes(range(1, 30)))
        assert Identity.from_text(identity.to_text()) == identity

    def test_groups_of_five(self) -> None:
        text = Identity(b"alice-principal").to_text()
        groups = text.split("-")
        assert all(len(g) == 5 for g in groups[:-1])
        assert 1 <= len(groups[-1]) <= 5
        assert text == text.lower()

    def test_str_is_text(self) -> None:
        identity = Identity(b"\x01\x02\x03")
        assert str(identity) == identity.to_text()

    def test_checksum_mismatch_rejected(self) -> None:
        text = Identity(b"alice-principal").to_text()
        tampered = ("a" if text[0] != "a" else "b") + text[1:]
        with pytest.raises(ValueError):
            Identity.from_text(tampered)

    def test_garbage_rejected(self) -> None:
        with pytest.raises(ValueError):
            Identity.from_text("not!base32")

    def test_too_long_rejected(self) -> None:
        with pytest.raises(ValueError):
            Identity(b"x" * (MAX_IDENTITY_BYTES + 1))


class TestEquality:
    def test_equal_bytes_equal_identities(self) -> None:
        assert Identity(b"abc") == Identity(bytearray(b"abc"))

    def test_different_bytes_differ(self) -> None:
        assert Identity(b"abc") != Identity(b"abd")
