"""Tests for email status classification."""

from __future__ import annotations

import pytest

from cspm_identity import EmailStatus, Identity, classify, find_identity


class TestClassify:
    @pytest.mark.parametrize("email", ["admin@co.test", "ANY@example.org", ""])
    def test_empty_set_is_system_init(self, email: str) -> None:
        assert classify(email, []) is EmailStatus.SYSTEM_INIT

    def test_enrolled_identity(self, enrolled_user: Identity) -> None:
        assert classify(enrolled_user.email, [enrolled_user]) is (
            EmailStatus.KNOWN_WITH_MFA
        )

    def test_pre_provisioned_identity(self, pending_user: Identity) -> None:
        assert classify(pending_user.email, [pending_user]) is EmailStatus.KNOWN_NO_MFA

    @pytest.mark.parametrize("email", ["other@co.test", "user@co.tes", "user"])
    def test_absent_email_is_unknown(self, pending_user: Identity, email: str) -> None:
        assert classify(email, [pending_user]) is EmailStatus.UNKNOWN

    @pytest.mark.parametrize(
        "email", ["USER@CO.TEST", "User@Co.Test", "  user@co.test "]
    )
    def test_lookup_is_case_insensitive(
        self, enrolled_user: Identity, email: str
    ) -> None:
        assert classify(email, [enrolled_user]) is EmailStatus.KNOWN_WITH_MFA

    def test_classification_does_not_mutate(self, pending_user: Identity) -> None:
        identities = [pending_user]

        classify("user@co.test", identities)

        assert identities == [pending_user]
        assert pending_user.totp_secret is None


class TestFindIdentity:
    def test_finds_by_normalized_email(self, enrolled_user: Identity) -> None:
        other = Identity(email="second@co.test")

        assert find_identity("USER@co.test", [other, enrolled_user]) is enrolled_user

    def test_missing_returns_none(self, enrolled_user: Identity) -> None:
        assert find_identity("nobody@co.test", [enrolled_user]) is None
