"""Tests for the TOTP engine."""

from __future__ import annotations

import base64
from unittest.mock import patch

import pytest

from cspm_identity.exceptions import SecretGenerationError
from cspm_identity.mfa import SECRET_LENGTH, TotpEngine

RFC_SECRET = "GEZDGNBVGY3TQOJQGEZDGNBVGY3TQOJQ"
RFC_CODE = "081804"  # step 37037036 (t=1111111109)
RFC_NEXT_STEP_CODE = "050471"  # step 37037037 (t=1111111111)


class TestGenerateSecret:
    def test_secret_is_160_bit_base32(self, engine: TotpEngine) -> None:
        secret = engine.generate_secret()

        assert len(secret) == SECRET_LENGTH
        assert len(base64.b32decode(secret)) == 20

    def test_secrets_are_unique(self, engine: TotpEngine) -> None:
        assert len({engine.generate_secret() for _ in range(50)}) == 50

    def test_entropy_failure_is_fatal(self, engine: TotpEngine) -> None:
        with patch(
            "cspm_identity.mfa.totp.pyotp.random_base32",
            side_effect=OSError("no entropy"),
        ):
            with pytest.raises(SecretGenerationError):
                engine.generate_secret()


class TestProvisioningUri:
    def test_exact_format(self, engine: TotpEngine) -> None:
        uri = engine.build_provisioning_uri("CSPM-NG", "admin@co.test", RFC_SECRET)

        assert uri == (
            "otpauth://totp/CSPM-NG:admin@co.test"
            f"?secret={RFC_SECRET}&issuer=CSPM-NG"
        )

    def test_spaces_are_escaped(self, engine: TotpEngine) -> None:
        uri = engine.build_provisioning_uri("My App", "a b@co.test", "ABC")

        assert uri == (
            "otpauth://totp/My%20App:a%20b@co.test?secret=ABC&issuer=My%20App"
        )

    def test_prepare_enrollment(self, engine: TotpEngine) -> None:
        setup = engine.prepare_enrollment("admin@co.test")

        assert setup.provisioning_uri.startswith(
            "otpauth://totp/CSPM-NG:admin@co.test?"
        )
        assert f"secret={setup.secret}" in setup.provisioning_uri
        assert setup.manual_key.replace(" ", "") == setup.secret
        assert setup.manual_key.split(" ")[0] == setup.secret[:4]


class TestValidate:
    def test_accepts_rfc_vector_for_current_step(self, engine: TotpEngine) -> None:
        assert engine.validate(RFC_SECRET, RFC_CODE)

    def test_current_code_matches_rfc_vector(self, engine: TotpEngine) -> None:
        assert engine.current_code(RFC_SECRET) == RFC_CODE

    def test_accepts_next_step_within_window(self, engine: TotpEngine) -> None:
        assert engine.validate(RFC_SECRET, RFC_NEXT_STEP_CODE)

    def test_accepts_previous_step_within_window(self, clock) -> None:
        clock.now = 1111111111  # inside step 37037037
        engine = TotpEngine(clock=clock)

        assert engine.current_code(RFC_SECRET) == RFC_NEXT_STEP_CODE
        assert engine.validate(RFC_SECRET, RFC_CODE)

    def test_rejects_outside_window(self, engine: TotpEngine, clock) -> None:
        clock.advance(90)

        assert not engine.validate(RFC_SECRET, RFC_CODE)

    def test_window_zero_only_accepts_current_step(self, engine: TotpEngine) -> None:
        assert engine.validate(RFC_SECRET, RFC_CODE, window=0)
        assert not engine.validate(RFC_SECRET, RFC_NEXT_STEP_CODE, window=0)

    @pytest.mark.parametrize(
        ("now", "code"),
        [
            (59, "287082"),
            (1234567890, "005924"),
            (2000000000, "279037"),
        ],
    )
    def test_other_rfc_vectors(self, clock, now: int, code: str) -> None:
        clock.now = now
        engine = TotpEngine(clock=clock)

        assert engine.validate(RFC_SECRET, code, window=0)

    def test_rejects_zero_code(self, engine: TotpEngine) -> None:
        assert not engine.validate(RFC_SECRET, "000000")

    def test_rejects_code_from_other_secret(self, engine: TotpEngine) -> None:
        assert not engine.validate("JBSWY3DPEHPK3PXP", RFC_CODE)

    @pytest.mark.parametrize("code", ["", "12345", "1234567", "08180a", "08 804"])
    def test_rejects_malformed_codes(self, engine: TotpEngine, code: str) -> None:
        assert not engine.validate(RFC_SECRET, code)

    def test_strips_surrounding_whitespace(self, engine: TotpEngine) -> None:
        assert engine.validate(RFC_SECRET, f" {RFC_CODE} ")

    def test_undecodable_secret_is_rejected(self, engine: TotpEngine) -> None:
        assert not engine.validate("not-base32!", RFC_CODE)

    def test_comparison_is_constant_time(self, engine: TotpEngine) -> None:
        with patch(
            "pyotp.totp.utils.strings_equal", return_value=False
        ) as strings_equal:
            assert not engine.validate(RFC_SECRET, RFC_CODE)

        assert strings_equal.call_count == 3
