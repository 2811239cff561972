# tests/contracts/test_tokens.py
"""Tests for the AuthorizationCode domain value."""

from datetime import datetime, timedelta

import pytest
from pydantic import ValidationError


class TestAuthorizationCode:
    """Validation and derived values."""

    def test_expires_at(self, code_factory) -> None:
        code = code_factory(lifetime_seconds=120)

        assert code.expires_at == code.creation_time + timedelta(seconds=120)

    def test_naive_creation_time_rejected(self, code_factory) -> None:
        with pytest.raises(ValidationError, match="timezone-aware"):
            code_factory(creation_time=datetime(2024, 1, 1))

    @pytest.mark.parametrize("field", ["code", "client_id", "subject_id"])
    def test_identifiers_must_not_be_empty(self, code_factory, field: str) -> None:
        overrides = {"code": "c", "client_id": "c1", "subject_id": "u1", field: ""}
        with pytest.raises(ValidationError):
            code_factory(**overrides)

    def test_is_frozen(self, code_factory) -> None:
        code = code_factory()
        with pytest.raises(ValidationError):
            code.client_id = "other"  # type: ignore[misc]

    def test_unknown_fields_rejected(self, code_factory) -> None:
        with pytest.raises(ValidationError, match="Extra inputs"):
            code_factory(refresh_token="nope")

    def test_scopes_normalized_to_tuple(self, code_factory) -> None:
        code = code_factory(requested_scopes=["openid", "email"])
        assert code.requested_scopes == ("openid", "email")

    @pytest.mark.parametrize("lifetime", [0, -1, 2**31, 2**53])
    def test_lifetime_outside_int32_range_rejected(
        self, code_factory, lifetime: int
    ) -> None:
        with pytest.raises(ValidationError, match="lifetime_seconds"):
            code_factory(lifetime_seconds=lifetime)

    def test_max_lifetime_accepted(self, code_factory) -> None:
        from tokentable.contracts.tokens import MAX_LIFETIME_SECONDS

        code = code_factory(lifetime_seconds=MAX_LIFETIME_SECONDS)
        assert code.lifetime_seconds == 2**31 - 1
