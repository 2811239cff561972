# tests/contracts/test_errors.py
"""Tests for the error hierarchy and result types."""

from tokentable.contracts import (
    CodecError,
    ConfigurationError,
    PartialRevokeError,
    QueryPage,
    RevokeResult,
    TableGatewayError,
    TokenStoreError,
)


class TestErrorHierarchy:
    """All store errors share one base."""

    def test_subclasses(self) -> None:
        for error_type in (
            CodecError,
            ConfigurationError,
            PartialRevokeError,
            TableGatewayError,
        ):
            assert issubclass(error_type, TokenStoreError)

    def test_gateway_error_carries_operation_and_status(self) -> None:
        error = TableGatewayError("upsert", "throttled", status_code=503)

        assert error.operation == "upsert"
        assert error.status_code == 503
        assert str(error) == "upsert failed: throttled"

    def test_partial_revoke_error_message(self) -> None:
        result = RevokeResult(
            owner_id="u1",
            issuer_id="c1",
            matched_count=3,
            deleted_keys=["a", "b"],
            failed_keys=["c"],
        )
        error = PartialRevokeError(result)

        assert error.result is result
        assert "failed for 1 of 3 records" in str(error)
        assert "'u1'" in str(error)


class TestResultTypes:
    """Dataclass helpers."""

    def test_revoke_result_succeeded(self) -> None:
        assert RevokeResult(owner_id="u", issuer_id="c", matched_count=0).succeeded
        assert not RevokeResult(
            owner_id="u", issuer_id="c", matched_count=1, failed_keys=["k"]
        ).succeeded

    def test_query_page_has_more(self) -> None:
        assert not QueryPage(records=[]).has_more
        assert QueryPage(records=[], continuation={"PartitionKey": "a", "RowKey": "b"}).has_more


class TestConfigurationError:
    def test_from_validation_error_flattens_locations(self) -> None:
        from pydantic import BaseModel, ValidationError

        class Inner(BaseModel):
            size: int

        class Outer(BaseModel):
            inner: Inner

        try:
            Outer.model_validate({"inner": {"size": "big"}})
        except ValidationError as e:
            error = ConfigurationError.from_validation_error(e)

        assert len(error.errors) == 1
        assert error.errors[0].startswith("inner.size: ")
        assert "1 errors" in str(error)
