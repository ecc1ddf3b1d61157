"""
Test suite for result envelopes, response codes, media types and query models.
"""

import pytest
from pydantic import ValidationError

from document_operations import (
    Comparator,
    ErrorKind,
    FieldPredicate,
    InvalidQueryError,
    MediaType,
    RawQuery,
    ResponseCode,
    ResultEnvelope,
    StoredDocument,
)
from document_operations.models import as_query


class TestResponseCodes:
    """Codes mirror the database's HTTP status codes."""

    def test_values(self) -> None:
        assert ResponseCode.SUCCESS_READ == 200
        assert ResponseCode.SUCCESS_UPDATE is ResponseCode.SUCCESS_READ
        assert ResponseCode.SUCCESS_CREATE == 201
        assert ResponseCode.SUCCESS_DELETE == 204
        assert ResponseCode.CONFLICT == 409
        assert ResponseCode.TOO_LARGE == 413

    def test_is_failure(self) -> None:
        assert not ResponseCode.SUCCESS_DELETE.is_failure
        assert ResponseCode.BAD_REQUEST.is_failure

    def test_mime_types(self) -> None:
        assert MediaType.XML.mime_type == "application/xml"
        assert MediaType.PDF.mime_type == "application/pdf"


class TestResultEnvelope:
    """Envelope invariants."""

    def test_failure_should_have_empty_body(self) -> None:
        cause = RuntimeError("boom")

        envelope = ResultEnvelope.failure(ResponseCode.NOT_FOUND, "missing", ErrorKind.NOT_FOUND, cause)

        assert envelope.has_error
        assert envelope.body == ""
        assert envelope.cause is cause
        assert "cause" not in envelope.model_dump()

    def test_failed_envelope_with_success_status_should_be_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ResultEnvelope(status=ResponseCode.SUCCESS_READ, has_error=True)

    def test_failure_status_without_error_flag_should_be_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ResultEnvelope(status=ResponseCode.CONFLICT)

    def test_failed_envelope_with_token_should_be_rejected(self) -> None:
        with pytest.raises(ValidationError):
            ResultEnvelope(status=ResponseCode.NOT_FOUND, has_error=True, continuation_token="t")

    def test_envelope_should_be_immutable(self) -> None:
        envelope = ResultEnvelope.success(ResponseCode.SUCCESS_CREATE, body="id1")

        with pytest.raises(ValidationError):
            envelope.body = "other"


class TestStoredDocument:
    """Typed documents read back from the database."""

    def test_from_json_should_expose_id_and_self_link(self) -> None:
        stored = StoredDocument.from_json('{"id": "a", "_self": "dbs/d/colls/c/docs/r/"}')

        assert stored.id == "a"
        assert stored.self_link == "dbs/d/colls/c/docs/r/"

    def test_from_json_array_should_raise(self) -> None:
        with pytest.raises(ValueError):
            StoredDocument.from_json("[]")


class TestQueries:
    """Raw SQL and field predicates."""

    def test_predicate_should_build_parameterized_sql(self) -> None:
        sql, parameters = FieldPredicate("a.b_c", Comparator.LT, 5).to_sql()

        assert sql == 'SELECT * FROM c WHERE c["a"]["b_c"] < @value'
        assert parameters == [{"name": "@value", "value": 5}]

    @pytest.mark.parametrize("field", ["", "a..b", "a;DROP", "1a"])
    def test_predicate_with_invalid_field_should_raise(self, field) -> None:
        with pytest.raises(InvalidQueryError):
            FieldPredicate(field, Comparator.EQ, 1).to_sql()

    def test_raw_query_should_pass_through(self) -> None:
        assert RawQuery("SELECT * FROM c").to_sql() == ("SELECT * FROM c", [])

    def test_blank_raw_query_should_raise(self) -> None:
        with pytest.raises(InvalidQueryError):
            RawQuery("  ").to_sql()

    def test_as_query_should_reject_other_types(self) -> None:
        assert as_query("SELECT * FROM c") == RawQuery("SELECT * FROM c")
        with pytest.raises(InvalidQueryError):
            as_query(42)
