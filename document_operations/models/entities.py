"""
Document Entities

Defines the result envelope returned by every document operation, the enums
it is built from, and the typed document record returned by reads.

Typical usage from external projects:

    from document_operations import ResultEnvelope, ResponseCode

    envelope = await store.create_one({"name": "example"})
    if envelope.has_error:
        print(f"{envelope.status.name}: {envelope.error_message}")
    else:
        print(f"Created document {envelope.body} at {envelope.self_link}")
"""

import json
from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class ResponseCode(IntEnum):
    """
    Outcome codes of result envelopes.

    The values are the HTTP status codes the document database itself
    reports for the same outcome.
    """
    SUCCESS_READ = 200      # HTTP ok
    SUCCESS_UPDATE = 200    # HTTP ok (alias of SUCCESS_READ)
    SUCCESS_CREATE = 201    # HTTP created
    SUCCESS_DELETE = 204    # HTTP no content
    BAD_REQUEST = 400       # HTTP bad request
    UNAUTHORIZED = 401      # HTTP unauthorized
    FORBIDDEN = 403         # HTTP forbidden
    NOT_FOUND = 404         # HTTP not found
    CONFLICT = 409          # HTTP conflict
    TOO_LARGE = 413         # HTTP entity too large

    @property
    def is_failure(self) -> bool:
        """Whether this code reports a failed operation."""
        return self.value >= 400


class MediaType(IntEnum):
    """Media type of an envelope body."""
    TEXT = 0
    JSON = 1
    XML = 2
    HTML = 3
    JPG = 4
    GIF = 5
    PNG = 6
    PDF = 7

    @property
    def mime_type(self) -> str:
        return _MIME_TYPES.get(self, "text/plain")


_MIME_TYPES = {
    MediaType.TEXT: "text/plain",
    MediaType.JSON: "application/json",
    MediaType.XML: "application/xml",
    MediaType.HTML: "text/html",
    MediaType.JPG: "image/jpeg",
    MediaType.GIF: "image/gif",
    MediaType.PNG: "image/png",
    MediaType.PDF: "application/pdf",
}


class ErrorKind(str, Enum):
    """
    Why an operation failed.

    Every failed envelope carries one of these next to its status code, so
    callers can tell apart failures that share a code (e.g. an empty
    document and an unparsable string are both BAD_REQUEST).
    """
    EMPTY_DOCUMENT = "empty_document"
    UNPARSABLE_INPUT = "unparsable_input"
    MISSING_LOCATOR = "missing_locator"
    INVALID_LOCATOR = "invalid_locator"
    MISSING_ID = "missing_id"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    BAD_QUERY = "bad_query"
    TIMEOUT = "timeout"
    TRANSPORT_FAILURE = "transport_failure"
    BATCH_CONSTRUCTION = "batch_construction"


class ResultEnvelope(BaseModel):
    """
    Uniform outcome of a document operation.

    Envelopes are immutable. A failed envelope always has a failure status
    and an empty body; a continuation token is only present on successful
    reads that may have more results.

    Attributes:
        status: Outcome code
        body: Serialized payload (document id, JSON text or XML text)
        has_error: Whether the operation failed
        error_message: Human-readable reason of the failure
        error_kind: Classified reason of the failure
        cause: Lower-level exception that caused the failure, if any
        media_type: Media type of the body
        self_link: Stable locator of the affected document
        attachment_link: Locator of the document's attachments, if any
        continuation_token: Token to pass to the next read to get the next page
        match_count: Number of documents represented in the body
    """
    status: ResponseCode
    body: str = ""
    has_error: bool = False
    error_message: Optional[str] = None
    error_kind: Optional[ErrorKind] = None
    cause: Optional[BaseException] = Field(None, exclude=True)
    media_type: MediaType = MediaType.TEXT
    self_link: Optional[str] = None
    attachment_link: Optional[str] = None
    continuation_token: Optional[str] = None
    match_count: int = 0

    class Config:
        arbitrary_types_allowed = True
        frozen = True

    @model_validator(mode='after')
    def check_outcome(self) -> 'ResultEnvelope':
        if self.has_error:
            if not self.status.is_failure:
                raise ValueError(f"Failed envelope cannot carry success status {self.status.name}")
            if self.body:
                raise ValueError("Failed envelope must have an empty body")
            if self.continuation_token is not None:
                raise ValueError("Failed envelope cannot carry a continuation token")
        elif self.status.is_failure:
            raise ValueError(f"Status {self.status.name} requires has_error=True")
        return self

    @classmethod
    def success(
        cls,
        status: ResponseCode,
        body: str = "",
        media_type: MediaType = MediaType.TEXT,
        self_link: Optional[str] = None,
        continuation_token: Optional[str] = None,
        match_count: int = 0
    ) -> 'ResultEnvelope':
        return cls(
            status=status,
            body=body,
            media_type=media_type,
            self_link=self_link,
            continuation_token=continuation_token,
            match_count=match_count
        )

    @classmethod
    def failure(
        cls,
        status: ResponseCode,
        message: str,
        kind: ErrorKind,
        cause: Optional[BaseException] = None
    ) -> 'ResultEnvelope':
        return cls(
            status=status,
            has_error=True,
            error_message=message,
            error_kind=kind,
            cause=cause
        )

    @property
    def mime_type(self) -> str:
        return self.media_type.mime_type


class StoredDocument(dict):
    """
    A document as stored in the database.

    Besides the caller's fields it holds the database's system properties,
    among them the stable locator (``_self``) that replace operations use
    when no explicit locator is given.
    """

    @property
    def id(self) -> Optional[str]:
        return self.get("id")

    @property
    def self_link(self) -> Optional[str]:
        return self.get("_self")

    @classmethod
    def from_json(cls, text: str) -> 'StoredDocument':
        """Rebuild a stored document from the JSON body of a single-document read."""
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError("Expected a single JSON document, got a JSON array or scalar")
        return cls(data)


@dataclass(frozen=True)
class BatchItem:
    """One input of a batch operation with its position in the batch."""
    index: int
    value: Any
