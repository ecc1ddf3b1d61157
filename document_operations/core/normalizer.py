"""
Input Normalizer

Classifies an arbitrary input value and converts it into the canonical
document the database accepts, or into a typed normalization failure.

Accepted inputs form a closed set:
- TEXT: raw JSON or XML text, sniffed to decide how to parse it
- PARSED_JSON: a dict, e.g. the result of json.loads()
- PARSED_XML: an ElementTree element or tree
- STRUCTURED_RECORD: a pydantic model, dataclass instance or other mapping
- TYPED_DOCUMENT: a StoredDocument read back from the database

Typical usage from external projects:

    from document_operations import InputNormalizer, NormalizationError

    result = InputNormalizer.normalize('<note><to>Ann</to></note>')
    if isinstance(result, NormalizationError):
        print(result.message)
    else:
        print(result.payload)   # {'note': {'to': 'Ann'}}
"""

import dataclasses
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Union
from xml.etree import ElementTree as ET

from pydantic import BaseModel, TypeAdapter

from document_operations.models.entities import (
    ErrorKind,
    ResponseCode,
    ResultEnvelope,
    StoredDocument
)
from document_operations.utils.xml_codec import element_to_dict, parse_xml

logger = logging.getLogger(__name__)

EMPTY_DOC = "{}"
DOC_NULL_MSG = "The document to be added is empty."
BAD_STRING_MSG = "Invalid string passed, will not serialize to JSON or XML. Raw string should be JSON or XML syntax."

_JSON_ADAPTER = TypeAdapter(Any)


class InputKind(str, Enum):
    """Shape of a value given to the normalizer."""
    TEXT = "text"
    PARSED_JSON = "parsed_json"
    PARSED_XML = "parsed_xml"
    STRUCTURED_RECORD = "structured_record"
    TYPED_DOCUMENT = "typed_document"


@dataclass(frozen=True)
class CanonicalDocument:
    """
    Normalized form of a caller's input.

    Attributes:
        kind: Canonical form, never TEXT (text is parsed into JSON or XML)
        content: The parsed tree, or the caller's value passed through unchanged
        payload: JSON-serializable mapping submitted to the database
        source_kind: Shape of the value the caller gave
    """
    kind: InputKind
    content: Any
    payload: Dict[str, Any]
    source_kind: InputKind

    @property
    def id(self) -> Optional[str]:
        """Caller-visible identifier, if the document carries one."""
        value = self.payload.get("id")
        return None if value is None else str(value)


@dataclass(frozen=True)
class NormalizationError:
    """
    Typed failure of normalization; becomes a BAD_REQUEST envelope.
    """
    kind: ErrorKind
    message: str
    cause: Optional[BaseException] = None

    def to_envelope(self) -> ResultEnvelope:
        return ResultEnvelope.failure(ResponseCode.BAD_REQUEST, self.message, self.kind, self.cause)


NormalizationResult = Union[CanonicalDocument, NormalizationError]


class InputNormalizer:
    """
    Converts any accepted input into a CanonicalDocument.

    Classification order, first match wins:
    1. A value that serializes to '{}' (ignoring whitespace) is EMPTY_DOCUMENT.
    2. Text that parses as a JSON object becomes a parsed JSON tree.
    3. Other text starting with '<' is parsed as XML; anything else, or
       malformed XML, is UNPARSABLE_INPUT with the parse error as cause.
    4. Parsed trees, records and stored documents pass through unchanged.

    normalize() never raises; every failure is returned.
    """

    @classmethod
    def normalize(cls, value: Any) -> NormalizationResult:
        if isinstance(value, CanonicalDocument):
            return value

        if cls._is_empty(value):
            return NormalizationError(ErrorKind.EMPTY_DOCUMENT, DOC_NULL_MSG)

        if isinstance(value, str):
            return cls._normalize_text(value)

        kind = cls.classify(value)
        if kind is None:
            return NormalizationError(
                ErrorKind.UNPARSABLE_INPUT,
                f"{BAD_STRING_MSG} Unsupported document type: {type(value).__name__}"
            )

        try:
            payload = cls._to_payload(kind, value)
        except (TypeError, ValueError) as e:
            logger.warning(f"Could not serialize {kind.value} input: {e}")
            return NormalizationError(ErrorKind.UNPARSABLE_INPUT, f"{BAD_STRING_MSG} {e}", e)
        return CanonicalDocument(kind=kind, content=value, payload=payload, source_kind=kind)

    @staticmethod
    def classify(value: Any) -> Optional[InputKind]:
        """Return the input kind of a value, or None if it is not an accepted shape."""
        if isinstance(value, str):
            return InputKind.TEXT
        if isinstance(value, StoredDocument):
            return InputKind.TYPED_DOCUMENT
        if isinstance(value, dict):
            return InputKind.PARSED_JSON
        if isinstance(value, (ET.Element, ET.ElementTree)):
            return InputKind.PARSED_XML
        if isinstance(value, (BaseModel, Mapping)):
            return InputKind.STRUCTURED_RECORD
        if dataclasses.is_dataclass(value) and not isinstance(value, type):
            return InputKind.STRUCTURED_RECORD
        return None

    @classmethod
    def _normalize_text(cls, text: str) -> NormalizationResult:
        try:
            parsed = json.loads(text)
        except ValueError as e:
            json_error: Exception = e
        else:
            if isinstance(parsed, dict):
                return CanonicalDocument(InputKind.PARSED_JSON, parsed, dict(parsed), InputKind.TEXT)
            json_error = ValueError(f"JSON text is a {type(parsed).__name__}, not an object")

        stripped = text.strip()
        if not stripped.startswith("<"):
            return NormalizationError(ErrorKind.UNPARSABLE_INPUT, BAD_STRING_MSG, json_error)

        try:
            element = parse_xml(stripped)
        except ET.ParseError as e:
            return NormalizationError(ErrorKind.UNPARSABLE_INPUT, BAD_STRING_MSG, e)
        return CanonicalDocument(InputKind.PARSED_XML, element, element_to_dict(element), InputKind.TEXT)

    @staticmethod
    def _to_payload(kind: InputKind, value: Any) -> Dict[str, Any]:
        if kind is InputKind.PARSED_XML:
            return element_to_dict(value)
        if kind in (InputKind.PARSED_JSON, InputKind.TYPED_DOCUMENT):
            return dict(value)

        payload = _JSON_ADAPTER.dump_python(
            dict(value) if isinstance(value, Mapping) else value, mode="json"
        )
        if not isinstance(payload, dict):
            raise TypeError(f"{type(value).__name__} does not serialize to a JSON object")
        return payload

    @staticmethod
    def _is_empty(value: Any) -> bool:
        """Whether the value serializes to the empty-object representation."""
        if isinstance(value, str):
            text = value
        elif isinstance(value, (ET.Element, ET.ElementTree)):
            return False
        elif isinstance(value, Mapping):
            if len(value) > 0:
                return False
            text = EMPTY_DOC
        else:
            try:
                text = json.dumps(_JSON_ADAPTER.dump_python(value, mode="json"))
            except (TypeError, ValueError):
                return False
        return "".join(text.split()) == EMPTY_DOC
