"""
Response Formatter

Turns the documents matched by a read into a result envelope whose body is
either JSON text or XML text.
"""

import json
import logging
from typing import Any, Mapping, Optional, Sequence

from config import ReturnShape
from document_operations.models.entities import (
    ErrorKind,
    MediaType,
    ResponseCode,
    ResultEnvelope
)
from document_operations.utils.xml_codec import dict_to_xml

logger = logging.getLogger(__name__)

NOT_FOUND_MSG = "No documents matched the request."
XML_ROOT = "docResponse"
XML_ITEM = "document"


class ResponseFormatter:
    """
    Formats matched documents into a ResultEnvelope.

    - no documents gives a NOT_FOUND failure with an empty body
    - one document in JSON shape gives that document alone, not an array of one
    - several documents in JSON shape give a JSON array
    - XML shape always wraps every document in one namespaced root element
      behind a version/standalone declaration

    match_count is the number of documents in either shape. Formatting a
    non-empty result never fails.
    """

    def __init__(self, xml_namespace: str = "urn:docdb-ops:response"):
        self._xml_namespace = xml_namespace

    def format(
        self,
        documents: Sequence[Mapping[str, Any]],
        shape: ReturnShape = ReturnShape.JSON,
        status: ResponseCode = ResponseCode.SUCCESS_READ,
        continuation_token: Optional[str] = None
    ) -> ResultEnvelope:
        """
        Build the envelope for a page of matched documents.

        Args:
            documents: Matched documents, in the order the database returned them
            shape: Serialized shape of the body
            status: Success code reported when at least one document matched
            continuation_token: Token of the next page; dropped when nothing matched

        Returns:
            ResultEnvelope
        """
        documents = list(documents)
        if not documents:
            return ResultEnvelope.failure(ResponseCode.NOT_FOUND, NOT_FOUND_MSG, ErrorKind.NOT_FOUND)

        shape = ReturnShape(shape)
        if shape is ReturnShape.XML:
            body = self.to_xml(documents)
            media_type = MediaType.XML
        else:
            body = json.dumps(documents[0] if len(documents) == 1 else documents)
            media_type = MediaType.JSON

        return ResultEnvelope.success(
            status,
            body=body,
            media_type=media_type,
            self_link=documents[0].get("_self"),
            continuation_token=continuation_token,
            match_count=len(documents)
        )

    def to_xml(self, documents: Sequence[Mapping[str, Any]]) -> str:
        """Wrap the documents in the XML response root and serialize them."""
        # Round trip through JSON so only JSON-serializable values reach the XML writer
        items = json.loads(json.dumps(list(documents)))
        wrapper = {
            "?xml": {"@version": "1.0", "@standalone": "no"},
            XML_ROOT: {"@xmlns": self._xml_namespace, XML_ITEM: items},
        }
        return dict_to_xml(wrapper)
