"""
Document Store

Provides the primary interface for document operations on one collection:
create, read, replace and delete, single and batched. Every operation
returns a ResultEnvelope; expected failures (bad input, conflicts, missing
documents, query and transport errors) are reported in the envelope and
never raised.

Only bootstrap failures of the connection (missing endpoint or key, the
client cannot be created, the collection does not exist) are raised, as
ConnectionInitializationError subclasses.

Typical usage from external projects:

    from connection_management import ConnectionManager
    from document_operations import DocumentStore, FieldPredicate, Comparator

    store = DocumentStore(ConnectionManager(settings))

    created = await store.create_one('{"name": "Ann", "city": "Oslo"}')
    page = await store.read_many(FieldPredicate("city", Comparator.EQ, "Oslo"), max_count=10)
    more = await store.read_many(
        FieldPredicate("city", Comparator.EQ, "Oslo"),
        max_count=10,
        continuation_token=page.continuation_token
    )
    results = await store.delete_batch(["a", "b", "c"])
"""

import asyncio
import logging
import re
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from azure.core.exceptions import ServiceRequestTimeoutError, ServiceResponseTimeoutError
from azure.cosmos import exceptions as cosmos_exceptions

from config import ReturnShape
from connection_management import ConnectionManager
from document_operations.core.batch import BatchRunner
from document_operations.core.formatter import ResponseFormatter
from document_operations.core.normalizer import InputNormalizer, NormalizationError
from document_operations.doc_ops_config import DocumentOperationConfig
from document_operations.doc_ops_exceptions import InvalidLocatorError, InvalidQueryError
from document_operations.models.entities import (
    ErrorKind,
    MediaType,
    ResponseCode,
    ResultEnvelope,
    StoredDocument
)
from document_operations.models.queries import Comparator, FieldPredicate, Query, as_query
from document_operations.utils.timing import OperationStats, OperationTimer

logger = logging.getLogger(__name__)

BAD_QUERY_MSG = "The query could not be executed as written."
EMPTY_ID_MSG = "The request did not specify a document ID."
CONFLICT_MSG = "There is already a document in the database with this ID but a different self link."
NOTFOUND_MSG = "There is no document with the specified self link."
NO_ID_MATCH_MSG = "There is no document with the specified ID."
NO_SELF_LINK_MSG = (
    "The locator cannot be blank unless the replacement object is a StoredDocument "
    "with its self link set."
)
BAD_LOCATOR_MSG = "The locator is not a valid document self link:"

# Self links look like 'dbs/<db>/colls/<coll>/docs/<doc>/'
_SELF_LINK = re.compile(r"^dbs/[^/\s]+/colls/[^/\s]+/docs/[^/\s]+/?$")

_TIMEOUT_ERRORS = (asyncio.TimeoutError, ServiceRequestTimeoutError, ServiceResponseTimeoutError)


def validate_locator(locator: str) -> str:
    """
    Check that a locator is a syntactically valid document self link.

    Raises:
        InvalidLocatorError: If it is not
    """
    if not isinstance(locator, str) or not _SELF_LINK.match(locator.strip()):
        raise InvalidLocatorError(f"{BAD_LOCATOR_MSG} {locator!r}")
    return locator.strip()


class DocumentStore:
    """
    High-level, asynchronous interface for the documents of one collection.

    The store holds no connection state of its own: the ConnectionManager
    passed in owns the transport client and opens it on first use.
    """

    def __init__(
        self,
        connection_manager: ConnectionManager,
        config: Optional[DocumentOperationConfig] = None
    ):
        """
        Initialize DocumentStore with injected dependencies.

        Args:
            connection_manager: Connection handle of the target collection
            config: Configuration for document operations. If None, it is
                    built from the connection manager's settings.
        """
        self._connection_manager = connection_manager
        if config is None:
            settings = connection_manager.config
            config = DocumentOperationConfig.from_settings(settings.operations, settings.monitoring)
        self._config = config

        self._timer = OperationTimer(enable_logging=self._config.enable_timing)
        self._formatter = ResponseFormatter(self._config.xml_namespace)
        self._batch_runner = BatchRunner(self._timer)

        logger.debug(
            f"DocumentStore initialized for collection '{connection_manager.collection_name}' "
            f"with max_count={self._config.default_max_count}, "
            f"partition_key_path={self._config.partition_key_path}"
        )

    @property
    def config(self) -> DocumentOperationConfig:
        return self._config

    async def _timed(
        self,
        operation_name: str,
        operation: Callable[..., Awaitable[ResultEnvelope]],
        *args: Any,
        **kwargs: Any
    ) -> ResultEnvelope:
        async with self._timer.time_operation(operation_name) as timing:
            envelope = await operation(*args, **kwargs)
            timing.success = not envelope.has_error
            timing.metadata["status"] = envelope.status.name
        if envelope.has_error:
            logger.warning(
                f"{operation_name} failed with {envelope.status.name} "
                f"({envelope.error_kind.value}): {envelope.error_message}"
            )
        return envelope

    async def create_one(self, document: Any) -> ResultEnvelope:
        """
        Create one document.

        Args:
            document: JSON or XML text, a parsed JSON dict or XML element,
                      a pydantic model, dataclass or mapping, or a StoredDocument

        Returns:
            SUCCESS_CREATE with the new document's id as body and its self
            link, BAD_REQUEST for empty or unparsable input, CONFLICT when
            the id is already taken
        """
        return await self._timed("create_one", self._create, document)

    async def _create(self, document: Any) -> ResultEnvelope:
        normalized = InputNormalizer.normalize(document)
        if isinstance(normalized, NormalizationError):
            return normalized.to_envelope()

        container = await self._connection_manager.get_container()
        try:
            created = await container.create_item(
                body=normalized.payload,
                enable_automatic_id_generation=True
            )
        except Exception as e:
            return self._transport_failure(e)

        return ResultEnvelope.success(
            ResponseCode.SUCCESS_CREATE,
            body=str(created.get("id", "")),
            media_type=MediaType.TEXT,
            self_link=created.get("_self"),
            match_count=1
        )

    async def create_batch(self, documents: List[Any]) -> List[ResultEnvelope]:
        """Create every document concurrently; one envelope per document, in order."""
        return await self._batch_runner.run(documents, self.create_one, operation_name="create_batch")

    async def read_many(
        self,
        query: Union[str, Query],
        max_count: Optional[int] = None,
        continuation_token: Optional[str] = None,
        shape: Optional[ReturnShape] = None,
        session_token: Optional[str] = None
    ) -> ResultEnvelope:
        """
        Read one page of documents matching a query.

        Args:
            query: SQL text, RawQuery or FieldPredicate
            max_count: Maximum number of documents in the page
            continuation_token: Token of a previous page to resume from
            shape: JSON or XML body; defaults to the configured shape
            session_token: Session token for session consistency

        Returns:
            SUCCESS_READ with the documents and the token of the next page if
            more may exist, NOT_FOUND if nothing matched, BAD_REQUEST if the
            query could not be executed
        """
        return await self._timed(
            "read_many", self._read_many, query, max_count, continuation_token, shape, session_token
        )

    async def _read_many(
        self,
        query: Union[str, Query],
        max_count: Optional[int],
        continuation_token: Optional[str],
        shape: Optional[ReturnShape],
        session_token: Optional[str]
    ) -> ResultEnvelope:
        try:
            sql, parameters = as_query(query).to_sql()
            page_size = self._config.validate_max_count(max_count)
            shape = ReturnShape(shape or self._config.default_return_shape)
        except (InvalidQueryError, ValueError) as e:
            return ResultEnvelope.failure(
                ResponseCode.BAD_REQUEST, f"{BAD_QUERY_MSG} {e}", ErrorKind.BAD_QUERY, e
            )

        container = await self._connection_manager.get_container()
        try:
            documents, next_token = await self._query_page(
                container, sql, parameters, page_size, continuation_token, session_token
            )
        except Exception as e:
            if isinstance(e, _TIMEOUT_ERRORS):
                return self._transport_failure(e)
            message = getattr(e, "message", None) or str(e)
            return ResultEnvelope.failure(
                ResponseCode.BAD_REQUEST, f"{BAD_QUERY_MSG} {message}", ErrorKind.BAD_QUERY, e
            )

        return self._formatter.format(documents, shape, continuation_token=next_token)

    async def read_one(self, document_id: str, shape: Optional[ReturnShape] = None) -> ResultEnvelope:
        """
        Read the document with the given id.

        Returns:
            SUCCESS_READ with the document and its self link, NOT_FOUND with
            an empty body if no document has that id
        """
        return await self._timed("read_one", self._read_one, document_id, shape)

    async def _read_one(self, document_id: str, shape: Optional[ReturnShape]) -> ResultEnvelope:
        if not document_id:
            return ResultEnvelope.failure(ResponseCode.BAD_REQUEST, EMPTY_ID_MSG, ErrorKind.MISSING_ID)

        try:
            shape = ReturnShape(shape or self._config.default_return_shape)
        except ValueError as e:
            return ResultEnvelope.failure(
                ResponseCode.BAD_REQUEST, f"Unsupported return shape: {e}", ErrorKind.BAD_QUERY, e
            )

        container = await self._connection_manager.get_container()
        try:
            documents = await self._find_by_id(container, document_id)
        except Exception as e:
            return self._transport_failure(e)
        return self._formatter.format(documents, shape)

    async def _query_page(
        self,
        container: Any,
        sql: str,
        parameters: List[Dict[str, Any]],
        page_size: int,
        continuation_token: Optional[str] = None,
        session_token: Optional[str] = None
    ) -> Tuple[List[Dict[str, Any]], Optional[str]]:
        """Fetch the next non-empty page of query results and the token of the page after it."""
        kwargs: Dict[str, Any] = {"max_item_count": page_size}
        if parameters:
            kwargs["parameters"] = parameters
        if session_token:
            kwargs["session_token"] = session_token

        pager = container.query_items(query=sql, **kwargs).by_page(continuation_token)
        documents: List[Dict[str, Any]] = []
        async for page in pager:
            async for document in page:
                documents.append(document)
            # Cross-partition queries may yield empty pages before the last one
            if documents or pager.continuation_token is None:
                break
        return documents, pager.continuation_token

    async def _find_by_id(self, container: Any, document_id: str) -> List[Dict[str, Any]]:
        """All documents with the given id, scanning every page of the query."""
        sql, parameters = FieldPredicate("id", Comparator.EQ, document_id).to_sql()
        documents: List[Dict[str, Any]] = []
        token: Optional[str] = None
        while True:
            page, token = await self._query_page(
                container, sql, parameters, self._config.max_max_count, token
            )
            documents.extend(page)
            if token is None:
                return documents

    async def replace_one(self, document: Any, locator: Optional[str] = None) -> ResultEnvelope:
        """
        Replace the document at a locator with a new document.

        Args:
            document: Replacement document, in any shape create_one accepts
            locator: Self link of the document to replace. May be omitted
                     when document is a StoredDocument carrying its self link.

        Returns:
            SUCCESS_UPDATE with the id and self link of the replaced document,
            BAD_REQUEST when the locator is missing or malformed (no network
            call is made), NOT_FOUND when it does not resolve, CONFLICT when
            the new id is taken by a different document
        """
        return await self._timed("replace_one", self._replace, document, locator)

    async def _replace(self, document: Any, locator: Optional[str]) -> ResultEnvelope:
        if locator is None:
            if isinstance(document, StoredDocument) and document.self_link:
                locator = document.self_link
            else:
                return ResultEnvelope.failure(
                    ResponseCode.BAD_REQUEST, NO_SELF_LINK_MSG, ErrorKind.MISSING_LOCATOR
                )

        try:
            locator = validate_locator(locator)
        except InvalidLocatorError as e:
            return ResultEnvelope.failure(ResponseCode.BAD_REQUEST, str(e), ErrorKind.INVALID_LOCATOR, e)

        normalized = InputNormalizer.normalize(document)
        if isinstance(normalized, NormalizationError):
            return normalized.to_envelope()

        container = await self._connection_manager.get_container()
        try:
            replaced = await container.replace_item(item={"_self": locator}, body=normalized.payload)
        except Exception as e:
            return self._transport_failure(e)

        return ResultEnvelope.success(
            ResponseCode.SUCCESS_UPDATE,
            body=str(replaced.get("id", "")),
            media_type=MediaType.TEXT,
            self_link=replaced.get("_self", locator),
            match_count=1
        )

    async def replace_batch(self, documents: List[Any]) -> List[ResultEnvelope]:
        """
        Replace every document concurrently.

        Each document must be a StoredDocument carrying its self link, e.g.
        StoredDocument.from_json(envelope.body) of an earlier read_one.
        """
        return await self._batch_runner.run(documents, self.replace_one, operation_name="replace_batch")

    async def delete_one(self, document_id: str) -> ResultEnvelope:
        """
        Delete the document with the given id.

        Returns:
            SUCCESS_DELETE with an empty body, NOT_FOUND if no document has
            that id, BAD_REQUEST if the id is empty
        """
        return await self._timed("delete_one", self._delete, document_id)

    async def _delete(self, document_id: str) -> ResultEnvelope:
        if not document_id:
            return ResultEnvelope.failure(ResponseCode.BAD_REQUEST, EMPTY_ID_MSG, ErrorKind.MISSING_ID)

        container = await self._connection_manager.get_container()
        try:
            documents = await self._find_by_id(container, document_id)
            if not documents:
                return ResultEnvelope.failure(
                    ResponseCode.NOT_FOUND, f"{NO_ID_MATCH_MSG} id={document_id}", ErrorKind.NOT_FOUND
                )
            target = documents[0]
            await container.delete_item(item=target, partition_key=self._partition_value(target))
        except Exception as e:
            return self._transport_failure(e)

        return ResultEnvelope.success(ResponseCode.SUCCESS_DELETE, self_link=target.get("_self"))

    async def delete_batch(self, document_ids: List[str]) -> List[ResultEnvelope]:
        """Delete every id concurrently; every item must be a string id."""
        return await self._batch_runner.run(
            document_ids, self.delete_one, item_type=str, operation_name="delete_batch"
        )

    def _partition_value(self, document: Dict[str, Any]) -> Any:
        value: Any = document
        for part in self._config.partition_key_parts:
            if not isinstance(value, dict) or part not in value:
                return None
            value = value[part]
        return value

    def _transport_failure(self, error: Exception) -> ResultEnvelope:
        """Map a transport exception of a per-document operation onto an envelope."""
        if isinstance(error, _TIMEOUT_ERRORS):
            return ResultEnvelope.failure(
                ResponseCode.BAD_REQUEST, f"The request timed out: {error}", ErrorKind.TIMEOUT, error
            )

        if isinstance(error, cosmos_exceptions.CosmosHttpResponseError):
            if error.status_code == ResponseCode.CONFLICT:
                return ResultEnvelope.failure(
                    ResponseCode.CONFLICT, f"{CONFLICT_MSG} {error.message}", ErrorKind.CONFLICT, error
                )
            if error.status_code == ResponseCode.NOT_FOUND:
                return ResultEnvelope.failure(
                    ResponseCode.NOT_FOUND, f"{NOTFOUND_MSG} {error.message}", ErrorKind.NOT_FOUND, error
                )
            if error.status_code == 408:
                return ResultEnvelope.failure(
                    ResponseCode.BAD_REQUEST, f"The request timed out: {error.message}", ErrorKind.TIMEOUT, error
                )
            message = error.message
        else:
            message = str(error) or type(error).__name__

        return ResultEnvelope.failure(ResponseCode.BAD_REQUEST, message, ErrorKind.TRANSPORT_FAILURE, error)

    def get_operation_stats(self, operation_name: str) -> Optional[OperationStats]:
        """Timing statistics of one operation, e.g. 'create_one' or 'delete_batch'."""
        return self._timer.get_operation_stats(operation_name)

    def get_performance_summary(self) -> Dict[str, OperationStats]:
        return self._timer.get_summary()
