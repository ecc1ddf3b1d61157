"""
Document Database Connection Manager

This module provides the connection handle used by all document operations.
The caller constructs one ConnectionManager at process start and passes it to
the DocumentStore; the transport client behind it is created on first use.
"""

import asyncio
import logging
from typing import Any, Callable, List, Optional

from azure.cosmos import exceptions as cosmos_exceptions
from azure.cosmos import http_constants
from azure.cosmos.aio import CosmosClient

from config import DocDBSettings, ConnectionSettings, load_settings
from connection_management.connection_exceptions import (
    ConnectionInitializationError,
    MissingEndpointError,
    MissingCredentialError,
    ClientCreationError,
    AggregateTransportError,
    CollectionUnavailableError
)

# Logger setup
logger = logging.getLogger(__name__)

END_POINT_MSG = "The document database endpoint is not specified."
AUTH_KEY_MSG = "The document database authorization key is not specified."
CLIENT_ERR_MSG = "The document client could not be created from stored credentials."
AGGREGATE_ERR_MSG = "Errors Occurred."
BAD_COLLECTION_MSG = "Cannot open document collection with collection ID given: "

# Builds an async client exposing get_database_client(); azure.cosmos.aio.CosmosClient by default
ClientFactory = Callable[[ConnectionSettings], Any]


def default_client_factory(settings: ConnectionSettings) -> CosmosClient:
    """Create the async Cosmos client from connection settings."""
    kwargs = {"connection_timeout": settings.connection_timeout}
    if settings.consistency_level:
        kwargs["consistency_level"] = settings.consistency_level
    return CosmosClient(
        settings.endpoint,
        credential=settings.auth_key.get_secret_value(),
        **kwargs
    )


def _base_exception(exc: BaseException) -> BaseException:
    """Follow the cause chain down to the innermost exception."""
    seen = set()
    while id(exc) not in seen:
        seen.add(id(exc))
        inner = exc.__cause__ or exc.__context__
        if inner is None:
            break
        exc = inner
    return exc


def describe_transport_error(exc: BaseException) -> str:
    """
    Summarize one lower-level failure.

    Database errors carry status code, activity id, message and the message
    of the root cause; anything else is reported by type and message.
    """
    if isinstance(exc, cosmos_exceptions.CosmosHttpResponseError):
        headers = getattr(exc, "headers", None) or {}
        activity_id = headers.get(http_constants.HttpHeaders.ActivityId)
        return (
            f"{CLIENT_ERR_MSG} StatusCode: {exc.status_code}, Activity id: {activity_id}, "
            f"Message: {exc.message}, BaseMessage: {_base_exception(exc)}"
        )
    return f"Error type: {type(exc).__name__}, Message: {exc}"


class ConnectionManager:
    """
    Connection handle for the remote document database.

    The handle owns a single transport client and the proxy for one
    collection. Both are created on the first call to get_container() and
    reused afterwards; an asyncio lock makes concurrent first calls create
    them exactly once.

    Bootstrap failures are classified and raised as fatal errors:
    - MissingEndpointError when no endpoint is configured
    - MissingCredentialError when no authorization key is configured
    - CollectionUnavailableError when the database or collection does not exist
    - ClientCreationError for a single transport failure
    - AggregateTransportError when several failures are reported at once
    A missing endpoint or key is always reported first, whatever failed below.
    """

    def __init__(
        self,
        config: Optional[DocDBSettings] = None,
        client_factory: Optional[ClientFactory] = None,
        collection: Optional[str] = None
    ):
        """
        Initialize the connection manager.

        Args:
            config: DocDBSettings object. If None, settings are loaded from
                   the environment and defaults.
            client_factory: Callable building the transport client from the
                   connection settings. Defaults to the async Cosmos client.
            collection: Collection to use instead of the configured default.
        """
        self.config = config if config is not None else load_settings()
        self._settings = self.config.connection
        self._client_factory = client_factory or default_client_factory
        self._collection_name = collection or self._settings.collection
        self._client = None
        self._container = None
        self._lock = asyncio.Lock()

        logger.debug(f"ConnectionManager created for collection '{self._collection_name}'")

    @property
    def collection_name(self) -> str:
        """Collection all operations run against."""
        return self._collection_name

    @property
    def is_connected(self) -> bool:
        """Whether the transport client has been created."""
        return self._container is not None

    async def get_container(self) -> Any:
        """
        Return the collection proxy, creating the client on first use.

        Raises:
            ConnectionInitializationError: One of its classified subclasses
                when the client cannot be created or the collection opened.
        """
        if self._container is not None:
            return self._container

        async with self._lock:
            if self._container is None:
                self._container = await self._open_container()
        return self._container

    def _check_configuration(self) -> None:
        if not self._settings.endpoint:
            raise MissingEndpointError(END_POINT_MSG)
        if not self._settings.auth_key.get_secret_value():
            raise MissingCredentialError(AUTH_KEY_MSG)

    async def _open_container(self) -> Any:
        self._check_configuration()

        client = None
        try:
            client = self._client_factory(self._settings)
            database = client.get_database_client(self._settings.database)
            container = database.get_container_client(self._collection_name)
            if self._settings.verify_on_connect:
                await self._verify(database, container)
        except ConnectionInitializationError:
            raise
        except Exception as e:
            if client is not None:
                await self._discard_client(client)
            error = self._classify(e)
            logger.error(f"Failed to open collection '{self._collection_name}': {error}")
            raise error from e

        self._client = client
        logger.info(
            f"Document client created for database '{self._settings.database}', "
            f"collection '{self._collection_name}'"
        )
        return container

    async def _verify(self, database: Any, container: Any) -> None:
        """Read database and collection concurrently; report every failure."""
        results = await asyncio.gather(database.read(), container.read(), return_exceptions=True)
        failures = [r for r in results if isinstance(r, Exception)]
        if len(failures) == 1:
            raise failures[0]
        if failures:
            raise ExceptionGroup("collection verification failed", failures)

    def _classify(self, exc: Exception) -> ConnectionInitializationError:
        """Turn a bootstrap failure into one of the fatal connection errors."""
        self._check_configuration()

        inner: List[Exception] = list(exc.exceptions) if isinstance(exc, ExceptionGroup) else [exc]

        if all(isinstance(e, cosmos_exceptions.CosmosResourceNotFoundError) for e in inner):
            return CollectionUnavailableError(
                f"{BAD_COLLECTION_MSG}{self._collection_name}. {inner[0].message}",
                collection=self._collection_name,
                cause=exc
            )

        if len(inner) > 1:
            summaries = [describe_transport_error(e) for e in inner]
            message = f"{len(inner)} {AGGREGATE_ERR_MSG} " + "".join(f"[{s}]" for s in summaries)
            return AggregateTransportError(message, summaries=summaries, cause=exc)

        single = inner[0]
        if isinstance(single, cosmos_exceptions.CosmosHttpResponseError):
            headers = getattr(single, "headers", None) or {}
            return ClientCreationError(
                describe_transport_error(single),
                status_code=single.status_code,
                activity_id=headers.get(http_constants.HttpHeaders.ActivityId),
                base_message=str(_base_exception(single)),
                cause=single
            )
        return ConnectionInitializationError(describe_transport_error(single), cause=single)

    async def _discard_client(self, client: Any) -> None:
        try:
            await client.close()
        except Exception as e:
            logger.warning(f"Error closing document client after failed bootstrap: {e}")

    async def close(self) -> None:
        """
        Close the transport client and release its resources.

        Safe to call more than once; a later get_container() creates a new client.
        """
        async with self._lock:
            if self._client is not None:
                await self._client.close()
                logger.info("Document client closed")
            self._client = None
            self._container = None

    async def __aenter__(self) -> "ConnectionManager":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
