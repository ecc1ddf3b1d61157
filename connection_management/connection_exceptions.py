"""
Connection Management Exceptions

This module defines the fatal exceptions raised while bootstrapping the
document database client. Each one carries a message built the same way
the client creation failure was classified, so callers can log it as-is.

Classification order is fixed: a missing endpoint is reported before a
missing credential, and both are reported before any lower-level failure.
"""

from typing import List, Optional

from docdb_ops_exceptions import ConnectionError as BaseConnectionError


class ConnectionError(BaseConnectionError):
    """
    Base exception for all connection-related errors.
    """
    pass


class ConnectionInitializationError(ConnectionError):
    """
    Raised when the document client cannot be created or opened.

    This is the parent of every classified bootstrap failure. It is never
    converted into a result envelope: without a client no operation can run.
    """

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause


class MissingEndpointError(ConnectionInitializationError):
    """Raised when no service endpoint is configured."""
    pass


class MissingCredentialError(ConnectionInitializationError):
    """Raised when no authorization key is configured."""
    pass


class ClientCreationError(ConnectionInitializationError):
    """
    Raised when the transport client reports a failure while it is created.

    Attributes:
        status_code: HTTP status code reported by the database, if any
        activity_id: Correlation id of the failed request, if any
        base_message: Message of the innermost exception in the cause chain
    """

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        activity_id: Optional[str] = None,
        base_message: Optional[str] = None,
        cause: Optional[BaseException] = None
    ):
        super().__init__(message, cause)
        self.status_code = status_code
        self.activity_id = activity_id
        self.base_message = base_message


class AggregateTransportError(ConnectionInitializationError):
    """
    Raised when several lower-level failures happen during one bootstrap call.

    Attributes:
        summaries: One summary line per inner failure, in the order reported
    """

    def __init__(self, message: str, summaries: List[str], cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.summaries = summaries


class CollectionUnavailableError(ConnectionInitializationError):
    """
    Raised when the configured database or collection does not exist.

    Attributes:
        collection: The collection locator that could not be opened
    """

    def __init__(self, message: str, collection: str, cause: Optional[BaseException] = None):
        super().__init__(message, cause)
        self.collection = collection
