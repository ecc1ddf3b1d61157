"""
Connection Management Module

This module owns the single connection handle to the remote document
database. The handle is an explicit object created once by the caller and
passed to the document operations; the underlying transport client is
created lazily on first use, guarded so concurrent first uses create it
exactly once.

Key capabilities:
- Lazy, lock-guarded creation of the transport client and collection proxy
- Classified bootstrap failures (missing endpoint, missing credential,
  client creation failure, aggregate failure, unavailable collection)
- Injectable client factory for alternate transports and testing
- Proper resource cleanup through close()
"""

from .connection_manager import ConnectionManager, ClientFactory, default_client_factory
from .connection_exceptions import (
    ConnectionError,
    ConnectionInitializationError,
    MissingEndpointError,
    MissingCredentialError,
    ClientCreationError,
    AggregateTransportError,
    CollectionUnavailableError
)

__all__ = [
    'ConnectionManager',
    'ClientFactory',
    'default_client_factory',
    'ConnectionError',
    'ConnectionInitializationError',
    'MissingEndpointError',
    'MissingCredentialError',
    'ClientCreationError',
    'AggregateTransportError',
    'CollectionUnavailableError',
]
