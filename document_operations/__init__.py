"""
Document Operations Module

Provides create, read, replace and delete operations on the documents of
one collection:
- Input normalization of JSON text, XML text, parsed trees, records and
  stored documents into one canonical payload
- Concurrent batch operations with one result per input, in input order
- Paged reads by SQL text or field predicate, returned as JSON or XML
- A uniform ResultEnvelope for every outcome, with a classified ErrorKind
- Operation timing and statistics

Expected failures never raise; only connection bootstrap failures do.

Typical usage from external projects:

    from connection_management import ConnectionManager
    from document_operations import DocumentStore, ErrorKind, ResponseCode

    store = DocumentStore(ConnectionManager(settings))

    results = await store.create_batch([doc_a, "{}", doc_b])
    for envelope in results:
        if envelope.has_error:
            print(f"{envelope.status.name} ({envelope.error_kind.value}): {envelope.error_message}")
        else:
            print(f"Created {envelope.body}")
"""

# Core store (primary interface)
from .core.store import DocumentStore, validate_locator

# Configuration
from .doc_ops_config import DocumentOperationConfig

# Components
from .core.normalizer import (
    InputKind,
    CanonicalDocument,
    NormalizationError,
    InputNormalizer
)
from .core.formatter import ResponseFormatter
from .core.batch import BatchRunner

# Models
from .models.entities import (
    ResponseCode,
    MediaType,
    ErrorKind,
    ResultEnvelope,
    StoredDocument,
    BatchItem
)
from .models.queries import (
    Comparator,
    RawQuery,
    FieldPredicate,
    Query
)

# Timing utilities
from .utils.timing import OperationTimer, TimingResult, OperationStats

# Exceptions
from .doc_ops_exceptions import (
    DocumentOperationError,
    BatchConstructionError,
    InvalidQueryError,
    InvalidLocatorError
)

__all__ = [
    # Primary interface
    'DocumentStore',
    'DocumentOperationConfig',
    'validate_locator',
    # Components
    'InputKind',
    'CanonicalDocument',
    'NormalizationError',
    'InputNormalizer',
    'ResponseFormatter',
    'BatchRunner',
    # Models
    'ResponseCode',
    'MediaType',
    'ErrorKind',
    'ResultEnvelope',
    'StoredDocument',
    'BatchItem',
    'Comparator',
    'RawQuery',
    'FieldPredicate',
    'Query',
    # Utilities
    'OperationTimer',
    'TimingResult',
    'OperationStats',
    # Exceptions
    'DocumentOperationError',
    'BatchConstructionError',
    'InvalidQueryError',
    'InvalidLocatorError'
]
