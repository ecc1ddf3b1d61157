"""
Document Models

Contains the result envelope, its enums, the stored document record and
the query variants.
"""

from .entities import (
    ResponseCode,
    MediaType,
    ErrorKind,
    ResultEnvelope,
    StoredDocument,
    BatchItem
)
from .queries import (
    Comparator,
    RawQuery,
    FieldPredicate,
    Query,
    as_query
)

__all__ = [
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
    'as_query'
]
