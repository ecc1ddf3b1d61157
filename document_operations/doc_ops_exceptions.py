"""
Document Operations Exceptions

These exceptions are raised inside the document operations and caught at
their boundary, where they become failed result envelopes. Callers only see
them through ResultEnvelope.cause.
"""

from docdb_ops_exceptions import DocDBOpsError, QueryError


class DocumentOperationError(DocDBOpsError):
    """
    Base exception for all document operation errors.
    """
    pass


class BatchConstructionError(DocumentOperationError):
    """
    Raised when the per-item operations of a batch cannot be built.

    This is the only batch failure reported as a single envelope instead of
    one envelope per item, e.g. when the batch is not a collection at all or
    holds items of the wrong type.
    """
    pass


class InvalidQueryError(QueryError, DocumentOperationError):
    """
    Raised when a query or predicate cannot be turned into SQL.
    """
    pass


class InvalidLocatorError(DocumentOperationError):
    """
    Raised when a document locator is not syntactically valid.
    """
    pass
