"""
Document Database Operations Exceptions

This module defines the base exceptions for the DocDB_Ops package.
Only failures that leave the system unable to work at all are raised;
per-document outcomes are reported through result envelopes instead.
"""

class DocDBOpsError(Exception):
    """Base exception for all DocDB_Ops errors"""
    pass


class ConnectionError(DocDBOpsError):
    """Raised when the connection to the document database cannot be used"""
    pass


class ConfigurationError(DocDBOpsError):
    """Raised when configuration is invalid or missing"""
    pass


class QueryError(DocDBOpsError):
    """Raised when a query cannot be built from the given input"""
    pass
