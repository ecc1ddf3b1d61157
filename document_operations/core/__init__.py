"""
Core Document Operation Components

Contains the input normalizer, the response formatter, the batch runner
and the DocumentStore that ties them to a collection.
"""

from .normalizer import InputKind, CanonicalDocument, NormalizationError, InputNormalizer
from .formatter import ResponseFormatter
from .batch import BatchRunner
from .store import DocumentStore, validate_locator

__all__ = [
    'InputKind',
    'CanonicalDocument',
    'NormalizationError',
    'InputNormalizer',
    'ResponseFormatter',
    'BatchRunner',
    'DocumentStore',
    'validate_locator'
]
