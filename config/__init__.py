"""
Configuration Module

This module provides centralized configuration management for document
database operations:
- Connection configuration (service endpoint, authorization key, collection)
- Operation defaults (page size, return shape, partition key path)
- Logging and timing settings
- Configuration loading from YAML files and environment variables

Implements a flexible, environment-aware configuration system
with sensible defaults using Pydantic settings.
"""

from .settings import (
    DocDBSettings,
    ConnectionSettings,
    OperationSettings,
    MonitoringSettings,
    ConsistencyLevel,
    ReturnShape,
    load_settings,
    configure_logging
)

__all__ = [
    'DocDBSettings',
    'ConnectionSettings',
    'OperationSettings',
    'MonitoringSettings',
    'ConsistencyLevel',
    'ReturnShape',
    'load_settings',
    'configure_logging'
]
