"""
Pydantic Settings for Document Database Operations

This module provides strongly-typed configuration settings using Pydantic,
with support for environment variables and YAML configuration files.
"""

from typing import Optional, Union
from enum import Enum
from pathlib import Path
import logging
import os

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings
from pydantic_yaml import to_yaml_file


class ConsistencyLevel(str, Enum):
    """
    Consistency levels offered by the document database.

    The level is passed to the transport client when it is created and
    decides how reads observe writes made by other sessions.
    """
    STRONG = "Strong"  # Reads always see the latest committed write
    BOUNDED_STALENESS = "BoundedStaleness"  # Reads lag writes by a bounded number of versions or time
    SESSION = "Session"  # Read-your-writes within one session token
    CONSISTENT_PREFIX = "ConsistentPrefix"  # Reads never see out-of-order writes
    EVENTUAL = "Eventual"  # No ordering guarantee, lowest latency


class ReturnShape(str, Enum):
    """Serialized shape of the body returned by read operations"""
    JSON = "json"
    XML = "xml"


class ConnectionSettings(BaseSettings):
    """
    Connection settings for the remote document database.

    Endpoint and authorization key are deliberately allowed to be empty here:
    their absence is reported when the client is first used, as
    MissingEndpointError or MissingCredentialError (checked in that order).
    """
    endpoint: str = Field("", description="Service endpoint URI of the document database account")
    auth_key: SecretStr = Field(SecretStr(""), description="Authorization key (master or resource key)")
    database: str = Field("docdb", description="Database that holds the default collection")
    collection: str = Field("documents", description="Default collection (container) used for all operations")
    consistency_level: Optional[ConsistencyLevel] = Field(
        None, description="Consistency level requested by the client; None keeps the account default")
    connection_timeout: int = Field(60, description="Transport connection timeout in seconds")
    verify_on_connect: bool = Field(
        True, description="Read the database and collection once when the client is created")

    class Config:
        env_prefix = "DOCDB_"
        case_sensitive = False
        use_enum_values = True


class OperationSettings(BaseSettings):
    """
    Defaults applied to document operations when the caller does not pass them.
    """
    default_max_count: int = Field(100, description="Maximum number of documents returned per read page")
    default_return_shape: ReturnShape = Field(ReturnShape.JSON, description="Body shape for read operations")
    partition_key_path: str = Field("/id", description="Partition key path of the collection, e.g. '/id'")
    xml_namespace: str = Field("urn:docdb-ops:response",
                               description="Namespace of the wrapper element in XML read responses")

    class Config:
        env_prefix = "DOCDB_OPS_"
        case_sensitive = False


class MonitoringSettings(BaseSettings):
    """
    Logging and timing settings.
    """
    log_level: str = Field("INFO", description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)")
    enable_timing: bool = Field(True, description="Whether to record per-operation timings")

    class Config:
        env_prefix = "DOCDB_"
        case_sensitive = False


class DocDBSettings(BaseSettings):
    """
    Main settings class that consolidates all configuration categories.

    Usage:
        # Load from environment variables and defaults
        settings = DocDBSettings()

        # Load from YAML file
        settings = DocDBSettings.from_yaml('config.yaml')

        # Access nested settings
        endpoint = settings.connection.endpoint
        page_size = settings.operations.default_max_count
    """
    connection: ConnectionSettings = Field(default_factory=ConnectionSettings,
                                           description="Connection settings for the document database")
    operations: OperationSettings = Field(default_factory=OperationSettings,
                                          description="Defaults for document operations")
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings,
                                           description="Logging and timing settings")

    class Config:
        env_prefix = "DOCDB_"
        case_sensitive = False
        env_nested_delimiter = "__"

    @classmethod
    def from_yaml(cls, yaml_file: Union[str, Path]) -> "DocDBSettings":
        """Load settings from YAML file"""
        import yaml
        with open(yaml_file, 'r') as f:
            data = yaml.safe_load(f) or {}
        return cls(**data)

    def to_yaml(self, yaml_file: Union[str, Path]) -> None:
        """
        Write settings to a YAML file.

        The authorization key is written empty; supply it through DOCDB_CONNECTION__AUTH_KEY
        or edit the file before loading it again.
        """
        connection = self.connection.model_copy(update={"auth_key": SecretStr("")})
        to_yaml_file(yaml_file, self.model_copy(update={"connection": connection}))


def load_settings(config_path: Optional[str] = None) -> DocDBSettings:
    """
    Load settings from file and/or environment variables.

    Args:
        config_path: Path to YAML configuration file. If None or file doesn't exist,
                    falls back to environment variables and default values.

    Returns:
        DocDBSettings object with loaded configuration

    Example:
        settings = load_settings("/path/to/config.yaml")
    """
    if config_path and os.path.exists(config_path):
        return DocDBSettings.from_yaml(config_path)
    return DocDBSettings()


def configure_logging(settings: Optional[DocDBSettings] = None) -> None:
    """Apply the configured log level to the root logger."""
    settings = settings or load_settings()
    logging.basicConfig(
        level=getattr(logging, settings.monitoring.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
