"""
Document Database Client

This module provides the main client interface for document operations,
wiring settings, the connection handle and the document store together.
"""

from typing import Optional, Union
import logging
from pathlib import Path

from config import DocDBSettings, load_settings
from connection_management import ConnectionManager, ClientFactory
from document_operations import DocumentStore, DocumentOperationConfig
from docdb_ops_exceptions import ConfigurationError

# Logger setup
logger = logging.getLogger(__name__)


class DocDBClient:
    """
    Main client interface for document operations.

    Builds one ConnectionManager and one DocumentStore for a collection.
    Nothing touches the network until the first operation runs.

    Example:
        async with DocDBClient("config.yaml", collection="orders") as client:
            envelope = await client.documents.read_one("order-1")
    """

    def __init__(
        self,
        config: Optional[Union[DocDBSettings, str, Path]] = None,
        collection: Optional[str] = None,
        client_factory: Optional[ClientFactory] = None
    ):
        """
        Initialize the client.

        Args:
            config: Either a DocDBSettings object or a path to a config YAML file.
                   If None, settings come from the environment and defaults.
            collection: Collection to use instead of the configured one.
            client_factory: Builds the transport client; the async Cosmos
                   client by default.
        """
        if config is None:
            self.config = load_settings()
        elif isinstance(config, (str, Path)):
            self.config = load_settings(str(config))
        elif isinstance(config, DocDBSettings):
            self.config = config
        else:
            raise ConfigurationError("Invalid configuration type. Expected DocDBSettings, str, Path, or None.")

        self.connection = ConnectionManager(self.config, client_factory=client_factory, collection=collection)
        self.documents = DocumentStore(
            self.connection,
            DocumentOperationConfig.from_settings(self.config.operations, self.config.monitoring)
        )

        logger.info(f"DocDBClient initialized for collection '{self.connection.collection_name}'")

    async def close(self) -> None:
        """Close the client and release all resources"""
        await self.connection.close()
        logger.info("DocDBClient closed")

    async def __aenter__(self) -> "DocDBClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()
