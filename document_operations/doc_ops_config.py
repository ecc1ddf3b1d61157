"""
Document Operations Configuration

Tunable parameters of the document operations: read page sizes, the
default body shape of reads, the collection's partition key and timing.
"""

from dataclasses import dataclass, fields
from typing import Any, Dict, Optional
import logging

from config import ReturnShape, OperationSettings, MonitoringSettings

logger = logging.getLogger(__name__)


@dataclass
class DocumentOperationConfig:
    """
    Configuration for document operations.

    Attributes:
        default_max_count: Page size of reads that do not pass max_count.
        max_max_count: Upper bound accepted for max_count.
        default_return_shape: Body shape of reads that do not pass a shape.
        partition_key_path: Partition key path of the collection, e.g. '/id'
                            or '/address/city'. Deletes and locator-less
                            replaces read the key value from this path.
        xml_namespace: Namespace of the wrapper element in XML read bodies.
        enable_timing: Whether to log per-operation timings.

    Example:
        ```python
        config = DocumentOperationConfig(default_max_count=20, partition_key_path="/tenant")
        store = DocumentStore(conn_mgr, config=config)
        ```
    """

    default_max_count: int = 100
    max_max_count: int = 1000
    default_return_shape: ReturnShape = ReturnShape.JSON
    partition_key_path: str = "/id"
    xml_namespace: str = "urn:docdb-ops:response"
    enable_timing: bool = True

    def __post_init__(self):
        """Validate configuration parameters after initialization."""
        self.default_return_shape = ReturnShape(self.default_return_shape)

        if self.max_max_count < 1:
            raise ValueError("max_max_count must be positive")

        if self.default_max_count < 1:
            raise ValueError("default_max_count must be positive")

        if self.default_max_count > self.max_max_count:
            logger.warning(
                f"default_max_count ({self.default_max_count}) exceeds "
                f"max_max_count ({self.max_max_count}). Setting to max_max_count."
            )
            self.default_max_count = self.max_max_count

        if not self.partition_key_path.startswith("/") or self.partition_key_path == "/":
            raise ValueError(f"partition_key_path must look like '/field', got {self.partition_key_path!r}")

    @classmethod
    def from_settings(
        cls,
        operations: OperationSettings,
        monitoring: Optional[MonitoringSettings] = None
    ) -> 'DocumentOperationConfig':
        """Build the configuration from loaded settings."""
        return cls(
            default_max_count=operations.default_max_count,
            default_return_shape=operations.default_return_shape,
            partition_key_path=operations.partition_key_path,
            xml_namespace=operations.xml_namespace,
            enable_timing=monitoring.enable_timing if monitoring is not None else True
        )

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'DocumentOperationConfig':
        """
        Create configuration from a dictionary.

        Keys that are not configuration fields are ignored.
        """
        valid_fields = {f.name for f in fields(cls)}
        filtered_dict = {k: v for k, v in config_dict.items() if k in valid_fields}
        return cls(**filtered_dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'default_max_count': self.default_max_count,
            'max_max_count': self.max_max_count,
            'default_return_shape': self.default_return_shape.value,
            'partition_key_path': self.partition_key_path,
            'xml_namespace': self.xml_namespace,
            'enable_timing': self.enable_timing
        }

    @property
    def partition_key_parts(self) -> list:
        """Partition key path split into field names."""
        return [part for part in self.partition_key_path.split("/") if part]

    def validate_max_count(self, max_count: Optional[int]) -> int:
        """
        Validate and normalize a max_count parameter.

        Args:
            max_count: Requested page size, or None to use the default.

        Returns:
            Page size within configured bounds.

        Raises:
            ValueError: If max_count is not an integer, is not positive or
                        exceeds max_max_count.
        """
        if max_count is None:
            return self.default_max_count

        if not isinstance(max_count, int) or isinstance(max_count, bool):
            raise ValueError(f"max_count must be an integer, got {max_count!r}")

        if max_count < 1:
            raise ValueError(f"max_count must be positive, got {max_count}")

        if max_count > self.max_max_count:
            raise ValueError(
                f"max_count {max_count} exceeds maximum ({self.max_max_count})"
            )

        return max_count
