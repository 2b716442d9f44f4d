"""
Operation specification value object.

Represents a single step in a declarative chain definition.
This is the data structure used to define chains in JSON/dict format.
"""

from typing import Optional, Dict, Any


class OperationSpec:
    """
    Value object representing a single step in a chain definition.

    Steps are added to the chain in order (order_index). This class is
    the bridge between JSON chain definitions and the fluent builders.

    Attributes:
        operation: Operation name (e.g., 'pad', 'has') or one of the
                   chain entries 'is_not', 'assert_that', 'string_transform'
        operation_config: Keyword arguments for the operation
        order_index: Position within the chain

    Example (creating manually):
        >>> spec = OperationSpec(
        ...     operation="pad",
        ...     operation_config={"length": 7, "char": "*", "where": "both"},
        ... )

    Example (from JSON):
        >>> {
        ...     "operation": "pad",
        ...     "operation_config": {"length": 7, "char": "*"},
        ...     "order_index": 2
        ... }
    """

    def __init__(
        self,
        operation: str,
        operation_config: Optional[Dict[str, Any]] = None,
        order_index: int = 0,
    ):
        """
        Initialize an operation specification.

        Args:
            operation: Operation name. Must match a registered operation
                      of the chain's type, or be a chain entry.
            operation_config: Configuration dict for the operation.
                             Keys depend on the specific operation's schema.
            order_index: Position within the chain (lower = earlier).
        """
        self._operation = operation
        self._operation_config = operation_config or {}
        self._order_index = order_index

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the operation specification to a dictionary.

        Useful for serialization to JSON.
        """
        return {
            "operation": self._operation,
            "operation_config": self._operation_config,
            "order_index": self._order_index,
        }

    def __eq__(self, other):
        if not isinstance(other, OperationSpec):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"OperationSpec(operation={self._operation}, order={self._order_index})"

    # Properties (read-only)
    @property
    def operation(self) -> str:
        """The operation name."""
        return self._operation

    @property
    def operation_config(self) -> Dict[str, Any]:
        """Configuration dictionary for the operation."""
        return self._operation_config

    @property
    def order_index(self) -> int:
        """Position in the chain (lower = earlier)."""
        return self._order_index
