"""
Exception classes for String Chain.

All exceptions include:
- Descriptive messages with context
- `to_dict()` method for structured JSON output
- Fuzzy-matched suggestions where applicable
"""

from difflib import get_close_matches
from typing import Any, Dict, List, Optional


class OperationError(Exception):
    """
    Base exception for all String Chain errors.

    Example:
        >>> try:
        ...     string_transform("abc").extract(r"\\d+").try_()
        ... except OperationError as e:
        ...     print(e.to_dict())
    """

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to JSON-serializable dict."""
        return {
            "error": self.__class__.__name__,
            "message": str(self),
        }


class StepError(OperationError):
    """
    Raised when a catalog operation cannot satisfy its contract.

    Typical causes are a pattern with no match, an index out of range or
    markers that are missing from the value.

    Attributes:
        message: Human-readable error message
        operation_name: Name of the step that raised
    """

    def __init__(self, message: str, operation_name: Optional[str] = None):
        self.message = message
        self.operation_name = operation_name
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "STEP_ERROR",
            "message": self.message,
            "operation": self.operation_name,
        }


class CustomOperationError(StepError):
    """
    Raised when a user supplied transform or predicate breaks its contract.

    Either the callable raised, or it returned a value of the wrong type.
    When the callable raised, the original exception is available as
    ``__cause__``.
    """

    def to_dict(self) -> Dict[str, Any]:
        result = super().to_dict()
        result["error"] = "CUSTOM_OPERATION_ERROR"
        if self.__cause__ is not None:
            result["original_error"] = str(self.__cause__)
        return result


class OperationNotFoundError(OperationError):
    """
    Raised when an unknown operation is requested.

    Includes fuzzy-matched suggestions to help identify typos.

    Attributes:
        operation: The unknown operation name that was requested
        valid_operations: List of all valid operation names
        suggestions: Fuzzy-matched similar operation names

    Example:
        >>> registry.get_operation("to_uper_case", OperationType.TRANSFORMATION)
        OperationNotFoundError: Unknown operation: 'to_uper_case'.
        Did you mean: to_upper_case?
        Available operations: add, anagram, break_to_lines, chunk, ...
    """

    def __init__(self, operation: str, valid_operations: List[str]):
        self.operation = operation
        self.valid_operations = valid_operations
        self.suggestions = get_close_matches(
            operation.lower(),
            [op.lower() for op in valid_operations],
            n=3,
            cutoff=0.5,
        )
        # Map back to original case
        self.suggestions = [
            op for op in valid_operations
            if op.lower() in self.suggestions
        ]

        message = f"Unknown operation: '{operation}'."
        if self.suggestions:
            message += f" Did you mean: {', '.join(self.suggestions)}?"

        sorted_ops = sorted(valid_operations)[:10]
        message += f"\nAvailable operations: {', '.join(sorted_ops)}"
        if len(valid_operations) > 10:
            message += f" ... ({len(valid_operations) - 10} more)"

        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "OPERATION_NOT_FOUND",
            "operation": self.operation,
            "suggestions": self.suggestions,
            "valid_operations": sorted(self.valid_operations),
        }


class ConfigurationError(OperationError):
    """
    Raised when an operation is called with an invalid configuration.

    Covers missing required parameters as well as values outside the
    operation's contract (an unknown pad position, a non-positive chunk
    size, an unknown phone preset).

    Attributes:
        message: Error description
        operation_name: Name of the misconfigured operation
        config_schema: The expected configuration schema
        provided_config: The invalid configuration that was provided

    Example:
        >>> raise ConfigurationError(
        ...     "Missing required parameter: 'length'",
        ...     operation_name="pad",
        ...     config_schema={"required": {"length": {...}}},
        ...     provided_config={}
        ... )
    """

    def __init__(
        self,
        message: str,
        operation_name: Optional[str] = None,
        config_schema: Optional[Dict[str, Any]] = None,
        provided_config: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.operation_name = operation_name
        self.config_schema = config_schema
        self.provided_config = provided_config

        full_message = message
        if operation_name:
            full_message = f"[{operation_name}] {message}"

        super().__init__(full_message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": "CONFIGURATION_ERROR",
            "message": self.message,
            "operation": self.operation_name,
            "config_schema": self.config_schema,
            "provided_config": self.provided_config,
        }


class BridgeError(OperationError):
    """
    Raised when a chain cannot switch mode.

    A bridge (``assert_that()`` on a transform chain, ``string_transform()``
    on an assertion chain) forces evaluation of the current chain. If that
    evaluation raised, or an assertion evaluated to False, the bridge fails
    with this error. It is never passed to a ``try_`` handler.

    Attributes:
        message: Error description
        operation_name: Name of the step that failed
        value_so_far: Value right before the failing step, if known
        original_error: The underlying exception, if any

    Example:
        >>> raise BridgeError(
        ...     'Transformation failed at step "extract": No match found',
        ...     operation_name="extract",
        ...     value_so_far="abc",
        ...     original_error=StepError("No match found")
        ... )
    """

    def __init__(
        self,
        message: str,
        operation_name: Optional[str] = None,
        value_so_far: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.operation_name = operation_name
        self.value_so_far = value_so_far
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "error": "BRIDGE_ERROR",
            "message": self.message,
            "operation": self.operation_name,
            "value_so_far": self.value_so_far,
        }
        if self.original_error:
            result["original_error"] = str(self.original_error)
        return result
