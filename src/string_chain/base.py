"""
Base operation interface for the chain execution engine.

This module defines the core abstractions:
- OperationType: Enum classifying operations
- StepResult: Metadata wrapper for a single executed step
- ChainContext: Execution log collected while a chain is evaluated
- EvaluationResult: Tagged outcome of evaluating a whole chain
- BaseOperation: Abstract base class for all operations
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
import time

from .exceptions import ConfigurationError


class OperationType(Enum):
    """
    Classification of operation types.

    Each type has different semantics:
    - TRANSFORMATION: Maps the current string to a new string
    - ASSERTION: Tests the subject string and returns a boolean
    """

    TRANSFORMATION = "transformation"
    ASSERTION = "assertion"


class EvaluationStatus(Enum):
    """
    Outcome of evaluating a chain.

    - PASSED: every step succeeded (transform) or returned True (assertion)
    - FAILED: an assertion step returned False
    - ERROR: a step raised
    """

    PASSED = "passed"
    FAILED = "failed"
    ERROR = "error"


@dataclass
class StepResult:
    """
    Result of a single step execution.

    Contains the output value and metadata for debugging/logging.

    Attributes:
        value: The output value (string or boolean), or the input on failure
        operation_name: Name of the step that produced this result
        operation_type: Type of the operation (transformation or assertion)
        success: Whether the step completed without raising
        error: Error message if the step raised
        metadata: Additional context (input/output types, config)
        execution_time_ms: How long the step took to execute
        timestamp: When the step was executed
    """

    value: Any
    operation_name: str
    operation_type: OperationType
    success: bool = True
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)
    execution_time_ms: float = 0.0
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging and debugging."""
        return {
            "operation_name": self.operation_name,
            "operation_type": self.operation_type.value,
            "success": self.success,
            "error": self.error,
            "metadata": self.metadata,
            "execution_time_ms": self.execution_time_ms,
            "timestamp": self.timestamp.isoformat(),
            "value_type": type(self.value).__name__
            if self.value is not None
            else "None",
        }


@dataclass
class ChainContext:
    """
    Execution log of one chain evaluation.

    A fresh context is created for every evaluation, so results of an
    earlier ``try_()`` never leak into a later one.

    Attributes:
        steps: History of all executed step results
    """

    steps: List[StepResult] = field(default_factory=list)

    def add_step(self, result: StepResult):
        """Add a step result to the history."""
        self.steps.append(result)

    def get_last_value(self) -> Any:
        """Get the value from the last executed step."""
        if self.steps:
            return self.steps[-1].value
        return None

    def get_step_values(self) -> List[Any]:
        """Get all step values in execution order."""
        return [step.value for step in self.steps]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging."""
        return {
            "total_steps": len(self.steps),
            "steps": [step.to_dict() for step in self.steps],
        }


@dataclass
class EvaluationResult:
    """
    Tagged result of evaluating a chain.

    Attributes:
        status: PASSED, FAILED or ERROR
        value: Final string (transform) or boolean (assertion); None on ERROR
        operation_name: Step that failed or raised, if any
        value_so_far: Value right before the step that raised
        error: The raised exception, for ERROR results
    """

    status: EvaluationStatus
    value: Any = None
    operation_name: Optional[str] = None
    value_so_far: Optional[str] = None
    error: Optional[Exception] = None

    @property
    def passed(self) -> bool:
        return self.status is EvaluationStatus.PASSED

    @property
    def failed(self) -> bool:
        return self.status is EvaluationStatus.FAILED

    @property
    def errored(self) -> bool:
        return self.status is EvaluationStatus.ERROR


class BaseOperation(ABC):
    """
    Base abstract class for all operations in a chain.

    An operation is one recorded step: a name, a config dict holding the
    arguments the step was created with, and an ``execute`` method that maps
    the current value to the step's output.

    To create a custom operation:
        1. Inherit from TransformationOperation or AssertionOperation
        2. Implement ``transform`` or ``check``
        3. Override get_config_schema() to document configuration options
        4. Register it with ``register_operation``

    Example:
        >>> class ReverseTransformation(TransformationOperation):
        ...     \"\"\"Reverse the string.\"\"\"
        ...     def transform(self, value):
        ...         return value[::-1]
    """

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the operation.

        Args:
            name: Step name used in error reports (e.g., 'extract', 'is_email')
            config: Arguments of the step. Copied, so later changes to the
                    caller's dict do not affect the recorded step.
        """
        if not name:
            raise ConfigurationError("Operation name must not be empty")
        self.name = name
        self.config = dict(config or {})

    @abstractmethod
    def get_operation_type(self) -> OperationType:
        """Return the type of this operation."""
        pass

    def get_config_schema(self) -> Dict[str, Any]:
        """
        Return the configuration schema for this operation.

        Schema defines required and optional config parameters with their types.
        This is used for validation and introspection.

        Returns:
            Dict with 'required' and 'optional' keys. Each contains param definitions
            with 'type', 'description', and optionally 'default' and 'example'.

        Example:
            {
                'required': {
                    'length': {
                        'type': 'int',
                        'description': 'Target length of the padded string',
                        'example': 7
                    }
                },
                'optional': {
                    'char': {
                        'type': 'str',
                        'description': 'Fill character',
                        'default': ' ',
                        'example': '*'
                    }
                }
            }
        """
        return {"required": {}, "optional": {}}

    def get_description(self) -> str:
        """
        Return a brief description of what this operation does.

        Default implementation uses the class docstring's first line.
        """
        doc = self.__class__.__doc__
        if doc:
            return doc.strip().split("\n")[0]
        return f"{self.__class__.__name__} operation"

    @abstractmethod
    def execute(self, value: str) -> Any:
        """
        Execute the operation.

        Args:
            value: Current value of the chain

        Returns:
            New string (transformation) or boolean (assertion)

        Raises:
            StepError: If the operation cannot satisfy its contract
        """
        pass

    def __call__(self, value: str) -> Any:
        return self.execute(value)

    def execute_with_metadata(self, value: str, context: ChainContext) -> StepResult:
        """
        Execute the operation and wrap result with metadata.

        The step is recorded in ``context`` whether it succeeds or raises;
        exceptions are re-raised unchanged.
        """
        start_time = time.perf_counter()

        try:
            result_value = self.execute(value)
        except Exception as e:
            execution_time = (time.perf_counter() - start_time) * 1000
            context.add_step(
                StepResult(
                    value=value,  # Keep the input value on failure
                    operation_name=self.name,
                    operation_type=self.get_operation_type(),
                    success=False,
                    error=str(e),
                    execution_time_ms=execution_time,
                )
            )
            raise

        execution_time = (time.perf_counter() - start_time) * 1000
        result = StepResult(
            value=result_value,
            operation_name=self.name,
            operation_type=self.get_operation_type(),
            success=True,
            execution_time_ms=execution_time,
            metadata=self._get_execution_metadata(value, result_value),
        )
        context.add_step(result)
        return result

    def _get_execution_metadata(
        self, input_value: Any, output_value: Any
    ) -> Dict[str, Any]:
        """
        Generate metadata about the execution.
        Override in subclasses to add operation-specific metadata.
        """
        return {
            "input_type": type(input_value).__name__
            if input_value is not None
            else "None",
            "output_type": type(output_value).__name__
            if output_value is not None
            else "None",
            "config": self.config,
        }

    def __repr__(self):
        return f"<{self.__class__.__name__}(name={self.name}, type={self.get_operation_type().value})>"
