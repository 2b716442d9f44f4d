"""
Lazy chain builder shared by transformation and assertion chains.

A chain owns its subject string and its list of recorded steps. Adding a
step never runs it; ``evaluate()`` and ``try_()`` run the whole chain on
demand. Every chain is independent, so building one chain never changes
another.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from .base import BaseOperation, EvaluationResult, OperationType
from .executor import ChainExecutor, ErrorHandler, handle_step_error
from .registry import get_registry


class Chain(ABC):
    """
    Base class for chains.

    Subclasses expose one method per catalog operation. Each such method
    records a step through ``_add`` and returns the chain itself, so calls
    compose: ``chain.a().b().c()``.
    """

    def __init__(self, subject: str):
        if not isinstance(subject, str):
            raise TypeError(
                f"Chain subject must be a string, not {type(subject).__name__}"
            )
        self._subject = subject
        self._steps: List[BaseOperation] = []
        self._last_executor: Optional[ChainExecutor] = None

    @abstractmethod
    def get_operation_type(self) -> OperationType:
        """Return the type of the steps this chain records."""
        pass

    @property
    def subject(self) -> str:
        """The string the chain was created with."""
        return self._subject

    @property
    def steps(self) -> Tuple[BaseOperation, ...]:
        """Recorded steps in evaluation order."""
        return tuple(self._steps)

    def add_step(self, operation: BaseOperation) -> "Chain":
        """
        Append a step to the chain.

        Args:
            operation: Operation instance to record

        Returns:
            The same chain, for further chaining
        """
        self._steps.append(operation)
        return self

    def _step_name(self, name: str, config: Dict[str, Any]) -> Optional[str]:
        """Name recorded on a new step; None keeps the operation name."""
        return None

    def _add(self, name: str, /, **config: Any) -> "Chain":
        operation = get_registry().get_operation(
            name,
            self.get_operation_type(),
            config,
            step_name=self._step_name(name, config),
        )
        return self.add_step(operation)

    def apply(self, name: str, /, **config: Any) -> "Chain":
        """
        Add any registered operation of this chain's type by name.

        Args:
            name: Registered operation name (built-in or custom)
            **config: Operation config. Any key is allowed, ``name``
                      included, since ``name`` is positional-only.

        Raises:
            OperationNotFoundError: If no such operation is registered
            ConfigurationError: If a required config parameter is missing
        """
        return self._add(name, **config)

    def evaluate(self) -> EvaluationResult:
        """
        Run every step and return the tagged result without raising.

        The execution log of this run replaces the previous one.
        """
        executor = ChainExecutor()
        result = executor.execute_chain(
            self._steps, self._subject, self.get_operation_type()
        )
        self._last_executor = executor
        return result

    def try_(self, handler: Optional[ErrorHandler] = None) -> Any:
        """
        Evaluate the chain.

        Args:
            handler: Optional callable ``(error, step_name, value_so_far)``
                     called when a step raises.

        Returns:
            The transformed string, or True/False for assertion chains.
            None if a step raised and ``handler`` was called.

        Raises:
            The exception raised by the failing step, when no handler is given.
        """
        result = self.evaluate()
        if result.errored:
            return handle_step_error(
                result.error, handler, result.operation_name, result.value_so_far
            )
        return result.value

    def get_execution_log(self) -> List[dict]:
        """
        Get the step log of the last evaluation.

        Returns:
            List of step results as dicts (empty before the first evaluation)
        """
        if self._last_executor is None:
            return []
        return self._last_executor.get_execution_log()

    def __repr__(self):
        names = ", ".join(step.name for step in self._steps)
        return f"{self.__class__.__name__}(subject={self._subject!r}, steps=[{names}])"
