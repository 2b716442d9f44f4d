"""
Chain executor for running recorded steps against a subject string.

Transformation chains fold their steps over the subject, each step
receiving the output of the previous one. Assertion chains test the
subject with every step and stop at the first False.
"""

from typing import Any, Callable, List, Optional, Sequence
import logging

from .base import (
    BaseOperation,
    ChainContext,
    EvaluationResult,
    EvaluationStatus,
    OperationType,
)

logger = logging.getLogger("string_chain")

ErrorHandler = Callable[[Exception, str, str], Any]


def handle_step_error(
    error: Exception,
    handler: Optional[ErrorHandler],
    step_name: str,
    value_so_far: str,
) -> None:
    """
    Deliver a step error to a handler, or re-raise it.

    Args:
        error: The exception raised by the step
        handler: Optional callable taking (error, step_name, value_so_far)
        step_name: Name of the step that raised
        value_so_far: Value right before the step ran

    Returns:
        None, when a handler was given

    Raises:
        The original exception, unchanged, when no handler was given
    """
    if handler is None:
        raise error

    logger.debug("Step %s failed, passing error to handler: %s", step_name, error)
    handler(error, step_name, value_so_far)
    return None


class ChainExecutor:
    """
    Evaluates a sequence of operations against a subject.

    The executor:
    - Creates a fresh chain context for the evaluation
    - Runs steps in insertion order
    - Stops at the first raised error (and, for assertions, the first False)
    - Returns a tagged EvaluationResult instead of raising

    Example:
        >>> executor = ChainExecutor()
        >>> result = executor.execute_chain(steps, "foo", OperationType.TRANSFORMATION)
        >>> result.status, result.value
        (<EvaluationStatus.PASSED: 'passed'>, 'FOO')
    """

    def __init__(self):
        self.context = ChainContext()

    def execute_chain(
        self,
        operations: Sequence[BaseOperation],
        subject: str,
        operation_type: OperationType,
    ) -> EvaluationResult:
        """
        Evaluate a chain.

        Args:
            operations: Steps in insertion order
            subject: The string the chain was created with
            operation_type: Whether the steps transform or assert

        Returns:
            EvaluationResult with status PASSED, FAILED or ERROR
        """
        logger.debug(
            "Starting %s chain with %d steps",
            operation_type.value,
            len(operations),
        )

        if operation_type is OperationType.ASSERTION:
            result = self._execute_assertions(operations, subject)
        else:
            result = self._execute_transformations(operations, subject)

        logger.debug(
            "Chain finished with status %s after %d steps",
            result.status.value,
            len(self.context.steps),
        )
        return result

    def _execute_transformations(
        self, operations: Sequence[BaseOperation], subject: str
    ) -> EvaluationResult:
        value = subject

        for operation in operations:
            try:
                step_result = operation.execute_with_metadata(value, self.context)
            except Exception as e:
                return EvaluationResult(
                    status=EvaluationStatus.ERROR,
                    operation_name=operation.name,
                    value_so_far=value,
                    error=e,
                )

            value = step_result.value
            logger.debug(
                "Step %s completed in %.2fms",
                operation.name,
                step_result.execution_time_ms,
            )

        return EvaluationResult(status=EvaluationStatus.PASSED, value=value)

    def _execute_assertions(
        self, operations: Sequence[BaseOperation], subject: str
    ) -> EvaluationResult:
        for operation in operations:
            try:
                step_result = operation.execute_with_metadata(subject, self.context)
            except Exception as e:
                return EvaluationResult(
                    status=EvaluationStatus.ERROR,
                    operation_name=operation.name,
                    value_so_far=subject,
                    error=e,
                )

            if not step_result.value:
                logger.debug("Assertion %s evaluated to False", operation.name)
                return EvaluationResult(
                    status=EvaluationStatus.FAILED,
                    value=False,
                    operation_name=operation.name,
                    value_so_far=subject,
                )

        return EvaluationResult(status=EvaluationStatus.PASSED, value=True)

    def get_execution_log(self) -> List[dict]:
        """
        Get execution log for debugging.

        Returns:
            List of step results as dicts
        """
        return [step.to_dict() for step in self.context.steps]

    def get_full_log(self) -> dict:
        """
        Get full execution log with context.

        Returns:
            Complete chain execution log
        """
        return self.context.to_dict()
