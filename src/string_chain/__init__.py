"""
String Chain - Fluent, lazily evaluated string transformations and assertions.

This library lets you describe a sequence of string operations as a chain,
then evaluate it in one go. Transformation chains fold their steps over the
subject; assertion chains test the subject against every step. Errors raised
by a step can be handed to a handler instead of propagating.

Basic Usage:
    >>> from string_chain import string_transform, assert_that
    >>>
    >>> string_transform(" fooBar ").trim().to_snake_case().try_()
    'foo_bar'
    >>>
    >>> assert_that("foobar").is_not().has("baz").starts_with("foo").try_()
    True
    >>>
    >>> # Switch modes mid-chain
    >>> string_transform("foo").to_upper_case().assert_that().is_exactly("FOO").try_()
    True

Key Concepts:
    - **Steps**: Discrete operations (transformation or assertion) recorded on a chain
    - **Chain**: An ordered, lazily evaluated sequence of steps over one subject
    - **Bridge**: Evaluates a chain and starts a chain of the other kind
    - **Registry**: Central catalog of available operations with introspection

Introspection:
    >>> from string_chain import get_registry
    >>> registry = get_registry()
    >>>
    >>> # Discover available operations
    >>> registry.list_operations(category="assertion")
    >>>
    >>> # Get detailed docs for an operation
    >>> registry.describe_operation("pad", "transformation")
"""

from .base import (
    BaseOperation,
    OperationType,
    EvaluationStatus,
    EvaluationResult,
    StepResult,
    ChainContext,
)
from .operation import OperationSpec
from .executor import ChainExecutor, handle_step_error
from .chain import Chain
from .transform_chain import TransformChain, SplitContinuation, string_transform
from .assertion_chain import (
    AssertionChain,
    WhereValueAtContinuation,
    WordCountContinuation,
    assert_that,
)
from .parser import ChainParser
from .registry import OperationRegistry, get_registry, register_operation
from .exceptions import (
    OperationError,
    StepError,
    CustomOperationError,
    OperationNotFoundError,
    ConfigurationError,
    BridgeError,
)

# Re-export operation base classes for custom operations
from .transformations import TransformationOperation
from .assertions import AssertionOperation, PhonePreset

__version__ = "0.1.0"

__all__ = [
    # Entry points
    "string_transform",
    "assert_that",
    # Chains
    "Chain",
    "TransformChain",
    "AssertionChain",
    "SplitContinuation",
    "WhereValueAtContinuation",
    "WordCountContinuation",
    # Core types
    "BaseOperation",
    "OperationType",
    "EvaluationStatus",
    "EvaluationResult",
    "StepResult",
    "ChainContext",
    "OperationSpec",
    "PhonePreset",
    # Execution
    "ChainExecutor",
    "handle_step_error",
    "ChainParser",
    # Registry
    "OperationRegistry",
    "get_registry",
    "register_operation",
    # Exceptions
    "OperationError",
    "StepError",
    "CustomOperationError",
    "OperationNotFoundError",
    "ConfigurationError",
    "BridgeError",
    # Base classes for custom operations
    "TransformationOperation",
    "AssertionOperation",
]
