"""
Operation Registry for managing and instantiating operations.

Provides a centralized catalog of available operations with introspection
capabilities. Transformations and assertions live in separate namespaces,
so the same name (e.g. ``anagram``) can mean different things in each.
"""

from typing import Dict, Type, Optional, Any, List, Union
import logging

from .base import BaseOperation, OperationType
from .transformations import (
    TransformationOperation,
    UpperCaseTransformation,
    LowerCaseTransformation,
    PascalCaseTransformation,
    SnakeCaseTransformation,
    CamelCaseTransformation,
    TrimTransformation,
    TakeThatAtTransformation,
    JoinTransformation,
    HexTransformation,
    BinaryTransformation,
    UrlSafeTransformation,
    HashTransformation,
    CharacterAtTransformation,
    RandomCharacterTransformation,
    RandomizeTransformation,
    AnagramTransformation,
    SanitizeTransformation,
    ReplaceTransformation,
    ReplaceAllTransformation,
    RemoveFirstTransformation,
    RemoveAllTransformation,
    AddTransformation,
    PadTransformation,
    ChunkTransformation,
    BreakToLinesTransformation,
    ExtractTransformation,
    ExtractInRangeTransformation,
    ExtractWhenBetweenTransformation,
    EscapeTransformation,
    UnescapeTransformation,
    CustomTransformation,
)
from .assertions import (
    AssertionOperation,
    HasAssertion,
    DoesNotHaveAssertion,
    StartsWithAssertion,
    EndsWithAssertion,
    IsExactlyAssertion,
    AnyOfAssertion,
    IsBetweenAssertion,
    IsAlphaAssertion,
    IsAlphaNumericAssertion,
    HasAllUppercaseAssertion,
    HasAllLowercaseAssertion,
    IsUpperCaseAssertion,
    IsLowerCaseAssertion,
    IsDigitAssertion,
    IsNumberConvertibleAssertion,
    IsWhitespaceAssertion,
    HasNoEmojiAssertion,
    HasUniqueCharactersAssertion,
    IsEmailAssertion,
    IsUrlAssertion,
    IsUrlSafeAssertion,
    IsPhoneAssertion,
    IsBase64Assertion,
    IsStrongPasswordAssertion,
    PassesRegexAssertion,
    FailsRegexAssertion,
    LengthIsAssertion,
    AnagramAssertion,
    IsPalindromeAssertion,
    ValueAtAssertion,
    WordCountAssertion,
    CustomCheckAssertion,
)
from .exceptions import ConfigurationError, OperationNotFoundError

logger = logging.getLogger("string_chain")

OperationTypeLike = Union[OperationType, str]


def _as_operation_type(operation_type: OperationTypeLike) -> OperationType:
    if isinstance(operation_type, OperationType):
        return operation_type
    try:
        return OperationType(operation_type)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown operation type '{operation_type}', expected one of: "
            f"{', '.join(t.value for t in OperationType)}"
        ) from e


class OperationRegistry:
    """
    Registry for all operation implementations.

    Operations are registered by name and type, and instantiated with a
    config dict. Provides introspection methods for discovery.

    Example:
        >>> from string_chain import get_registry, OperationType
        >>> registry = get_registry()
        >>>
        >>> # List all assertions
        >>> registry.list_operations(category="assertion")
        >>>
        >>> # Get details for a specific operation
        >>> registry.describe_operation("pad", OperationType.TRANSFORMATION)
        >>>
        >>> # Instantiate an operation
        >>> op = registry.get_operation("pad", OperationType.TRANSFORMATION, {"length": 5})
    """

    def __init__(self):
        self._operations: Dict[OperationType, Dict[str, Type[BaseOperation]]] = {
            operation_type: {} for operation_type in OperationType
        }
        self._register_default_operations()

    def _register_default_operations(self):
        """Register all built-in operations."""

        transformations = {
            "to_upper_case": UpperCaseTransformation,
            "to_lower_case": LowerCaseTransformation,
            "to_pascal_case": PascalCaseTransformation,
            "to_snake_case": SnakeCaseTransformation,
            "to_camel_case": CamelCaseTransformation,
            "trim": TrimTransformation,
            "take_that_at": TakeThatAtTransformation,
            "join": JoinTransformation,
            "to_hex": HexTransformation,
            "to_binary": BinaryTransformation,
            "to_url_safe": UrlSafeTransformation,
            "get_character_at": CharacterAtTransformation,
            "get_random_from": RandomCharacterTransformation,
            "sanitize": SanitizeTransformation,
            "anagram": AnagramTransformation,
            "replace": ReplaceTransformation,
            "replace_all": ReplaceAllTransformation,
            "remove_first": RemoveFirstTransformation,
            "remove_all": RemoveAllTransformation,
            "add": AddTransformation,
            "pad": PadTransformation,
            "randomize": RandomizeTransformation,
            "chunk": ChunkTransformation,
            "break_to_lines": BreakToLinesTransformation,
            "extract": ExtractTransformation,
            "extract_in_range": ExtractInRangeTransformation,
            "extract_when_between": ExtractWhenBetweenTransformation,
            "escape_string": EscapeTransformation,
            "un_escape_string": UnescapeTransformation,
            "to_hash": HashTransformation,
            "custom_transform": CustomTransformation,
        }
        for name, operation_class in transformations.items():
            self.register(name, operation_class, OperationType.TRANSFORMATION)

        assertions = {
            "has": HasAssertion,
            "does_not_have": DoesNotHaveAssertion,
            "starts_with": StartsWithAssertion,
            "ends_with": EndsWithAssertion,
            "is_exactly": IsExactlyAssertion,
            "is_alpha": IsAlphaAssertion,
            "is_alpha_numeric": IsAlphaNumericAssertion,
            "has_all_uppercase": HasAllUppercaseAssertion,
            "has_all_lowercase": HasAllLowercaseAssertion,
            "is_upper_case": IsUpperCaseAssertion,
            "is_lower_case": IsLowerCaseAssertion,
            "is_digit": IsDigitAssertion,
            "is_numeric": IsNumberConvertibleAssertion,
            "is_whitespace": IsWhitespaceAssertion,
            "is_email": IsEmailAssertion,
            "is_url": IsUrlAssertion,
            "is_url_safe": IsUrlSafeAssertion,
            "is_phone": IsPhoneAssertion,
            "is_number_convertible": IsNumberConvertibleAssertion,  # Alias
            "passes_regex": PassesRegexAssertion,
            "fails_regex": FailsRegexAssertion,
            "any_of": AnyOfAssertion,
            "length_is": LengthIsAssertion,
            "is_between": IsBetweenAssertion,
            "has_no_emoji": HasNoEmojiAssertion,
            "anagram": AnagramAssertion,
            "is_palindrome": IsPalindromeAssertion,
            "has_unique_characters": HasUniqueCharactersAssertion,
            "where_value_at": ValueAtAssertion,
            "word_count": WordCountAssertion,
            "is_base64": IsBase64Assertion,
            "is_strong_password": IsStrongPasswordAssertion,
            "custom_check": CustomCheckAssertion,
        }
        for name, operation_class in assertions.items():
            self.register(name, operation_class, OperationType.ASSERTION)

    def register(
        self,
        name: str,
        operation_class: Type[BaseOperation],
        operation_type: Optional[OperationTypeLike] = None,
    ):
        """
        Register an operation by name.

        Args:
            name: Name to register the operation under
            operation_class: Operation class (not instance)
            operation_type: Namespace to register in. Inferred from the
                            class when omitted.
        """
        if operation_type is None:
            operation_type = self._infer_type(operation_class)
        operation_type = _as_operation_type(operation_type)

        self._operations[operation_type][name] = operation_class
        logger.debug(
            f"Registered {operation_type.value}: {name} -> {operation_class.__name__}"
        )

    @staticmethod
    def _infer_type(operation_class: Type[BaseOperation]) -> OperationType:
        if issubclass(operation_class, TransformationOperation):
            return OperationType.TRANSFORMATION
        if issubclass(operation_class, AssertionOperation):
            return OperationType.ASSERTION
        raise ConfigurationError(
            f"Cannot infer operation type of {operation_class.__name__}; "
            "subclass TransformationOperation or AssertionOperation, "
            "or pass operation_type"
        )

    def _get_class(
        self, name: str, operation_type: OperationTypeLike
    ) -> Type[BaseOperation]:
        namespace = self._operations[_as_operation_type(operation_type)]
        if name not in namespace:
            raise OperationNotFoundError(name, list(namespace.keys()))
        return namespace[name]

    def get_operation(
        self,
        name: str,
        operation_type: OperationTypeLike,
        config: Optional[Dict[str, Any]] = None,
        step_name: Optional[str] = None,
    ) -> BaseOperation:
        """
        Get an operation instance by name.

        Args:
            name: Operation name
            operation_type: 'transformation' or 'assertion'
            config: Configuration dict for the operation
            step_name: Name recorded on the step, defaults to ``name``

        Returns:
            Operation instance

        Raises:
            OperationNotFoundError: If operation not found (includes suggestions)
            ConfigurationError: If a required config parameter is missing
        """
        operation_class = self._get_class(name, operation_type)
        operation = operation_class(name=step_name or name, config=config or {})

        schema = operation.get_config_schema()
        missing = [
            param for param in schema.get("required", {})
            if param not in operation.config
        ]
        if missing:
            raise ConfigurationError(
                f"Missing required parameter(s): {', '.join(repr(p) for p in missing)}",
                operation_name=name,
                config_schema=schema,
                provided_config=operation.config,
            )

        return operation

    def has_operation(
        self, name: str, operation_type: Optional[OperationTypeLike] = None
    ) -> bool:
        """Check if an operation is registered (in any namespace if no type is given)."""
        if operation_type is None:
            return any(name in namespace for namespace in self._operations.values())
        return name in self._operations[_as_operation_type(operation_type)]

    def get_operation_config_schema(
        self, name: str, operation_type: OperationTypeLike
    ) -> Dict[str, Any]:
        """
        Get the configuration schema for an operation.

        Args:
            name: Operation name
            operation_type: 'transformation' or 'assertion'

        Returns:
            Config schema with 'required' and 'optional' keys

        Raises:
            OperationNotFoundError: If operation not found
        """
        operation_class = self._get_class(name, operation_type)
        temp_instance = operation_class(name=name, config={})
        return temp_instance.get_config_schema()

    def describe_operation(
        self, name: str, operation_type: OperationTypeLike
    ) -> Dict[str, Any]:
        """
        Get full documentation for an operation.

        Args:
            name: Operation name
            operation_type: 'transformation' or 'assertion'

        Returns:
            Dict with name, type, description, config_schema, and example

        Raises:
            OperationNotFoundError: If operation not found

        Example:
            >>> registry.describe_operation("pad", "transformation")
            {
                "name": "pad",
                "type": "transformation",
                "description": "Pad the string to a target length.",
                "config_schema": {...},
                "example": {...}
            }
        """
        operation_class = self._get_class(name, operation_type)
        temp_instance = operation_class(name=name, config={})
        schema = temp_instance.get_config_schema()

        # Build example from schema
        example_config = {}
        for param, param_def in schema.get("required", {}).items():
            if "example" in param_def:
                example_config[param] = param_def["example"]
        for param, param_def in schema.get("optional", {}).items():
            if "example" in param_def:
                example_config[param] = param_def["example"]

        return {
            "name": name,
            "type": temp_instance.get_operation_type().value,
            "description": temp_instance.get_description(),
            "config_schema": schema,
            "example": {"operation": name, "operation_config": example_config}
            if example_config
            else {"operation": name},
        }

    def list_operations(self, category: Optional[str] = None) -> List[Dict[str, str]]:
        """
        List all operations with brief descriptions.

        Args:
            category: Optional filter by type: 'transformation' or 'assertion'

        Returns:
            List of dicts with name, type, and description, sorted by type then name

        Example:
            >>> registry.list_operations(category="transformation")
            [
                {"name": "add", "type": "transformation", "description": "..."},
                ...
            ]
        """
        result = []

        for operation_type, namespace in self._operations.items():
            if category and operation_type.value != category:
                continue

            seen_classes = set()  # Avoid duplicates from aliases
            for name, cls in namespace.items():
                if cls in seen_classes:
                    continue
                seen_classes.add(cls)

                temp_instance = cls(name=name, config={})
                result.append(
                    {
                        "name": name,
                        "type": operation_type.value,
                        "description": temp_instance.get_description(),
                    }
                )

        return sorted(result, key=lambda x: (x["type"], x["name"]))

    def list_by_type(self) -> Dict[str, List[str]]:
        """
        List operation names grouped by type, aliases included.

        Returns:
            Dict with keys 'transformation' and 'assertion'
        """
        return {
            operation_type.value: sorted(namespace.keys())
            for operation_type, namespace in self._operations.items()
        }


# Global registry instance
_global_registry = OperationRegistry()


def get_registry() -> OperationRegistry:
    """Get the global operation registry."""
    return _global_registry


def register_operation(
    name: str,
    operation_class: Type[BaseOperation],
    operation_type: Optional[OperationTypeLike] = None,
):
    """
    Register a custom operation with the global registry.

    Registered operations can be added to a chain with ``apply``.

    Args:
        name: Operation name
        operation_class: Operation class (not instance)
        operation_type: Namespace; inferred from the base class when omitted

    Example:
        >>> from string_chain import register_operation, TransformationOperation
        >>>
        >>> class ReverseTransformation(TransformationOperation):
        ...     def transform(self, value):
        ...         return value[::-1]
        >>>
        >>> register_operation('reverse', ReverseTransformation)
        >>> string_transform("abc").apply("reverse").try_()
        'cba'
    """
    _global_registry.register(name, operation_class, operation_type)
