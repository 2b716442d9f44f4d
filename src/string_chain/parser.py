"""
Chain parser for converting JSON definitions to fluent chains.

Provides utilities to parse, validate and build chain definitions.
"""

import json
from typing import Any, Dict, List, Union, TYPE_CHECKING

from .base import OperationType
from .exceptions import ConfigurationError
from .operation import OperationSpec

if TYPE_CHECKING:
    from .chain import Chain

ChainDefinition = Union[str, List[Dict[str, Any]]]

# Entries that steer the builder instead of naming a catalog operation
NEGATE = "is_not"
TO_ASSERTION = "assert_that"
TO_TRANSFORM = "string_transform"

_MODES = {
    "transform": OperationType.TRANSFORMATION,
    "assert": OperationType.ASSERTION,
}


def _mode_type(mode: str) -> OperationType:
    try:
        return _MODES[mode]
    except KeyError:
        raise ConfigurationError(
            f"Unknown chain mode '{mode}', expected one of: {', '.join(_MODES)}"
        ) from None


class ChainParser:
    """
    Utility class to parse, validate and build chain definitions.

    Transforms JSON-like chain definitions into OperationSpec objects
    and replays them on ``string_transform`` / ``assert_that`` builders.

    Example:
        >>> definition = [
        ...     {"operation": "trim"},
        ...     {"operation": "to_upper_case"},
        ...     {"operation": "assert_that"},
        ...     {"operation": "starts_with", "operation_config": {"prefix": "FOO"}}
        ... ]
        >>>
        >>> chain = ChainParser.build("  foobar ", definition)
        >>> chain.try_()
        True
    """

    @classmethod
    def _load(cls, definition: ChainDefinition, chain_name: str) -> List[Dict[str, Any]]:
        if isinstance(definition, str):
            try:
                return json.loads(definition)
            except json.JSONDecodeError as e:
                raise ValueError(f"Invalid JSON in chain '{chain_name}': {e}") from e
        if isinstance(definition, list):
            return definition
        raise TypeError(
            f"definition must be a JSON string or a list, not {type(definition).__name__}"
        )

    @classmethod
    def from_json(
        cls,
        definition: ChainDefinition,
        chain_name: str = "Unnamed"
    ) -> List[OperationSpec]:
        """
        Transform a chain definition into a list of OperationSpec objects.

        Ensures steps are correctly ordered and handles defaults.
        Colliding order indices are bumped to the next free slot.

        Args:
            definition: A list of dictionaries or a JSON string defining the chain.
            chain_name: Name for clearer error messages.

        Returns:
            List of OperationSpec objects sorted by order_index.

        Raises:
            ValueError: If JSON is invalid, a step is missing the 'operation' field,
                or a step's 'operation_config' is not an object.
            TypeError: If input is not a string or a list.

        Example:
            >>> ChainParser.from_json('[{"operation": "trim"}]')
            [OperationSpec(operation=trim, order=0)]
        """
        parsed = cls._load(definition, chain_name)
        if not parsed:
            return []

        operations: List[OperationSpec] = []
        used_order_indices = set()

        for idx, op_def in enumerate(parsed):
            if not isinstance(op_def, dict):
                raise ValueError(
                    f"Chain step at index {idx} in '{chain_name}' must be an object, "
                    f"got {type(op_def).__name__}."
                )

            operation_name = op_def.get('operation')
            if not operation_name:
                raise ValueError(
                    f"Chain step at index {idx} in '{chain_name}' "
                    f"is missing required 'operation' field."
                )

            operation_config = op_def.get('operation_config')
            if operation_config is None:
                operation_config = {}
            if not isinstance(operation_config, dict):
                raise ValueError(
                    f"Chain step at index {idx} in '{chain_name}' has an 'operation_config' "
                    f"that is not an object, got {type(operation_config).__name__}."
                )

            order_index = int(op_def.get('order_index', idx))
            while order_index in used_order_indices:
                order_index += 1
            used_order_indices.add(order_index)

            operations.append(
                OperationSpec(
                    operation=operation_name,
                    operation_config=operation_config,
                    order_index=order_index,
                )
            )

        return sorted(operations, key=lambda x: x.order_index)

    @staticmethod
    def _validate_config_param_type(value: Any, expected_type: str) -> bool:
        """Helper to validate that a config parameter value matches the expected type."""
        if expected_type == 'callable':
            return callable(value)
        type_map = {
            'str': str, 'int': int, 'bool': bool, 'float': (float, int),
            'list': (list, tuple), 'dict': dict, 'any': object
        }
        expected_py_type = type_map.get(expected_type)
        return isinstance(value, expected_py_type) if expected_py_type else True

    @classmethod
    def validate(
        cls,
        definition: ChainDefinition,
        mode: str = "transform",
        chain_name: str = "Unnamed"
    ) -> List[str]:
        """
        Validate a chain definition without building or evaluating it.

        Checks:
        - JSON structure is valid
        - All required fields are present
        - Operation names are registered for the mode in effect at that step
        - Required config parameters are provided with the right type
        - 'is_not' only appears in assertion mode, bridges only leave the
          mode they are in

        Args:
            definition: Chain definition as JSON string or list of dicts.
            mode: Starting mode, 'transform' or 'assert'.
            chain_name: Name for error context.

        Returns:
            List of validation error messages (empty if valid).

        Example:
            >>> errors = ChainParser.validate([{"operation": "to_uper_case"}])
            >>> errors
            ["Step 0: Unknown transformation 'to_uper_case'"]
        """
        from .registry import get_registry

        errors: List[str] = []

        try:
            operation_type = _mode_type(mode)
        except ConfigurationError as e:
            return [str(e)]

        if isinstance(definition, str):
            try:
                parsed = json.loads(definition)
            except json.JSONDecodeError as e:
                return [f"Invalid JSON: {e}"]
        elif isinstance(definition, list):
            parsed = definition
        else:
            return [f"Expected JSON string or list, got {type(definition).__name__}"]

        if not parsed:
            return ["Chain cannot be empty"]

        registry = get_registry()

        for idx, op_def in enumerate(parsed):
            prefix = f"Step {idx}"

            if not isinstance(op_def, dict):
                errors.append(f"{prefix}: Expected dict, got {type(op_def).__name__}")
                continue

            op_name = op_def.get('operation')
            if not op_name:
                errors.append(f"{prefix}: Missing required 'operation' field")
                continue

            if op_name == NEGATE:
                if operation_type is not OperationType.ASSERTION:
                    errors.append(f"{prefix}: '{NEGATE}' is only valid in an assertion chain")
                continue
            if op_name == TO_ASSERTION:
                if operation_type is not OperationType.TRANSFORMATION:
                    errors.append(f"{prefix}: '{TO_ASSERTION}' is only valid in a transformation chain")
                operation_type = OperationType.ASSERTION
                continue
            if op_name == TO_TRANSFORM:
                if operation_type is not OperationType.ASSERTION:
                    errors.append(f"{prefix}: '{TO_TRANSFORM}' is only valid in an assertion chain")
                operation_type = OperationType.TRANSFORMATION
                continue

            if not registry.has_operation(op_name, operation_type):
                errors.append(f"{prefix}: Unknown {operation_type.value} '{op_name}'")
                continue

            # Validate config against schema
            schema = registry.get_operation_config_schema(op_name, operation_type)
            op_config = op_def.get('operation_config', {})
            if not isinstance(op_config, dict):
                errors.append(f"{prefix} ({op_name}): 'operation_config' must be a dict")
                continue

            for param, param_def in schema.get('required', {}).items():
                if param not in op_config:
                    errors.append(f"{prefix} ({op_name}): Missing required config '{param}'")
                elif not cls._validate_config_param_type(op_config[param], param_def.get('type', 'any')):
                    errors.append(
                        f"{prefix} ({op_name}): Config '{param}' has invalid type, "
                        f"expected {param_def.get('type')}"
                    )

            known = set(schema.get('required', {})) | set(schema.get('optional', {}))
            for param in op_config:
                if param not in known:
                    errors.append(f"{prefix} ({op_name}): Unknown config '{param}'")

        return errors

    @classmethod
    def build(
        cls,
        subject: str,
        definition: ChainDefinition,
        mode: str = "transform",
        chain_name: str = "Unnamed"
    ) -> "Chain":
        """
        Build a fluent chain from a definition.

        Bridge entries evaluate the chain built so far, exactly like the
        fluent ``assert_that()`` / ``string_transform()`` calls, so a
        failing prefix raises BridgeError here.

        Args:
            subject: The string the chain starts from.
            definition: Chain definition as JSON string or list of dicts.
            mode: Starting mode, 'transform' or 'assert'.
            chain_name: Name for error context.

        Returns:
            The chain, ready for ``try_()``.

        Raises:
            ConfigurationError: If an entry does not fit the current mode,
                or a required config parameter is missing.
            OperationNotFoundError: If an operation is not registered.
            BridgeError: If a bridge entry finds the chain so far failing.
        """
        # Import here to avoid circular imports
        from .assertion_chain import AssertionChain, assert_that
        from .transform_chain import TransformChain, string_transform

        if _mode_type(mode) is OperationType.ASSERTION:
            chain = assert_that(subject)
        else:
            chain = string_transform(subject)

        for spec in cls.from_json(definition, chain_name):
            if spec.operation == NEGATE:
                if not isinstance(chain, AssertionChain):
                    raise ConfigurationError(
                        f"'{NEGATE}' is only valid in an assertion chain",
                        operation_name=NEGATE,
                    )
                chain = chain.is_not()
            elif spec.operation == TO_ASSERTION:
                if not isinstance(chain, TransformChain):
                    raise ConfigurationError(
                        f"'{TO_ASSERTION}' is only valid in a transformation chain",
                        operation_name=TO_ASSERTION,
                    )
                chain = chain.assert_that()
            elif spec.operation == TO_TRANSFORM:
                if not isinstance(chain, AssertionChain):
                    raise ConfigurationError(
                        f"'{TO_TRANSFORM}' is only valid in an assertion chain",
                        operation_name=TO_TRANSFORM,
                    )
                chain = chain.string_transform()
            else:
                chain = chain.apply(spec.operation, **spec.operation_config)

        return chain
