"""
Fluent string transformation chain.

    >>> from string_chain import string_transform
    >>> string_transform(" fooBar ").trim().to_snake_case().try_()
    'foo_bar'

Nothing runs until ``try_()`` (or a bridge) is called.
"""

from typing import Callable, Optional, TYPE_CHECKING
import logging

from .base import OperationType
from .chain import Chain
from .exceptions import BridgeError
from .transformations import PatternLike

if TYPE_CHECKING:
    from .assertion_chain import AssertionChain

logger = logging.getLogger("string_chain")


class SplitContinuation:
    """
    Pending ``split()``; choose what to do with the parts.

    No step is recorded until ``take_that_at`` or ``join`` is called.
    """

    def __init__(self, chain: "TransformChain", separator: Optional[PatternLike]):
        self._chain = chain
        self._separator = separator

    def take_that_at(self, index: int) -> "TransformChain":
        """Keep the part at ``index``; raises StepError on evaluation if out of range."""
        return self._chain._add("take_that_at", separator=self._separator, index=index)

    def join(self, joiner: str = "") -> "TransformChain":
        """Join the parts back with ``joiner``."""
        return self._chain._add("join", separator=self._separator, joiner=joiner)


class TransformChain(Chain):
    """
    Chain of string transformations.

    Every method records one step and returns the chain. ``try_()`` runs
    the steps in order, each one receiving the output of the previous one.
    """

    def get_operation_type(self) -> OperationType:
        return OperationType.TRANSFORMATION

    # Case and whitespace

    def to_upper_case(self) -> "TransformChain":
        return self._add("to_upper_case")

    def to_lower_case(self) -> "TransformChain":
        return self._add("to_lower_case")

    def to_pascal_case(self) -> "TransformChain":
        """``"hello world"`` becomes ``"HelloWorld"``."""
        return self._add("to_pascal_case")

    def to_snake_case(self) -> "TransformChain":
        """``"Hello World-Test"`` becomes ``"hello_world_test"``."""
        return self._add("to_snake_case")

    def to_camel_case(self) -> "TransformChain":
        """``"hello_world test-case"`` becomes ``"helloWorldTestCase"``."""
        return self._add("to_camel_case")

    def trim(self) -> "TransformChain":
        return self._add("trim")

    # Splitting

    def split(self, separator: Optional[PatternLike] = None) -> SplitContinuation:
        """
        Split the value, then pick a part or join the parts.

        Args:
            separator: String or compiled regex. None splits into characters.

        Returns:
            A continuation exposing ``take_that_at(index)`` and ``join(joiner)``.
        """
        return SplitContinuation(self, separator)

    # Encodings

    def to_hex(self) -> "TransformChain":
        return self._add("to_hex")

    def to_binary(self) -> "TransformChain":
        return self._add("to_binary")

    def to_url_safe(self) -> "TransformChain":
        return self._add("to_url_safe")

    def to_hash(self) -> "TransformChain":
        """Replace the value with its djb2 hash as a decimal string."""
        return self._add("to_hash")

    # Characters

    def get_character_at(self, index: int) -> "TransformChain":
        return self._add("get_character_at", index=index)

    def get_random_from(self) -> "TransformChain":
        return self._add("get_random_from")

    def randomize(self) -> "TransformChain":
        return self._add("randomize")

    def anagram(self, other: str) -> "TransformChain":
        """Merge the characters of ``other`` in and sort all characters."""
        return self._add("anagram", other=other)

    def sanitize(
        self,
        remove_spaces: bool = False,
        remove_digits: bool = False,
        remove_special: bool = False,
    ) -> "TransformChain":
        return self._add(
            "sanitize",
            remove_spaces=remove_spaces,
            remove_digits=remove_digits,
            remove_special=remove_special,
        )

    # Replacement

    def replace(self, search: PatternLike, replacement: str) -> "TransformChain":
        """
        Replace the first occurrence.

        A ``str`` is matched literally; a compiled pattern is matched as a regex.
        """
        return self._add("replace", search=search, replacement=replacement)

    def replace_all(self, search: PatternLike, replacement: str) -> "TransformChain":
        return self._add("replace_all", search=search, replacement=replacement)

    def remove_first(self, pattern: PatternLike) -> "TransformChain":
        return self._add("remove_first", pattern=pattern)

    def remove_all(self, pattern: PatternLike) -> "TransformChain":
        return self._add("remove_all", pattern=pattern)

    def add(self, prefix: Optional[str] = None, suffix: Optional[str] = None) -> "TransformChain":
        """
        Add a prefix and/or suffix.

            >>> string_transform("bar").add("foo").try_()
            'foobar'
            >>> string_transform("foo").add(suffix="bar").try_()
            'foobar'
        """
        return self._add("add", prefix=prefix, suffix=suffix)

    # Layout

    def pad(self, length: int, char: str = " ", where: str = "end") -> "TransformChain":
        """
        Pad to ``length`` with ``char``.

        Args:
            length: Target length
            char: Fill character
            where: 'start', 'end' or 'both'. With 'both' an odd fill puts
                   the extra character at the end.
        """
        return self._add("pad", length=length, char=char, where=where)

    def chunk(self, size: int, separator: str = "|") -> "TransformChain":
        return self._add("chunk", size=size, separator=separator)

    def break_to_lines(self, characters_per_line: int) -> "TransformChain":
        return self._add("break_to_lines", characters_per_line=characters_per_line)

    # Extraction

    def extract(self, pattern: PatternLike) -> "TransformChain":
        """Keep the first regex match; raises StepError on evaluation if none."""
        return self._add("extract", pattern=pattern)

    def extract_in_range(self, start: int, end: Optional[int] = None) -> "TransformChain":
        return self._add("extract_in_range", start=start, end=end)

    def extract_when_between(self, prefix: str, suffix: str) -> "TransformChain":
        """Keep the text between ``prefix`` and ``suffix``; raises StepError if absent."""
        return self._add("extract_when_between", prefix=prefix, suffix=suffix)

    def escape_string(self) -> "TransformChain":
        return self._add("escape_string")

    def un_escape_string(self) -> "TransformChain":
        return self._add("un_escape_string")

    # User supplied

    def custom_transform(self, function: Callable[[str], str]) -> "TransformChain":
        """
        Apply ``function`` to the value.

        ``function`` must return a string. If it raises or returns anything
        else, the step raises CustomOperationError.
        """
        return self._add("custom_transform", function=function)

    # Mode bridge

    def assert_that(self) -> "AssertionChain":
        """
        Evaluate this chain and start an assertion chain on the result.

        Raises:
            BridgeError: If a step raised. No handler can intercept this.
        """
        # Import here to avoid circular imports
        from .assertion_chain import assert_that

        result = self.evaluate()
        if result.errored:
            message = (
                f'Transformation failed at step "{result.operation_name}": '
                f"{result.error}\nValue so far: {result.value_so_far}"
            )
            logger.error(message)
            raise BridgeError(
                message,
                operation_name=result.operation_name,
                value_so_far=result.value_so_far,
                original_error=result.error,
            ) from result.error

        return assert_that(result.value)


def string_transform(subject: str) -> TransformChain:
    """
    Start a transformation chain.

    Args:
        subject: The string to transform

    Returns:
        A new, empty TransformChain

    Example:
        >>> string_transform("foo").to_upper_case().try_()
        'FOO'
        >>> string_transform("abc").extract(r"\\d+").try_(
        ...     lambda error, step, value: print(step, value)
        ... )
        extract abc
    """
    return TransformChain(subject)

