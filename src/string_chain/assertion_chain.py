"""
Fluent string assertion chain.

    >>> from string_chain import assert_that
    >>> assert_that("foo").has("oo").is_not().is_exactly("bar").try_()
    True

``try_()`` returns True when every step passes, False at the first step
that does not, and None when a step raised and a handler took the error.
"""

from typing import Any, Callable, Dict, Optional, Union, TYPE_CHECKING
import logging

from .assertions import PhonePreset
from .base import BaseOperation, OperationType
from .chain import Chain
from .exceptions import BridgeError
from .transformations import PatternLike

if TYPE_CHECKING:
    from .transform_chain import TransformChain

logger = logging.getLogger("string_chain")


class WhereValueAtContinuation:
    """Pending ``where_value_at(index)``; finish it with ``is_(expected)``."""

    def __init__(self, chain: "AssertionChain", index: int):
        self._chain = chain
        self._index = index

    def is_(self, expected: str) -> "AssertionChain":
        return self._chain._add("where_value_at", index=self._index, expected=expected)


class WordCountContinuation:
    """Pending ``word_count()``; finish it with ``is_(count)``."""

    def __init__(self, chain: "AssertionChain"):
        self._chain = chain

    def is_(self, count: int) -> "AssertionChain":
        return self._chain._add("word_count", count=count)


class AssertionChain(Chain):
    """
    Chain of string assertions.

    All steps test the same subject. ``is_not()`` negates only the step
    recorded right after it.
    """

    def __init__(self, subject: str):
        super().__init__(subject)
        self._negate_next = False

    def get_operation_type(self) -> OperationType:
        return OperationType.ASSERTION

    def add_step(self, operation: BaseOperation) -> "AssertionChain":
        """Append a step, handing it a pending ``is_not()`` if there is one."""
        if self._negate_next:
            operation.negate = True
            self._negate_next = False
        return super().add_step(operation)

    def _step_name(self, name: str, config: Dict[str, Any]) -> Optional[str]:
        """Name continuation steps after their fluent form, however they are added."""
        if name == "where_value_at" and "index" in config:
            return f"where_value_at({config['index']}).is"
        if name == "word_count":
            return "word_count.is"
        return None

    def is_not(self) -> "AssertionChain":
        """
        Negate the next assertion.

        Not a step itself. A trailing ``is_not()`` with no assertion after
        it has no effect.
        """
        self._negate_next = True
        return self

    # Substrings

    def has(self, substring: str) -> "AssertionChain":
        return self._add("has", substring=substring)

    def does_not_have(self, substring: str) -> "AssertionChain":
        return self._add("does_not_have", substring=substring)

    def starts_with(self, prefix: str) -> "AssertionChain":
        return self._add("starts_with", prefix=prefix)

    def ends_with(self, suffix: str) -> "AssertionChain":
        return self._add("ends_with", suffix=suffix)

    def is_exactly(self, expected: str) -> "AssertionChain":
        return self._add("is_exactly", expected=expected)

    def any_of(self, *values: str) -> "AssertionChain":
        return self._add("any_of", values=list(values))

    def is_between(self, prefix: str, suffix: str) -> "AssertionChain":
        """Pass if non-empty text sits between ``prefix`` and a later ``suffix``."""
        return self._add("is_between", prefix=prefix, suffix=suffix)

    # Character classes

    def is_alpha(self) -> "AssertionChain":
        return self._add("is_alpha")

    def is_alpha_numeric(self) -> "AssertionChain":
        return self._add("is_alpha_numeric")

    def has_all_uppercase(self) -> "AssertionChain":
        return self._add("has_all_uppercase")

    def has_all_lowercase(self) -> "AssertionChain":
        return self._add("has_all_lowercase")

    def is_upper_case(self) -> "AssertionChain":
        """Pass if there is at least one uppercase letter."""
        return self._add("is_upper_case")

    def is_lower_case(self) -> "AssertionChain":
        """Pass if there is at least one lowercase letter."""
        return self._add("is_lower_case")

    def is_digit(self) -> "AssertionChain":
        return self._add("is_digit")

    def is_numeric(self) -> "AssertionChain":
        return self._add("is_numeric")

    def is_number_convertible(self) -> "AssertionChain":
        return self._add("is_number_convertible")

    def is_whitespace(self) -> "AssertionChain":
        return self._add("is_whitespace")

    def has_no_emoji(self) -> "AssertionChain":
        return self._add("has_no_emoji")

    def has_unique_characters(self) -> "AssertionChain":
        return self._add("has_unique_characters")

    # Formats

    def is_email(self) -> "AssertionChain":
        return self._add("is_email")

    def is_url(self) -> "AssertionChain":
        return self._add("is_url")

    def is_url_safe(self) -> "AssertionChain":
        return self._add("is_url_safe")

    def is_phone(self, preset: Union[PhonePreset, str] = PhonePreset.DEFAULT) -> "AssertionChain":
        """
        Check a phone number against a preset: 'US', 'UG' or 'DEFAULT'.

        'DEFAULT' has no rule and always fails.
        """
        return self._add("is_phone", preset=preset)

    def is_base64(self) -> "AssertionChain":
        return self._add("is_base64")

    def is_strong_password(self) -> "AssertionChain":
        return self._add("is_strong_password")

    # Regex

    def passes_regex(self, pattern: PatternLike) -> "AssertionChain":
        return self._add("passes_regex", pattern=pattern)

    def fails_regex(self, pattern: PatternLike) -> "AssertionChain":
        return self._add("fails_regex", pattern=pattern)

    # Structure

    def length_is(
        self,
        length: Optional[int] = None,
        min_length: Optional[int] = None,
        max_length: Optional[int] = None,
    ) -> "AssertionChain":
        """
        Check the length exactly, or within inclusive bounds.

            >>> assert_that("foo").length_is(3).try_()
            True
            >>> assert_that("foobar").length_is(min_length=3, max_length=5).try_()
            False
        """
        return self._add(
            "length_is", length=length, min_length=min_length, max_length=max_length
        )

    def anagram(self, other: str) -> "AssertionChain":
        return self._add("anagram", other=other)

    def is_palindrome(self) -> "AssertionChain":
        return self._add("is_palindrome")

    def where_value_at(self, index: int) -> WhereValueAtContinuation:
        """Check the character at ``index``; finish with ``.is_(expected)``."""
        return WhereValueAtContinuation(self, index)

    def word_count(self) -> WordCountContinuation:
        """Check the number of words; finish with ``.is_(count)``."""
        return WordCountContinuation(self)

    # User supplied

    def custom_check(self, function: Callable[[str], bool]) -> "AssertionChain":
        """
        Check the subject with ``function``.

        ``function`` must return a bool. If it raises or returns anything
        else, the step raises CustomOperationError.
        """
        return self._add("custom_check", function=function)

    # Mode bridge

    def string_transform(self) -> "TransformChain":
        """
        Evaluate this chain and start a transformation chain on the subject.

        The new chain starts from the original subject, not from a boolean.

        Raises:
            BridgeError: If a step raised or an assertion evaluated to False.
                No handler can intercept this.
        """
        # Import here to avoid circular imports
        from .transform_chain import string_transform

        result = self.evaluate()
        if result.errored:
            message = (
                f'Assertion failed at step "{result.operation_name}": '
                f"{result.error}\nValue so far: {result.value_so_far}"
            )
            logger.error(message)
            raise BridgeError(
                message,
                operation_name=result.operation_name,
                value_so_far=result.value_so_far,
                original_error=result.error,
            ) from result.error

        if result.failed:
            last_step = self._steps[-1].name
            message = f'Assertion failed at step "{last_step}"'
            logger.error(message)
            raise BridgeError(
                message, operation_name=last_step, value_so_far=self.subject
            )

        return string_transform(self.subject)


def assert_that(subject: str) -> AssertionChain:
    """
    Start an assertion chain.

    Args:
        subject: The string to test

    Returns:
        A new, empty AssertionChain

    Example:
        >>> assert_that("fooBar").has("Bar").is_alpha().try_()
        True
        >>> assert_that("foo").is_exactly("foo").string_transform().to_upper_case().try_()
        'FOO'
    """
    return AssertionChain(subject)
