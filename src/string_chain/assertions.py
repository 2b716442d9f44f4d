"""
Assertion operations that test the subject string and return a boolean.

Assertions are pure checks that either:
- Pass (return True)
- Fail (return False, which stops the chain without an error)
- Raise, when the check itself cannot be evaluated

The subject string is never modified by an assertion.
"""

from abc import abstractmethod
from enum import Enum
from typing import Any, Dict, Optional
import logging
import re

from .base import BaseOperation, OperationType
from .exceptions import ConfigurationError, CustomOperationError

logger = logging.getLogger("string_chain")


class PhonePreset(str, Enum):
    """Phone number formats understood by ``is_phone``."""

    US = 'US'
    UG = 'UG'
    DEFAULT = 'DEFAULT'


# Decimal, exponent and Infinity literals, optionally signed
_DECIMAL_NUMBER_RE = re.compile(r'[+-]?(?:(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?|Infinity)')
# Unsigned hex, octal and binary integer literals
_PREFIXED_INTEGER_RE = re.compile(r'0[xX][0-9a-fA-F]+|0[oO][0-7]+|0[bB][01]+')
_UG_PHONE_RE = re.compile(r'(\+256|0)7[0-9]{8}')
_EMOJI_RE = re.compile('[\U0001F600-\U0001F64F]')
_BASE64_RE = re.compile(r'(?:[A-Za-z0-9+/]{4})*(?:[A-Za-z0-9+/]{2}==|[A-Za-z0-9+/]{3}=)?')
_STRONG_PASSWORD_RE = re.compile(r'(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*\W).{8,}', re.ASCII)
_URL_RE = re.compile(r'(https?://)?([a-zA-Z0-9\-_]+\.)+[a-zA-Z]{2,}(:[0-9]+)?(/.*)?')


def is_number_convertible(value: str) -> bool:
    """
    Return True if JavaScript's ``Number(value)`` would not give NaN.

    Blank strings convert to 0, so they count as convertible.
    """
    stripped = value.strip()
    if not stripped:
        return True
    return bool(
        _DECIMAL_NUMBER_RE.fullmatch(stripped)
        or _PREFIXED_INTEGER_RE.fullmatch(stripped)
    )


class AssertionOperation(BaseOperation):
    """
    Base class for assertion operations.

    Assertions:
    - Receive the subject string
    - Check a condition on it
    - Return a boolean

    An assertion recorded right after ``is_not()`` has ``negate`` set and
    returns the opposite of its check.

    Example:
        >>> class HasDashAssertion(AssertionOperation):
        ...     def check(self, value):
        ...         return '-' in value
    """

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None, negate: bool = False):
        super().__init__(name, config)
        self.negate = negate

    def get_operation_type(self) -> OperationType:
        return OperationType.ASSERTION

    @abstractmethod
    def check(self, value: str) -> bool:
        """
        Check the subject string.

        Args:
            value: Subject string of the chain

        Returns:
            True if the check passes, False otherwise
        """
        pass

    def execute(self, value: str) -> bool:
        """Run the check and apply this step's negation."""
        result = self.check(value)
        if self.negate:
            return not result
        return result

    def __repr__(self):
        negated = ', negated' if self.negate else ''
        return f"<{self.__class__.__name__}(name={self.name}, type={self.get_operation_type().value}{negated})>"


def _text_schema(param: str, description: str, example: Any) -> Dict[str, Any]:
    return {
        'required': {
            param: {
                'type': 'str',
                'description': description,
                'example': example
            }
        },
        'optional': {}
    }


# ============================================================================
# Substrings
# ============================================================================


class HasAssertion(AssertionOperation):
    """Check that the subject contains a substring."""

    def get_config_schema(self) -> Dict[str, Any]:
        return _text_schema('substring', 'Substring to look for', 'world')

    def check(self, value: str) -> bool:
        return self.config['substring'] in value


class DoesNotHaveAssertion(HasAssertion):
    """Check that the subject does not contain a substring."""

    def check(self, value: str) -> bool:
        return self.config['substring'] not in value


class StartsWithAssertion(AssertionOperation):
    """Check that the subject starts with a prefix."""

    def get_config_schema(self) -> Dict[str, Any]:
        return _text_schema('prefix', 'Expected prefix', 'he')

    def check(self, value: str) -> bool:
        return value.startswith(self.config['prefix'])


class EndsWithAssertion(AssertionOperation):
    """Check that the subject ends with a suffix."""

    def get_config_schema(self) -> Dict[str, Any]:
        return _text_schema('suffix', 'Expected suffix', 'lo')

    def check(self, value: str) -> bool:
        return value.endswith(self.config['suffix'])


class IsExactlyAssertion(AssertionOperation):
    """Check that the subject equals a string exactly."""

    def get_config_schema(self) -> Dict[str, Any]:
        return _text_schema('expected', 'Exact expected value', 'foo')

    def check(self, value: str) -> bool:
        return value == self.config['expected']


class AnyOfAssertion(AssertionOperation):
    """Check that the subject equals one of the given values."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'values': {
                    'type': 'list',
                    'description': 'Allowed values',
                    'example': ['bar', 'foo', 'baz']
                }
            },
            'optional': {}
        }

    def check(self, value: str) -> bool:
        return value in self.config['values']


class IsBetweenAssertion(AssertionOperation):
    """
    Check that some text sits between a prefix and a suffix marker.

    The suffix must start strictly after the end of the first prefix
    occurrence, so adjacent markers fail.
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'prefix': {
                    'type': 'str',
                    'description': 'Start marker',
                    'example': 'e'
                },
                'suffix': {
                    'type': 'str',
                    'description': 'End marker',
                    'example': 'o'
                }
            },
            'optional': {}
        }

    def check(self, value: str) -> bool:
        prefix = self.config['prefix']
        suffix = self.config['suffix']

        prefix_index = value.find(prefix)
        if prefix_index == -1:
            return False

        content_start = prefix_index + len(prefix)
        suffix_index = value.find(suffix, content_start)
        return suffix_index != -1 and content_start < suffix_index


# ============================================================================
# Character classes
# ============================================================================


class IsAlphaAssertion(AssertionOperation):
    """Check that the subject has only ASCII letters (and at least one)."""

    def check(self, value: str) -> bool:
        return bool(re.fullmatch(r'[A-Za-z]+', value))


class IsAlphaNumericAssertion(AssertionOperation):
    """Check that the subject has only ASCII letters and digits."""

    def check(self, value: str) -> bool:
        return bool(re.fullmatch(r'[A-Za-z0-9]+', value))


class HasAllUppercaseAssertion(AssertionOperation):
    """Check that every letter in the subject is uppercase (needs one letter)."""

    def check(self, value: str) -> bool:
        letters = re.sub(r'[^A-Za-z]', '', value)
        return bool(re.fullmatch(r'[A-Z]+', letters))


class HasAllLowercaseAssertion(AssertionOperation):
    """Check that every letter in the subject is lowercase (needs one letter)."""

    def check(self, value: str) -> bool:
        letters = re.sub(r'[^A-Za-z]', '', value)
        return bool(re.fullmatch(r'[a-z]+', letters))


class IsUpperCaseAssertion(AssertionOperation):
    """Check that the subject contains at least one uppercase letter."""

    def check(self, value: str) -> bool:
        return bool(re.search(r'[A-Z]', value))


class IsLowerCaseAssertion(AssertionOperation):
    """Check that the subject contains at least one lowercase letter."""

    def check(self, value: str) -> bool:
        return bool(re.search(r'[a-z]', value))


class IsDigitAssertion(AssertionOperation):
    """Check that the subject has only digits 0-9."""

    def check(self, value: str) -> bool:
        return bool(re.fullmatch(r'[0-9]+', value))


class IsNumberConvertibleAssertion(AssertionOperation):
    """Check that the subject converts to a number."""

    def check(self, value: str) -> bool:
        return is_number_convertible(value)


class IsWhitespaceAssertion(AssertionOperation):
    """Check that the subject has only whitespace (and at least one character)."""

    def check(self, value: str) -> bool:
        return bool(re.fullmatch(r'\s+', value))


class HasNoEmojiAssertion(AssertionOperation):
    """Check that the subject has no emoticon (U+1F600 to U+1F64F)."""

    def check(self, value: str) -> bool:
        return not _EMOJI_RE.search(value)


class HasUniqueCharactersAssertion(AssertionOperation):
    """Check that no character appears twice."""

    def check(self, value: str) -> bool:
        return len(set(value)) == len(value)


# ============================================================================
# Formats
# ============================================================================


class IsEmailAssertion(AssertionOperation):
    """Check email address format."""

    def check(self, value: str) -> bool:
        return bool(re.fullmatch(r'[^\s@]+@[^\s@]+\.[^\s@]+', value))


class IsUrlAssertion(AssertionOperation):
    """
    Check URL format.

    The scheme is optional; when present it must be http or https.
    """

    def check(self, value: str) -> bool:
        return bool(_URL_RE.fullmatch(value))


class IsUrlSafeAssertion(AssertionOperation):
    """Check that the subject has only unreserved URL characters."""

    def check(self, value: str) -> bool:
        return bool(re.fullmatch(r'[a-zA-Z0-9\-._~]+', value))


class IsPhoneAssertion(AssertionOperation):
    """
    Check phone number format for a preset.

    - US: 10 digits, or 11 digits starting with 1, ignoring punctuation
    - UG: +256 or 0, then 7 and eight more digits
    - DEFAULT: no generic rule exists, always False
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'preset': {
                    'type': 'str',
                    'description': 'Phone format preset: US, UG, or DEFAULT',
                    'example': 'US'
                }
            },
            'optional': {}
        }

    def check(self, value: str) -> bool:
        raw_preset = self.config['preset']
        try:
            preset = PhonePreset(raw_preset)
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown phone preset '{raw_preset}', expected one of: "
                f"{', '.join(p.value for p in PhonePreset)}",
                operation_name=self.name,
                config_schema=self.get_config_schema(),
                provided_config=self.config,
            ) from e

        if preset is PhonePreset.UG:
            return bool(_UG_PHONE_RE.fullmatch(value))
        if preset is PhonePreset.US:
            digits = re.sub(r'[^0-9]', '', value)
            return len(digits) == 10 or (len(digits) == 11 and digits.startswith('1'))

        logger.debug("%s: no rule for preset %s, failing", self.name, preset.value)
        return False


class IsBase64Assertion(AssertionOperation):
    """Check that the subject is padded Base64 (the empty string passes)."""

    def check(self, value: str) -> bool:
        return bool(_BASE64_RE.fullmatch(value))


class IsStrongPasswordAssertion(AssertionOperation):
    """
    Check strong password rules.

    At least 8 characters with a lowercase letter, an uppercase letter,
    a digit and a non-word character.
    """

    def check(self, value: str) -> bool:
        return bool(_STRONG_PASSWORD_RE.fullmatch(value))


# ============================================================================
# Regex
# ============================================================================


class PassesRegexAssertion(AssertionOperation):
    """Check that a regex matches somewhere in the subject."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'pattern': {
                    'type': 'str',
                    'description': 'Regex pattern (string or compiled)',
                    'example': r'\d{3}'
                }
            },
            'optional': {}
        }

    def check(self, value: str) -> bool:
        return bool(re.search(self.config['pattern'], value))


class FailsRegexAssertion(PassesRegexAssertion):
    """Check that a regex matches nowhere in the subject."""

    def check(self, value: str) -> bool:
        return not re.search(self.config['pattern'], value)


# ============================================================================
# Structure
# ============================================================================


class LengthIsAssertion(AssertionOperation):
    """
    Check the subject length.

    Either an exact ``length``, or inclusive ``min_length``/``max_length``
    bounds. With no constraint at all the check passes.
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {},
            'optional': {
                'length': {
                    'type': 'int',
                    'description': 'Exact expected length',
                    'example': 3
                },
                'min_length': {
                    'type': 'int',
                    'description': 'Minimum length (inclusive)',
                    'example': 3
                },
                'max_length': {
                    'type': 'int',
                    'description': 'Maximum length (inclusive)',
                    'example': 6
                }
            }
        }

    def check(self, value: str) -> bool:
        length = len(value)
        exact = self.config.get('length')
        if exact is not None:
            return length == exact

        min_length = self.config.get('min_length')
        max_length = self.config.get('max_length')

        if min_length is not None and length < min_length:
            return False

        if max_length is not None and length > max_length:
            return False

        return True


class AnagramAssertion(AssertionOperation):
    """Check that the subject is an anagram of another string."""

    def get_config_schema(self) -> Dict[str, Any]:
        return _text_schema('other', 'String to compare with', 'silent')

    def check(self, value: str) -> bool:
        return sorted(value) == sorted(self.config['other'])


class IsPalindromeAssertion(AssertionOperation):
    """Check that the subject reads the same backwards, ignoring case and punctuation."""

    def check(self, value: str) -> bool:
        cleaned = re.sub(r'[\W_]', '', value, flags=re.ASCII).lower()
        return cleaned == cleaned[::-1]


class ValueAtAssertion(AssertionOperation):
    """Check the character at an index (out of range never matches)."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'index': {
                    'type': 'int',
                    'description': 'Position of the character',
                    'example': 1
                },
                'expected': {
                    'type': 'str',
                    'description': 'Expected character',
                    'example': 'e'
                }
            },
            'optional': {}
        }

    def check(self, value: str) -> bool:
        index = self.config['index']
        return 0 <= index < len(value) and value[index] == self.config['expected']


class WordCountAssertion(AssertionOperation):
    """Check the number of whitespace separated words."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'count': {
                    'type': 'int',
                    'description': 'Expected word count',
                    'example': 3
                }
            },
            'optional': {}
        }

    def check(self, value: str) -> bool:
        return len(value.split()) == self.config['count']


# ============================================================================
# User supplied
# ============================================================================


class CustomCheckAssertion(AssertionOperation):
    """
    Check the subject with a user supplied predicate.

    The predicate must return a bool. Anything it raises, and any other
    return type, becomes a CustomOperationError.
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'function': {
                    'type': 'callable',
                    'description': 'Predicate taking the subject and returning a bool'
                }
            },
            'optional': {}
        }

    def check(self, value: str) -> bool:
        function = self.config['function']
        try:
            result = function(value)
        except Exception as e:
            raise CustomOperationError(
                f'Error evaluating predicate: {e}', operation_name=self.name
            ) from e

        if not isinstance(result, bool):
            raise CustomOperationError(
                'Custom check function must return a boolean', operation_name=self.name
            )
        return result
