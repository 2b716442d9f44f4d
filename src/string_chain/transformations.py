"""
Transformation operations that map the current string to a new string.

Transformations are pure functions of their input and their config.
They signal failure by raising; the chain executor decides whether the
error reaches a handler or the caller.
"""

from abc import abstractmethod
from typing import Any, Dict, Iterator, List, Union
from urllib.parse import quote
import json
import random
import re

from .base import BaseOperation, OperationType
from .exceptions import ConfigurationError, CustomOperationError, StepError


PatternLike = Union[str, re.Pattern]

# Characters escaped by escape_string / restored by un_escape_string
REGEX_METACHARACTERS = r'-/\\^$*+?.()|[\]{}'

_ESCAPE_RE = re.compile('[' + REGEX_METACHARACTERS + ']')
_UNESCAPE_RE = re.compile(r'\\([' + REGEX_METACHARACTERS + '])')
_WORD_RE = re.compile(r'(\w)(\w*)', re.ASCII)
_PASCAL_SEPARATORS_RE = re.compile(r'[\s_-]+')
_CAMEL_SEPARATORS_RE = re.compile(r'[-_\s]+(.)?')
_CAMEL_BOUNDARY_RE = re.compile(r'([a-z\d])([A-Z])', re.ASCII)


def _compile(pattern: PatternLike) -> re.Pattern:
    if isinstance(pattern, re.Pattern):
        return pattern
    return re.compile(pattern)


def _utf16_code_units(value: str) -> Iterator[int]:
    for char in value:
        code_point = ord(char)
        if code_point > 0xFFFF:
            code_point -= 0x10000
            yield 0xD800 + (code_point >> 10)
            yield 0xDC00 + (code_point & 0x3FF)
        else:
            yield code_point


def split_value(value: str, separator: Union[PatternLike, None] = None) -> List[str]:
    """Split a value; no separator (or an empty one) splits into characters."""
    if separator is None or separator == '':
        return list(value)
    if isinstance(separator, re.Pattern):
        return separator.split(value)
    return value.split(separator)


class TransformationOperation(BaseOperation):
    """
    Base class for transformation operations.

    Transformations:
    - Receive the current string
    - Transform it according to their config
    - Return the new string
    - Are pure functions (no side effects)

    Errors raised by ``transform`` propagate unchanged, so the executor can
    report the exact exception object to a handler or to the caller.

    Example:
        >>> class ReverseTransformation(TransformationOperation):
        ...     def transform(self, value):
        ...         return value[::-1]
    """

    def get_operation_type(self) -> OperationType:
        return OperationType.TRANSFORMATION

    @abstractmethod
    def transform(self, value: str) -> str:
        """
        Transform the input value.

        Args:
            value: Current string of the chain

        Returns:
            Transformed string
        """
        pass

    def execute(self, value: str) -> str:
        return self.transform(value)


# ============================================================================
# Case and whitespace
# ============================================================================


class UpperCaseTransformation(TransformationOperation):
    """Convert string to uppercase."""

    def transform(self, value: str) -> str:
        return value.upper()


class LowerCaseTransformation(TransformationOperation):
    """Convert string to lowercase."""

    def transform(self, value: str) -> str:
        return value.lower()


class PascalCaseTransformation(TransformationOperation):
    """
    Convert string to PascalCase.

    Every ASCII word is capitalized, then spaces, underscores and hyphens
    are removed.
    """

    def transform(self, value: str) -> str:
        capitalized = _WORD_RE.sub(
            lambda m: m.group(1).upper() + m.group(2).lower(), value
        )
        return _PASCAL_SEPARATORS_RE.sub('', capitalized)


class SnakeCaseTransformation(TransformationOperation):
    """Convert string to snake_case."""

    def transform(self, value: str) -> str:
        result = re.sub(r'\s+', '_', value)
        result = _CAMEL_BOUNDARY_RE.sub(r'\1_\2', result)
        result = re.sub(r'-+', '_', result)
        result = re.sub(r'__+', '_', result)
        return result.lower()


class CamelCaseTransformation(TransformationOperation):
    """Convert string to camelCase."""

    def transform(self, value: str) -> str:
        result = _CAMEL_SEPARATORS_RE.sub(
            lambda m: m.group(1).upper() if m.group(1) else '', value
        )
        return result[:1].lower() + result[1:]


class TrimTransformation(TransformationOperation):
    """Strip whitespace from both ends of the string."""

    def transform(self, value: str) -> str:
        return value.strip()


# ============================================================================
# Split continuations
# ============================================================================


class TakeThatAtTransformation(TransformationOperation):
    """
    Split the string and keep the part at a given index.

    Raises StepError when the index is outside the split result.
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'index': {
                    'type': 'int',
                    'description': 'Index of the part to keep',
                    'example': 1
                }
            },
            'optional': {
                'separator': {
                    'type': 'str',
                    'description': 'Separator string or compiled regex (None splits into characters)',
                    'default': None,
                    'example': ','
                }
            }
        }

    def transform(self, value: str) -> str:
        parts = split_value(value, self.config.get('separator'))
        index = self.config['index']
        if index < 0 or index >= len(parts):
            raise StepError('Index out of range', operation_name=self.name)
        return parts[index]


class JoinTransformation(TransformationOperation):
    """Split the string and join the parts back with another separator."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {},
            'optional': {
                'separator': {
                    'type': 'str',
                    'description': 'Separator string or compiled regex (None splits into characters)',
                    'default': None,
                    'example': ','
                },
                'joiner': {
                    'type': 'str',
                    'description': 'String placed between the joined parts',
                    'default': '',
                    'example': '-'
                }
            }
        }

    def transform(self, value: str) -> str:
        parts = split_value(value, self.config.get('separator'))
        return self.config.get('joiner', '').join(parts)


# ============================================================================
# Encodings
# ============================================================================


class HexTransformation(TransformationOperation):
    """Convert each character to its two-digit (minimum) hex code."""

    def transform(self, value: str) -> str:
        return ''.join(format(ord(char), '02x') for char in value)


class BinaryTransformation(TransformationOperation):
    """Convert each character to its 8-bit (minimum) binary code, space separated."""

    def transform(self, value: str) -> str:
        return ' '.join(format(ord(char), '08b') for char in value)


class UrlSafeTransformation(TransformationOperation):
    """
    Percent-encode the string for use in a URL component.

    Keeps the same unreserved set as JavaScript's encodeURIComponent.
    """

    def transform(self, value: str) -> str:
        return quote(value, safe="!'()*")


class HashTransformation(TransformationOperation):
    """
    Hash the string with djb2 and return the hash as a decimal string.

    The hash runs over UTF-16 code units, so a character outside the BMP
    contributes its two surrogates. The running hash wraps to a signed
    32-bit integer.
    """

    def transform(self, value: str) -> str:
        hash_value = 5381
        for unit in _utf16_code_units(value):
            hash_value = (hash_value * 33 + unit) & 0xFFFFFFFF
        if hash_value >= 0x80000000:
            hash_value -= 0x100000000
        return str(hash_value)


# ============================================================================
# Characters
# ============================================================================


class CharacterAtTransformation(TransformationOperation):
    """Return the character at an index, or an empty string if out of range."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'index': {
                    'type': 'int',
                    'description': 'Position of the character',
                    'example': 2
                }
            },
            'optional': {}
        }

    def transform(self, value: str) -> str:
        index = self.config['index']
        if 0 <= index < len(value):
            return value[index]
        return ''


class RandomCharacterTransformation(TransformationOperation):
    """Return a random character from the string (empty string stays empty)."""

    def transform(self, value: str) -> str:
        if not value:
            return ''
        return value[random.randrange(len(value))]


class RandomizeTransformation(TransformationOperation):
    """Shuffle the characters of the string."""

    def transform(self, value: str) -> str:
        return ''.join(random.sample(value, len(value)))


class AnagramTransformation(TransformationOperation):
    """Merge the characters of the string with another string and sort them."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'other': {
                    'type': 'str',
                    'description': 'String whose characters are mixed in',
                    'example': 'cab'
                }
            },
            'optional': {}
        }

    def transform(self, value: str) -> str:
        return ''.join(sorted(value + self.config['other']))


class SanitizeTransformation(TransformationOperation):
    """
    Remove spaces, digits and/or special characters from the string.
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {},
            'optional': {
                'remove_spaces': {
                    'type': 'bool',
                    'description': 'Remove all whitespace',
                    'default': False
                },
                'remove_digits': {
                    'type': 'bool',
                    'description': 'Remove digits 0-9',
                    'default': False
                },
                'remove_special': {
                    'type': 'bool',
                    'description': 'Remove everything except letters, digits, underscore and whitespace',
                    'default': False,
                    'example': True
                }
            }
        }

    def transform(self, value: str) -> str:
        result = value
        if self.config.get('remove_spaces', False):
            result = re.sub(r'\s+', '', result)
        if self.config.get('remove_digits', False):
            result = re.sub(r'[0-9]+', '', result)
        if self.config.get('remove_special', False):
            result = re.sub(r'[^A-Za-z0-9_\s]', '', result)
        return result


# ============================================================================
# Replacement
# ============================================================================


class ReplaceTransformation(TransformationOperation):
    """
    Replace the first occurrence of a substring or the first regex match.

    A plain string is matched literally; a compiled pattern uses regex
    substitution (``\\1`` style group references).
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'search': {
                    'type': 'str',
                    'description': 'Literal string or compiled regex to search for',
                    'example': 'foo'
                },
                'replacement': {
                    'type': 'str',
                    'description': 'Replacement string',
                    'example': 'baz'
                }
            },
            'optional': {}
        }

    def transform(self, value: str) -> str:
        search = self.config['search']
        replacement = self.config['replacement']
        if isinstance(search, re.Pattern):
            return search.sub(replacement, value, count=1)
        return value.replace(search, replacement, 1)


class ReplaceAllTransformation(ReplaceTransformation):
    """Replace every occurrence of a substring or every regex match."""

    def transform(self, value: str) -> str:
        search = self.config['search']
        replacement = self.config['replacement']
        if isinstance(search, re.Pattern):
            return search.sub(replacement, value)
        return replacement.join(split_value(value, search))


class RemoveFirstTransformation(TransformationOperation):
    """Remove the first occurrence of a substring or the first regex match."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'pattern': {
                    'type': 'str',
                    'description': 'Literal string or compiled regex to remove',
                    'example': 'foo'
                }
            },
            'optional': {}
        }

    def transform(self, value: str) -> str:
        pattern = self.config['pattern']
        if isinstance(pattern, re.Pattern):
            return pattern.sub('', value, count=1)
        return value.replace(pattern, '', 1)


class RemoveAllTransformation(RemoveFirstTransformation):
    """Remove every occurrence of a substring or every regex match."""

    def transform(self, value: str) -> str:
        pattern = self.config['pattern']
        if isinstance(pattern, re.Pattern):
            return pattern.sub('', value)
        return ''.join(split_value(value, pattern))


class AddTransformation(TransformationOperation):
    """Add a prefix and/or a suffix to the string."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {},
            'optional': {
                'prefix': {
                    'type': 'str',
                    'description': 'Text placed before the value',
                    'default': None,
                    'example': 'foo'
                },
                'suffix': {
                    'type': 'str',
                    'description': 'Text placed after the value',
                    'default': None,
                    'example': 'bar'
                }
            }
        }

    def transform(self, value: str) -> str:
        prefix = self.config.get('prefix')
        suffix = self.config.get('suffix')
        result = value
        if prefix:
            result = prefix + result
        if suffix:
            result = result + suffix
        return result


# ============================================================================
# Layout
# ============================================================================


class PadTransformation(TransformationOperation):
    """
    Pad the string to a target length.

    'start' and 'end' repeat the fill and cut it to the missing length.
    'both' splits the missing length in two, giving the extra character of
    an odd split to the end.
    """

    POSITIONS = ('start', 'end', 'both')

    def get_config_schema(self) -> Dict[str, Any]:
        return {
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
                    'description': 'Fill character (or string)',
                    'default': ' ',
                    'example': '*'
                },
                'where': {
                    'type': 'str',
                    'description': 'Where to pad: start, end, or both',
                    'default': 'end',
                    'example': 'both'
                }
            }
        }

    def transform(self, value: str) -> str:
        length = self.config['length']
        char = self.config.get('char', ' ')
        where = self.config.get('where', 'end')

        if where not in self.POSITIONS:
            raise ConfigurationError(
                f"Invalid pad position '{where}', expected one of: {', '.join(self.POSITIONS)}",
                operation_name=self.name,
                config_schema=self.get_config_schema(),
                provided_config=self.config,
            )

        missing = length - len(value)
        if missing <= 0 or not char:
            return value

        if where == 'start':
            return (char * missing)[:missing] + value
        if where == 'end':
            return value + (char * missing)[:missing]

        before = missing // 2
        after = missing - before
        return char * before + value + char * after


class ChunkTransformation(TransformationOperation):
    """Cut the string into fixed-size chunks joined by a separator."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'size': {
                    'type': 'int',
                    'description': 'Number of characters per chunk',
                    'example': 2
                }
            },
            'optional': {
                'separator': {
                    'type': 'str',
                    'description': 'String placed between chunks',
                    'default': '|',
                    'example': '-'
                }
            }
        }

    def transform(self, value: str) -> str:
        size = self.config['size']
        if size <= 0:
            raise ConfigurationError(
                f'Chunk size must be positive, got {size}',
                operation_name=self.name,
                provided_config=self.config,
            )
        separator = self.config.get('separator', '|')
        return separator.join(value[i:i + size] for i in range(0, len(value), size))


class BreakToLinesTransformation(TransformationOperation):
    """Break the string into lines of a fixed number of characters."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'characters_per_line': {
                    'type': 'int',
                    'description': 'Number of characters per line',
                    'example': 2
                }
            },
            'optional': {}
        }

    def transform(self, value: str) -> str:
        width = self.config['characters_per_line']
        if width <= 0:
            raise ConfigurationError(
                f'Characters per line must be positive, got {width}',
                operation_name=self.name,
                provided_config=self.config,
            )
        return '\n'.join(value[i:i + width] for i in range(0, len(value), width))


# ============================================================================
# Extraction
# ============================================================================


class ExtractTransformation(TransformationOperation):
    """
    Extract the first match of a regex pattern.

    Raises StepError if the pattern does not match.
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'pattern': {
                    'type': 'str',
                    'description': 'Regex pattern (string or compiled)',
                    'example': r'\d+'
                }
            },
            'optional': {}
        }

    def transform(self, value: str) -> str:
        match = _compile(self.config['pattern']).search(value)
        if not match:
            raise StepError('No match found', operation_name=self.name)
        return match.group(0)


class ExtractInRangeTransformation(TransformationOperation):
    """Extract the slice between two indexes (end exclusive, negatives allowed)."""

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'start': {
                    'type': 'int',
                    'description': 'Index where the slice starts',
                    'example': 1
                }
            },
            'optional': {
                'end': {
                    'type': 'int',
                    'description': 'Index where the slice ends (exclusive)',
                    'default': None,
                    'example': 4
                }
            }
        }

    def transform(self, value: str) -> str:
        return value[self.config['start']:self.config.get('end')]


class ExtractWhenBetweenTransformation(TransformationOperation):
    """
    Extract the text between a prefix marker and a suffix marker.

    The suffix is searched after the end of the first prefix occurrence.
    Raises StepError if either marker is missing.
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'prefix': {
                    'type': 'str',
                    'description': 'Start marker',
                    'example': '['
                },
                'suffix': {
                    'type': 'str',
                    'description': 'End marker',
                    'example': ']'
                }
            },
            'optional': {}
        }

    def transform(self, value: str) -> str:
        prefix = self.config['prefix']
        suffix = self.config['suffix']

        start = value.find(prefix)
        if start == -1:
            raise StepError('Not found', operation_name=self.name)

        content_start = start + len(prefix)
        end = value.find(suffix, content_start)
        if end == -1 or end <= start:
            raise StepError('Not found', operation_name=self.name)

        return value[content_start:end]


class EscapeTransformation(TransformationOperation):
    """Escape regex metacharacters with a backslash."""

    def transform(self, value: str) -> str:
        return _ESCAPE_RE.sub(lambda m: '\\' + m.group(0), value)


class UnescapeTransformation(TransformationOperation):
    """Remove the backslash in front of escaped regex metacharacters."""

    def transform(self, value: str) -> str:
        return _UNESCAPE_RE.sub(lambda m: m.group(1), value)


# ============================================================================
# User supplied
# ============================================================================


class CustomTransformation(TransformationOperation):
    """
    Apply a user supplied function.

    The function must return a string. Anything it raises, and any other
    return type, becomes a CustomOperationError.
    """

    def get_config_schema(self) -> Dict[str, Any]:
        return {
            'required': {
                'function': {
                    'type': 'callable',
                    'description': 'Function taking the current string and returning a new string'
                }
            },
            'optional': {}
        }

    def transform(self, value: str) -> str:
        function = self.config['function']
        try:
            result = function(value)
        except Exception as e:
            raise CustomOperationError(
                f'Custom transform function failed: {e}', operation_name=self.name
            ) from e

        if not isinstance(result, str):
            raise CustomOperationError(
                'Custom transform function must return a string, '
                f'but returned {json.dumps(result, default=repr)}',
                operation_name=self.name,
            )
        return result
