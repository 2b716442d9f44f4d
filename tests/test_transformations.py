"""
Tests for transformation operations.
"""

import re

import pytest
from string_chain import string_transform
from string_chain.transformations import (
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
    split_value,
)
from string_chain.exceptions import ConfigurationError, CustomOperationError, StepError


class TestCaseTransformations:
    """Tests for case and whitespace transformations."""

    def test_upper_case(self):
        op = UpperCaseTransformation(name="to_upper_case")
        assert op.execute("fooBar") == "FOOBAR"

    def test_lower_case(self):
        op = LowerCaseTransformation(name="to_lower_case")
        assert op.execute("FooBAR") == "foobar"

    def test_pascal_case(self):
        op = PascalCaseTransformation(name="to_pascal_case")
        assert op.execute("hello world") == "HelloWorld"
        assert op.execute("hello world-test") == "HelloWorldTest"

    def test_pascal_case_lowers_rest_of_word(self):
        op = PascalCaseTransformation(name="to_pascal_case")
        assert op.execute("hELLO wORLD") == "HelloWorld"

    def test_snake_case(self):
        op = SnakeCaseTransformation(name="to_snake_case")
        assert op.execute("Hello World-Test") == "hello_world_test"

    def test_snake_case_splits_camel_boundaries(self):
        op = SnakeCaseTransformation(name="to_snake_case")
        assert op.execute("fooBar") == "foo_bar"

    def test_camel_case(self):
        op = CamelCaseTransformation(name="to_camel_case")
        assert op.execute("hello_world test-case") == "helloWorldTestCase"

    def test_camel_case_lowers_first_letter(self):
        op = CamelCaseTransformation(name="to_camel_case")
        assert op.execute("Hello world") == "helloWorld"

    def test_trim(self):
        op = TrimTransformation(name="trim")
        assert op.execute("  foo \n") == "foo"

    def test_upper_case_is_idempotent(self):
        once = string_transform("fooBar").to_upper_case().try_()
        twice = string_transform("fooBar").to_upper_case().to_upper_case().try_()
        assert once == twice == "FOOBAR"


class TestSplitTransformations:
    """Tests for split continuations."""

    def test_split_value_into_characters(self):
        assert split_value("abc") == ["a", "b", "c"]
        assert split_value("abc", "") == ["a", "b", "c"]

    def test_split_value_with_pattern(self):
        assert split_value("a1b22c", re.compile(r"\d+")) == ["a", "b", "c"]

    def test_take_that_at(self):
        op = TakeThatAtTransformation(
            name="take_that_at", config={"separator": ",", "index": 1}
        )
        assert op.execute("a,b,c") == "b"

    def test_take_that_at_out_of_range_raises(self):
        op = TakeThatAtTransformation(
            name="take_that_at", config={"separator": ",", "index": 5}
        )
        with pytest.raises(StepError, match="Index out of range"):
            op.execute("a,b,c")

    def test_take_that_at_negative_index_raises(self):
        op = TakeThatAtTransformation(
            name="take_that_at", config={"separator": ",", "index": -1}
        )
        with pytest.raises(StepError):
            op.execute("a,b,c")

    def test_join(self):
        op = JoinTransformation(name="join", config={"separator": " ", "joiner": "_"})
        assert op.execute("a b c") == "a_b_c"

    def test_join_characters(self):
        assert string_transform("abc").split().join("-").try_() == "a-b-c"

    def test_split_take_that_at_in_chain(self):
        assert string_transform("foo bar baz").split(" ").take_that_at(2).try_() == "baz"


class TestEncodingTransformations:
    """Tests for hex, binary, url and hash encodings."""

    def test_hex(self):
        op = HexTransformation(name="to_hex")
        assert op.execute("Hi") == "4869"

    def test_hex_pads_low_code_points(self):
        op = HexTransformation(name="to_hex")
        assert op.execute("\n") == "0a"

    def test_binary(self):
        op = BinaryTransformation(name="to_binary")
        assert op.execute("A") == "01000001"
        assert op.execute("AB") == "01000001 01000010"

    def test_url_safe(self):
        op = UrlSafeTransformation(name="to_url_safe")
        assert op.execute("hello world!") == "hello%20world!"

    def test_url_safe_encodes_reserved_characters(self):
        op = UrlSafeTransformation(name="to_url_safe")
        assert op.execute("a/b?c=d&e") == "a%2Fb%3Fc%3Dd%26e"

    def test_hash(self):
        op = HashTransformation(name="to_hash")
        assert op.execute("foo") == "193491849"

    def test_hash_of_empty_string(self):
        op = HashTransformation(name="to_hash")
        assert op.execute("") == "5381"

    def test_hash_is_deterministic(self):
        results = {string_transform("foo").to_hash().try_() for _ in range(5)}
        assert results == {"193491849"}

    def test_hash_counts_utf16_surrogates(self):
        op = HashTransformation(name="to_hash")
        assert op.execute("a\U0001F600") == "195366243"
        assert string_transform("a\U0001F600").to_hash().try_() == "195366243"

    def test_hash_of_bmp_character_uses_code_point(self):
        op = HashTransformation(name="to_hash")
        assert op.execute("é") == str(5381 * 33 + 0xE9)

    def test_hash_wraps_to_signed_32_bits(self):
        op = HashTransformation(name="to_hash")
        result = int(op.execute("the quick brown fox jumps over the lazy dog"))
        assert -(2 ** 31) <= result < 2 ** 31


class TestCharacterTransformations:
    """Tests for character level transformations."""

    def test_get_character_at(self):
        op = CharacterAtTransformation(name="get_character_at", config={"index": 1})
        assert op.execute("foo") == "o"

    def test_get_character_at_out_of_range_is_empty(self):
        op = CharacterAtTransformation(name="get_character_at", config={"index": 5})
        assert op.execute("foo") == ""

    def test_get_random_from(self):
        op = RandomCharacterTransformation(name="get_random_from")
        assert op.execute("abc") in {"a", "b", "c"}

    def test_get_random_from_empty_string(self):
        op = RandomCharacterTransformation(name="get_random_from")
        assert op.execute("") == ""

    def test_randomize_keeps_characters(self):
        op = RandomizeTransformation(name="randomize")
        result = op.execute("foobar")
        assert sorted(result) == sorted("foobar")

    def test_anagram_merges_and_sorts(self):
        op = AnagramTransformation(name="anagram", config={"other": "fed"})
        assert op.execute("cba") == "abcdef"

    def test_sanitize_all(self):
        op = SanitizeTransformation(
            name="sanitize",
            config={"remove_spaces": True, "remove_digits": True, "remove_special": True},
        )
        assert op.execute("a1 b2!") == "ab"

    def test_sanitize_only_digits(self):
        op = SanitizeTransformation(name="sanitize", config={"remove_digits": True})
        assert op.execute("a1 b2!") == "a b!"

    def test_sanitize_without_flags_is_identity(self):
        op = SanitizeTransformation(name="sanitize")
        assert op.execute("a1 b2!") == "a1 b2!"


class TestReplaceTransformations:
    """Tests for replacement and removal."""

    def test_replace_first_literal(self):
        op = ReplaceTransformation(
            name="replace", config={"search": "foo", "replacement": "bar"}
        )
        assert op.execute("foo foo") == "bar foo"

    def test_replace_literal_ignores_regex_syntax(self):
        op = ReplaceTransformation(
            name="replace", config={"search": "a.c", "replacement": "x"}
        )
        assert op.execute("abc a.c") == "abc x"

    def test_replace_first_pattern(self):
        op = ReplaceTransformation(
            name="replace", config={"search": re.compile(r"o+"), "replacement": "0"}
        )
        assert op.execute("foo boo") == "f0 boo"

    def test_replace_all_literal(self):
        op = ReplaceAllTransformation(
            name="replace_all", config={"search": "foo", "replacement": "bar"}
        )
        assert op.execute("foo foo") == "bar bar"

    def test_replace_all_pattern(self):
        op = ReplaceAllTransformation(
            name="replace_all", config={"search": re.compile(r"o+"), "replacement": "0"}
        )
        assert op.execute("foo boo") == "f0 b0"

    def test_remove_first(self):
        op = RemoveFirstTransformation(name="remove_first", config={"pattern": "-"})
        assert op.execute("a-b-c") == "ab-c"

    def test_remove_all(self):
        op = RemoveAllTransformation(name="remove_all", config={"pattern": "-"})
        assert op.execute("a-b-c") == "abc"

    def test_remove_all_pattern(self):
        op = RemoveAllTransformation(
            name="remove_all", config={"pattern": re.compile(r"\d")}
        )
        assert op.execute("a1b2c3") == "abc"

    def test_add_prefix(self):
        op = AddTransformation(name="add", config={"prefix": "foo"})
        assert op.execute("bar") == "foobar"

    def test_add_suffix(self):
        op = AddTransformation(name="add", config={"suffix": "bar"})
        assert op.execute("foo") == "foobar"

    def test_add_both(self):
        op = AddTransformation(name="add", config={"prefix": "<", "suffix": ">"})
        assert op.execute("foo") == "<foo>"


class TestLayoutTransformations:
    """Tests for pad, chunk and break_to_lines."""

    def test_pad_both(self):
        op = PadTransformation(
            name="pad", config={"length": 7, "char": "*", "where": "both"}
        )
        assert op.execute("foo") == "**foo**"

    def test_pad_both_odd_puts_extra_at_end(self):
        op = PadTransformation(
            name="pad", config={"length": 6, "char": "*", "where": "both"}
        )
        assert op.execute("foo") == "*foo**"

    def test_pad_start(self):
        op = PadTransformation(
            name="pad", config={"length": 5, "char": "-", "where": "start"}
        )
        assert op.execute("foo") == "--foo"

    def test_pad_end_is_default(self):
        op = PadTransformation(name="pad", config={"length": 5, "char": "."})
        assert op.execute("foo") == "foo.."

    def test_pad_shorter_target_is_identity(self):
        op = PadTransformation(name="pad", config={"length": 2, "char": "*"})
        assert op.execute("foo") == "foo"

    def test_pad_invalid_position_raises(self):
        op = PadTransformation(name="pad", config={"length": 5, "where": "middle"})
        with pytest.raises(ConfigurationError, match="middle"):
            op.execute("foo")

    def test_chunk(self):
        op = ChunkTransformation(name="chunk", config={"size": 3})
        assert op.execute("abcdefg") == "abc|def|g"

    def test_chunk_custom_separator(self):
        op = ChunkTransformation(name="chunk", config={"size": 2, "separator": "-"})
        assert op.execute("abcd") == "ab-cd"

    def test_chunk_non_positive_size_raises(self):
        op = ChunkTransformation(name="chunk", config={"size": 0})
        with pytest.raises(ConfigurationError):
            op.execute("abc")

    def test_break_to_lines(self):
        op = BreakToLinesTransformation(
            name="break_to_lines", config={"characters_per_line": 4}
        )
        assert op.execute("abcdef") == "abcd\nef"

    def test_break_to_lines_non_positive_raises(self):
        op = BreakToLinesTransformation(
            name="break_to_lines", config={"characters_per_line": -1}
        )
        with pytest.raises(ConfigurationError):
            op.execute("abc")


class TestExtractTransformations:
    """Tests for extraction and escaping."""

    def test_extract(self):
        op = ExtractTransformation(name="extract", config={"pattern": r"\d+"})
        assert op.execute("abc123def") == "123"

    def test_extract_compiled_pattern(self):
        op = ExtractTransformation(
            name="extract", config={"pattern": re.compile(r"[a-z]+", re.IGNORECASE)}
        )
        assert op.execute("123FooBar!") == "FooBar"

    def test_extract_no_match_raises(self):
        op = ExtractTransformation(name="extract", config={"pattern": r"\d+"})
        with pytest.raises(StepError, match="No match found"):
            op.execute("abc")

    def test_extract_in_range(self):
        op = ExtractInRangeTransformation(
            name="extract_in_range", config={"start": 1, "end": 4}
        )
        assert op.execute("foobar") == "oob"

    def test_extract_in_range_to_end(self):
        op = ExtractInRangeTransformation(name="extract_in_range", config={"start": 3})
        assert op.execute("foobar") == "bar"

    def test_extract_in_range_negative_start(self):
        op = ExtractInRangeTransformation(name="extract_in_range", config={"start": -3})
        assert op.execute("foobar") == "bar"

    def test_extract_when_between(self):
        op = ExtractWhenBetweenTransformation(
            name="extract_when_between", config={"prefix": "[", "suffix": "]"}
        )
        assert op.execute("say [foo] now") == "foo"

    def test_extract_when_between_missing_marker_raises(self):
        op = ExtractWhenBetweenTransformation(
            name="extract_when_between", config={"prefix": "[", "suffix": "]"}
        )
        with pytest.raises(StepError, match="Not found"):
            op.execute("say [foo now")

    def test_escape(self):
        op = EscapeTransformation(name="escape_string")
        assert op.execute("a.b*c") == r"a\.b\*c"

    def test_unescape(self):
        op = UnescapeTransformation(name="un_escape_string")
        assert op.execute(r"a\.b\*c") == "a.b*c"

    def test_escape_round_trip(self):
        subject = "-/\\^$*+?.()|[]{}"
        result = string_transform(subject).escape_string().un_escape_string().try_()
        assert result == subject


class TestCustomTransformation:
    """Tests for CustomTransformation."""

    def test_custom_function(self):
        op = CustomTransformation(
            name="custom_transform", config={"function": lambda s: s[::-1]}
        )
        assert op.execute("abc") == "cba"

    def test_custom_function_raising(self):
        def broken(value):
            raise KeyError("boom")

        op = CustomTransformation(name="custom_transform", config={"function": broken})
        with pytest.raises(CustomOperationError) as exc_info:
            op.execute("abc")

        assert "Custom transform function failed" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, KeyError)

    def test_custom_function_wrong_return_type(self):
        op = CustomTransformation(
            name="custom_transform", config={"function": lambda s: 42}
        )
        with pytest.raises(CustomOperationError, match="must return a string"):
            op.execute("abc")
