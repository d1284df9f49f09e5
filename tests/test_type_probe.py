"""Tests for the value type prober."""

import pytest

from ingest_schema.canonical import types as T
from ingest_schema.inference.type_probe import (
    BooleanLexicon,
    parse_time,
    parse_timestamp,
    probe_types,
)
from ingest_schema.utils.exceptions import ConfigError

TEXT = set(T.TEXT_TYPES)


class TestTextTypes:
    def test_ascii_text_gets_every_text_type(self):
        assert probe_types("hello") == TEXT

    def test_non_ascii_text_only_gets_unicode_types(self):
        assert probe_types("café") == set(T.UNICODE_TEXT_TYPES)

    @pytest.mark.parametrize("value", [None, "", "   "])
    def test_null_or_blank_has_no_opinion(self, value):
        assert probe_types(value) == set()


class TestNumbers:
    def test_small_integer_reports_full_ladder(self):
        types = probe_types("42")
        assert set(T.INTEGER_TYPES) <= types
        assert {T.DECIMAL, T.DOUBLE, T.FLOAT} <= types
        assert T.BOOLEAN not in types

    def test_integer_outside_tinyint(self):
        types = probe_types("200")
        assert T.TINYINT not in types
        assert {T.SMALLINT, T.INTEGER, T.BIGINT} <= types

    def test_integer_needing_32_bits(self):
        types = probe_types("-70000")
        assert types & set(T.INTEGER_TYPES) == {T.INTEGER, T.BIGINT}

    def test_integer_beyond_64_bits_is_only_decimal_like(self):
        types = probe_types("9223372036854775808")
        assert not types & set(T.INTEGER_TYPES)
        assert {T.DECIMAL, T.DOUBLE, T.FLOAT} <= types

    def test_fraction_is_floating_only(self):
        types = probe_types("-3.25")
        assert not types & set(T.INTEGER_TYPES)
        assert {T.DECIMAL, T.DOUBLE, T.FLOAT} <= types

    def test_value_beyond_single_precision(self):
        types = probe_types("1e39")
        assert {T.DECIMAL, T.DOUBLE} <= types
        assert T.FLOAT not in types

    def test_value_beyond_double_precision(self):
        types = probe_types("1e400")
        assert T.DECIMAL in types
        assert T.DOUBLE not in types
        assert T.FLOAT not in types

    @pytest.mark.parametrize("value", ["NaN", "Infinity", "1_000", "12abc", "1.2.3"])
    def test_not_numbers(self, value):
        assert not probe_types(value) & set(T.NUMERIC_TYPES)


class TestBoolean:
    @pytest.mark.parametrize("value", ["true", "FALSE", "yes", "No", "y", "t", "1", "0"])
    def test_default_lexicon(self, value):
        assert T.BOOLEAN in probe_types(value)

    def test_non_boolean(self):
        assert T.BOOLEAN not in probe_types("maybe")

    def test_custom_lexicon(self):
        lexicon = BooleanLexicon(true_tokens={"si"}, false_tokens={"no"})
        assert T.BOOLEAN in probe_types("SI", boolean_lexicon=lexicon)
        assert T.BOOLEAN not in probe_types("yes", boolean_lexicon=lexicon)


class TestBooleanLexicon:
    def test_tokens_keep_their_value(self):
        lexicon = BooleanLexicon(true_tokens={"On", "si"}, false_tokens={"off"})
        assert lexicon.parse(" ON ") is True
        assert lexicon.parse("si") is True
        assert lexicon.parse("OFF") is False
        assert lexicon.parse("maybe") is None

    def test_yaml_booleans_fold_to_text(self):
        lexicon = BooleanLexicon(true_tokens=[True], false_tokens=[False])
        assert lexicon.tokens == {"true", "false"}

    def test_token_on_both_sides(self):
        with pytest.raises(ConfigError):
            BooleanLexicon(true_tokens={"yes", "x"}, false_tokens={"X"})

    @pytest.mark.parametrize("true_tokens, false_tokens", [((), {"no"}), ({"yes"}, ())])
    def test_both_sides_required(self, true_tokens, false_tokens):
        with pytest.raises(ConfigError):
            BooleanLexicon(true_tokens=true_tokens, false_tokens=false_tokens)


class TestTemporal:
    @pytest.mark.parametrize("value", ["2024-01-15", "15-01-2024", "01/15/2024", "31/12/2024"])
    def test_dates(self, value):
        types = probe_types(value)
        assert T.DATE in types
        assert T.TIME not in types
        assert T.TIMESTAMP_WITH_TIMEZONE not in types

    def test_invalid_calendar_date(self):
        assert T.DATE not in probe_types("2024-02-30")

    @pytest.mark.parametrize("value", ["10:30", "23:59:59", "07:05:00.123"])
    def test_times(self, value):
        types = probe_types(value)
        assert T.TIME in types
        assert T.DATE not in types

    def test_out_of_range_time(self):
        assert T.TIME not in probe_types("25:00")

    @pytest.mark.parametrize(
        "value",
        [
            "2024-01-15T10:30:00Z",
            "2024-01-15 10:30:00",
            "2024-01-15T10:30:00.5+05:30",
            "2024-01-15 10:30-0400",
        ],
    )
    def test_timestamps(self, value):
        types = probe_types(value)
        assert T.TIMESTAMP_WITH_TIMEZONE in types
        assert T.DATE not in types

    def test_timestamp_offsets_are_kept(self):
        ts = parse_timestamp("2024-01-15T10:30:00+05:30")
        assert ts.utcoffset().total_seconds() == 5.5 * 3600

    def test_naive_timestamp_is_read_as_utc(self):
        ts = parse_timestamp("2024-01-15 10:30:00")
        assert ts.utcoffset().total_seconds() == 0

    def test_fractional_seconds(self):
        assert parse_time("07:05:00.5").microsecond == 500000
