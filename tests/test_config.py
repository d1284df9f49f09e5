"""Tests for engine configuration loading."""

import dataclasses

import pytest

from ingest_schema.execution.config import EngineConfig
from ingest_schema.governance.schema_diff import MatchingPolicy
from ingest_schema.inference.type_determiner import NarrowestTypeDeterminer, WidestTypeDeterminer
from ingest_schema.utils.exceptions import ConfigError


class TestEngineConfig:
    def test_defaults(self):
        config = EngineConfig()
        assert config.type_strategy == "WIDEST"
        assert config.sample_size == 100
        assert config.matching_policy == MatchingPolicy.CASE_SENSITIVE
        assert "yes" in config.boolean_lexicon

    def test_from_dict(self):
        config = EngineConfig.from_dict({
            "type_strategy": "narrowest",
            "column_strategies": {"total": "WIDEST"},
            "case_sensitive": False,
            "sample_size": 20,
            "csv": {"delimiter": ";", "encoding": "latin-1"},
        })

        assert config.type_strategy == "NARROWEST"
        assert config.matching_policy == MatchingPolicy.CASE_INSENSITIVE
        assert config.csv_delimiter == ";"
        assert config.csv_encoding == "latin-1"

        registry = config.determiners()
        assert isinstance(registry.get_determiner("total"), WidestTypeDeterminer)
        assert isinstance(registry.get_determiner("other"), NarrowestTypeDeterminer)

    def test_column_types_are_normalized(self):
        config = EngineConfig.from_dict({"column_types": {"created": " date ", 7: "varchar"}})
        assert config.column_types == {"created": "DATE", "7": "VARCHAR"}

    def test_replace_is_validated(self):
        with pytest.raises(ConfigError):
            dataclasses.replace(EngineConfig(), sample_size=0)

    def test_empty_mapping_gives_defaults(self):
        assert EngineConfig.from_dict(None) == EngineConfig()

    @pytest.mark.parametrize(
        "cfg",
        [
            {"type_strategy": "BIGGEST"},
            {"sample_size": 0},
            {"sample_size": "ten"},
            {"column_strategies": {"a": "SMALLEST"}},
            {"column_strategies": ["a"]},
            {"boolean_lexicon": ["yes", "no"]},
            {"boolean_lexicon": {"true_tokens": ["yes"]}},
            {"boolean_lexicon": {"yes": ["a"], "no": ["b"]}},
            {"boolean_lexicon": {"true_tokens": ["x"], "false_tokens": ["X"]}},
            {"case_sensitive": "false"},
            {"sample_size": True},
            {"column_types": {"a": "GEOMETRY"}},
            {"column_types": ["a"]},
            ["not", "a", "mapping"],
        ],
    )
    def test_invalid(self, cfg):
        with pytest.raises(ConfigError):
            EngineConfig.from_dict(cfg)


class TestYamlConfig:
    def test_from_yaml(self, tmp_path):
        path = tmp_path / "engine.yaml"
        path.write_text(
            "type_strategy: NARROWEST\n"
            "sample_size: 50\n"
            "column_types:\n"
            "  created: date\n"
            "boolean_lexicon:\n"
            "  true_tokens: [yes, Oui]\n"
            "  false_tokens: [no, Non]\n",
            encoding="utf-8",
        )

        config = EngineConfig.from_yaml(str(path))
        assert config.sample_size == 50
        assert config.column_types == {"created": "DATE"}
        # bare yes / no are read by YAML as booleans and folded back to text
        assert config.boolean_lexicon.true_tokens == {"true", "oui"}
        assert config.boolean_lexicon.false_tokens == {"false", "non"}
        assert config.boolean_lexicon.parse("NON") is False

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EngineConfig.from_yaml(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("type_strategy: [WIDEST\n", encoding="utf-8")
        with pytest.raises(ConfigError):
            EngineConfig.from_yaml(str(path))
