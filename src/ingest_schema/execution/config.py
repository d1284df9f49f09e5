import os
from dataclasses import dataclass, field
from typing import Dict, Optional

import yaml

from ingest_schema.canonical import types as T
from ingest_schema.governance.schema_diff import MatchingPolicy
from ingest_schema.inference.type_determiner import DeterminerRegistry, TypeStrategy
from ingest_schema.inference.type_probe import BooleanLexicon
from ingest_schema.utils.exceptions import ConfigError, UnsupportedTypeError


@dataclass
class EngineConfig:
    """
    Settings of one inference / reconciliation run.

    Example YAML:

        type_strategy: WIDEST
        column_strategies:
          code: NARROWEST
        column_types:
          created_at: TIMESTAMP_WITH_TIMEZONE
        case_sensitive: true
        sample_size: 100
        boolean_lexicon:
          true_tokens: ["true", "1", "si"]
          false_tokens: ["false", "0", "no"]
        csv:
          delimiter: ","
          encoding: utf-8
    """
    type_strategy: str = TypeStrategy.WIDEST
    column_strategies: Dict[str, str] = field(default_factory=dict)
    column_types: Dict[str, str] = field(default_factory=dict)
    case_sensitive: bool = True
    sample_size: int = 100
    boolean_lexicon: BooleanLexicon = field(default_factory=BooleanLexicon)
    csv_delimiter: Optional[str] = None
    csv_encoding: str = "utf-8-sig"

    def __post_init__(self):
        self.type_strategy = str(self.type_strategy).upper()
        if not TypeStrategy.is_valid(self.type_strategy):
            raise ConfigError(
                f"Invalid type_strategy '{self.type_strategy}'. "
                f"Allowed values: WIDEST, NARROWEST"
            )

        if not isinstance(self.case_sensitive, bool):
            raise ConfigError(
                f"case_sensitive must be true or false, got: {self.case_sensitive!r}"
            )

        if (
            isinstance(self.sample_size, bool)
            or not isinstance(self.sample_size, int)
            or self.sample_size <= 0
        ):
            raise ConfigError(
                f"sample_size must be a positive integer, got: {self.sample_size!r}"
            )

        if not isinstance(self.boolean_lexicon, BooleanLexicon):
            raise ConfigError("boolean_lexicon must be a BooleanLexicon")

        try:
            self.column_types = {
                str(column): T.normalize_type(type_name)
                for column, type_name in self.column_types.items()
            }
        except UnsupportedTypeError as e:
            raise ConfigError(f"Invalid column_types entry: {e}") from e

        # Fail early on unknown per-column strategies
        self.determiners()

    @property
    def matching_policy(self) -> str:
        if self.case_sensitive:
            return MatchingPolicy.CASE_SENSITIVE
        return MatchingPolicy.CASE_INSENSITIVE

    def determiners(self) -> DeterminerRegistry:
        return DeterminerRegistry(
            default_strategy=self.type_strategy,
            column_strategies=self.column_strategies,
        )

    # ------------------------------------------
    # Loading
    # ------------------------------------------
    @staticmethod
    def _mapping(cfg: Dict, key: str) -> Dict:
        value = cfg.get(key) or {}
        if not isinstance(value, dict):
            raise ConfigError(f"{key} must be a mapping")
        return value

    @classmethod
    def _lexicon_from_dict(cls, cfg: Dict) -> BooleanLexicon:
        lexicon = cls._mapping(cfg, "boolean_lexicon")
        if not lexicon:
            return BooleanLexicon()

        unknown = set(lexicon) - {"true_tokens", "false_tokens"}
        if unknown:
            raise ConfigError(
                f"boolean_lexicon accepts true_tokens and false_tokens, got: {sorted(unknown)}"
            )
        return BooleanLexicon(
            true_tokens=lexicon.get("true_tokens") or (),
            false_tokens=lexicon.get("false_tokens") or (),
        )

    @classmethod
    def from_dict(cls, cfg: Optional[Dict]) -> "EngineConfig":
        cfg = cfg or {}
        if not isinstance(cfg, dict):
            raise ConfigError("Configuration must be a mapping")

        csv_cfg = cls._mapping(cfg, "csv")
        column_strategies = cls._mapping(cfg, "column_strategies")
        column_types = cls._mapping(cfg, "column_types")

        return cls(
            type_strategy=cfg.get("type_strategy", TypeStrategy.WIDEST),
            column_strategies={str(k): str(v) for k, v in column_strategies.items()},
            column_types={str(k): str(v) for k, v in column_types.items()},
            case_sensitive=cfg.get("case_sensitive", True),
            sample_size=cfg.get("sample_size", 100),
            boolean_lexicon=cls._lexicon_from_dict(cfg),
            csv_delimiter=csv_cfg.get("delimiter"),
            csv_encoding=csv_cfg.get("encoding", "utf-8-sig"),
        )

    @classmethod
    def from_yaml(cls, config_path: str) -> "EngineConfig":
        if not os.path.exists(config_path):
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path, "r", encoding="utf-8") as f:
            try:
                return cls.from_dict(yaml.safe_load(f))
            except yaml.YAMLError as e:
                raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e
