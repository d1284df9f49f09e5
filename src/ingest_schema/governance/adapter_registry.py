import os

from ingest_schema.adapters.csv_adapter import CSVAdapter
from ingest_schema.adapters.parquet_adapter import ParquetAdapter
from ingest_schema.execution.config import EngineConfig


class AdapterRegistry:
    """
    Maps input formats to adapter implementations.
    """

    _REGISTRY = {
        "CSV": CSVAdapter,
        "TSV": CSVAdapter,
        "TXT": CSVAdapter,
        "PARQUET": ParquetAdapter,
    }

    @classmethod
    def get_adapter(cls, format_name: str):
        if not format_name:
            raise ValueError("Format name must not be empty")

        key = format_name.upper()

        if key not in cls._REGISTRY:
            raise ValueError(
                f"No adapter registered for format: {format_name}"
            )

        return cls._REGISTRY[key]

    @classmethod
    def detect_format(cls, file_path: str) -> str:
        return os.path.splitext(file_path)[1].lstrip(".").upper()

    @classmethod
    def build(cls, file_path: str, config: EngineConfig, format_name: str = None):
        """
        Instantiate the adapter for a file with the run configuration.
        """
        adapter_cls = cls.get_adapter(format_name or cls.detect_format(file_path))

        if adapter_cls is CSVAdapter:
            return CSVAdapter(
                file_path,
                sample_size=config.sample_size,
                determiners=config.determiners(),
                delimiter=config.csv_delimiter,
                encoding=config.csv_encoding,
                boolean_lexicon=config.boolean_lexicon,
                column_types=config.column_types,
            )

        return adapter_cls(
            file_path,
            sample_size=config.sample_size,
            determiners=config.determiners(),
            boolean_lexicon=config.boolean_lexicon,
            column_types=config.column_types,
        )
