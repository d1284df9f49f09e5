import argparse
import dataclasses
import json
import sys

from ingest_schema.execution.config import EngineConfig
from ingest_schema.governance.adapter_registry import AdapterRegistry
from ingest_schema.governance.schema_diff import diff_schemas
from ingest_schema.outputs.yaml_schema_exporter import YAMLSchemaExporter, load_table_schema
from ingest_schema.utils.exceptions import IngestSchemaError


class C:
    RESET = "\033[0m"
    BOLD = "\033[1m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"


def cprint(text: str, color: str = C.RESET, bold: bool = False):
    if not sys.stderr.isatty():
        print(text, file=sys.stderr)
        return
    prefix = (C.BOLD if bold else "") + color
    print(f"{prefix}{text}{C.RESET}", file=sys.stderr)


def _load_config(args: argparse.Namespace) -> EngineConfig:
    config = EngineConfig.from_yaml(args.config) if args.config else EngineConfig()

    overrides = {}
    if args.strategy:
        overrides["type_strategy"] = args.strategy
    if args.sample_size is not None:
        overrides["sample_size"] = args.sample_size
    if getattr(args, "case_insensitive", False):
        overrides["case_sensitive"] = False

    if not overrides:
        return config

    # replace() runs the same validation as loading
    return dataclasses.replace(config, **overrides)


def _infer(args: argparse.Namespace, config: EngineConfig):
    return AdapterRegistry.build(args.file, config, args.format).parse()


def run_infer(args: argparse.Namespace) -> int:
    config = _load_config(args)
    schema = _infer(args, config)
    exporter = YAMLSchemaExporter(schema)

    if args.output:
        exporter.export_to_file(args.output)
        cprint(f"[DONE] Schema written to: {args.output}", C.GREEN, bold=True)
    else:
        print(exporter.export_to_string())
    return 0


def run_diff(args: argparse.Namespace) -> int:
    config = _load_config(args)
    file_schema = _infer(args, config)
    table_schema = load_table_schema(args.table_schema)

    result = diff_schemas(file_schema, table_schema, config.matching_policy)
    print(json.dumps(result.to_dict(), indent=2))

    if result.no_difference:
        cprint("[MATCH] File matches the table schema", C.GREEN, bold=True)
        return 0
    if result.can_load:
        cprint("[DIFFERENT] Types differ but the data can be loaded", C.YELLOW, bold=True)
    else:
        cprint("[INCOMPATIBLE] File cannot be loaded into the table", C.RED, bold=True)
    return 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ingest-schema",
        description="Infer column types of a data file and reconcile them with a table schema",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    def add_common(p):
        p.add_argument("file", help="CSV or Parquet data file")
        p.add_argument("--config", help="Path to YAML engine config")
        p.add_argument("--format", help="Input format (default: from file extension)")
        p.add_argument("--strategy", choices=["WIDEST", "NARROWEST"], help="Type strategy")
        p.add_argument("--sample-size", type=int, help="Rows to sample")

    infer = sub.add_parser("infer", help="Print the inferred schema as YAML")
    add_common(infer)
    infer.add_argument("--output", help="Write YAML schema to this path")
    infer.set_defaults(handler=run_infer)

    diff = sub.add_parser("diff", help="Compare the inferred schema with a YAML table schema")
    add_common(diff)
    diff.add_argument("table_schema", help="YAML file describing the existing table")
    diff.add_argument("--case-insensitive", action="store_true", help="Match column names ignoring case")
    diff.set_defaults(handler=run_diff)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    try:
        return args.handler(args)
    except (IngestSchemaError, FileNotFoundError, ValueError) as e:
        cprint("[FAILED] " + str(e), C.RED, bold=True)
        return 2


if __name__ == "__main__":
    sys.exit(main())
