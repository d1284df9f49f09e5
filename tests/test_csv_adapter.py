"""Tests for CSV sampling and schema inference."""

import pytest

from ingest_schema.adapters.csv_adapter import CSVAdapter, detect_delimiter_from_lines
from ingest_schema.canonical import types as T
from ingest_schema.inference.type_determiner import DeterminerRegistry, TypeStrategy
from ingest_schema.inference.type_probe import BooleanLexicon
from ingest_schema.utils.exceptions import TypedValueError, UnsupportedTypeError

ORDERS_CSV = (
    "id,name,price,active,created\n"
    "1,Alice,9.99,true,2024-01-15\n"
    "2,Bob,12.5,false,2024-02-01\n"
    "3,,7,yes,2024-03-10\n"
)


@pytest.fixture
def orders_csv(tmp_path):
    path = tmp_path / "orders.csv"
    path.write_text(ORDERS_CSV, encoding="utf-8")
    return str(path)


def types_of(schema):
    return {c.name: c.data_type for c in schema.columns}


class TestInference:
    def test_widest(self, orders_csv):
        schema = CSVAdapter(orders_csv, delimiter=",").parse()

        assert schema.name == "orders"
        assert types_of(schema) == {
            "id": T.BIGINT,
            "name": T.CLOB,
            "price": T.DECIMAL,
            "active": T.BOOLEAN,
            "created": T.DATE,
        }
        assert schema.metadata["sampled_rows"] == 3

    def test_narrowest(self, orders_csv):
        registry = DeterminerRegistry(TypeStrategy.NARROWEST)
        schema = CSVAdapter(orders_csv, delimiter=",", determiners=registry).parse()

        assert types_of(schema) == {
            "id": T.TINYINT,
            "name": T.VARCHAR,
            "price": T.FLOAT,
            "active": T.BOOLEAN,
            "created": T.DATE,
        }

    def test_column_strategy_override(self, orders_csv):
        registry = DeterminerRegistry(TypeStrategy.WIDEST, {"id": TypeStrategy.NARROWEST})
        schema = CSVAdapter(orders_csv, delimiter=",", determiners=registry).parse()

        assert types_of(schema)["id"] == T.TINYINT
        assert types_of(schema)["price"] == T.DECIMAL

    def test_pinned_column_type(self, orders_csv):
        adapter = CSVAdapter(
            orders_csv, delimiter=",", column_types={"created": "timestamp_with_timezone"}
        )
        assert types_of(adapter.parse())["created"] == T.TIMESTAMP_WITH_TIMEZONE

    def test_modifiers(self, orders_csv):
        columns = {c.name: c for c in CSVAdapter(orders_csv, delimiter=",").parse().columns}

        assert columns["name"].type_modifier.nullable
        assert columns["name"].type_modifier.max_length == 5
        assert not columns["id"].type_modifier.nullable
        assert columns["price"].type_modifier.scale == 2

    def test_sniffed_delimiter(self, tmp_path):
        path = tmp_path / "data.csv"
        path.write_text("a;b\n1;x\n2;y\n", encoding="utf-8")

        schema = CSVAdapter(str(path)).parse()
        assert schema.metadata["delimiter"] == ";"
        assert [c.name for c in schema.columns] == ["a", "b"]

    def test_tab_delimiter_escape(self, tmp_path):
        path = tmp_path / "data.tsv"
        path.write_text("a\tb\n1\t2\n", encoding="utf-8")

        schema = CSVAdapter(str(path), delimiter="\\t").parse()
        assert [c.name for c in schema.columns] == ["a", "b"]


class TestSampling:
    def test_sample_size_limits_rows(self, tmp_path):
        path = tmp_path / "big.csv"
        rows = "\n".join(str(i) for i in range(10))
        path.write_text("n\n" + rows + "\nnot-a-number\n", encoding="utf-8")

        schema = CSVAdapter(str(path), sample_size=5).parse()
        assert schema.metadata["sampled_rows"] == 5
        assert schema.columns[0].data_type == T.BIGINT

    def test_comments_and_blank_lines_skipped(self, tmp_path):
        path = tmp_path / "notes.csv"
        path.write_text("# exported\nn,m\n\n-- note\n1,2\n", encoding="utf-8")

        schema = CSVAdapter(str(path), delimiter=",").parse()
        assert schema.metadata["sampled_rows"] == 1

    def test_all_null_column(self, tmp_path):
        path = tmp_path / "nulls.csv"
        path.write_text("a,b\n1,\n2,\n", encoding="utf-8")

        column = CSVAdapter(str(path), delimiter=",").parse().columns[1]
        assert column.data_type == T.CLOB
        assert column.type_modifier.nullable

    def test_invalid_sample_size(self, orders_csv):
        with pytest.raises(ValueError):
            CSVAdapter(orders_csv, sample_size=0)


class TestHeaderAndFormat:
    def test_empty_header_names_repaired(self, tmp_path):
        path = tmp_path / "events.csv"
        path.write_text(",b,\n1,2,3\n", encoding="utf-8")

        schema = CSVAdapter(str(path), delimiter=",").parse()
        assert [c.name for c in schema.columns] == ["events_1", "b", "events_3"]

    def test_entity_name(self, orders_csv):
        assert CSVAdapter(orders_csv, entity_name="sales", delimiter=",").parse().name == "sales"

    def test_row_width_mismatch(self, tmp_path):
        path = tmp_path / "broken.csv"
        path.write_text("a,b\n1,2\n3\n", encoding="utf-8")

        with pytest.raises(ValueError, match="line 3"):
            CSVAdapter(str(path), delimiter=",").parse()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "empty.csv"
        path.write_text("\n# nothing\n", encoding="utf-8")

        with pytest.raises(ValueError):
            CSVAdapter(str(path)).parse()


class TestDelimiterDetection:
    def test_semicolon(self):
        lines = ["a;b;c\n", "1;2;3\n", "4;5;6\n"]
        assert detect_delimiter_from_lines(lines) == ";"

    def test_pipe(self):
        lines = ["a|b\n", "1|2\n"]
        assert detect_delimiter_from_lines(lines) == "|"


class TestPinnedTypes:
    def test_pinned_type_skips_determiner(self, orders_csv):
        registry = DeterminerRegistry(TypeStrategy.NARROWEST)
        schema = CSVAdapter(
            orders_csv, delimiter=",", determiners=registry, column_types={"id": "varchar"}
        ).parse()

        assert types_of(schema)["id"] == T.VARCHAR
        assert types_of(schema)["price"] == T.FLOAT

    def test_cell_not_fitting_pinned_type(self, orders_csv):
        adapter = CSVAdapter(orders_csv, delimiter=",", column_types={"name": "INTEGER"})

        with pytest.raises(TypedValueError, match="line 2"):
            adapter.parse()

    def test_blank_cells_fit_any_pinned_type(self, tmp_path):
        path = tmp_path / "gaps.csv"
        path.write_text("n,d\n1,2024-01-15\n2,\n", encoding="utf-8")

        schema = CSVAdapter(str(path), delimiter=",", column_types={"d": "DATE"}).parse()
        assert schema.columns[1].data_type == T.DATE

    def test_pinned_boolean_uses_lexicon(self, tmp_path):
        path = tmp_path / "flags.csv"
        path.write_text("active\nsi\nno\n", encoding="utf-8")
        lexicon = BooleanLexicon(true_tokens={"si"}, false_tokens={"no"})

        schema = CSVAdapter(
            str(path), boolean_lexicon=lexicon, column_types={"active": "BOOLEAN"}
        ).parse()
        assert schema.columns[0].data_type == T.BOOLEAN

        with pytest.raises(TypedValueError):
            CSVAdapter(str(path), column_types={"active": "BOOLEAN"}).parse()

    def test_unknown_pinned_type(self, orders_csv):
        with pytest.raises(UnsupportedTypeError):
            CSVAdapter(orders_csv, column_types={"id": "GEOMETRY"})
