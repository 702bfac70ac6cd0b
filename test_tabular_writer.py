"""
Tests for TabularWriter: lifecycle, schema inference, filtering, ids and DDL.
"""
import json
import uuid
from decimal import Decimal

import pytest

from persist_tabular.export import (
    CellSerializationError,
    ExplicitColumnDefn,
    ExportValidationError,
    InvalidColumnNameError,
    InvalidNamespaceError,
    PersistPropsTransformContext,
    SQL_INTEGER,
    TabularIoError,
    TabularWriter,
    WriterClosedError,
    compose_transforms,
    create_id,
    derive_namespace,
    read_tabular,
    split_delimited,
    split_records,
    validate_tabular_export,
)


PARENT_NAMESPACE = "6ba7b811-9dad-11d1-80b4-00c04fd430c8"


def _ctx(persist, source=None):
    return PersistPropsTransformContext(persist=persist, source=source)


def _writer(tmp_path, file_name="customers.csv", **kwargs):
    return TabularWriter(tmp_path, file_name, PARENT_NAMESPACE, **kwargs)


# =============================================================================
# END-TO-END SCENARIO
# =============================================================================

def test_inferred_schema_scenario(tmp_path):
    """First row fixes columns and types; id cells are unquoted."""
    with _writer(tmp_path) as writer:
        assert writer.write(_ctx({"id": "1", "name": "a", "amount": 10}))
        assert writer.write(_ctx({"id": "2", "name": "b", "amount": 10.5}))

    content = (tmp_path / "customers.csv").read_text(encoding="utf-8")
    assert content == 'id,name,amount\n1,"a",10\n2,"b",10.5'

    # amount is pinned by the first row's value (10), not the later 10.5
    amount = writer.schema[2]
    assert amount.sql_type == SQL_INTEGER
    assert writer.sql_ddl_create_table() == (
        "CREATE TABLE customers (\n"
        "    id INTEGER,\n"
        "    name VARCHAR(8192),\n"
        "    amount INTEGER,\n"
        "    PRIMARY KEY(id)\n"
        ");"
    )


def test_no_rows_leaves_file_empty(tmp_path):
    writer = _writer(tmp_path)
    writer.close()
    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == ""
    assert writer.schema == []
    assert writer.sql_ddl_create_table() == "CREATE TABLE customers (\n);"


def test_construction_truncates_existing_file(tmp_path):
    (tmp_path / "customers.csv").write_text("stale content", encoding="utf-8")
    _writer(tmp_path).close()
    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == ""


# =============================================================================
# SCHEMA ORDER AND SHAPE
# =============================================================================

def test_header_order_follows_first_row(tmp_path):
    with _writer(tmp_path) as writer:
        writer.write(_ctx({"b": 1, "a": 2}))
        writer.write(_ctx({"a": 3, "c": 4, "b": 5}))

    lines = (tmp_path / "customers.csv").read_text(encoding="utf-8").split("\n")
    assert lines == ["b,a", "1,2", "5,3"]


def test_missing_keys_render_empty(tmp_path):
    with _writer(tmp_path) as writer:
        writer.write(_ctx({"id": "1", "name": "a"}))
        writer.write(_ctx({"note": "x"}))

    lines = (tmp_path / "customers.csv").read_text(encoding="utf-8").split("\n")
    assert lines[2] == ","


def test_guess_schema_only_populates_once(tmp_path):
    with _writer(tmp_path) as writer:
        writer.guess_schema({"x": 1})
        writer.guess_schema({"y": 2, "z": 3})
        assert [c.name for c in writer.schema] == ["x"]
        writer.write(_ctx({"y": 2, "x": 9}))

    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == "x\n9"


def test_explicit_schema_is_not_replaced(tmp_path):
    schema = [ExplicitColumnDefn("id", "VARCHAR(36)", primary_key=True), ExplicitColumnDefn("total", "DECIMAL(16,2)")]
    with _writer(tmp_path, schema=schema) as writer:
        writer.write(_ctx({"total": 5, "id": "k1", "ignored": True}))

    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == "id,total\nk1,5"
    assert writer.sql_ddl_create_table("orders") == (
        "CREATE TABLE orders (\n"
        "    id VARCHAR(36),\n"
        "    total DECIMAL(16,2),\n"
        "    PRIMARY KEY(id)\n"
        ");"
    )


def test_ddl_available_before_rows_with_explicit_schema(tmp_path):
    with _writer(tmp_path, schema=[ExplicitColumnDefn("id", "INTEGER", primary_key=True)]) as writer:
        assert "PRIMARY KEY(id)" in writer.sql_ddl_create_table()


# =============================================================================
# TRANSFORMS AND FILTERING
# =============================================================================

def test_filtered_row_writes_nothing(tmp_path):
    writer = _writer(tmp_path, pp_transform=lambda ctx, persist: None)
    assert writer.write(_ctx({"id": "1"})) is False
    assert writer.row_index == 0
    assert writer.schema == []
    writer.close()
    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == ""


def test_header_waits_for_first_accepted_row(tmp_path):
    def skip_drafts(ctx, persist):
        return None if ctx.source == "draft" else persist

    with _writer(tmp_path, pp_transform=skip_drafts) as writer:
        assert not writer.write(_ctx({"draft_col": 1}, source="draft"))
        assert writer.write(_ctx({"id": "7", "name": "x"}, source="final"))
        assert writer.row_index == 1

    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == 'id,name\n7,"x"'


def test_write_all_counts_accepted_rows(tmp_path):
    def only_even(ctx, persist):
        return persist if persist["n"] % 2 == 0 else None

    with _writer(tmp_path, pp_transform=only_even) as writer:
        accepted = writer.write_all(_ctx({"n": n}) for n in range(5))

    assert accepted == 3
    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == "n\n0\n2\n4"


def test_transform_can_replace_projection(tmp_path):
    def upper_names(ctx, persist):
        return {**persist, "name": persist["name"].upper()}

    with _writer(tmp_path, pp_transform=upper_names) as writer:
        writer.write(_ctx({"name": "ann"}))

    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == 'name\n"ANN"'


def test_object_transform_with_flow(tmp_path):
    class DropEmpty:
        def flow(self, ctx, persist):
            return {k: v for k, v in persist.items() if v is not None}

    with _writer(tmp_path, pp_transform=DropEmpty()) as writer:
        assert writer.write(_ctx({"a": 1, "b": None}))
        assert not writer.write(_ctx({"a": None}))

    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == "a\n1"


def test_compose_transforms_stops_at_rejection():
    calls = []

    def tag(ctx, persist):
        calls.append("tag")
        return {**persist, "tagged": True}

    def reject_negative(ctx, persist):
        calls.append("reject")
        return None if persist["n"] < 0 else persist

    def never(ctx, persist):
        calls.append("never")
        return persist

    pipeline = compose_transforms(tag, reject_negative, never)
    assert pipeline(_ctx({"n": 1}), {"n": 1}) == {"n": 1, "tagged": True}
    calls.clear()
    assert pipeline(_ctx({"n": -1}), {"n": -1}) is None
    assert calls == ["tag", "reject"]


# =============================================================================
# ESCAPING AND ROUND TRIP
# =============================================================================

def test_round_trip_with_delimiters_in_values(tmp_path):
    rows = [
        {"id": "a1", "customer_id": "c9", "name": 'Smith, "Jo"\nline two', "amount": 1.25, "active": True},
        {"id": "a2", "customer_id": "c10", "name": "back\\slash", "amount": 3, "active": None},
    ]
    with _writer(tmp_path) as writer:
        for row in rows:
            writer.write(_ctx(row))

    content = (tmp_path / "customers.csv").read_text(encoding="utf-8")
    assert content.count("\n") == 2, "Each row must occupy exactly one line"

    header, decoded = read_tabular(tmp_path / "customers.csv")
    assert header == ["id", "customer_id", "name", "amount", "active"]
    assert decoded == rows
    assert validate_tabular_export(tmp_path / "customers.csv", expected_rows=2)


def test_custom_delimiters(tmp_path):
    with _writer(tmp_path, file_name="data.psv", column_delim="|", record_delim="\r\n") as writer:
        writer.write(_ctx({"id": "1", "label": "a|b"}))
        writer.write(_ctx({"id": "2", "label": "c"}))

    assert (tmp_path / "data.psv").read_bytes() == b'id|label\r\n1|"a|b"\r\n2|"c"'
    _, rows = read_tabular(tmp_path / "data.psv", column_delim="|", record_delim="\r\n")
    assert rows == [{"id": "1", "label": "a|b"}, {"id": "2", "label": "c"}]


def test_record_delimiter_inside_string_value(tmp_path):
    with _writer(tmp_path, file_name="data.txt", column_delim="|", record_delim=";") as writer:
        writer.write(_ctx({"id": "1", "label": "a;b"}))
        writer.write(_ctx({"id": "2", "label": ";|;"}))

    assert (tmp_path / "data.txt").read_text(encoding="utf-8") == 'id|label;1|"a;b";2|";|;"'
    _, rows = read_tabular(tmp_path / "data.txt", column_delim="|", record_delim=";")
    assert rows == [{"id": "1", "label": "a;b"}, {"id": "2", "label": ";|;"}]


def test_split_records_is_quote_aware():
    assert split_records('a,b\n"x\n",1', ",", "\n") == [["a", "b"], ['"x\n"', "1"]]


def test_round_trip_lists_dicts_and_decimals(tmp_path):
    row = {
        "id": "1",
        "tags": ["x", "y"],
        "meta": {"a": 1, "b": 2},
        "amount": Decimal("12345678901234567.89"),
    }
    with _writer(tmp_path) as writer:
        writer.write(_ctx(row))

    header, rows = read_tabular(tmp_path / "customers.csv")
    assert header == ["id", "tags", "meta", "amount"]
    decoded = rows[0]
    assert decoded["id"] == "1"
    assert json.loads(decoded["tags"]) == ["x", "y"]
    assert json.loads(decoded["meta"]) == {"a": 1, "b": 2}
    assert decoded["amount"] == Decimal("12345678901234567.89")


def test_split_delimited_respects_strings():
    assert split_delimited('1,"a,\\"b",2') == ["1", '"a,\\"b"', "2"]
    with pytest.raises(ExportValidationError):
        split_delimited('1,"open')


def test_validate_row_count_mismatch(tmp_path):
    with _writer(tmp_path) as writer:
        writer.write(_ctx({"id": "1"}))
    with pytest.raises(ExportValidationError):
        validate_tabular_export(tmp_path / "customers.csv", expected_rows=3)


# =============================================================================
# ERRORS
# =============================================================================

def test_unopenable_destination_raises_io_error(tmp_path):
    with pytest.raises(TabularIoError):
        TabularWriter(tmp_path / "missing" / "dir", "out.csv", PARENT_NAMESPACE)


def test_invalid_parent_namespace(tmp_path):
    with pytest.raises(InvalidNamespaceError):
        TabularWriter(tmp_path, "out.csv", "not-a-uuid")


@pytest.mark.parametrize("kwargs", [
    {"column_delim": ""},
    {"column_delim": ",", "record_delim": ","},
    {"column_delim": '"'},
    {"file_name": "../escape.csv"},
])
def test_invalid_options_rejected(tmp_path, kwargs):
    options = {"file_name": "out.csv", **kwargs}
    with pytest.raises(ValueError):
        TabularWriter(tmp_path, parent_namespace=PARENT_NAMESPACE, **options)


def test_unserializable_cell_writes_nothing(tmp_path):
    with _writer(tmp_path) as writer:
        with pytest.raises(CellSerializationError):
            writer.write(_ctx({"id": "1", "payload": object()}))
        assert writer.row_index == 0
        assert writer.write(_ctx({"id": "2", "payload": "ok"}))

    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == 'id,payload\n2,"ok"'


@pytest.mark.parametrize("bad_key", ["a,b", "line\nbreak", 'say "hi"', ""])
def test_guessed_header_with_delimiter_rejected(tmp_path, bad_key):
    with _writer(tmp_path) as writer:
        with pytest.raises(InvalidColumnNameError):
            writer.write(_ctx({"id": "1", bad_key: 2}))
        assert writer.schema == []
        assert writer.row_index == 0

    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == ""


def test_explicit_header_with_delimiter_rejected(tmp_path):
    with pytest.raises(InvalidColumnNameError):
        _writer(tmp_path, file_name="data.psv", column_delim="|",
                schema=[ExplicitColumnDefn("a|b")])


def test_close_is_idempotent_and_final(tmp_path):
    writer = _writer(tmp_path)
    writer.write(_ctx({"id": "1"}))
    writer.close()
    writer.close()
    assert writer.closed
    with pytest.raises(WriterClosedError):
        writer.write(_ctx({"id": "2"}))
    assert (tmp_path / "customers.csv").read_text(encoding="utf-8") == "id\n1"


# =============================================================================
# IDS
# =============================================================================

def test_create_id_is_deterministic(tmp_path):
    other_dir = tmp_path / "other"
    other_dir.mkdir()
    first = _writer(tmp_path, file_name="a.csv")
    second = _writer(other_dir, file_name="a.csv")
    try:
        assert first.create_id("row-1") == second.create_id("row-1")
        assert first.create_id("row-1") != first.create_id("row-2")
    finally:
        first.close()
        second.close()


def test_create_id_matches_hierarchical_uuid5(tmp_path):
    with _writer(tmp_path, file_name="a.csv") as writer:
        expected = uuid.uuid5(uuid.uuid5(uuid.UUID(PARENT_NAMESPACE), "a.csv"), "row-1")
        assert writer.pk_namespace == derive_namespace("a.csv", PARENT_NAMESPACE)
        assert writer.create_id("row-1") == str(expected)
        assert create_id("row-1", writer.pk_namespace) == str(expected)


def test_ids_differ_per_file(tmp_path):
    with _writer(tmp_path, file_name="a.csv") as a, _writer(tmp_path, file_name="b.csv") as b:
        assert a.create_id("row-1") != b.create_id("row-1")
