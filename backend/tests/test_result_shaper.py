from datetime import date
from decimal import Decimal

from core.result_shaper import shape_rows, stringify


def test_empty_rows():
    assert shape_rows([]) == []


def test_rows_with_name_are_returned_unchanged():
    rows = [{"name": "A", "total": 1, "extra": "x"}, {"name": "B", "total": 2, "extra": "y"}]
    assert shape_rows(rows) is rows


def test_two_column_numeric_rows_become_name_value():
    rows = [{"category": "A", "total": 10}, {"category": "B", "total": 20}]
    assert shape_rows(rows) == [{"name": "A", "value": 10}, {"name": "B", "value": 20}]


def test_two_columns_with_non_numeric_second_field_keep_field_name():
    rows = [{"category": "A", "total": 10}, {"category": "B", "total": None}]
    assert shape_rows(rows) == [{"name": "A", "total": 10}, {"name": "B", "total": None}]


def test_booleans_are_not_treated_as_numeric():
    rows = [{"employee": "Ann", "active": True}]
    assert shape_rows(rows) == [{"name": "Ann", "active": True}]


def test_multi_column_rows_keep_remaining_fields_in_order():
    rows = [
        {"month": 1, "spend": 2.5, "revenue": 10},
        {"month": 2, "spend": 3.5, "revenue": 12},
    ]
    shaped = shape_rows(rows)
    assert shaped == [
        {"name": "1", "spend": 2.5, "revenue": 10},
        {"name": "2", "spend": 3.5, "revenue": 12},
    ]
    assert list(shaped[0].keys()) == ["name", "spend", "revenue"]


def test_decimal_counts_as_numeric():
    rows = [{"region": "EU", "total": Decimal("1.5")}]
    assert shape_rows(rows) == [{"name": "EU", "value": Decimal("1.5")}]


def test_stringify_is_stable():
    assert stringify(None) == "null"
    assert stringify(date(2024, 1, 31)) == "2024-01-31"
    assert stringify(3.0) == stringify(3.0) == "3.0"
