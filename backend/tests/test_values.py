"""
Tests for graph value normalization
"""
from degree_planner.graph.values import MAX_SAFE_INTEGER, normalize_record, normalize_value


class FakeRecord:
    """Mapping-like record exposing items() the way driver records do"""

    def __init__(self, **values):
        self._values = values

    def items(self):
        return self._values.items()


def test_safe_integers_stay_numbers():
    assert normalize_value(42) == 42
    assert normalize_value(MAX_SAFE_INTEGER) == MAX_SAFE_INTEGER
    assert normalize_value(-MAX_SAFE_INTEGER) == -MAX_SAFE_INTEGER


def test_large_integers_become_strings():
    assert normalize_value(MAX_SAFE_INTEGER + 1) == str(MAX_SAFE_INTEGER + 1)
    assert normalize_value(-(MAX_SAFE_INTEGER + 1)) == str(-(MAX_SAFE_INTEGER + 1))


def test_booleans_are_not_treated_as_integers():
    assert normalize_value(True) is True


def test_nested_structures():
    value = {"codes": ("MAT1001", 2**60), "meta": {"count": 3}}
    assert normalize_value(value) == {
        "codes": ["MAT1001", str(2**60)],
        "meta": {"count": 3},
    }


def test_normalize_record_accepts_record_objects():
    record = FakeRecord(c={"course_code": "MAT1001"}, total=2**60)
    assert normalize_record(record) == {
        "c": {"course_code": "MAT1001"},
        "total": str(2**60),
    }
