"""
Tests for FilterRequest and the value coercion helpers.
"""

import pytest

from comment_query.request import (
    FilterRequest,
    as_list,
    is_empty,
    is_exact_zero,
    is_numeric,
    parse_list,
    split_csv,
    to_int,
)


@pytest.mark.parametrize("value", [None, False, "", "0", 0, 0.0, [], {}, (), set()])
def test_empty_values(value):
    assert is_empty(value)


@pytest.mark.parametrize("value", ["0.0", " ", "a", 1, -1, 0.5, True, [0], {"a": None}])
def test_non_empty_values(value):
    assert not is_empty(value)


def test_exact_zero_only_matches_int_zero():
    assert is_exact_zero(0)
    assert not is_exact_zero("0")
    assert not is_exact_zero(0.0)
    assert not is_exact_zero(False)


@pytest.mark.parametrize(
    "value, expected",
    [
        (7, 7),
        ("12", 12),
        (" -4 ", -4),
        ("12abc", 12),
        ("3.7", 3),
        ("1e3", 1000),
        (2.9, 2),
        (True, 1),
        ("abc", 0),
        (None, 0),
        (float("nan"), 0),
    ],
)
def test_to_int(value, expected):
    assert to_int(value) == expected


@pytest.mark.parametrize("value", ["1" * 5000, " -" + "9" * 5000, "7" * 5000 + "abc", "3" * 5000 + ".5"])
def test_to_int_oversized_digit_strings_are_zero(value):
    assert to_int(value) == 0


def test_is_numeric():
    assert is_numeric("3")
    assert is_numeric("-2.5")
    assert is_numeric(4)
    assert not is_numeric("a@example.com")
    assert not is_numeric(True)
    assert not is_numeric(None)


def test_as_list():
    assert as_list(None) == []
    assert as_list("a") == ["a"]
    assert as_list((1, 2)) == [1, 2]
    assert as_list({"x": 1, "y": 2}) == [1, 2]


def test_split_csv_trims_entries():
    assert split_csv(" publish , draft") == ["publish", "draft"]
    assert split_csv(["a ", " b"]) == ["a", "b"]


def test_parse_list_splits_on_commas_and_whitespace():
    assert parse_list("3, a@example.com  7") == ["3", "a@example.com", "7"]
    assert parse_list([3, "x"]) == [3, "x"]


def test_filter_request_is_read_only_copy():
    params = {"post_id": 1}
    request = FilterRequest(params)
    params["post_id"] = 2

    assert request["post_id"] == 1
    with pytest.raises(TypeError):
        request._data["post_id"] = 3


def test_filter_request_aliases():
    assert FilterRequest({"page": 2})["paged"] == 2
    assert FilterRequest({"order_by": "comment_ID"})["orderby"] == "comment_ID"


def test_canonical_name_wins_over_alias():
    request = FilterRequest({"page": 2, "paged": 3})

    assert request["paged"] == 3
    assert "page" not in request


def test_is_set_and_is_empty():
    request = FilterRequest({"offset": 0, "number": None})

    assert request.is_set("offset")
    assert request.is_empty("offset")
    assert not request.is_set("number")
    assert request.is_empty("missing")


def test_with_params_returns_new_request():
    request = FilterRequest(status="approve")
    updated = request.with_params(status="hold")

    assert request["status"] == "approve"
    assert updated["status"] == "hold"


def test_coerce_keeps_existing_instance():
    request = FilterRequest({"a": 1})

    assert FilterRequest.coerce(request) is request
    assert FilterRequest.coerce(None) == {}
