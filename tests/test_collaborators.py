"""
Tests for the default meta query and date query compilers.
"""

from comment_query.collaborators import DateQueryCompiler, MetaQueryCompiler, parse_date


# -----------------------------------------------------------------------------
# META QUERIES
# -----------------------------------------------------------------------------


def test_meta_value_list_defaults_to_in():
    node = MetaQueryCompiler().compile([{"key": "color", "value": ["red", "blue"]}])

    assert node == {"bool": {"must": [{"terms": {"meta.color.raw": ["red", "blue"]}}]}}


def test_meta_key_without_value_is_exists():
    node = MetaQueryCompiler().compile([{"key": "color"}])

    assert node == {"bool": {"must": [{"exists": {"field": "meta.color"}}]}}


def test_meta_not_exists_and_like():
    node = MetaQueryCompiler().compile(
        [
            {"key": "flag", "compare": "NOT EXISTS"},
            {"key": "note", "value": "thanks", "compare": "like"},
        ],
        relation="or",
    )

    assert node == {
        "bool": {
            "should": [
                {"bool": {"must_not": [{"exists": {"field": "meta.flag"}}]}},
                {"match_phrase": {"meta.note.value": "thanks"}},
            ]
        }
    }


def test_meta_between_numeric_uses_double():
    node = MetaQueryCompiler().compile([{"key": "score", "value": [1, 5], "compare": "BETWEEN"}])

    assert node == {"bool": {"must": [{"range": {"meta.score.double": {"gte": 1, "lte": 5}}}]}}


def test_meta_not_equal():
    node = MetaQueryCompiler().compile([{"key": "color", "value": "red", "compare": "!="}])

    assert node == {"bool": {"must": [{"bool": {"must_not": [{"term": {"meta.color.raw": "red"}}]}}]}}


def test_meta_nested_group_keeps_its_relation():
    node = MetaQueryCompiler().compile(
        [
            {"key": "a"},
            {"relation": "OR", "0": {"key": "b", "value": "x"}, "1": {"key": "c", "value": "y"}},
        ]
    )

    assert node == {
        "bool": {
            "must": [
                {"exists": {"field": "meta.a"}},
                {"bool": {"should": [{"term": {"meta.b.raw": "x"}}, {"term": {"meta.c.raw": "y"}}]}},
            ]
        }
    }


def test_meta_nothing_to_compile_is_none():
    assert MetaQueryCompiler().compile([]) is None
    assert MetaQueryCompiler().compile([{"key": "x", "compare": ">"}]) is None
    assert MetaQueryCompiler().compile(["loose string"]) is None


# -----------------------------------------------------------------------------
# DATE QUERIES
# -----------------------------------------------------------------------------


def test_parse_date_formats():
    assert parse_date("2024-02-03").day == 3
    assert parse_date("2024-02-03 04:05:06").second == 6
    assert parse_date("not a date") is None


def test_after_year_defaults_to_end_of_year():
    result = DateQueryCompiler().compile([{"after": {"year": 2023}}])

    assert result == {"and": {"bool": {"must": [{"range": {"comment_date": {"gt": "2023-12-31 23:59:59"}}}]}}}


def test_before_month_defaults_to_start_of_month():
    result = DateQueryCompiler().compile({"before": {"year": 2023, "month": 2}})

    assert result["and"]["bool"]["must"][0] == {"range": {"comment_date": {"lt": "2023-02-01 00:00:00"}}}


def test_inclusive_before_runs_to_end_of_month():
    result = DateQueryCompiler().compile({"before": {"year": 2024, "month": 2}, "inclusive": True})

    assert result["and"]["bool"]["must"][0] == {"range": {"comment_date": {"lte": "2024-02-29 23:59:59"}}}


def test_exact_month_period():
    result = DateQueryCompiler().compile([{"year": 2024, "month": 2}])

    assert result["and"]["bool"]["must"][0] == {
        "range": {"comment_date": {"gte": "2024-02-01 00:00:00", "lte": "2024-02-29 23:59:59"}}
    }


def test_column_override():
    result = DateQueryCompiler().compile({"column": "comment_date_gmt", "0": {"after": "2024-01-01"}})

    assert result["and"]["bool"]["must"][0] == {"range": {"comment_date_gmt": {"gt": "2024-01-01 00:00:00"}}}


def test_or_relation():
    result = DateQueryCompiler().compile(
        {"relation": "OR", "0": {"year": 2020}, "1": {"year": 2022}}
    )

    assert list(result) == ["or"]
    assert len(result["or"]["bool"]["should"]) == 2


def test_unusable_clauses_compile_to_empty():
    assert DateQueryCompiler().compile([{"year": 0}]) == {}
    assert DateQueryCompiler().compile([{"after": "someday"}]) == {}
    assert DateQueryCompiler().compile(None) == {}
