"""
Tests for sort alias resolution.
"""

import pytest

from comment_query.sorting import SORT_FIELD_ALIASES, SortClause, parse_order, resolve_sort


@pytest.mark.parametrize("order, expected", [("asc", "asc"), ("ASC", "asc"), ("Asc", "asc"), ("desc", "desc"), ("", "desc"), (None, "desc"), (1, "desc"), ("up", "desc")])
def test_parse_order(order, expected):
    assert parse_order(order) == expected


@pytest.mark.parametrize(
    "alias, field",
    [
        ("comment_agent", "comment_agent.raw"),
        ("comment_approved", "comment_approved.raw"),
        ("comment_author", "comment_author.raw"),
        ("comment_author_email", "comment_author_email.raw"),
        ("comment_author_IP", "comment_author_IP.raw"),
        ("comment_author_url", "comment_author_url.raw"),
        ("comment_content", "comment_content.raw"),
        ("comment_type", "comment_type.raw"),
        ("comment_date", "comment_date"),
        ("comment_date_gmt", "comment_date_gmt"),
        ("comment_ID", "comment_ID"),
        ("comment_karma", "comment_karma"),
        ("comment_parent", "comment_parent"),
        ("comment_post_ID", "comment_post_ID"),
        ("user_id", "user_id"),
    ],
)
def test_every_alias_resolves_to_its_field(alias, field):
    assert resolve_sort(alias, "desc") == [SortClause(field, "desc")]


def test_alias_table_is_fully_covered():
    assert len(SORT_FIELD_ALIASES) == 15


def test_analyzed_field_sorts_on_raw():
    assert resolve_sort("comment_content", "asc") == [SortClause("comment_content.raw", "asc")]


def test_native_field_sorts_directly():
    assert resolve_sort("comment_karma", "desc") == [SortClause("comment_karma", "desc")]


def test_unknown_alias_is_literal_field():
    assert resolve_sort("custom.path", "asc") == [SortClause("custom.path", "asc")]


def test_empty_orderby_has_no_sort():
    assert resolve_sort("", "desc") == []
    assert resolve_sort(None, "desc") == []


def test_meta_value_uses_value_sub_field():
    clauses = resolve_sort("meta_value", "asc", {"meta_key": "mood"})

    assert clauses == [SortClause("meta.mood.value", "asc")]


def test_meta_alias_needs_meta_key():
    assert resolve_sort("meta_value_num", "asc", {}) == []
    assert resolve_sort("meta_value_num", "asc", {"meta_key": "0"}) == []


def test_sort_clause_to_dict():
    assert SortClause("comment_ID", "asc").to_dict() == {"comment_ID": {"order": "asc"}}
