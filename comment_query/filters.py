"""
Filter dimensions of a comment query.

Every supported query var is one entry of FILTER_DIMENSIONS. Entries are
evaluated in table order and each active one appends exactly one clause to a
FilterBuilder; the order of the table is the order of the emitted `must`
list.

Most dimensions are plain table rows (parameter, field, clause shape,
wrapping). The handful with extra rules (karma, parent, status, meta and date
queries) are functions registered in the same table.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional, Union

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

logger = logging.getLogger("comment_query.filters")

Clause = Dict[str, Any]

# Moderation status literals -> comment_approved values
MODERATION_STATUS_VALUES = {
    "hold": 0,
    "approve": 1,
}

STATUS_ALL = "all"
POST_STATUS_ANY = "any"


@dataclass
class FilterBuilder:
    """Accumulates the `must` clauses of one compilation."""

    must: List[Clause] = field(default_factory=list)

    def add(self, clause: Optional[Clause]) -> bool:
        if not clause:
            return False
        self.must.append(clause)
        return True

    def to_dict(self) -> Optional[Clause]:
        """The accumulated bool filter, or None when no dimension was active."""
        if not self.must:
            return None
        return {"bool": {"must": list(self.must)}}


# ============================================================
# Clause shapes
# ============================================================

def term_clause(field_name: str, value: Any) -> Clause:
    return {"term": {field_name: value}}


def terms_clause(field_name: str, values: Any) -> Clause:
    return {"terms": {field_name: as_list(values)}}


def term_or_terms_clause(field_name: str, values: List[Any]) -> Clause:
    """One value compiles to `term`, two or more to `terms`."""
    if len(values) < 2:
        return term_clause(field_name, values[0])
    return terms_clause(field_name, values)


def wrap_clause(clause: Clause, occur: Optional[str]) -> Clause:
    """Nest a clause as the single `must` / `must_not` entry of a bool node."""
    if occur is None:
        return clause
    return {"bool": {occur: clause}}


# ============================================================
# Dimension table
# ============================================================

@dataclass(frozen=True)
class FilterDimension:
    """
    One table-driven filter dimension.

    Attributes:
        param: Query var that activates the dimension
        field: Index field the clause targets
        shape: "term", "terms" or "term_or_terms" (comma list, sized by count)
        occur: None to append the clause directly, "must" / "must_not" to nest it
        cast: Applied to single values before they are emitted
        disabled_by: Literal value that turns the dimension off
    """

    param: str
    field: str
    shape: str = "term"
    occur: Optional[str] = None
    cast: Optional[Callable[[Any], Any]] = None
    disabled_by: Optional[str] = None

    @property
    def name(self) -> str:
        return self.param

    def build(self, request: FilterRequest, context: Any = None) -> Optional[Clause]:
        value = request.get(self.param)
        if is_empty(value):
            return None
        if self.disabled_by is not None and value == self.disabled_by:
            return None

        if self.shape == "terms":
            clause = terms_clause(self.field, value)
        elif self.shape == "term_or_terms":
            values = split_csv(value)
            if not values:
                return None
            clause = term_or_terms_clause(self.field, values)
        else:
            clause = term_clause(self.field, self.cast(value) if self.cast else value)

        return wrap_clause(clause, self.occur)


@dataclass(frozen=True)
class SpecialDimension:
    """A dimension with its own activation rules, built by `builder`."""

    name: str
    builder: Callable[[FilterRequest, Any], Optional[Clause]]

    def build(self, request: FilterRequest, context: Any = None) -> Optional[Clause]:
        return self.builder(request, context)


def _include_exclude(param: str, field_name: str) -> List[FilterDimension]:
    return [
        FilterDimension(f"{param}__in", field_name, "terms", occur="must"),
        FilterDimension(f"{param}__not_in", field_name, "terms", occur="must_not"),
    ]


# ============================================================
# Special dimensions
# ============================================================

def date_query_clause(request: FilterRequest, context: Any) -> Optional[Clause]:
    """Only the `and` portion of the date compiler's output is used."""
    date_query = request.get("date_query")
    if is_empty(date_query):
        return None

    compiled = context.date_query_compiler.compile(date_query)
    if not isinstance(compiled, Mapping) or is_empty(compiled.get("and")):
        logger.debug("date_query produced no 'and' filter; keys=%s", list(compiled or {}))
        return None
    return compiled["and"]


def karma_clause(request: FilterRequest, context: Any = None) -> Optional[Clause]:
    karma = request.get("karma")
    if is_empty(karma) and not is_exact_zero(karma):
        return None
    return wrap_clause(term_clause("comment_karma", karma), "must")


def meta_query_clause(request: FilterRequest, context: Any) -> Optional[Clause]:
    """
    Merge the `meta_key`/`meta_value` shorthand with `meta_query` and compile.

    The shorthand clause comes first. A `relation` on `meta_query` applies to
    the merged list.
    """
    clauses: List[Any] = []

    if not request.is_empty("meta_key"):
        shorthand = {"key": request["meta_key"]}
        if request.is_set("meta_value"):
            shorthand["value"] = request["meta_value"]
        clauses.append(shorthand)

    meta_query = request.get("meta_query")
    relation = None
    if not is_empty(meta_query):
        if isinstance(meta_query, Mapping):
            relation = meta_query.get("relation")
            clauses.extend(v for k, v in meta_query.items() if k != "relation")
        else:
            clauses.extend(as_list(meta_query))

    if not clauses:
        return None

    built = context.meta_query_compiler.compile(clauses, relation=relation)
    if not built:
        logger.debug("meta query compiled to nothing: %r", clauses)
        return None
    return built


def parent_clause(request: FilterRequest, context: Any = None) -> Optional[Clause]:
    """`hierarchical` without an explicit parent pins the parent to the root (0)."""
    parent = request.get("parent")
    if not request.is_empty("hierarchical") and is_empty(parent):
        parent = 0
    if is_empty(parent) and not is_exact_zero(parent):
        return None
    return wrap_clause(term_clause("comment_parent", to_int(parent)), "must")


def moderation_status_values(status: Any) -> List[Any]:
    """Split a status list and map hold/approve onto 0/1; other values pass through."""
    return [MODERATION_STATUS_VALUES.get(s, s) for s in split_csv(status)]


def split_unapproved_identifiers(identifiers: Any) -> Dict[str, List[Any]]:
    """
    Classify `include_unapproved` entries.

    Numeric entries are user ids (emitted as absolute integers); everything
    else is treated as an author email.

    Example:
        ["3", "a@example.com", "7"] -> {"user_ids": [3, 7], "emails": ["a@example.com"]}
    """
    user_ids: List[int] = []
    emails: List[Any] = []
    for identifier in parse_list(identifiers):
        if is_numeric(identifier):
            user_ids.append(abs(to_int(identifier)))
        else:
            emails.append(identifier)
    return {"user_ids": user_ids, "emails": emails}


def status_clause(request: FilterRequest, context: Any = None) -> Optional[Clause]:
    status = request.get("status")
    if is_empty(status) or status == STATUS_ALL:
        return None

    values = moderation_status_values(status)
    if not values:
        return None
    approved = term_or_terms_clause("comment_approved", values)

    if request.is_empty("include_unapproved"):
        return approved

    unapproved = split_unapproved_identifiers(request["include_unapproved"])
    return {
        "bool": {
            "should": [
                approved,
                terms_clause("user_id", unapproved["user_ids"]),
                terms_clause("comment_author_email.raw", unapproved["emails"]),
            ]
        }
    }


# ============================================================
# Table
# ============================================================

Dimension = Union[FilterDimension, SpecialDimension]

FILTER_DIMENSIONS = (
    FilterDimension("author_email", "comment_author_email.raw"),
    FilterDimension("author_url", "comment_author_url.raw"),
    FilterDimension("user_id", "user_id", cast=to_int),
    *_include_exclude("author", "user_id"),
    *_include_exclude("comment", "comment_ID"),
    SpecialDimension("date_query", date_query_clause),
    SpecialDimension("karma", karma_clause),
    SpecialDimension("meta_query", meta_query_clause),
    SpecialDimension("parent", parent_clause),
    *_include_exclude("parent", "comment_parent"),
    FilterDimension("post_author", "comment_post_author_ID", occur="must", cast=to_int),
    *_include_exclude("post_author", "comment_post_author_ID"),
    FilterDimension("post_id", "comment_post_ID", occur="must", cast=to_int),
    *_include_exclude("post", "comment_post_ID"),
    FilterDimension("post_status", "comment_post_status", "term_or_terms", disabled_by=POST_STATUS_ANY),
    FilterDimension("post_type", "comment_post_type", occur="must"),
    FilterDimension("post_name", "comment_post_name", occur="must"),
    FilterDimension("post_parent", "comment_post_parent", occur="must", cast=to_int),
    SpecialDimension("status", status_clause),
    FilterDimension("type", "comment_type.raw", "term_or_terms"),
    *_include_exclude("type", "comment_type.raw"),
)


def build_filter(request: FilterRequest, context: Any, dimensions=FILTER_DIMENSIONS) -> FilterBuilder:
    """
    Run every dimension against the request.

    Args:
        request: Query vars
        context: Object exposing `meta_query_compiler` and `date_query_compiler`
        dimensions: Dimension table, FILTER_DIMENSIONS by default

    Returns:
        A fresh FilterBuilder holding one clause per active dimension.
    """
    builder = FilterBuilder()
    for dimension in dimensions:
        if builder.add(dimension.build(request, context)):
            logger.debug("Filter dimension %s active", dimension.name)
    return builder
