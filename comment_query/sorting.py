"""
Sort-key resolution for comment queries.

Maps a logical `orderby` alias onto the concrete sortable field(s) of the
comment index. Analyzed text fields cannot be sorted on directly, so they sort
on their `.raw` keyword sibling instead.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from comment_query.request import is_empty

# ============================================================
# Configuration: sortable aliases
# ============================================================

SORT_FIELD_ALIASES = {
    # Analyzed text -> keyword sibling
    "comment_agent": "comment_agent.raw",
    "comment_approved": "comment_approved.raw",
    "comment_author": "comment_author.raw",
    "comment_author_email": "comment_author_email.raw",
    "comment_author_IP": "comment_author_IP.raw",
    "comment_author_url": "comment_author_url.raw",
    "comment_content": "comment_content.raw",
    "comment_type": "comment_type.raw",

    # Natively sortable
    "comment_date": "comment_date",
    "comment_date_gmt": "comment_date_gmt",
    "comment_ID": "comment_ID",
    "comment_karma": "comment_karma",
    "comment_parent": "comment_parent",
    "comment_post_ID": "comment_post_ID",
    "user_id": "user_id",
}

# Aliases that sort on a meta sub-field; the meta key comes from `meta_key`
META_SORT_ALIASES = {
    "meta_value": "value",
    "meta_value_num": "long",
}


@dataclass(frozen=True)
class SortClause:
    """One entry of the sort list; earlier entries take priority."""

    field: str
    direction: str = "desc"

    def to_dict(self) -> Dict[str, Any]:
        return {self.field: {"order": self.direction}}


def parse_order(order: Any) -> str:
    """
    Normalize an `order` query var to "asc" or "desc".

    Only a case-insensitive "asc" sorts ascending; anything else, including
    non-strings and "", sorts descending.
    """
    if not isinstance(order, str) or not order:
        return "desc"
    return "asc" if order.upper() == "ASC" else "desc"


def meta_sort_field(meta_key: str, sub_field: str) -> str:
    return f"meta.{meta_key}.{sub_field}"


def resolve_sort(orderby: Any, direction: str, request: Optional[Mapping] = None) -> List[SortClause]:
    """
    Resolve a sort alias into sort clauses.

    Args:
        orderby: Logical alias (e.g. "comment_author") or a literal field path
        direction: "asc" or "desc"
        request: Query vars; consulted for `meta_key` by the meta aliases

    Returns:
        List of SortClause. Empty when `orderby` is empty, or when a meta alias
        is requested without a `meta_key`. Unknown aliases are sorted on as
        literal field names.
    """
    if is_empty(orderby):
        return []

    orderby = str(orderby)
    request = request or {}

    if orderby in META_SORT_ALIASES:
        meta_key = request.get("meta_key")
        if is_empty(meta_key):
            return []
        return [SortClause(meta_sort_field(meta_key, META_SORT_ALIASES[orderby]), direction)]

    return [SortClause(SORT_FIELD_ALIASES.get(orderby, orderby), direction)]
