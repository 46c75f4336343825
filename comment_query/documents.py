"""
Comment documents for the search index.

Builds the document shape the compiled queries are written against: the
`.raw` siblings and `meta.<key>.<type>` sub-fields targeted by filters and
sorts all come from the mapping of these fields.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from comment_query.collaborators import parse_date
from comment_query.request import is_numeric, to_int

logger = logging.getLogger("comment_query.documents")

# Fields copied from a fetched comment record, in index order
COMMENT_FIELDS = (
    "comment_ID",
    "comment_post_ID",
    "comment_author",
    "comment_author_email",
    "comment_author_url",
    "comment_author_IP",
    "comment_date",
    "comment_date_gmt",
    "comment_content",
    "comment_karma",
    "comment_approved",
    "comment_agent",
    "comment_type",
    "comment_parent",
    "user_id",
)

TRUE_STRINGS = {"1", "true", "on", "yes"}

# Largest value the index's long sub-field accepts
MAX_LONG = 2 ** 63 - 1


def _read(record: Any, name: str, default: Any = None) -> Any:
    if isinstance(record, Mapping):
        return record.get(name, default)
    return getattr(record, name, default)


def remap_comment(record: Any) -> Dict[str, Any]:
    """
    Flatten a fetched comment record and add the `ID` field the indexer keys on.

    Args:
        record: Mapping or object exposing the wp_comments columns

    Returns:
        Dict with `ID` followed by COMMENT_FIELDS.
    """
    remapped = {"ID": _read(record, "comment_ID")}
    for name in COMMENT_FIELDS:
        remapped[name] = _read(record, name)
    return remapped


def prepare_meta_value_types(value: Any) -> Dict[str, Any]:
    """
    Expand one meta value into its typed sub-fields.

    Example:
        "42" -> {"value": "42", "raw": "42", "long": 42, "double": 42.0, "boolean": False}
        "2021-03-04 05:06:07" -> {..., "date": "2021-03-04",
            "datetime": "2021-03-04 05:06:07", "time": "05:06:07"}
    """
    if isinstance(value, (list, tuple, dict)):
        value = json.dumps(value, sort_keys=True)

    types: Dict[str, Any] = {"value": value, "raw": value}

    if is_numeric(value):
        as_long = to_int(value)
        if abs(as_long) <= MAX_LONG:
            types["long"] = as_long
        types["double"] = float(value)

    if isinstance(value, bool):
        types["boolean"] = value
    else:
        types["boolean"] = str(value).strip().lower() in TRUE_STRINGS

    if isinstance(value, str) and not is_numeric(value):
        parsed = parse_date(value)
        if parsed is not None:
            types["date"] = parsed.strftime("%Y-%m-%d")
            types["datetime"] = parsed.strftime("%Y-%m-%d %H:%M:%S")
            types["time"] = parsed.strftime("%H:%M:%S")

    return types


def prepare_meta_types(meta: Optional[Mapping]) -> Dict[str, List[Dict[str, Any]]]:
    """Typed sub-fields for every value of every meta key; scalars count as one value."""
    prepared: Dict[str, List[Dict[str, Any]]] = {}
    for key, values in (meta or {}).items():
        if not isinstance(values, (list, tuple)):
            values = [values]
        prepared[key] = [prepare_meta_value_types(v) for v in values]
    return prepared


def prepare_document(comment: Any, post: Any = None, meta: Optional[Mapping] = None) -> Optional[Dict[str, Any]]:
    """
    Build the index document for one comment.

    Args:
        comment: Comment record (mapping or object)
        post: The commented post record; its author, status, type, name and
            parent are denormalized onto the comment
        meta: Comment meta already filtered down to indexable keys

    Returns:
        The document dict, or None when there is no comment record.
    """
    if comment is None:
        return None

    if post is None:
        logger.warning("Comment %s has no post record; post fields left empty", _read(comment, "comment_ID"))

    return {
        "comment_ID": _read(comment, "comment_ID"),
        "ID": _read(comment, "comment_ID"),
        "comment_post_ID": _read(comment, "comment_post_ID"),
        "comment_post_author_ID": _read(post, "post_author"),
        "comment_post_status": _read(post, "post_status"),
        "comment_post_type": _read(post, "post_type"),
        "comment_post_name": _read(post, "post_name"),
        "comment_post_parent": _read(post, "post_parent"),
        "comment_author": _read(comment, "comment_author"),
        "comment_author_email": _read(comment, "comment_author_email"),
        "comment_author_url": _read(comment, "comment_author_url"),
        "comment_author_IP": _read(comment, "comment_author_IP"),
        "comment_date": _read(comment, "comment_date"),
        "comment_date_gmt": _read(comment, "comment_date_gmt"),
        "comment_content": _read(comment, "comment_content"),
        "comment_karma": _read(comment, "comment_karma"),
        "comment_approved": _read(comment, "comment_approved"),
        "comment_agent": _read(comment, "comment_agent"),
        "comment_type": _read(comment, "comment_type") or "comment",
        "comment_parent": _read(comment, "comment_parent"),
        "user_id": _read(comment, "user_id"),
        "meta": prepare_meta_types(meta),
    }
