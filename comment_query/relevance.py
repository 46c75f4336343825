"""
Relevance query builder for free-text comment search.

The query is a three-tier cascade OR'ed together so scores stack:
1. exact phrase match (highest boost)
2. all terms required, no fuzziness
3. any terms with typo tolerance

Tier order and default weights (4, 2, fuzziness 1) are part of the output
contract.
"""

from collections.abc import Mapping
from typing import Any, Dict, List, Optional

from comment_query.config import CompilerSettings
from comment_query.request import as_list, is_empty

MATCH_ALL_QUERY = {"match_all": {"boost": 1}}


def meta_search_field(meta_key: Any) -> str:
    return f"meta.{meta_key}.value"


def prepare_search_fields(search_fields: Any, settings: Optional[CompilerSettings] = None) -> List[str]:
    """
    Resolve the fields a search term is matched against.

    Args:
        search_fields: Caller supplied fields. Either a list of field names or a
            mapping; a `meta` entry lists meta keys to search on.
        settings: Source of the default field set

    Returns:
        Explicit fields first, then `meta.<key>.value` for each meta key. The
        configured default set when nothing was supplied.

    Examples:
        None -> ["comment_author", ..., "comment_content"]
        {"0": "comment_content", "meta": ["rating"]}
            -> ["comment_content", "meta.rating.value"]
    """
    settings = settings or CompilerSettings()
    if is_empty(search_fields):
        return list(settings.search_fields)

    explicit: List[Any] = []
    metas: List[Any] = []

    if isinstance(search_fields, Mapping):
        for key, value in search_fields.items():
            if key == "meta":
                metas.extend(as_list(value))
            else:
                explicit.append(value)
    else:
        for entry in as_list(search_fields):
            if isinstance(entry, Mapping) and "meta" in entry:
                metas.extend(as_list(entry["meta"]))
            else:
                explicit.append(entry)

    return [str(f) for f in explicit] + [meta_search_field(m) for m in metas]


def build_search_query(
    term: str,
    fields: Any = None,
    request: Optional[Mapping] = None,
    settings: Optional[CompilerSettings] = None,
) -> Dict[str, Any]:
    """
    Build the scoring query for a search term.

    Args:
        term: Free text to search for; empty means match everything
        fields: Raw `search_fields` value; falls back to the request's own
            `search_fields` and then to the configured defaults
        request: Query vars of the compilation
        settings: Boosts, fuzziness and default fields

    Returns:
        A bool/should query with exactly three multi_match clauses, or a
        match_all query with boost 1 when there is no term.
    """
    if is_empty(term):
        return {"match_all": dict(MATCH_ALL_QUERY["match_all"])}

    settings = settings or CompilerSettings()
    if fields is None and request is not None:
        fields = request.get("search_fields")
    prepared = prepare_search_fields(fields, settings)

    return {
        "bool": {
            "should": [
                {
                    "multi_match": {
                        "query": term,
                        "type": "phrase",
                        "fields": list(prepared),
                        "boost": settings.phrase_boost,
                    }
                },
                {
                    "multi_match": {
                        "query": term,
                        "fields": list(prepared),
                        "boost": settings.match_boost,
                        "fuzziness": 0,
                        "operator": "and",
                    }
                },
                {
                    "multi_match": {
                        "fields": list(prepared),
                        "query": term,
                        "fuzziness": settings.fuzziness,
                    }
                },
            ]
        }
    }
