"""
Comment query compiler.

Converts WP_Comment_Query style query vars into an Elasticsearch request body
for the comment index. This module is shared by app.py and
apps/streamlit_app.py.

Pipeline:
    query vars -> pagination + sort -> filter dimensions -> relevance query
    -> CompiledQuery.to_dict()

The compiler keeps no state between calls; every compilation builds its own
filter accumulator, so one instance can serve concurrent callers.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Tuple

from comment_query.collaborators import (
    DateQueryCompiler,
    DateQueryCompilerPort,
    MetaQueryCompiler,
    MetaQueryCompilerPort,
)
from comment_query.config import CompilerSettings
from comment_query.filters import FILTER_DIMENSIONS, build_filter
from comment_query.relevance import build_search_query
from comment_query.request import FilterRequest, is_empty, to_int
from comment_query.sorting import SortClause, parse_order, resolve_sort

logger = logging.getLogger("comment_query.compiler")

# Projection used for fields=ids
IDS_SOURCE_FILTER = {"includes": ["comment_ID"]}


@dataclass(frozen=True)
class CompiledQuery:
    """
    Result of one compilation.

    Attributes:
        offset: `from` of the request body, never negative
        size: `size` of the request body, never negative
        sort: Sort clauses, highest priority first
        query: Scoring query (multi_match cascade or match_all)
        post_filter: Bool filter, None when no filter dimension was active
        source_filter: `_source` projection, None for full documents
    """

    offset: int
    size: int
    sort: Tuple[SortClause, ...] = ()
    query: Dict[str, Any] = field(default_factory=dict)
    post_filter: Optional[Dict[str, Any]] = None
    source_filter: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the Elasticsearch search body; absent parts are omitted."""
        body: Dict[str, Any] = {
            "from": self.offset,
            "size": self.size,
            "sort": [clause.to_dict() for clause in self.sort],
        }
        if self.source_filter is not None:
            body["_source"] = self.source_filter
        body["query"] = self.query
        if self.post_filter is not None:
            body["post_filter"] = self.post_filter
        return body


def resolve_pagination(request: FilterRequest, settings: CompilerSettings) -> Tuple[int, int]:
    """
    Work out (offset, size).

    `number` sets the size, falling back to the max result window. An explicit
    `offset` wins over `paged`; a page beyond the first only applies while
    `offset` is empty.

    Examples:
        {"number": 10, "offset": 5, "paged": 3} -> (5, 10)
        {"number": 10, "paged": 3} -> (20, 10)
    """
    if not request.is_empty("number"):
        size = to_int(request["number"])
    else:
        size = settings.max_results_window

    offset = 0
    if request.is_set("offset"):
        offset = to_int(request["offset"])

    if request.is_set("paged") and request.is_empty("offset"):
        paged = to_int(request["paged"])
        if paged > 1:
            offset = size * (paged - 1)

    return max(offset, 0), max(size, 0)


class QueryCompiler:
    """
    Compiles filter requests into Elasticsearch comment queries.

    Args:
        settings: Knobs for page size, search fields and relevance weights;
            CompilerSettings() defaults when omitted
        meta_query_compiler: Collaborator for meta_key/meta_value/meta_query
        date_query_compiler: Collaborator for date_query
        dimensions: Filter dimension table, FILTER_DIMENSIONS by default

    Example:
        >>> compiler = QueryCompiler()
        >>> body = compiler.compile({"status": "approve", "post_id": 12}).to_dict()
        >>> body["post_filter"]["bool"]["must"][1]
        {'term': {'comment_approved': 1}}
    """

    def __init__(
        self,
        settings: Optional[CompilerSettings] = None,
        meta_query_compiler: Optional[MetaQueryCompilerPort] = None,
        date_query_compiler: Optional[DateQueryCompilerPort] = None,
        dimensions=FILTER_DIMENSIONS,
    ):
        self.settings = settings or CompilerSettings()
        self.meta_query_compiler = meta_query_compiler or MetaQueryCompiler()
        self.date_query_compiler = date_query_compiler or DateQueryCompiler()
        self.dimensions = tuple(dimensions)

    def compile(self, request: Any) -> CompiledQuery:
        """
        Compile one request.

        Args:
            request: FilterRequest or plain mapping of query vars. Unknown,
                absent and empty values are ignored.

        Returns:
            CompiledQuery. Never raises for request content.
        """
        request = FilterRequest.coerce(request)
        offset, size = resolve_pagination(request, self.settings)

        order = parse_order(request.get("order"))
        orderby = request.get("orderby")
        if is_empty(orderby):
            orderby = self.settings.default_orderby
        sort = resolve_sort(orderby, order, request)

        source_filter = None
        if request.get("fields") == "ids":
            source_filter = {"includes": list(IDS_SOURCE_FILTER["includes"])}

        builder = build_filter(request, self, self.dimensions)

        search = request.get("search")
        if is_empty(search):
            query = build_search_query("", settings=self.settings)
        else:
            query = build_search_query(search, request.get("search_fields"), request, self.settings)

        logger.debug(
            "Compiled comment query: from=%s size=%s sort=%s filters=%d search=%s",
            offset,
            size,
            [c.field for c in sort],
            len(builder.must),
            not is_empty(search),
        )

        return CompiledQuery(
            offset=offset,
            size=size,
            sort=tuple(sort),
            query=query,
            post_filter=builder.to_dict(),
            source_filter=source_filter,
        )


# Shared compiler with default settings and collaborators
_default_compiler = QueryCompiler()


def get_default_compiler() -> QueryCompiler:
    return _default_compiler


def compile_query(request: Mapping, settings: Optional[CompilerSettings] = None) -> Dict[str, Any]:
    """
    Compile query vars straight to an Elasticsearch request body.

    Args:
        request: Query vars (e.g. {"post_id": 12, "status": "approve"})
        settings: Optional settings; the shared default compiler is used when omitted

    Returns:
        The request body dict, ready for json.dumps.
    """
    compiler = QueryCompiler(settings) if settings is not None else get_default_compiler()
    return compiler.compile(request).to_dict()
