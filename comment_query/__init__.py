"""
Comment query compiler for Elasticsearch.

Turns WP_Comment_Query style query vars (filters, sorting, pagination, free
text search) into the JSON request body of a comment index search.

Usage:
    from comment_query import QueryCompiler

    compiler = QueryCompiler()
    body = compiler.compile({"post_id": 12, "status": "approve", "search": "great post"}).to_dict()
"""

from comment_query.collaborators import DateQueryCompiler, MetaQueryCompiler
from comment_query.compiler import CompiledQuery, QueryCompiler, compile_query
from comment_query.config import CompilerSettings
from comment_query.documents import prepare_document, prepare_meta_types, remap_comment
from comment_query.errors import CommentQueryError, ConfigurationError, SearchRequestError
from comment_query.relevance import build_search_query, prepare_search_fields
from comment_query.request import FilterRequest
from comment_query.sorting import SortClause, parse_order, resolve_sort

__all__ = [
    "CommentQueryError",
    "CompiledQuery",
    "CompilerSettings",
    "ConfigurationError",
    "DateQueryCompiler",
    "FilterRequest",
    "MetaQueryCompiler",
    "QueryCompiler",
    "SearchRequestError",
    "SortClause",
    "build_search_query",
    "compile_query",
    "parse_order",
    "prepare_document",
    "prepare_meta_types",
    "prepare_search_fields",
    "remap_comment",
    "resolve_sort",
]
