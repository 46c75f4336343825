"""
Meta query and date query compilers.

QueryCompiler delegates two filter dimensions to pluggable collaborators:
- meta queries ({key, value, compare, type} clauses) -> bool filter node
- date queries (WP_Date_Query style clauses) -> {"and": node} / {"or": node}

Both must be synchronous, side-effect free and deterministic. The defaults
below cover the WordPress clause vocabulary; any object with a matching
`compile` method can be injected instead.
"""

import calendar
import logging
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Dict, List, Optional, Protocol, Sequence

from comment_query.request import as_list, is_empty, is_numeric, to_int

logger = logging.getLogger("comment_query.collaborators")


class MetaQueryCompilerPort(Protocol):
    """Turns meta clauses into one filter node, or None when nothing applies."""

    def compile(self, clauses: Sequence[Any], relation: Optional[str] = None) -> Optional[Dict[str, Any]]:
        ...


class DateQueryCompilerPort(Protocol):
    """Turns a date query into a filter keyed by its relation ("and" / "or")."""

    def compile(self, date_query: Any) -> Dict[str, Any]:
        ...


def _relation_of(group: Any, default: str = "AND") -> str:
    if isinstance(group, Mapping) and isinstance(group.get("relation"), str):
        return "OR" if group["relation"].upper() == "OR" else "AND"
    return default


def _clauses_of(group: Any) -> List[Any]:
    if isinstance(group, Mapping):
        return [v for k, v in group.items() if k != "relation"]
    return as_list(group)


def _bool_node(clauses: List[Dict[str, Any]], relation: str) -> Dict[str, Any]:
    occur = "should" if relation == "OR" else "must"
    return {"bool": {occur: clauses}}


# ============================================================
# Meta queries
# ============================================================

META_TYPE_SUB_FIELDS = {
    "numeric": "long",
    "signed": "long",
    "unsigned": "long",
    "decimal": "double",
    "boolean": "boolean",
    "date": "date",
    "datetime": "datetime",
    "time": "time",
    "char": "raw",
    "binary": "raw",
}

RANGE_OPERATORS = {
    ">": "gt",
    ">=": "gte",
    "<": "lt",
    "<=": "lte",
}


class MetaQueryCompiler:
    """
    Default meta query compiler over the `meta.<key>.<sub_field>` mapping.

    Supported compares: =, !=, >, >=, <, <=, IN, NOT IN, BETWEEN,
    NOT BETWEEN, LIKE, NOT LIKE, EXISTS, NOT EXISTS. A clause without `key`
    that holds further clauses is compiled as a nested group with its own
    relation.

    Example:
        MetaQueryCompiler().compile([{"key": "rating", "value": 4, "compare": ">=", "type": "NUMERIC"}])
        -> {"bool": {"must": [{"range": {"meta.rating.long": {"gte": 4}}}]}}
    """

    def compile(self, clauses: Sequence[Any], relation: Optional[str] = None) -> Optional[Dict[str, Any]]:
        if is_empty(clauses):
            return None
        if relation is None:
            relation = _relation_of(clauses)
        else:
            relation = "OR" if str(relation).upper() == "OR" else "AND"

        built = []
        for clause in _clauses_of(clauses):
            node = self._compile_clause(clause)
            if node is not None:
                built.append(node)

        if not built:
            return None
        return _bool_node(built, relation)

    def _compile_clause(self, clause: Any) -> Optional[Dict[str, Any]]:
        if isinstance(clause, Mapping) and not is_empty(clause.get("key")):
            return self._compile_key_clause(clause)
        if isinstance(clause, (Mapping, list, tuple)) and not isinstance(clause, str):
            return self.compile(clause)
        logger.debug("Skipping meta clause without a key: %r", clause)
        return None

    def _compile_key_clause(self, clause: Mapping) -> Optional[Dict[str, Any]]:
        key = clause["key"]
        has_value = clause.get("value") is not None
        value = clause.get("value")

        if not is_empty(clause.get("compare")):
            compare = str(clause["compare"]).upper()
        elif has_value:
            compare = "IN" if isinstance(value, (list, tuple)) else "="
        else:
            compare = "EXISTS"

        if compare in ("EXISTS", "NOT EXISTS"):
            exists = {"exists": {"field": f"meta.{key}"}}
            return exists if compare == "EXISTS" else {"bool": {"must_not": [exists]}}

        if not has_value:
            logger.warning("Meta clause on %r uses %s without a value; skipped", key, compare)
            return None

        if compare in ("LIKE", "NOT LIKE"):
            match = {"match_phrase": {f"meta.{key}.value": value}}
            return match if compare == "LIKE" else {"bool": {"must_not": [match]}}

        path = f"meta.{key}.{self._sub_field(clause, compare, value)}"

        if compare in ("=", "!="):
            node = self._term_or_terms(path, value)
            return node if compare == "=" else {"bool": {"must_not": [node]}}

        if compare in ("IN", "NOT IN"):
            node = {"terms": {path: as_list(value)}}
            return node if compare == "IN" else {"bool": {"must_not": [node]}}

        if compare in RANGE_OPERATORS:
            return {"range": {path: {RANGE_OPERATORS[compare]: value}}}

        if compare in ("BETWEEN", "NOT BETWEEN"):
            bounds = as_list(value)
            if len(bounds) < 2:
                logger.warning("Meta clause on %r needs two values for %s; skipped", key, compare)
                return None
            node = {"range": {path: {"gte": bounds[0], "lte": bounds[1]}}}
            return node if compare == "BETWEEN" else {"bool": {"must_not": [node]}}

        logger.warning("Unsupported meta compare %r on %r; skipped", compare, key)
        return None

    @staticmethod
    def _sub_field(clause: Mapping, compare: str, value: Any) -> str:
        meta_type = clause.get("type")
        if not is_empty(meta_type):
            return META_TYPE_SUB_FIELDS.get(str(meta_type).lower(), "raw")
        if compare in RANGE_OPERATORS or compare in ("BETWEEN", "NOT BETWEEN"):
            values = as_list(value)
            if values and all(is_numeric(v) for v in values):
                return "double"
            return "raw"
        return "raw"

    @staticmethod
    def _term_or_terms(path: str, value: Any) -> Dict[str, Any]:
        if isinstance(value, (list, tuple)):
            return {"terms": {path: list(value)}}
        return {"term": {path: value}}


# ============================================================
# Date queries
# ============================================================

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_DATE_INPUT_FORMATS = (
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%Y/%m/%d",
)


def _component(value: Any, default: int) -> int:
    if is_empty(value):
        return default
    return to_int(value)


def parse_date(value: str) -> Optional[datetime]:
    """Parse the date formats WordPress stores and accepts; None when unparsable."""
    text = value.strip()
    for fmt in _DATE_INPUT_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        return None


class DateQueryCompiler:
    """
    Default date query compiler.

    Understands `after`, `before`, `inclusive`, `column` and exact
    `year` / `month` / `day` clauses, plus a top level `relation` and
    `column`. Dates are emitted as "YYYY-MM-DD HH:MM:SS" range bounds.

    Returns:
        {"and": {"bool": {"must": [...]}}} for AND relations,
        {"or": {"bool": {"should": [...]}}} for OR relations,
        {} when no clause produced a filter.
    """

    def __init__(self, default_column: str = "comment_date"):
        self.default_column = default_column

    def compile(self, date_query: Any) -> Dict[str, Any]:
        if is_empty(date_query):
            return {}

        # A bare clause ({"after": ...}) is shorthand for a one-clause query.
        if isinstance(date_query, Mapping) and self._is_clause(date_query):
            date_query = [date_query]

        relation = _relation_of(date_query)
        column = self._column_of(date_query, self.default_column)
        clauses = self._compile_group(date_query, column)
        if not clauses:
            return {}
        node = _bool_node(clauses, relation)
        return {"or": node} if relation == "OR" else {"and": node}

    @staticmethod
    def _is_clause(value: Mapping) -> bool:
        return any(k in value for k in ("after", "before", "year", "month", "monthnum", "day"))

    @staticmethod
    def _column_of(group: Any, default: str) -> str:
        if isinstance(group, Mapping) and not is_empty(group.get("column")):
            return str(group["column"])
        return default

    def _compile_group(self, group: Any, column: str) -> List[Dict[str, Any]]:
        built = []
        for clause in _clauses_of(group):
            if isinstance(clause, str) or not isinstance(clause, (Mapping, list, tuple)):
                continue
            if isinstance(clause, Mapping) and self._is_clause(clause):
                node = self._compile_clause(clause, self._column_of(clause, column))
            else:
                nested = self._compile_group(clause, self._column_of(clause, column))
                node = _bool_node(nested, _relation_of(clause)) if nested else None
            if node is not None:
                built.append(node)
        return built

    def _compile_clause(self, clause: Mapping, column: str) -> Optional[Dict[str, Any]]:
        inclusive = bool(clause.get("inclusive"))
        bounds: Dict[str, str] = {}

        if not is_empty(clause.get("after")):
            after = self._to_datetime(clause["after"], default_to_max=not inclusive)
            if after is not None:
                bounds["gte" if inclusive else "gt"] = after.strftime(DATE_FORMAT)

        if not is_empty(clause.get("before")):
            before = self._to_datetime(clause["before"], default_to_max=inclusive)
            if before is not None:
                bounds["lte" if inclusive else "lt"] = before.strftime(DATE_FORMAT)

        if not bounds:
            bounds = self._exact_period(clause)

        if not bounds:
            logger.debug("Date clause %r produced no range", clause)
            return None
        return {"range": {column: bounds}}

    @staticmethod
    def _to_datetime(value: Any, default_to_max: bool) -> Optional[datetime]:
        if isinstance(value, datetime):
            return value
        if isinstance(value, str):
            parsed = parse_date(value)
            if parsed is None:
                logger.warning("Could not parse date %r; bound skipped", value)
            return parsed
        if isinstance(value, Mapping):
            if is_empty(value.get("year")) or not is_numeric(value["year"]):
                return None
            year = to_int(value["year"])
            if not 1 <= year <= 9999:
                return None
            month = _component(value.get("month"), 12 if default_to_max else 1)
            month = min(max(month, 1), 12)
            last_day = calendar.monthrange(year, month)[1]
            day = _component(value.get("day"), last_day if default_to_max else 1)
            day = min(max(day, 1), last_day)
            if default_to_max:
                return datetime(year, month, day, 23, 59, 59)
            return datetime(year, month, day)
        return None

    @staticmethod
    def _exact_period(clause: Mapping) -> Dict[str, str]:
        year = clause.get("year")
        if is_empty(year) or not is_numeric(year):
            return {}
        year = to_int(year)
        if not 1 <= year <= 9999:
            return {}
        month = clause.get("month", clause.get("monthnum"))
        day = clause.get("day")

        if is_empty(month) or not is_numeric(month):
            start, end = datetime(year, 1, 1), datetime(year, 12, 31, 23, 59, 59)
        else:
            month = min(max(to_int(month), 1), 12)
            last_day = calendar.monthrange(year, month)[1]
            if is_empty(day) or not is_numeric(day):
                start = datetime(year, month, 1)
                end = datetime(year, month, last_day, 23, 59, 59)
            else:
                day = min(max(to_int(day), 1), last_day)
                start = datetime(year, month, day)
                end = datetime(year, month, day, 23, 59, 59)

        return {"gte": start.strftime(DATE_FORMAT), "lte": end.strftime(DATE_FORMAT)}
