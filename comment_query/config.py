"""
Settings for the comment query compiler.

All knobs have defaults matching what the search index expects, and every one
of them can be overridden from the environment (or a .env file) through
CompilerSettings.from_env().

Environment Variables:
- EP_MAX_RESULTS_WINDOW: Page size used when the request has no `number`
- EP_COMMENT_SEARCH_FIELDS: Comma separated default search fields
- EP_COMMENT_MATCH_PHRASE_BOOST: Weight of the exact phrase tier
- EP_COMMENT_MATCH_BOOST: Weight of the all-terms tier
- EP_COMMENT_FUZZINESS: Edit distance of the fuzzy tier
- ES_URL: Elasticsearch endpoint used by the demo apps
- ES_COMMENT_INDEX: Comment index name used by the demo apps
- ES_TIMEOUT: HTTP timeout in seconds used by the demo apps
"""

import os
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

from comment_query.errors import ConfigurationError

# ============================================================
# Defaults
# ============================================================
# The backend rejects requests whose size exceeds index.max_result_window,
# so the default page size is pinned to the stock Elasticsearch ceiling.
# ============================================================

DEFAULT_MAX_RESULTS_WINDOW = 10000

DEFAULT_SEARCH_FIELDS = (
    "comment_author",
    "comment_author_email",
    "comment_author_url",
    "comment_author_IP",
    "comment_content",
)

DEFAULT_PHRASE_BOOST = 4
DEFAULT_MATCH_BOOST = 2
DEFAULT_FUZZINESS = 1
DEFAULT_ORDERBY = "comment_date_gmt"


@dataclass(frozen=True)
class CompilerSettings:
    """
    Externally overridable configuration consumed by QueryCompiler.

    Attributes:
        max_results_window: Result size when the request does not pass `number`
        search_fields: Fields searched when the request has no `search_fields`
        phrase_boost: Boost of the exact phrase multi_match
        match_boost: Boost of the all-terms (operator=and) multi_match
        fuzziness: Fuzziness of the typo-tolerant multi_match
        default_orderby: Sort alias used when the request has no `orderby`
        elasticsearch_url: Endpoint for the demo apps (not used by the compiler)
        index_name: Index for the demo apps (not used by the compiler)
        request_timeout: HTTP timeout for the demo apps
    """

    max_results_window: int = DEFAULT_MAX_RESULTS_WINDOW
    search_fields: Tuple[str, ...] = field(default=DEFAULT_SEARCH_FIELDS)
    phrase_boost: float = DEFAULT_PHRASE_BOOST
    match_boost: float = DEFAULT_MATCH_BOOST
    fuzziness: int = DEFAULT_FUZZINESS
    default_orderby: str = DEFAULT_ORDERBY
    elasticsearch_url: Optional[str] = None
    index_name: str = "comments"
    request_timeout: float = 10

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "CompilerSettings":
        """
        Build settings from environment variables, loading a .env file first.

        Args:
            dotenv_path: Explicit .env location; python-dotenv searches upwards
                from the working directory when omitted.

        Returns:
            CompilerSettings with every unset variable left at its default.

        Raises:
            ConfigurationError: If a numeric variable cannot be parsed.
        """
        load_dotenv(dotenv_path=dotenv_path)

        search_fields = DEFAULT_SEARCH_FIELDS
        raw_fields = os.getenv("EP_COMMENT_SEARCH_FIELDS")
        if raw_fields:
            parsed = tuple(f.strip() for f in raw_fields.split(",") if f.strip())
            if parsed:
                search_fields = parsed

        return cls(
            max_results_window=_env_number("EP_MAX_RESULTS_WINDOW", DEFAULT_MAX_RESULTS_WINDOW, int),
            search_fields=search_fields,
            phrase_boost=_env_number("EP_COMMENT_MATCH_PHRASE_BOOST", DEFAULT_PHRASE_BOOST, float),
            match_boost=_env_number("EP_COMMENT_MATCH_BOOST", DEFAULT_MATCH_BOOST, float),
            fuzziness=_env_number("EP_COMMENT_FUZZINESS", DEFAULT_FUZZINESS, int),
            elasticsearch_url=os.getenv("ES_URL") or None,
            index_name=os.getenv("ES_COMMENT_INDEX", "comments"),
            request_timeout=_env_number("ES_TIMEOUT", 10, float),
        )


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        value = cast(raw.strip())
    except ValueError as exc:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigurationError(f"{name} must not be negative, got {raw!r}")
    # Whole-number floats stay ints so the emitted boosts read 4, not 4.0.
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return value
