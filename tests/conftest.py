"""
Pytest configuration for comment query tests.
"""

import pytest

from comment_query import CompilerSettings, QueryCompiler

ENV_VARS = (
    "EP_MAX_RESULTS_WINDOW",
    "EP_COMMENT_SEARCH_FIELDS",
    "EP_COMMENT_MATCH_PHRASE_BOOST",
    "EP_COMMENT_MATCH_BOOST",
    "EP_COMMENT_FUZZINESS",
    "ES_URL",
    "ES_COMMENT_INDEX",
    "ES_TIMEOUT",
)


@pytest.fixture
def settings():
    """Fixture providing default compiler settings."""
    return CompilerSettings()


@pytest.fixture
def compiler(settings):
    """Fixture providing a compiler with the default collaborators."""
    return QueryCompiler(settings)


@pytest.fixture
def compile_body(compiler):
    """Compile query vars straight to the request body dict."""

    def _compile(query_vars):
        return compiler.compile(query_vars).to_dict()

    return _compile


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Clear the settings variables; returns a .env path that does not exist yet."""
    for name in ENV_VARS:
        # setenv first so teardown also removes values a .env file loads
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return tmp_path / ".env"
