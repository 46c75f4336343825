"""
Comment Query Console (app.py)

Interactive console for trying out comment queries. Each line of input is a
JSON object of query vars; the compiled Elasticsearch body is printed and, when
ES_URL is configured, posted to the comment index.

Usage:
    python app.py

Example Input:
    {"post_id": 12, "status": "approve"}
    {"search": "great post", "number": 5, "orderby": "comment_karma"}
    {"status": "hold", "include_unapproved": "3,a@example.com"}
"""

import json
import time
from typing import Any, Dict, Mapping, Optional

import requests

from comment_query import CompilerSettings, QueryCompiler
from comment_query.errors import SearchRequestError

# ============================================================
# HTTP Connection Pooling
# ============================================================
# One session for the whole console run so repeated searches reuse the
# TCP/TLS connection to the cluster.
# ============================================================
_http_session = requests.Session()


def build_search_request(
    query_vars: Mapping[str, Any],
    service_endpoint: str,
    index_name: str,
    compiler: Optional[QueryCompiler] = None,
) -> Dict[str, Any]:
    """
    End-to-end helper:
    - compiles query vars -> Elasticsearch body
    - builds HTTP method, URL, headers

    Returns dict:
    {
      "query_vars": {...},
      "method": "POST",
      "url": "...",
      "headers": {...},
      "json": {...}
    }
    """
    compiler = compiler or QueryCompiler()
    payload = compiler.compile(query_vars).to_dict()

    # Ensure no trailing slash duplication
    service_endpoint = service_endpoint.rstrip("/")
    url = f"{service_endpoint}/{index_name}/_search"

    return {
        "query_vars": dict(query_vars),
        "method": "POST",
        "url": url,
        "headers": {"Content-Type": "application/json"},
        "json": payload,
    }


def execute_search_request(req: Dict[str, Any], timeout: float = 10) -> Dict[str, Any]:
    """
    POST a built request to Elasticsearch using the pooled session.

    Args:
        req: Output of build_search_request()
        timeout: Seconds before the request is abandoned

    Returns:
        Dictionary with status_code, the query vars, the payload sent and the
        decoded response (or its raw text when it is not JSON).

    Raises:
        SearchRequestError: If the cluster cannot be reached.
    """
    try:
        response = _http_session.post(
            req["url"],
            headers=req["headers"],
            json=req["json"],
            timeout=timeout,
        )
    except requests.RequestException as exc:
        raise SearchRequestError(f"Search request to {req['url']} failed: {exc}") from exc

    try:
        data = response.json()
    except ValueError:
        # Proxies and some cluster errors answer with plain text
        data = {"raw_text": response.text}

    return {
        "status_code": response.status_code,
        "query_vars": req["query_vars"],
        "request_payload": req["json"],
        "response": data,
    }


def summarize_hits(response: Dict[str, Any]) -> str:
    hits = response.get("hits") or {}
    total = hits.get("total")
    if isinstance(total, dict):
        total = total.get("value")
    ids = [h.get("_id") for h in hits.get("hits", [])]
    return f"total={total} ids={ids}"


# ============================================================
# Console loop
# ============================================================

if __name__ == "__main__":
    settings = CompilerSettings.from_env()
    compiler = QueryCompiler(settings)

    print("=== Comment Query Console ===")
    if settings.elasticsearch_url:
        print(f"Searching {settings.elasticsearch_url}/{settings.index_name}")
    else:
        print("ES_URL not set: compiled queries are printed but not executed")
    print("Enter query vars as JSON or 'exit' to quit\n")

    while True:
        try:
            line = input("Query vars: ").strip()
        except (EOFError, KeyboardInterrupt):
            print("\n\nExiting...")
            break

        if line.lower() in ["exit", "quit", "q"]:
            print("Exiting...")
            break

        if not line:
            continue

        try:
            query_vars = json.loads(line)
        except json.JSONDecodeError as exc:
            print(f"❌ Invalid JSON: {exc}")
            continue

        if not isinstance(query_vars, dict):
            print("❌ Query vars must be a JSON object")
            continue

        t1_input_received = time.time()
        req = build_search_request(
            query_vars,
            service_endpoint=settings.elasticsearch_url or "http://localhost:9200",
            index_name=settings.index_name,
            compiler=compiler,
        )
        t2_compiled = time.time()

        print("\n==============================")
        print("URL:", req["url"])
        print("Payload JSON:", json.dumps(req["json"], indent=2))
        print(f"[PERFORMANCE] Compile: {(t2_compiled - t1_input_received) * 1000:.2f} ms")

        if not settings.elasticsearch_url:
            continue

        try:
            result = execute_search_request(req, timeout=settings.request_timeout)
        except SearchRequestError as exc:
            print(f"❌ {exc}")
            continue

        t3_response_received = time.time()
        print("Status code:", result["status_code"])
        print("Hits:", summarize_hits(result["response"]))
        print(f"[PERFORMANCE] Search: {(t3_response_received - t2_compiled) * 1000:.2f} ms")
