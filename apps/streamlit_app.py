import streamlit as st
import time
import json

# ============================================================
# Backend Import Configuration
# ============================================================
# The playground compiles through the same helpers as the console
# (app.py) so both front ends show the exact body sent to Elasticsearch.
# ============================================================
import sys
from pathlib import Path
sys.path.append(str(Path(__file__).parent.parent))
from app import build_search_request, execute_search_request, summarize_hits
from comment_query import CompilerSettings, QueryCompiler
from comment_query.errors import CommentQueryError

# Page configuration
st.set_page_config(
    page_title="Comment Query Playground",
    page_icon="",
    layout="wide",
    initial_sidebar_state="expanded"
)

st.markdown("""
<style>
    .header-container {
        text-align: center;
        padding: 1.5rem 0 2rem 0;
        background: linear-gradient(135deg, #3b6e8f 0%, #2c3e50 100%);
        border-radius: 16px;
        margin-bottom: 1.5rem;
    }

    .header-title {
        color: white;
        font-size: 2.2rem;
        font-weight: 700;
        margin: 0;
    }

    .header-subtitle {
        color: rgba(255, 255, 255, 0.85);
        font-size: 1rem;
        margin-top: 0.5rem;
    }

    .section-header {
        color: #3b6e8f;
        font-size: 1.2rem;
        font-weight: 600;
        margin: 1.2rem 0 0.8rem 0;
        border-bottom: 2px solid #f0f0f0;
    }
</style>
""", unsafe_allow_html=True)

st.markdown("""
<div class="header-container">
    <h1 class="header-title"> Comment Query Playground</h1>
    <p class="header-subtitle">Query vars in, Elasticsearch search body out</p>
</div>
""", unsafe_allow_html=True)


# ============================================================
# Settings with Caching
# ============================================================
# Settings are read from the environment (.env included) once per app
# lifecycle and shared across sessions. Restart the app after editing .env.
# ============================================================

@st.cache_resource
def get_compiler():
    """
    Build and cache the compiler for all sessions.

    Returns:
        Tuple of (CompilerSettings, QueryCompiler)
    """
    settings = CompilerSettings.from_env()
    return settings, QueryCompiler(settings)


try:
    settings, compiler = get_compiler()
except CommentQueryError as e:
    st.error(f" Invalid configuration: {e}")
    st.stop()


def form_to_query_vars(form: dict) -> dict:
    """Drop blank form inputs so only the vars the user filled in are compiled."""
    query_vars = {}
    for name, value in form.items():
        if isinstance(value, str):
            value = value.strip()
        if value in ("", None):
            continue
        query_vars[name] = value
    return query_vars


# ============================================================
# Query vars form
# ============================================================

with st.sidebar:
    st.markdown("### Pagination & sort")
    number = st.number_input("number", min_value=0, value=10, step=1)
    paged = st.number_input("paged", min_value=0, value=0, step=1)
    orderby = st.selectbox(
        "orderby",
        ["", "comment_date_gmt", "comment_date", "comment_karma", "comment_author",
         "comment_ID", "comment_post_ID", "meta_value", "meta_value_num"],
    )
    order = st.radio("order", ["DESC", "ASC"], horizontal=True)
    fields = st.selectbox("fields", ["", "ids"])

col1, col2 = st.columns(2)
with col1:
    search = st.text_input("search", placeholder="e.g. 'great post'")
    status = st.text_input("status", placeholder="approve, hold, all or a comma list")
    include_unapproved = st.text_input("include_unapproved", placeholder="e.g. 3,a@example.com")
    comment_type = st.text_input("type", placeholder="comment, pingback")
    meta_key = st.text_input("meta_key")
    meta_value = st.text_input("meta_value")
with col2:
    post_id = st.text_input("post_id")
    post_status = st.text_input("post_status", placeholder="publish, any")
    post_type = st.text_input("post_type")
    author_email = st.text_input("author_email")
    parent = st.text_input("parent")
    hierarchical = st.checkbox("hierarchical")

with st.expander(" Extra query vars (JSON)", expanded=False):
    extra_json = st.text_area(
        "Merged over the form values",
        placeholder='{"date_query": {"after": "2024-01-01"}, "post__in": [1, 2]}',
    )

compile_button = st.button(" Compile", use_container_width=True)


# ============================================================
# Compile (and optionally search)
# ============================================================
# t1: form submitted, t2: body compiled, t3: search response received
# ============================================================

if compile_button:
    query_vars = form_to_query_vars({
        "number": int(number) or None,
        "paged": int(paged) or None,
        "orderby": orderby,
        "order": order,
        "fields": fields,
        "search": search,
        "status": status,
        "include_unapproved": include_unapproved,
        "type": comment_type,
        "meta_key": meta_key,
        "meta_value": meta_value,
        "post_id": post_id,
        "post_status": post_status,
        "post_type": post_type,
        "author_email": author_email,
        "parent": parent,
        "hierarchical": hierarchical or None,
    })

    if extra_json.strip():
        try:
            extra = json.loads(extra_json)
        except json.JSONDecodeError as e:
            st.error(f" Invalid JSON in extra query vars: {e}")
            st.stop()
        if not isinstance(extra, dict):
            st.error(" Extra query vars must be a JSON object")
            st.stop()
        query_vars.update(extra)

    t1_input_received = time.time()
    req = build_search_request(
        query_vars,
        service_endpoint=settings.elasticsearch_url or "http://localhost:9200",
        index_name=settings.index_name,
        compiler=compiler,
    )
    t2_compiled = time.time()

    st.markdown('<div class="section-header"> Query vars</div>', unsafe_allow_html=True)
    st.json(query_vars)

    st.markdown('<div class="section-header"> Search body</div>', unsafe_allow_html=True)
    st.code(f"POST {req['url']}", language="text")
    st.json(req["json"])
    st.caption(f"Compiled in {(t2_compiled - t1_input_received) * 1000:.2f}ms")

    if settings.elasticsearch_url:
        with st.spinner(" Searching..."):
            try:
                result = execute_search_request(req, timeout=settings.request_timeout)
            except CommentQueryError as e:
                st.error(f" {e}")
                st.stop()
        t3_response_received = time.time()

        st.markdown('<div class="section-header"> Response</div>', unsafe_allow_html=True)
        if result["status_code"] == 200:
            st.success(f"Success (200): {summarize_hits(result['response'])}")
        else:
            st.error(f"Error ({result['status_code']})")
        st.caption(f"Search took {(t3_response_received - t2_compiled) * 1000:.0f}ms")
        with st.expander(" Full Response", expanded=False):
            st.json(result["response"])
    else:
        st.info(" Set ES_URL in .env to run the compiled query against a cluster")

# Footer
st.markdown("---")
st.markdown("""
<div style="text-align: center; color: #666; font-size: 0.9rem; padding: 1rem;">
    <p>Built with Streamlit | WP_Comment_Query vars compiled to Elasticsearch DSL</p>
</div>
""", unsafe_allow_html=True)
