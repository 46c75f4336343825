"""
Tests for comment document preparation.
"""

import json
import logging
from types import SimpleNamespace

from comment_query.documents import (
    prepare_document,
    prepare_meta_types,
    prepare_meta_value_types,
    remap_comment,
)

COMMENT = {
    "comment_ID": 5,
    "comment_post_ID": 12,
    "comment_author": "Ann",
    "comment_author_email": "ann@example.com",
    "comment_author_url": "",
    "comment_author_IP": "127.0.0.1",
    "comment_date": "2024-01-02 03:04:05",
    "comment_date_gmt": "2024-01-02 03:04:05",
    "comment_content": "Nice post",
    "comment_karma": 0,
    "comment_approved": "1",
    "comment_agent": "curl",
    "comment_type": "",
    "comment_parent": 0,
    "user_id": 3,
}

POST = SimpleNamespace(post_author=9, post_status="publish", post_type="post", post_name="hello-world", post_parent=0)


def test_numeric_meta_value():
    assert prepare_meta_value_types("42") == {
        "value": "42",
        "raw": "42",
        "long": 42,
        "double": 42.0,
        "boolean": False,
    }


def test_datetime_meta_value():
    types = prepare_meta_value_types("2021-03-04 05:06:07")

    assert types["date"] == "2021-03-04"
    assert types["datetime"] == "2021-03-04 05:06:07"
    assert types["time"] == "05:06:07"
    assert "long" not in types


def test_boolean_meta_strings():
    assert prepare_meta_value_types("yes")["boolean"] is True
    assert prepare_meta_value_types("nope")["boolean"] is False


def test_container_meta_value_is_serialized():
    types = prepare_meta_value_types({"b": 1, "a": [1, 2]})

    assert types["value"] == json.dumps({"a": [1, 2], "b": 1}, sort_keys=True)


def test_prepare_meta_types_wraps_scalars():
    prepared = prepare_meta_types({"mood": "happy", "scores": ["1", "2"]})

    assert [t["raw"] for t in prepared["mood"]] == ["happy"]
    assert [t["long"] for t in prepared["scores"]] == [1, 2]
    assert prepare_meta_types(None) == {}


def test_remap_comment_adds_id():
    remapped = remap_comment(COMMENT)

    assert remapped["ID"] == 5
    assert list(remapped)[1:] == list(COMMENT)


def test_prepare_document_denormalizes_post():
    document = prepare_document(COMMENT, POST, {"mood": "happy"})

    assert document["ID"] == 5
    assert document["comment_post_author_ID"] == 9
    assert document["comment_post_status"] == "publish"
    assert document["comment_post_name"] == "hello-world"
    assert document["comment_type"] == "comment"
    assert document["meta"]["mood"][0]["value"] == "happy"


def test_prepare_document_without_comment():
    assert prepare_document(None) is None


def test_prepare_document_without_post_warns(caplog):
    with caplog.at_level(logging.WARNING, logger="comment_query.documents"):
        document = prepare_document(COMMENT)

    assert document["comment_post_status"] is None
    assert "no post record" in caplog.text
