"""Query formulations tried against the backend, most specific first."""

import re
from dataclasses import dataclass
from typing import Callable

# Characters with operator meaning in Sphinx extended query syntax
_MATCH_SPECIAL = re.compile(r"""([\\()|\-!@~"&/^$=<>])""")


@dataclass(frozen=True)
class QueryStrategy:
    """One named way of turning query text into a backend query body."""

    name: str
    build: Callable[[str, int, str], dict]

    def body(self, text: str, limit: int, index_name: str) -> dict:
        return self.build(text, limit, index_name)


def escape_match(text: str) -> str:
    """Escape operator characters for a full-text MATCH() expression."""
    return _MATCH_SPECIAL.sub(r"\\\1", text)


# HTTP JSON query bodies

_SOURCE_FIELDS = ["title", "url", "content"]


def _bool_should(text: str, limit: int, index_name: str) -> dict:
    return {
        "index": index_name,
        "query": {
            "bool": {
                "should": [
                    {"match": {"content": text}},
                    {"match": {"title": text}},
                ]
            }
        },
        "limit": limit,
        "_source": _SOURCE_FIELDS,
    }


def _multi_match(text: str, limit: int, index_name: str) -> dict:
    return {
        "index": index_name,
        "query": {"multi_match": {"query": text, "fields": ["title^2", "content"]}},
        "limit": limit,
        "_source": _SOURCE_FIELDS,
    }


def _match_all_fields(text: str, limit: int, index_name: str) -> dict:
    return {
        "index": index_name,
        "query": {"match": {"_all": text}},
        "limit": limit,
    }


HTTP_STRATEGIES = [
    QueryStrategy("bool_should", _bool_should),
    QueryStrategy("multi_match", _multi_match),
    QueryStrategy("match_all_fields", _match_all_fields),
]


# SQL MATCH() expressions

def _title_content_any(text: str, limit: int, index_name: str) -> dict:
    terms = [escape_match(term) for term in text.split()]
    expression = "@(title_text,content_text) (" + " | ".join(terms) + ")"
    return {"index": index_name, "match": expression, "limit": limit}


def _all_fields(text: str, limit: int, index_name: str) -> dict:
    return {"index": index_name, "match": escape_match(text), "limit": limit}


SQL_STRATEGIES = [
    QueryStrategy("title_content_any", _title_content_any),
    QueryStrategy("all_fields", _all_fields),
]
