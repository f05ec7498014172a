"""Query-string helpers on top of ``urllib.parse``.

Pairs keep their original order and blank values survive a round trip, so
stripping parameters from a signed URL gives back exactly the string that was
signed.
"""

from typing import Iterable
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit


def parse_query(query: str) -> list[tuple[str, str]]:
    return parse_qsl(query, keep_blank_values=True)


def query_pairs(url: str) -> list[tuple[str, str]]:
    return parse_query(urlsplit(url).query)


def _replace_query(url: str, pairs: list[tuple[str, str]]) -> str:
    parts = urlsplit(url)
    return urlunsplit(parts._replace(query=urlencode(pairs)))


def without_params(url: str, names: Iterable[str]) -> str:
    names = set(names)
    pairs = [(key, value) for key, value in query_pairs(url) if key not in names]
    return _replace_query(url, pairs)


def with_params(url: str, params: list[tuple[str, str]]) -> str:
    # Existing pairs with the same keys are superseded, new ones go last.
    url = without_params(url, [key for key, _ in params])
    return _replace_query(url, query_pairs(url) + list(params))
