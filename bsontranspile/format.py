from __future__ import annotations

import ast
import re
from typing import Iterable

_STRING_PARTS = re.compile(r"^(?P<prefix>[rubf]{0,2})(?P<quote>'''|\"\"\"|'|\")(?P<body>.*)(?P=quote)$", re.I | re.S)
_BARE_DOUBLE = re.compile(r'(?<!\\)((?:\\\\)*)"')
_BARE_SINGLE = re.compile(r"(?<!\\)((?:\\\\)*)'")
_QUOTES = re.compile(r"^([rubf]{0,2}(\"\"\"|'''|\"|'))|(\"\"\"|'''|\"|')$", re.I)


def string_body(token_text: str) -> str:
    """Body of a source string token with its escape sequences left in place.

    Raw strings have their backslashes doubled so the body reads the same as a
    regular string body would.
    """
    match = _STRING_PARTS.match(token_text)
    if match is None:
        return token_text
    body = match.group("body")
    if "r" in match.group("prefix").lower():
        body = body.replace("\\", "\\\\")
    return body


def string_value(token_texts: Iterable[str]) -> str:
    """Decoded value of (possibly implicitly concatenated) string tokens."""
    return "".join(ast.literal_eval(text) for text in token_texts)


def double_quote(body: str) -> str:
    body = body.replace("\\'", "'")
    return '"' + _BARE_DOUBLE.sub(r'\1\\"', body) + '"'


def single_quote(body: str) -> str:
    body = body.replace('\\"', '"')
    return "'" + _BARE_SINGLE.sub(r"\1\\'", body) + "'"


def remove_quotes(text: str) -> str:
    return _QUOTES.sub("", text)


__all__ = ["double_quote", "remove_quotes", "single_quote", "string_body", "string_value"]
