"""Lightweight lexical helpers shared by the policy stages.

Nothing here parses SQL. The helpers only answer positional questions about
normalized text: is this offset inside a quoted literal, how deep in
parentheses is it, and which function call (if any) encloses it.
"""

from __future__ import annotations

import functools
import re

_QUOTES = ("'", '"')


@functools.lru_cache(maxsize=256)
def keyword_re(keyword: str) -> re.Pattern[str]:
    """Whole-word, case-insensitive pattern for a (possibly multi-word) keyword."""
    words = keyword.split()
    return re.compile(r"\b" + r"\s+".join(re.escape(w) for w in words) + r"\b", re.IGNORECASE)


def _word_before(text: str, end: int) -> str | None:
    j = end
    while j > 0 and text[j - 1].isspace():
        j -= 1
    k = j
    while k > 0 and (text[k - 1].isalnum() or text[k - 1] == "_"):
        k -= 1
    return text[k:j].upper() or None


class TextMap:
    """Per-offset paren depth, enclosing call name and literal membership.

    Single-quoted strings and double-quoted identifiers count as literals;
    a doubled quote inside one is an escaped quote. Parentheses inside
    literals are ignored.
    """

    def __init__(self, text: str) -> None:
        self.text = text
        n = len(text)
        self._depth = [0] * n
        self._call: list[str | None] = [None] * n
        self._literal = [False] * n

        stack: list[str | None] = []
        quote: str | None = None
        i = 0
        while i < n:
            ch = text[i]
            if quote is not None:
                self._mark(i, stack, literal=True)
                if ch == quote:
                    if i + 1 < n and text[i + 1] == quote:
                        self._mark(i + 1, stack, literal=True)
                        i += 2
                        continue
                    quote = None
                i += 1
                continue

            if ch in _QUOTES:
                quote = ch
                self._mark(i, stack, literal=True)
                i += 1
                continue

            if ch == "(":
                stack.append(_word_before(text, i))
            elif ch == ")" and stack:
                stack.pop()
            self._mark(i, stack, literal=False)
            i += 1

        self.unterminated_literal = quote is not None

    def _mark(self, i: int, stack: list[str | None], *, literal: bool) -> None:
        self._depth[i] = len(stack)
        self._call[i] = stack[-1] if stack else None
        self._literal[i] = literal

    def depth_at(self, pos: int) -> int:
        return self._depth[pos]

    def call_at(self, pos: int) -> str | None:
        return self._call[pos]

    def in_literal(self, pos: int) -> bool:
        return self._literal[pos]

    def is_top_level(self, pos: int) -> bool:
        return self._depth[pos] == 0 and not self._literal[pos]

    def top_level_matches(
        self, pattern: re.Pattern[str], *, start: int = 0
    ) -> list[re.Match[str]]:
        return [m for m in pattern.finditer(self.text, start) if self.is_top_level(m.start())]
