"""An in-memory full-text index over bean IDs, titles, tags and bodies."""

from __future__ import annotations

import re
import threading
from collections import Counter
from collections.abc import Iterable

from beans.model import Bean

DEFAULT_SEARCH_LIMIT = 100

_WORD_RE = re.compile(r"\w+")


def _words(text: str) -> list[str]:
    return _WORD_RE.findall(text.lower())


class SearchIndex:
    """A thread-safe term index.

    Query words are optional by default; a word prefixed with ``+`` must
    appear and one prefixed with ``-`` must not. Matching is case-insensitive.
    """

    def __init__(self) -> None:
        self._docs: dict[str, Counter[str]] = {}
        self._lock = threading.Lock()
        self._closed = False

    def _check_open(self) -> None:
        if self._closed:
            raise RuntimeError("search index is closed")

    def index_bean(self, bean: Bean) -> None:
        """Add or replace a bean in the index."""
        text = " ".join([bean.id, bean.title, " ".join(bean.tags), bean.body])
        terms = Counter(_words(text))
        with self._lock:
            self._check_open()
            self._docs[bean.id] = terms

    def index_beans(self, beans: Iterable[Bean]) -> None:
        for bean in beans:
            self.index_bean(bean)

    def delete_bean(self, bean_id: str) -> None:
        with self._lock:
            self._check_open()
            self._docs.pop(bean_id, None)

    def search(self, query: str, limit: int = DEFAULT_SEARCH_LIMIT) -> list[str]:
        """Return the IDs of matching beans, best match first."""
        if limit <= 0:
            raise ValueError("search limit must be positive")

        must: set[str] = set()
        must_not: set[str] = set()
        should: set[str] = set()
        for word in query.split():
            if word.startswith("+"):
                must.update(_words(word[1:]))
            elif word.startswith("-"):
                must_not.update(_words(word[1:]))
            else:
                should.update(_words(word))
        if not must and not should:
            return []

        scored: list[tuple[int, str]] = []
        with self._lock:
            self._check_open()
            for bean_id, terms in self._docs.items():
                if any(terms[t] == 0 for t in must):
                    continue
                if any(terms[t] > 0 for t in must_not):
                    continue
                hits = [t for t in should if terms[t] > 0]
                if not must and not hits:
                    continue
                score = sum(terms[t] for t in must) + sum(terms[t] for t in hits)
                scored.append((score, bean_id))

        scored.sort(key=lambda item: (-item[0], item[1]))
        return [bean_id for _, bean_id in scored[:limit]]

    def close(self) -> None:
        """Release the index; later calls raise RuntimeError."""
        with self._lock:
            self._docs.clear()
            self._closed = True

    def __len__(self) -> int:
        with self._lock:
            return len(self._docs)