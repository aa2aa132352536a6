"""Links between beans: incoming-link lookup, cycle detection and link validation."""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass, field

from beans.model import Bean

LINK_PARENT = "parent"
LINK_BLOCKING = "blocking"
HIERARCHICAL_LINK_TYPES = (LINK_BLOCKING, LINK_PARENT)


@dataclass
class IncomingLink:
    """A link from another bean to a target bean."""

    from_bean: Bean
    link_type: str


@dataclass(frozen=True)
class BrokenLink:
    """A link to a bean that does not exist."""

    bean_id: str
    link_type: str
    target: str


@dataclass(frozen=True)
class SelfLink:
    """A bean linking to itself."""

    bean_id: str
    link_type: str


@dataclass
class Cycle:
    """A circular chain of links of one type."""

    link_type: str
    path: list[str]


@dataclass
class LinkCheckResult:
    """All link problems found by a check."""

    broken_links: list[BrokenLink] = field(default_factory=list)
    self_links: list[SelfLink] = field(default_factory=list)
    cycles: list[Cycle] = field(default_factory=list)

    def has_issues(self) -> bool:
        return bool(self.broken_links or self.self_links or self.cycles)

    def total_issues(self) -> int:
        return len(self.broken_links) + len(self.self_links) + len(self.cycles)


def _targets(bean: Bean, link_type: str) -> list[str]:
    if link_type == LINK_PARENT:
        return [bean.parent] if bean.parent else []
    if link_type == LINK_BLOCKING:
        return list(bean.blocking)
    return []


def canonical_cycle_key(path: list[str]) -> str:
    """Return a key identifying a cycle regardless of where it starts.

    ``path`` ends with its first element repeated; the key starts at the smallest ID.
    """
    if len(path) <= 1:
        return ""
    cycle = path[:-1]
    start = cycle.index(min(cycle))
    return "->".join(cycle[start:] + cycle[:start])


def valid_parent_types(bean_type: str) -> list[str] | None:
    """Return the bean types allowed as parent, or None if the type cannot have a parent."""
    if bean_type == "milestone":
        return None
    if bean_type == "epic":
        return ["milestone"]
    if bean_type == "feature":
        return ["milestone", "epic"]
    return ["milestone", "epic", "feature"]


def join_with_or(items: list[str]) -> str:
    """Join items with commas and a final "or"."""
    if not items:
        return ""
    if len(items) == 1:
        return items[0]
    if len(items) == 2:
        return f"{items[0]} or {items[1]}"
    return ", ".join(items[:-1]) + ", or " + items[-1]


class LinkMixin:
    """Link operations for a bean store.

    The host class provides ``_beans`` (ID to Bean), ``_lock`` (a re-entrant
    lock), ``get(bean_id)`` raising a LookupError when the bean is missing and
    ``_save_to_disk(bean)``.
    """

    _beans: dict[str, Bean]
    _lock: threading.RLock
    get: Callable[[str], Bean]
    _save_to_disk: Callable[[Bean], None]

    def find_incoming_links(self, target_id: str) -> list[IncomingLink]:
        """Return every link from another bean to ``target_id``."""
        result: list[IncomingLink] = []
        with self._lock:
            for bean in self._beans.values():
                if bean.parent == target_id:
                    result.append(IncomingLink(bean, LINK_PARENT))
                result.extend(
                    IncomingLink(bean, LINK_BLOCKING)
                    for blocked in bean.blocking
                    if blocked == target_id
                )
        return result

    def detect_cycle(self, from_id: str, link_type: str, to_id: str) -> list[str] | None:
        """Return the cycle that a new link ``from_id -> to_id`` would close, or None."""
        if link_type not in HIERARCHICAL_LINK_TYPES:
            return None
        with self._lock:
            return self._find_path(to_id, from_id, link_type, set(), [from_id, to_id])

    def _find_path(
        self, current: str, target: str, link_type: str, visited: set[str], path: list[str]
    ) -> list[str] | None:
        if current == target:
            return path
        if current in visited:
            return None
        visited.add(current)
        bean = self._beans.get(current)
        if bean is None:
            return None
        for nxt in _targets(bean, link_type):
            found = self._find_path(nxt, target, link_type, visited, path + [nxt])
            if found is not None:
                return found
        return None

    def check_all_links(self) -> LinkCheckResult:
        """Find broken links, self-links and cycles across all beans."""
        result = LinkCheckResult()
        with self._lock:
            for bean in self._beans.values():
                if bean.parent:
                    if bean.parent == bean.id:
                        result.self_links.append(SelfLink(bean.id, LINK_PARENT))
                    elif bean.parent not in self._beans:
                        result.broken_links.append(BrokenLink(bean.id, LINK_PARENT, bean.parent))
                for blocked in bean.blocking:
                    if blocked == bean.id:
                        result.self_links.append(SelfLink(bean.id, LINK_BLOCKING))
                    elif blocked not in self._beans:
                        result.broken_links.append(BrokenLink(bean.id, LINK_BLOCKING, blocked))
            for link_type in HIERARCHICAL_LINK_TYPES:
                result.cycles.extend(self._find_cycles(link_type))
        return result

    def _find_cycles(self, link_type: str) -> list[Cycle]:
        cycles: list[Cycle] = []
        visited: set[str] = set()
        in_stack: set[str] = set()
        seen: set[str] = set()

        def dfs(bean_id: str, path: list[str]) -> None:
            if bean_id in in_stack:
                if bean_id in path:
                    cycle_path = path[path.index(bean_id):] + [bean_id]
                    key = canonical_cycle_key(cycle_path)
                    if key not in seen:
                        seen.add(key)
                        cycles.append(Cycle(link_type, cycle_path))
                return
            if bean_id in visited:
                return
            visited.add(bean_id)
            in_stack.add(bean_id)
            bean = self._beans.get(bean_id)
            if bean is not None:
                for target in _targets(bean, link_type):
                    if target != bean_id:
                        dfs(target, path + [bean_id])
            in_stack.discard(bean_id)

        for bean_id in list(self._beans):
            if bean_id not in visited:
                dfs(bean_id, [])
        return cycles

    def remove_links_to(self, target_id: str) -> int:
        """Remove every link pointing at ``target_id``; return how many were removed."""
        removed = 0
        with self._lock:
            for bean in self._beans.values():
                count = 0
                if bean.parent == target_id:
                    bean.parent = ""
                    count += 1
                before = len(bean.blocking)
                bean.remove_blocking(target_id)
                count += before - len(bean.blocking)
                if count:
                    removed += count
                    self._save_to_disk(bean)
        return removed

    def fix_broken_links(self) -> int:
        """Remove broken links and self-links; return how many were fixed."""
        fixed = 0
        with self._lock:
            for bean in self._beans.values():
                count = 0
                if bean.parent and (bean.parent == bean.id or bean.parent not in self._beans):
                    bean.parent = ""
                    count += 1
                kept = [b for b in bean.blocking if b != bean.id and b in self._beans]
                if len(kept) < len(bean.blocking):
                    count += len(bean.blocking) - len(kept)
                    bean.blocking = kept
                if count:
                    fixed += count
                    self._save_to_disk(bean)
        return fixed

    def validate_parent(self, bean: Bean, parent_id: str) -> None:
        """Raise ValueError if ``parent_id`` is not an acceptable parent for ``bean``."""
        if not parent_id:
            return
        allowed = valid_parent_types(bean.type)
        if allowed is None:
            raise ValueError(f"{bean.type} beans cannot have a parent")
        try:
            parent = self.get(parent_id)
        except LookupError:
            raise ValueError(f"parent bean not found: {parent_id}") from None
        if parent.type not in allowed:
            raise ValueError(
                f"{bean.type} beans can only have {join_with_or(allowed)} as parent, "
                f"not {parent.type}"
            )