"""Filtering of bean lists by status, type, priority, tags and links."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field
from typing import Protocol

from beans.links import LINK_BLOCKING, IncomingLink
from beans.model import Bean

DEFAULT_PRIORITY = "normal"

Predicate = Callable[[Bean], bool]


class LinkSource(Protocol):
    """Anything that can report the links pointing at a bean."""

    def find_incoming_links(self, target_id: str) -> list[IncomingLink]: ...


@dataclass
class BeanFilter:
    """Criteria for selecting beans.

    List criteria match any of their values; empty lists and ``None`` or
    ``False`` flags are ignored. ``is_blocked`` selects blocked beans when
    True and unblocked beans when False.
    """

    status: list[str] = field(default_factory=list)
    exclude_status: list[str] = field(default_factory=list)
    type: list[str] = field(default_factory=list)
    exclude_type: list[str] = field(default_factory=list)
    priority: list[str] = field(default_factory=list)
    exclude_priority: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    exclude_tags: list[str] = field(default_factory=list)
    has_parent: bool | None = None
    no_parent: bool | None = None
    parent_id: str | None = None
    has_blocking: bool | None = None
    blocking_id: str | None = None
    no_blocking: bool | None = None
    is_blocked: bool | None = None


def _effective_priority(bean: Bean) -> str:
    return bean.priority or DEFAULT_PRIORITY


def _is_blocked(bean: Bean, core: LinkSource) -> bool:
    return any(link.link_type == LINK_BLOCKING for link in core.find_incoming_links(bean.id))


def _predicates(flt: BeanFilter, core: LinkSource | None) -> Iterator[Predicate]:
    if flt.status:
        wanted = set(flt.status)
        yield lambda b: b.status in wanted
    if flt.exclude_status:
        unwanted = set(flt.exclude_status)
        yield lambda b: b.status not in unwanted

    if flt.type:
        wanted_types = set(flt.type)
        yield lambda b: b.type in wanted_types
    if flt.exclude_type:
        unwanted_types = set(flt.exclude_type)
        yield lambda b: b.type not in unwanted_types

    if flt.priority:
        wanted_priorities = set(flt.priority)
        yield lambda b: _effective_priority(b) in wanted_priorities
    if flt.exclude_priority:
        unwanted_priorities = set(flt.exclude_priority)
        yield lambda b: _effective_priority(b) not in unwanted_priorities

    if flt.tags:
        wanted_tags = set(flt.tags)
        yield lambda b: not wanted_tags.isdisjoint(b.tags)
    if flt.exclude_tags:
        unwanted_tags = set(flt.exclude_tags)
        yield lambda b: unwanted_tags.isdisjoint(b.tags)

    if flt.has_parent:
        yield lambda b: bool(b.parent)
    if flt.no_parent:
        yield lambda b: not b.parent
    if flt.parent_id:
        parent_id = flt.parent_id
        yield lambda b: b.parent == parent_id

    if flt.has_blocking:
        yield lambda b: bool(b.blocking)
    if flt.blocking_id:
        blocking_id = flt.blocking_id
        yield lambda b: blocking_id in b.blocking
    if flt.no_blocking:
        yield lambda b: not b.blocking
    if flt.is_blocked is not None:
        if core is None:
            raise ValueError("filtering by blocked state needs a bean store")
        if flt.is_blocked:
            yield lambda b: _is_blocked(b, core)
        else:
            yield lambda b: not _is_blocked(b, core)


def apply_filter(
    beans: Iterable[Bean], bean_filter: BeanFilter | None, core: LinkSource | None = None
) -> list[Bean]:
    """Return the beans that satisfy every criterion of ``bean_filter``, in their original order.

    ``core`` is consulted for incoming blocking links when ``is_blocked`` is set.
    """
    if bean_filter is None:
        return list(beans)
    predicates = list(_predicates(bean_filter, core))
    return [bean for bean in beans if all(check(bean) for check in predicates)]