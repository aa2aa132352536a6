"""Beans: work items stored as Markdown files with a YAML front matter block."""

from __future__ import annotations

import re
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

import yaml

FILE_SUFFIX = ".md"
FILENAME_SEPARATOR = "--"
ID_ALPHABET = "0123456789abcdefghijklmnopqrstuvwxyz"

_DELIMITER = "---"
_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"
_NON_SLUG_CHARS = re.compile(r"[^a-z0-9]+")


@dataclass(eq=False)
class Bean:
    """A single work item.

    ``id``, ``slug`` and ``path`` come from the file name and location; the
    remaining fields live in the front matter and body of the file.
    """

    id: str = ""
    slug: str = ""
    path: str = ""
    title: str = ""
    status: str = ""
    type: str = ""
    priority: str = ""
    tags: list[str] = field(default_factory=list)
    parent: str = ""
    blocking: list[str] = field(default_factory=list)
    created_at: datetime | None = None
    updated_at: datetime | None = None
    body: str = ""

    @classmethod
    def parse(cls, text: str) -> Bean:
        """Parse the contents of a bean file. Raises ValueError on malformed input."""
        front, body = _split_front_matter(text)
        try:
            data = yaml.safe_load(front) if front.strip() else {}
        except yaml.YAMLError as exc:
            raise ValueError(f"invalid front matter: {exc}") from exc
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ValueError("front matter must be a mapping")

        return cls(
            title=_as_str(data.get("title"), "title"),
            status=_as_str(data.get("status"), "status"),
            type=_as_str(data.get("type"), "type"),
            priority=_as_str(data.get("priority"), "priority"),
            tags=_as_str_list(data.get("tags"), "tags"),
            parent=_as_str(data.get("parent"), "parent"),
            blocking=_as_str_list(data.get("blocking"), "blocking"),
            created_at=_as_datetime(data.get("created_at"), "created_at"),
            updated_at=_as_datetime(data.get("updated_at"), "updated_at"),
            body=body.lstrip("\r\n").rstrip("\r\n"),
        )

    def render(self) -> bytes:
        """Render the bean as the contents of its Markdown file."""
        data: dict[str, Any] = {"title": self.title, "status": self.status}
        if self.type:
            data["type"] = self.type
        if self.priority:
            data["priority"] = self.priority
        if self.tags:
            data["tags"] = list(self.tags)
        if self.created_at is not None:
            data["created_at"] = _format_time(self.created_at)
        if self.updated_at is not None:
            data["updated_at"] = _format_time(self.updated_at)
        if self.parent:
            data["parent"] = self.parent
        if self.blocking:
            data["blocking"] = list(self.blocking)

        front = yaml.safe_dump(data, sort_keys=False, allow_unicode=True)
        text = f"{_DELIMITER}\n{front}{_DELIMITER}\n"
        if self.body:
            text += f"\n{self.body}\n"
        return text.encode("utf-8")

    def is_blocking(self, bean_id: str) -> bool:
        return bean_id in self.blocking

    def remove_blocking(self, bean_id: str) -> None:
        """Drop every blocking link to ``bean_id``."""
        self.blocking = [b for b in self.blocking if b != bean_id]


def _split_front_matter(text: str) -> tuple[str, str]:
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].strip() != _DELIMITER:
        return "", text
    for position, line in enumerate(lines[1:], start=1):
        if line.strip() == _DELIMITER:
            return "".join(lines[1:position]), "".join(lines[position + 1 :])
    raise ValueError("front matter is not terminated")


def _as_str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValueError(f"field {key!r} must be a scalar")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_str_list(value: Any, key: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"field {key!r} must be a list")
    return [_as_str(item, key) for item in value]


def _as_datetime(value: Any, key: str) -> datetime | None:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError as exc:
            raise ValueError(f"field {key!r} is not a valid timestamp") from exc
    else:
        raise ValueError(f"field {key!r} must be a timestamp")
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc)


def _format_time(moment: datetime) -> str:
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime(_TIME_FORMAT)


def parse_filename(filename: str) -> tuple[str, str]:
    """Split a bean file name into its ID and slug."""
    stem = filename[: -len(FILE_SUFFIX)] if filename.endswith(FILE_SUFFIX) else filename
    bean_id, _, slug = stem.partition(FILENAME_SEPARATOR)
    return bean_id, slug


def build_filename(bean_id: str, slug: str) -> str:
    """Build the file name for a bean from its ID and slug."""
    if slug:
        return f"{bean_id}{FILENAME_SEPARATOR}{slug}{FILE_SUFFIX}"
    return f"{bean_id}{FILE_SUFFIX}"


def new_id(prefix: str, length: int) -> str:
    """Generate a random ID of ``length`` characters after ``prefix``."""
    if length <= 0:
        raise ValueError("ID length must be positive")
    return prefix + "".join(secrets.choice(ID_ALPHABET) for _ in range(length))


def slugify(text: str) -> str:
    """Turn a title into a lower-case, hyphen-separated slug."""
    return _NON_SLUG_CHARS.sub("-", text.lower()).strip("-")