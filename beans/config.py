"""Project configuration: the ``.beans.yml`` file and the fixed status, type and priority sets."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

import yaml

CONFIG_FILE_NAME = ".beans.yml"
DEFAULT_BEANS_PATH = ".beans"
LEGACY_CONFIG_FILE = "config.yaml"


@dataclass(frozen=True)
class StatusConfig:
    """A bean status with its display colour."""

    name: str
    color: str
    archive: bool = False
    description: str = ""


@dataclass(frozen=True)
class TypeConfig:
    """A bean type with its display colour."""

    name: str
    color: str
    description: str = ""


@dataclass(frozen=True)
class PriorityConfig:
    """A priority level with its display colour."""

    name: str
    color: str
    description: str = ""


# Order determines sort priority: active work first, finished states last.
DEFAULT_STATUSES: tuple[StatusConfig, ...] = (
    StatusConfig("in-progress", "yellow", description="Currently being worked on"),
    StatusConfig("todo", "green", description="Ready to be worked on"),
    StatusConfig("draft", "blue", description="Needs refinement before it can be worked on"),
    StatusConfig("completed", "gray", archive=True, description="Finished successfully"),
    StatusConfig("scrapped", "gray", archive=True, description="Will not be done"),
)

DEFAULT_TYPES: tuple[TypeConfig, ...] = (
    TypeConfig(
        "milestone",
        "cyan",
        "A target release or checkpoint; group work that should ship together",
    ),
    TypeConfig(
        "epic",
        "purple",
        "A thematic container for related work; should have child beans, not be worked on directly",
    ),
    TypeConfig("bug", "red", "Something that is broken and needs fixing"),
    TypeConfig("feature", "green", "A user-facing capability or enhancement"),
    TypeConfig(
        "task",
        "blue",
        "A concrete piece of work to complete (eg. a chore, or a sub-task for a feature)",
    ),
)

# Ordered from highest to lowest urgency.
DEFAULT_PRIORITIES: tuple[PriorityConfig, ...] = (
    PriorityConfig("critical", "red", "Urgent, blocking work. When possible, address immediately"),
    PriorityConfig("high", "yellow", "Important, should be done before normal work"),
    PriorityConfig("normal", "white", "Standard priority"),
    PriorityConfig("low", "gray", "Less important, can be delayed"),
    PriorityConfig("deferred", "gray", "Explicitly pushed back, avoid doing unless necessary"),
)


@dataclass
class BeansConfig:
    """Settings for bean storage and creation."""

    path: str = ""
    prefix: str = ""
    id_length: int = 0
    default_status: str = ""
    default_type: str = ""
    require_if_match: bool = False

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {}
        if self.path:
            data["path"] = self.path
        data["prefix"] = self.prefix
        data["id_length"] = self.id_length
        if self.default_status:
            data["default_status"] = self.default_status
        if self.default_type:
            data["default_type"] = self.default_type
        if self.require_if_match:
            data["require_if_match"] = True
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BeansConfig:
        return cls(
            path=_as_str(data.get("path"), "path"),
            prefix=_as_str(data.get("prefix"), "prefix"),
            id_length=_as_int(data.get("id_length"), "id_length"),
            default_status=_as_str(data.get("default_status"), "default_status"),
            default_type=_as_str(data.get("default_type"), "default_type"),
            require_if_match=_as_bool(data.get("require_if_match"), "require_if_match"),
        )


def _as_str(value: Any, key: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (dict, list)):
        raise ValueError(f"config field {key!r} must be a scalar")
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _as_int(value: Any, key: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"config field {key!r} must be an integer")
    return value


def _as_bool(value: Any, key: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"config field {key!r} must be a boolean")
    return value


@dataclass(frozen=True)
class BeanColors:
    """Resolved colours for rendering a bean."""

    status_color: str = "gray"
    type_color: str = ""
    priority_color: str = ""
    is_archive: bool = False


@dataclass
class Config:
    """The beans configuration. Statuses, types and priorities are fixed, not configurable."""

    beans: BeansConfig = field(default_factory=BeansConfig)
    config_dir: str = ""

    def resolve_beans_path(self) -> str:
        """Return the absolute path to the beans directory."""
        if os.path.isabs(self.beans.path):
            return self.beans.path
        base = self.config_dir or os.getcwd()
        return os.path.join(base, self.beans.path)

    def save(self, directory: str) -> None:
        """Write the config file into the config directory, or into ``directory`` if unset."""
        target = self.config_dir or directory
        path = os.path.join(target, CONFIG_FILE_NAME)
        text = yaml.safe_dump({"beans": self.beans.to_dict()}, sort_keys=False)
        with open(path, "w", encoding="utf-8") as fh:
            fh.write(text)

    def is_valid_status(self, status: str) -> bool:
        return any(s.name == status for s in DEFAULT_STATUSES)

    def status_list(self) -> str:
        return ", ".join(self.status_names())

    def status_names(self) -> list[str]:
        return [s.name for s in DEFAULT_STATUSES]

    def get_status(self, name: str) -> StatusConfig | None:
        return next((s for s in DEFAULT_STATUSES if s.name == name), None)

    def get_default_status(self) -> str:
        return self.beans.default_status or "todo"

    def get_default_type(self) -> str:
        return self.beans.default_type

    def is_archive_status(self, name: str) -> bool:
        status = self.get_status(name)
        return status.archive if status else False

    def get_type(self, name: str) -> TypeConfig | None:
        return next((t for t in DEFAULT_TYPES if t.name == name), None)

    def type_names(self) -> list[str]:
        return [t.name for t in DEFAULT_TYPES]

    def is_valid_type(self, type_name: str) -> bool:
        return any(t.name == type_name for t in DEFAULT_TYPES)

    def type_list(self) -> str:
        return ", ".join(self.type_names())

    def get_bean_colors(self, status: str, type_name: str, priority: str) -> BeanColors:
        status_cfg = self.get_status(status)
        type_cfg = self.get_type(type_name)
        priority_cfg = self.get_priority(priority)
        return BeanColors(
            status_color=status_cfg.color if status_cfg else "gray",
            type_color=type_cfg.color if type_cfg else "",
            priority_color=priority_cfg.color if priority_cfg else "",
            is_archive=self.is_archive_status(status),
        )

    def get_priority(self, name: str) -> PriorityConfig | None:
        return next((p for p in DEFAULT_PRIORITIES if p.name == name), None)

    def priority_names(self) -> list[str]:
        return [p.name for p in DEFAULT_PRIORITIES]

    def is_valid_priority(self, priority: str) -> bool:
        """Empty priority is valid and means no priority set."""
        if priority == "":
            return True
        return any(p.name == priority for p in DEFAULT_PRIORITIES)

    def priority_list(self) -> str:
        return ", ".join(self.priority_names())


def default() -> Config:
    """Return a Config with default values."""
    return Config(
        beans=BeansConfig(
            path=DEFAULT_BEANS_PATH,
            prefix="",
            id_length=4,
            default_status="todo",
            default_type="task",
        )
    )


def default_with_prefix(prefix: str) -> Config:
    cfg = default()
    cfg.beans.prefix = prefix
    return cfg


def find_config(start_dir: str) -> str:
    """Search upward from ``start_dir`` for a config file; return its path or ``""``."""
    directory = os.path.abspath(start_dir)
    while True:
        candidate = os.path.join(directory, CONFIG_FILE_NAME)
        if os.path.exists(candidate):
            return candidate
        parent = os.path.dirname(directory)
        if parent == directory:
            return ""
        directory = parent


def load(config_path: str) -> Config:
    """Read the config file at ``config_path``; defaults if it does not exist."""
    try:
        with open(config_path, encoding="utf-8") as fh:
            text = fh.read()
    except FileNotFoundError:
        return default()

    data = yaml.safe_load(text) or {}
    if not isinstance(data, dict):
        raise ValueError("config file must contain a mapping")
    section = data.get("beans") or {}
    if not isinstance(section, dict):
        raise ValueError("config field 'beans' must be a mapping")

    cfg = Config(beans=BeansConfig.from_dict(section), config_dir=os.path.dirname(config_path))
    if not cfg.beans.path:
        cfg.beans.path = DEFAULT_BEANS_PATH
    if cfg.beans.id_length == 0:
        cfg.beans.id_length = 4
    if not cfg.beans.default_status:
        cfg.beans.default_status = "todo"
    if not cfg.beans.default_type:
        cfg.beans.default_type = DEFAULT_TYPES[0].name
    return cfg


def load_from_directory(start_dir: str) -> Config:
    """Find and load the config file above ``start_dir``, or defaults anchored there."""
    path = find_config(start_dir)
    if not path:
        cfg = default()
        cfg.config_dir = start_dir
        return cfg
    return load(path)