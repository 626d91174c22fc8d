"""Resolved configuration model."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Iterable, Mapping, Tuple

__all__ = ["RunConfig"]


@dataclass(frozen=True)
class RunConfig:
    """Settings plus named command groups.

    Both mappings are read-only views; use ``RunConfig.build`` to construct
    one from plain dictionaries.
    """

    settings: Mapping[str, str] = field(default_factory=dict)
    groups: Mapping[str, Tuple[str, ...]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "settings", MappingProxyType(dict(self.settings)))
        object.__setattr__(
            self,
            "groups",
            MappingProxyType(
                {name: tuple(cmds) for name, cmds in self.groups.items()}
            ),
        )

    @classmethod
    def build(
        cls,
        settings: Mapping[str, str] | None = None,
        groups: Mapping[str, Iterable[str]] | None = None,
    ) -> "RunConfig":
        return cls(settings=dict(settings or {}), groups=dict(groups or {}))

    def to_dict(self) -> Dict[str, object]:
        return {
            "settings": dict(self.settings),
            "groups": {name: list(cmds) for name, cmds in self.groups.items()},
        }
