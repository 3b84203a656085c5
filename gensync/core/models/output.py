"""
Output configuration model — where and how one category of generated files is written.

Configurations are named.  A generator addresses them by name; the
synchronizer receives an ``OutputConfigurations`` table at construction
time and never mutates it.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from pydantic import BaseModel, ConfigDict

DEFAULT_OUTPUT = "DEFAULT_OUTPUT"


class OutputConfiguration(BaseModel):
    """Policy bundle for one named output category."""

    model_config = ConfigDict(frozen=True)

    name: str = DEFAULT_OUTPUT
    description: str = ""
    output_directory: str = "src-gen"          # relative to the project root

    create_output_directory: bool = True
    override_existing_resources: bool = True
    set_derived_property: bool = True
    clean_up_derived_resources: bool = True
    keep_local_history: bool = True


class OutputConfigurations:
    """Read-only lookup table of output configurations by name."""

    def __init__(self, configurations: Iterable[OutputConfiguration] = ()):
        self._by_name: dict[str, OutputConfiguration] = {}
        for config in configurations:
            if config.name in self._by_name:
                raise ValueError(f"Duplicate output configuration: {config.name}")
            self._by_name[config.name] = config

    @classmethod
    def with_defaults(cls) -> OutputConfigurations:
        """A table holding only ``DEFAULT_OUTPUT`` with default policy."""
        return cls([OutputConfiguration()])

    def get(self, name: str) -> OutputConfiguration:
        config = self._by_name.get(name)
        if config is None:
            raise KeyError(f"Unknown output configuration: {name}")
        return config

    def names(self) -> list[str]:
        return list(self._by_name)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    def __iter__(self) -> Iterator[OutputConfiguration]:
        return iter(self._by_name.values())

    def __len__(self) -> int:
        return len(self._by_name)
