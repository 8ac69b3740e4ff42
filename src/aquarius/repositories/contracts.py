from __future__ import annotations

from typing import Protocol


class FolioCounter(Protocol):
    def next_value(self, name: str, seed: int) -> int: ...


class InMemoryFolioCounter:
    """Process-local folio counter; values restart from the seed on every run."""

    def __init__(self) -> None:
        self._values: dict[str, int] = {}

    def next_value(self, name: str, seed: int) -> int:
        value = self._values.get(name, int(seed)) + 1
        self._values[name] = value
        return value
