"""Generator / syntax-tree-to-target-source translation."""

from __future__ import annotations

from abc import ABC, abstractmethod


class Generator(ABC):
    @abstractmethod
    def translate(self, tree, source: bytes) -> str:
        ...
