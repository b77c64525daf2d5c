"""Module types and graph edges shared by the package scanner and graph engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ModuleType(str, Enum):
    """The kinds of module directory a package may contain.

    Values double as the keys used in ``package.yml`` override maps.
    """

    MAIN = "main"
    IMPL = "impl"
    TESTS = "tests"
    TEST_HELPERS = "testHelpers"

    @property
    def suffix(self) -> str:
        """Directory-name suffix appended to the package name."""
        return _SUFFIXES[self]

    def directory(self, package_name: str) -> str:
        return package_name + self.suffix

    @property
    def bridged_sibling_imports(self) -> list[ModuleType]:
        """Sibling types whose imports are merged into ours for graph checks.

        Main bridges Impl: protocols declared in main inject their
        implementations, so anything using main may transitively need
        whatever impl imports.
        """
        if self is ModuleType.MAIN:
            return [ModuleType.IMPL]
        return []

    @classmethod
    def from_key(cls, key: str) -> ModuleType | None:
        try:
            return cls(key)
        except ValueError:
            return None


_SUFFIXES = {
    ModuleType.MAIN: "",
    ModuleType.IMPL: "Impl",
    ModuleType.TESTS: "Tests",
    ModuleType.TEST_HELPERS: "TestHelpers",
}


@dataclass(frozen=True)
class ModuleImport:
    """An edge in the import graph.

    Identity is the imported ``name`` only; ``bridge`` records which sibling
    module type the edge was inherited from and does not affect equality.
    """

    name: str
    bridge: ModuleType | None = field(default=None, compare=False)
