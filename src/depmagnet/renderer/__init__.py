"""Manifest renderers for the module graph."""

from __future__ import annotations

from dataclasses import dataclass, field

from depmagnet.config import DependencyConfig
from depmagnet.packages import IMPORTS_FILENAME, Module

DEFAULT_EXCLUSIONS = [IMPORTS_FILENAME]


@dataclass
class TargetDependencies:
    """A module's imports split into internal targets and external products."""

    internal: list[str] = field(default_factory=list)
    # package name -> product names
    external: dict[str, list[str]] = field(default_factory=dict)


def split_dependencies(
    module: Module,
    internal_modules: set[str],
    libraries: dict[str, DependencyConfig],
) -> TargetDependencies:
    """Classify *module*'s imports; imports matching neither side are system frameworks."""
    result = TargetDependencies()
    for name in sorted(module.imported_modules):
        if name == module.name:
            continue
        if name in internal_modules:
            result.internal.append(name)
        elif name in libraries:
            package = libraries[name].inferred_package_name
            result.external.setdefault(package, []).append(name)
    result.external = dict(sorted(result.external.items()))
    return result


def existing_exclusions(module: Module, extra: list[str] | None) -> list[str]:
    return [
        exclusion
        for exclusion in DEFAULT_EXCLUSIONS + (extra or [])
        if (module.absolute_base_path / exclusion).exists()
    ]
