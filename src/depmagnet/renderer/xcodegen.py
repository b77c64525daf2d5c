"""Render XcodeGen ``targets:`` and ``packages:`` YAML documents."""

from __future__ import annotations

import yaml

from depmagnet.config import DependencyConfig, library_lookup
from depmagnet.errors import CommandError, DepMagnetError
from depmagnet.model import ModuleType
from depmagnet.packages import Package
from depmagnet.renderer import existing_exclusions, split_dependencies

SUPPORTED_DESTINATIONS = ("iOS", "tvOS", "watchOS", "visionOS", "macOS", "macCatalyst")

_EMPTY_MARKERS = (": null", ": []", ": {}")


def parse_destinations(platforms: str) -> list[str]:
    """Validate a comma-delimited destination list."""
    destinations = []
    for platform in platforms.split(","):
        if platform not in SUPPORTED_DESTINATIONS:
            raise DepMagnetError(
                CommandError.INVALID_ARGUMENT,
                f"{platform} is not a valid platform -- options are "
                f"({', '.join(SUPPORTED_DESTINATIONS)})",
            )
        destinations.append(platform)
    return destinations


def build_targets(
    packages: list[Package],
    dependency_configs: list[DependencyConfig],
    destinations: list[str],
) -> dict[str, dict]:
    internal = {m.name for p in packages for m in p.modules.values()}
    libraries = library_lookup(dependency_configs)

    targets: dict[str, dict] = {}
    for package in sorted(packages, key=lambda p: p.name):
        for module_type in sorted(package.modules, key=lambda t: t.value):
            module = package.modules[module_type]
            deps = split_dependencies(module, internal, libraries)
            source = {"path": module.project_base_path}
            excludes = existing_exclusions(
                module, package.file_exclusions.get(module_type)
            )
            if excludes:
                source["excludes"] = excludes

            dependencies: list[dict] = [{"target": name} for name in deps.internal]
            dependencies += [
                {"package": name, "products": products}
                for name, products in deps.external.items()
            ]

            target = {
                "type": "bundle.unit-test"
                if module_type is ModuleType.TESTS
                else "framework",
                "platform": "auto",
                "supportedDestinations": list(destinations),
                "sources": [source],
            }
            if dependencies:
                target["dependencies"] = dependencies
            settings = package.settings_overrides.get(module_type)
            if settings:
                target["settings"] = {"base": dict(settings)}
            targets[module.name] = target
    return targets


def build_packages(
    dependency_configs: list[DependencyConfig], dependency_output_path: str | None
) -> dict[str, dict]:
    packages: dict[str, dict] = {}
    for dependency in sorted(dependency_configs, key=lambda d: d.inferred_package_name):
        name = dependency.inferred_package_name
        if dependency_output_path and not dependency.keep_remote:
            packages[name] = {"path": f"{dependency_output_path}/Packages/{name}"}
            continue

        entry = {"url": dependency.url}
        if dependency.from_ is not None:
            entry["from"] = dependency.from_
        elif dependency.branch is not None:
            entry["branch"] = dependency.branch
        elif dependency.revision is not None:
            entry["revision"] = dependency.revision
        elif dependency.exact is not None:
            entry["exactVersion"] = dependency.exact
        else:
            raise DepMagnetError(
                CommandError.NO_DEPENDENCY_QUALIFIER,
                "xcodegen does not support range qualifiers for package versions, "
                "use [from, branch, revision or exact] in dependencies.yml",
            )
        packages[name] = entry
    return packages


def dump_yaml(document: dict) -> str:
    """Dump with sorted keys, dropping lines that only hold empty values."""
    text = yaml.safe_dump(document, sort_keys=True, default_flow_style=False)
    kept = [
        line
        for line in text.splitlines()
        if not any(marker in line for marker in _EMPTY_MARKERS)
    ]
    return "\n".join(kept) + "\n"
