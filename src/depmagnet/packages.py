"""Discover module packages on disk and the modules inside them.

A package is any directory holding a marker file (``package.yml`` by
default).  Its modules live in sibling directories named after the package
plus a module-type suffix, e.g. ``Foo/``, ``FooImpl/``, ``FooTests/``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

import yaml

from depmagnet import yamlio
from depmagnet.errors import CommandError, DepMagnetError
from depmagnet.extractors import is_swift_source
from depmagnet.extractors.swift_imports import detect_imports
from depmagnet.model import ModuleType

logger = logging.getLogger(__name__)

IMPORTS_FILENAME = "imports.yml"
DEFAULT_PACKAGE_FILENAME = "package.yml"


class Module:
    """One module directory and its (lazily computed) import list."""

    def __init__(
        self,
        name: str,
        type: ModuleType,
        absolute_base_path: Path,
        project_base_path: str,
    ):
        self.name = name
        self.type = type
        self.absolute_base_path = absolute_base_path
        self.project_base_path = project_base_path
        self._imported_modules: list[str] | None = None

    def __repr__(self) -> str:
        return f"Module({self.name!r}, {self.type.value})"

    @property
    def imports_file_path(self) -> Path:
        return self.absolute_base_path / IMPORTS_FILENAME

    @property
    def imported_modules(self) -> list[str]:
        """Sorted imports, read from ``imports.yml`` when it is usable."""
        if self._imported_modules is None:
            self._imported_modules = self._regenerate_imports_if_necessary()
        return self._imported_modules

    def _regenerate_imports_if_necessary(self) -> list[str]:
        cached = _read_imports_file(self.imports_file_path)
        if cached is not None:
            return cached
        return self.regenerate_imports_file() or []

    def regenerate_imports_file(
        self, ignore_filenames: frozenset[str] | set[str] = frozenset()
    ) -> list[str] | None:
        """Rescan sources and rewrite ``imports.yml``.

        Returns None if the module directory is gone.  An empty result
        removes any stale ``imports.yml``.
        """
        found = detect_imports(
            self.absolute_base_path,
            deep_search=True,
            ignore_filenames=ignore_filenames,
        )
        if found is None:
            return None

        imports = sorted(found)
        self._imported_modules = imports

        if not imports:
            try:
                self.imports_file_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning("Could not remove %s: %s", self.imports_file_path, e)
            return []

        try:
            self.imports_file_path.write_text(
                yaml.safe_dump(imports, default_flow_style=False),
                encoding="utf-8",
            )
        except OSError as e:
            logger.warning("Could not write %s: %s", self.imports_file_path, e)
        return imports


def _read_imports_file(path: Path) -> list[str] | None:
    try:
        data = yamlio.load(path.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError):
        return None
    if not isinstance(data, list) or not all(isinstance(i, str) for i in data):
        return None
    return data


@dataclass
class PackageConfig:
    """Decoded ``package.yml``.  Every field is optional; empty files are normal."""

    description: str | None = None
    disable: bool | None = None
    disable_tests: bool | None = None
    directory_overrides: dict[str, str] | None = None
    settings_overrides: dict[str, dict[str, str]] | None = None
    file_exclusions: dict[str, list[str]] | None = None

    @classmethod
    def from_dict(cls, data: dict) -> PackageConfig:
        """Build a config from parsed YAML; raise ValueError on a schema mismatch."""
        if not isinstance(data, dict):
            raise ValueError("package config must be a mapping")

        settings = yamlio.optional(data, "settingsOverrides")
        if settings is not None:
            settings = _expect_map(settings, "settingsOverrides")
            for key, value in settings.items():
                _expect_str_map(value, f"settingsOverrides.{key}")

        exclusions = yamlio.optional(data, "fileExclusions")
        if exclusions is not None:
            exclusions = _expect_map(exclusions, "fileExclusions")
            for key, value in exclusions.items():
                if not isinstance(value, list) or not all(
                    isinstance(v, str) for v in value
                ):
                    raise ValueError(f"fileExclusions.{key} must be a list of strings")

        overrides = yamlio.optional(data, "directoryOverrides")
        if overrides is not None:
            overrides = _expect_str_map(overrides, "directoryOverrides")

        return cls(
            description=yamlio.optional_str(data, "description"),
            disable=yamlio.optional_bool(data, "disable"),
            disable_tests=yamlio.optional_bool(data, "disableTests"),
            directory_overrides=overrides,
            settings_overrides=settings,
            file_exclusions=exclusions,
        )


def _expect_map(value, key: str) -> dict:
    if not isinstance(value, dict) or not all(isinstance(k, str) for k in value):
        raise ValueError(f"{key} must be a mapping keyed by module type")
    return value


def _expect_str_map(value, key: str) -> dict[str, str]:
    value = _expect_map(value, key)
    if not all(isinstance(v, str) for v in value.values()):
        raise ValueError(f"{key} values must be strings")
    return value


class Package:
    """A directory holding one ``package.yml`` and up to four module directories."""

    def __init__(
        self,
        config: PackageConfig,
        package_file_path: Path,
        absolute_project_path: Path,
    ):
        self.config = config
        self.file_path = package_file_path
        self.absolute_base_path = package_file_path.parent
        self.name = self.absolute_base_path.name
        relative = os.path.relpath(self.absolute_base_path, absolute_project_path)
        self.project_base_path = "" if relative == "." else relative + "/"
        self._modules: dict[ModuleType, Module] | None = None

    @classmethod
    def from_file(
        cls, package_file_path: Path | str, absolute_project_path: Path | str
    ) -> Package | None:
        """Parse *package_file_path*; return None if unreadable or malformed."""
        package_file_path = Path(package_file_path)
        try:
            contents = package_file_path.read_text(encoding="utf-8")
        except OSError as e:
            logger.debug("Could not read %s: %s", package_file_path, e)
            return None

        # An empty package.yml is a valid, empty configuration.
        if not contents.strip():
            contents = "{}"

        try:
            config = PackageConfig.from_dict(yamlio.load(contents))
        except (yaml.YAMLError, ValueError) as e:
            logger.debug("Could not decode %s: %s", package_file_path, e)
            return None

        return cls(config, package_file_path, Path(absolute_project_path))

    def __repr__(self) -> str:
        return f"Package({self.name!r})"

    @property
    def modules(self) -> dict[ModuleType, Module]:
        if self._modules is None:
            self._modules = self.scan_modules()
        return self._modules

    @property
    def settings_overrides(self) -> dict[ModuleType, dict[str, str]]:
        return _by_module_type(self.config.settings_overrides)

    @property
    def file_exclusions(self) -> dict[ModuleType, list[str]]:
        return _by_module_type(self.config.file_exclusions)

    def directory_name(self, module_type: ModuleType) -> str:
        overrides = self.config.directory_overrides or {}
        return overrides.get(module_type.value) or module_type.directory(self.name)

    def scan_modules(self) -> dict[ModuleType, Module]:
        """Return a Module for every type directory that holds Swift sources."""
        if self.config.disable:
            return {}

        modules: dict[ModuleType, Module] = {}
        for module_type in ModuleType:
            if module_type is ModuleType.TESTS and self.config.disable_tests:
                continue

            directory_name = self.directory_name(module_type)
            module_dir = self.absolute_base_path / directory_name
            if not module_dir.is_dir():
                continue
            if not any(
                is_swift_source(child) and child.is_file()
                for child in module_dir.iterdir()
            ):
                continue

            modules[module_type] = Module(
                name=module_type.directory(self.name),
                type=module_type,
                absolute_base_path=module_dir,
                project_base_path=f"{self.project_base_path}{directory_name}/",
            )
        return modules


def _by_module_type(raw: dict | None) -> dict:
    result = {}
    for key, value in (raw or {}).items():
        module_type = ModuleType.from_key(key)
        if module_type is not None:
            result[module_type] = value
    return result


def discover_packages(
    root: Path | str,
    absolute_project_path: Path | str,
    *,
    package_filename: str = DEFAULT_PACKAGE_FILENAME,
) -> list[Package]:
    """Find and parse every *package_filename* beneath *root*.

    A marker file that cannot be parsed is fatal.
    """
    root = Path(root)
    if not root.is_dir():
        return []

    packages: list[Package] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames.sort()
        if package_filename not in filenames:
            continue
        package_file = Path(dirpath) / package_filename
        package = Package.from_file(package_file, absolute_project_path)
        if package is None:
            raise DepMagnetError(
                CommandError.CONFIG_NOT_DECODABLE,
                f"Error creating package from: {package_file}",
            )
        packages.append(package)

    logger.debug("Discovered %d packages under %s", len(packages), root)
    return packages
