"""Load ``dependencies.yml``: the list of external packages to vendor."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

import yaml

from depmagnet import yamlio
from depmagnet.errors import CommandError, DepMagnetError

logger = logging.getLogger(__name__)

DEFAULT_DEPENDENCIES_CONFIG = "Dependencies/dependencies.yml"

# (yaml key, attribute, label used in .package(...)), in priority order
_QUALIFIERS = (
    ("from", "from_", "from: "),
    ("range", "range", ""),
    ("closedRange", "closed_range", ""),
    ("branch", "branch", "branch: "),
    ("revision", "revision", "revision: "),
    ("exact", "exact", "exact: "),
)


@dataclass
class DependencyConfig:
    """One external dependency declaration."""

    url: str
    from_: str | None = None
    range: str | None = None
    closed_range: str | None = None
    branch: str | None = None
    revision: str | None = None
    exact: str | None = None
    package_name: str | None = None
    libraries: list[str] | None = None
    keep_remote: bool = False
    ignore_sha: bool = False
    refresh_cursor: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> DependencyConfig:
        """Build from a parsed YAML mapping; raise ValueError on a schema mismatch."""
        if not isinstance(data, dict):
            raise ValueError("dependency entry must be a mapping")
        url = data.get("url")
        if not isinstance(url, str) or not url:
            raise ValueError("dependency entry requires a url")

        values: dict = {}
        for key, attr, _label in _QUALIFIERS:
            values[attr] = yamlio.optional_str(data, key)

        libraries = yamlio.optional(data, "libraries")
        if libraries is not None and (
            not isinstance(libraries, list)
            or not all(isinstance(lib, str) for lib in libraries)
        ):
            raise ValueError(f"{url}: libraries must be a list of strings")

        return cls(
            url=url,
            package_name=yamlio.optional_str(data, "packageName"),
            libraries=libraries,
            keep_remote=bool(yamlio.optional_bool(data, "keepRemote")),
            ignore_sha=bool(yamlio.optional_bool(data, "ignoreSha")),
            refresh_cursor=yamlio.optional_str(data, "refreshCursor"),
            **values,
        )

    @property
    def package_qualifier(self) -> tuple[str, str]:
        """Return (label, value) of the highest-priority version qualifier."""
        for _key, attr, label in _QUALIFIERS:
            value = getattr(self, attr)
            if value is not None:
                return label, value
        raise DepMagnetError(
            CommandError.NO_DEPENDENCY_QUALIFIER,
            f"Dependency {self.url} does not have a qualifier",
        )

    @property
    def package_string(self) -> str:
        label, value = self.package_qualifier
        return f'.package(url: "{self.url}", {label}"{value}")'

    @property
    def inferred_package_name(self) -> str:
        if self.package_name:
            return self.package_name
        last = self.url.rstrip("/").rsplit("/", 1)[-1]
        return last.removesuffix(".git")


def load_dependencies_config(path: Path | str) -> list[DependencyConfig]:
    """Read the dependency list from *path*.

    A missing ``dependencies:`` key yields an empty list; callers decide
    whether that is an error.
    """
    path = Path(path)
    if not path.is_file():
        raise DepMagnetError(
            CommandError.CONFIG_NOT_FOUND, f"Config file not found at {path}"
        )

    try:
        with open(path, encoding="utf-8") as f:
            data = yamlio.load(f)
    except OSError as e:
        raise DepMagnetError(
            CommandError.CONFIG_NOT_FOUND, f"Could not read config file {path}: {e}"
        ) from e
    except yaml.YAMLError as e:
        raise DepMagnetError(
            CommandError.CONFIG_NOT_DECODABLE, f"Could not parse {path}: {e}"
        ) from e

    if yamlio.is_null(data):
        return []

    try:
        if not isinstance(data, dict):
            raise ValueError("top level must be a mapping")
        entries = yamlio.optional(data, "dependencies") or []
        if not isinstance(entries, list):
            raise ValueError("dependencies must be a list")
        return [DependencyConfig.from_dict(entry) for entry in entries]
    except ValueError as e:
        raise DepMagnetError(
            CommandError.CONFIG_NOT_DECODABLE, f"Could not decode {path}: {e}"
        ) from e


def dependency_url_match(url: str, other: str) -> bool:
    """Case-insensitive URL equality that treats ``x`` and ``x.git`` as equal."""
    lhs = url.lower()
    rhs = other.lower()
    return lhs == rhs or rhs == f"{lhs}.git" or lhs == f"{rhs}.git"


def config_for_url(
    configs: list[DependencyConfig], url: str | None
) -> DependencyConfig | None:
    """Return the first config whose url matches *url*."""
    if url is None:
        return None
    for config in configs:
        if dependency_url_match(config.url, url):
            return config
    return None


def library_lookup(configs: list[DependencyConfig]) -> dict[str, DependencyConfig]:
    """Map each importable library name to the dependency that provides it.

    Dependencies without a ``libraries`` list provide a single library named
    after the package.
    """
    lookup: dict[str, DependencyConfig] = {}
    for config in configs:
        if config.libraries:
            for library in config.libraries:
                lookup[library] = config
        else:
            lookup[config.inferred_package_name] = config
    return lookup
