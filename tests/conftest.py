"""Shared builders for on-disk package and dependency fixtures."""

from __future__ import annotations

from pathlib import Path

import pytest


def write_module(
    package_dir: Path, directory: str, sources: dict[str, str]
) -> Path:
    module_dir = package_dir / directory
    module_dir.mkdir(parents=True, exist_ok=True)
    for filename, text in sources.items():
        path = module_dir / filename
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
    return module_dir


def make_package(
    root: Path,
    name: str,
    modules: dict[str, list[str]],
    *,
    config: str = "",
    parent: str = "",
) -> Path:
    """Create ``<root>/<parent>/<name>/package.yml`` plus one module per suffix.

    *modules* maps a directory suffix ("", "Impl", "Tests", ...) to the
    names imported by that module's single source file.
    """
    package_dir = root / parent / name if parent else root / name
    package_dir.mkdir(parents=True, exist_ok=True)
    (package_dir / "package.yml").write_text(config, encoding="utf-8")
    for suffix, imports in modules.items():
        body = "".join(f"import {name}\n" for name in imports)
        write_module(
            package_dir,
            name + suffix,
            {f"{name}{suffix}.swift": body + "\nstruct Placeholder {}\n"},
        )
    return package_dir


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "project"
    root.mkdir()
    return root
