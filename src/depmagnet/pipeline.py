"""Orchestrators for the module-generation commands: discover → graph → render."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from depmagnet.config import (
    DEFAULT_DEPENDENCIES_CONFIG,
    DependencyConfig,
    load_dependencies_config,
)
from depmagnet.errors import CommandError, DepMagnetError
from depmagnet.graph import ModuleGraph, describe_cycle
from depmagnet.packages import DEFAULT_PACKAGE_FILENAME, Package, discover_packages
from depmagnet.renderer import swift_package, xcodegen
from depmagnet.vendor.pull import PACKAGES_OUTPUT_DIR

logger = logging.getLogger(__name__)


def _require_directory(path: Path, what: str) -> Path:
    path = path.resolve()
    if not path.is_dir():
        raise DepMagnetError(
            CommandError.PATH_NOT_FOUND, f"Directory not found at {what}: {path}"
        )
    return path


def _write_output(path: Path, text: str) -> None:
    try:
        path.write_text(text, encoding="utf-8")
    except OSError as e:
        raise DepMagnetError(
            CommandError.FILE_ERROR, f"Could not write to file [{path}]: {e}"
        ) from e


def _plural(count: int) -> str:
    return "" if count == 1 else "s"


def regenerate_imports(packages: list[Package]) -> None:
    """Rewrite ``imports.yml`` for every module, in name order."""
    logger.info(
        "Regenerate imports for %d package%s", len(packages), _plural(len(packages))
    )
    for package in sorted(packages, key=lambda p: p.name):
        for module in sorted(package.modules.values(), key=lambda m: m.name):
            logger.debug("Regenerate imports for %s", module.name)
            module.regenerate_imports_file()


def generate_imports(
    search_path: Path,
    *,
    project_path: Path | None = None,
    package_filename: str = DEFAULT_PACKAGE_FILENAME,
) -> list[Package]:
    search_path = _require_directory(search_path, "search path")
    project_path = _require_directory(project_path or Path.cwd(), "project path")

    packages = discover_packages(
        search_path, project_path, package_filename=package_filename
    )
    regenerate_imports(packages)
    return packages


def _load_optional_dependencies(config_path: Path) -> list[DependencyConfig]:
    if not config_path.is_file():
        logger.warning(
            "Warning, no external dependencies config found at path: %s", config_path
        )
        return []
    return load_dependencies_config(config_path)


def generate_package(
    root_path: Path,
    *,
    platforms: str,
    swift_tools_version: str = "5.8",
    dependencies_config: Path = Path(DEFAULT_DEPENDENCIES_CONFIG),
    dependency_output_path: Path | None = None,
    package_name: str | None = None,
    products: list[str] | None = None,
    regen_imports: bool = False,
    package_filename: str = DEFAULT_PACKAGE_FILENAME,
) -> Path | None:
    """Write ``<root>/Package.swift`` and return its path (None if no packages)."""
    project_path = _require_directory(root_path, "root path")

    packages = discover_packages(
        project_path, project_path, package_filename=package_filename
    )
    if not packages:
        logger.info("No packages found at root path: %s", project_path)
        return None

    if regen_imports:
        regenerate_imports(packages)

    graph = ModuleGraph(packages)
    # Validates module names before anything is written.
    graph.import_graph
    included = graph.full_dependency_list(products) if products else None

    configs = _load_optional_dependencies(dependencies_config)
    dependency_lines = [
        _package_dependency_line(dependency, dependency_output_path, project_path)
        for dependency in configs
    ]

    out_path = project_path / "Package.swift"
    logger.info("Generating %s", out_path)
    _write_output(
        out_path,
        swift_package.render_package_swift(
            package_name=package_name or project_path.name,
            swift_tools_version=swift_tools_version,
            platforms=platforms,
            packages=packages,
            dependency_lines=dependency_lines,
            dependency_configs=configs,
            included_modules=included,
        ),
    )
    return out_path


def _package_dependency_line(
    dependency: DependencyConfig,
    dependency_output_path: Path | None,
    project_path: Path,
) -> str:
    if dependency.keep_remote:
        return dependency.package_string

    name = dependency.inferred_package_name
    if dependency_output_path is None:
        logger.warning(
            "Warning, no dependencyOutputPath was specified; %s will use remote package",
            name,
        )
        return dependency.package_string

    local = dependency_output_path / PACKAGES_OUTPUT_DIR / name
    if not local.is_dir():
        logger.warning(
            "Warning, no local package exists at %s; %s will use remote package",
            local,
            name,
        )
        return dependency.package_string

    relative = os.path.relpath(local.resolve(), project_path)
    return swift_package.local_package_line(name, relative)


def generate_xcodegen(
    root_path: Path,
    *,
    project_path: Path | None = None,
    output_filename: Path = Path("project-modules.yml"),
    platforms: str = "iOS",
    dependencies_config: Path = Path(DEFAULT_DEPENDENCIES_CONFIG),
    regen_imports: bool = False,
    package_filename: str = DEFAULT_PACKAGE_FILENAME,
) -> Path | None:
    module_root = _require_directory(root_path, "module path")
    project_path = _require_directory(project_path or Path.cwd(), "project path")
    destinations = xcodegen.parse_destinations(platforms)

    packages = discover_packages(
        module_root, project_path, package_filename=package_filename
    )
    configs = (
        load_dependencies_config(dependencies_config)
        if dependencies_config.is_file()
        else []
    )
    if not configs:
        logger.debug("No external dependencies were detected at %s", dependencies_config)

    if not packages:
        logger.info("No packages found at root path: %s", module_root)
        return None

    if regen_imports:
        regenerate_imports(packages)

    ModuleGraph(packages).import_graph

    logger.info("Generating %s", output_filename)
    targets = xcodegen.build_targets(packages, configs, destinations)
    _write_output(output_filename, xcodegen.dump_yaml({"targets": targets}))
    return output_filename


def generate_xcodegen_deps(
    *,
    output_filename: Path = Path("project-dependencies.yml"),
    dependencies_config: Path = Path(DEFAULT_DEPENDENCIES_CONFIG),
    dependency_output_path: str | None = None,
) -> Path | None:
    if not dependencies_config.is_file():
        raise DepMagnetError(
            CommandError.PATH_NOT_FOUND,
            f"Dependencies file not found at path: {dependencies_config}",
        )

    logger.info("Generating %s", output_filename)
    if dependency_output_path is None:
        logger.info(
            "No dependency output path provided, all packages will use remote repo"
        )

    configs = load_dependencies_config(dependencies_config)
    if not configs:
        logger.info("No dependencies found in %s", dependencies_config)
        return None

    packages = xcodegen.build_packages(configs, dependency_output_path)
    _write_output(output_filename, xcodegen.dump_yaml({"packages": packages}))
    return output_filename


def check_cycles(
    root_path: Path,
    *,
    project_path: Path | None = None,
    package_filename: str = DEFAULT_PACKAGE_FILENAME,
) -> None:
    """Raise IMPORT_CYCLE if the module graph under *root_path* has a cycle."""
    module_root = _require_directory(root_path, "root path")
    project_path = _require_directory(project_path or Path.cwd(), "project path")

    packages = discover_packages(
        module_root, project_path, package_filename=package_filename
    )
    cycle = ModuleGraph(packages).import_cycle()
    if cycle is None:
        logger.info("No import cycles among %d packages", len(packages))
        return

    for line in describe_cycle(cycle):
        logger.error("  %s", line)
    raise DepMagnetError(
        CommandError.IMPORT_CYCLE,
        f"Import cycle detected through {len(cycle)} module{_plural(len(cycle))}",
    )
