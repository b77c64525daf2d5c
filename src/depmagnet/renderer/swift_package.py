"""Render a SwiftPM ``Package.swift`` for the discovered modules."""

from __future__ import annotations

from pathlib import Path
from string import Template

from depmagnet.config import DependencyConfig, library_lookup
from depmagnet.model import ModuleType
from depmagnet.packages import Module, Package
from depmagnet.renderer import existing_exclusions, split_dependencies

_TEMPLATE = Template(
    """\
// swift-tools-version:$swift_tools

import PackageDescription

let package = Package(
  name: "$package_name",
  platforms: [
    $platforms
  ],
  products: [
$products
  ],
  dependencies: [
$dependencies
  ],
  targets: [
$targets
  ]
)
"""
)


def render_package_swift(
    *,
    package_name: str,
    swift_tools_version: str,
    platforms: str,
    packages: list[Package],
    dependency_lines: list[str],
    dependency_configs: list[DependencyConfig],
    included_modules: set[str] | None = None,
) -> str:
    """Return the text of a Package.swift.

    ``included_modules`` restricts products and targets to the given names
    (normally a transitive closure from the requested products).
    """
    modules = sorted(
        (
            (package, module)
            for package in packages
            for module in package.modules.values()
            if included_modules is None or module.name in included_modules
        ),
        key=lambda pm: pm[1].name,
    )
    internal = {module.name for _package, module in modules}
    libraries = library_lookup(dependency_configs)

    products = [
        f'    .library(name: "{module.name}", targets: ["{module.name}"]),'
        for _package, module in modules
        if module.type is ModuleType.MAIN
    ]
    targets = [
        _target(module, package, internal, libraries) for package, module in modules
    ]

    return _TEMPLATE.substitute(
        swift_tools=swift_tools_version,
        package_name=package_name,
        platforms=platforms,
        products="\n".join(products),
        dependencies="\n".join(f"    {line}," for line in dependency_lines),
        targets="\n".join(targets),
    )


def _target(
    module: Module,
    package: Package,
    internal: set[str],
    libraries: dict[str, DependencyConfig],
) -> str:
    kind = "testTarget" if module.type is ModuleType.TESTS else "target"
    deps = split_dependencies(module, internal, libraries)

    lines = [f"    .{kind}(", f'      name: "{module.name}",', "      dependencies: ["]
    lines += [f'        "{name}",' for name in deps.internal]
    for package_name, products in deps.external.items():
        lines += [
            f'        .product(name: "{product}", package: "{package_name}"),'
            for product in products
        ]
    lines.append("      ],")

    path = module.project_base_path.rstrip("/")
    exclusions = existing_exclusions(module, package.file_exclusions.get(module.type))
    if exclusions:
        lines.append(f'      path: "{path}",')
        quoted = ", ".join(f'"{e}"' for e in exclusions)
        lines.append(f"      exclude: [{quoted}]")
    else:
        lines.append(f'      path: "{path}"')
    lines.append("    ),")
    return "\n".join(lines)


def local_package_line(package_name: str, path: Path | str) -> str:
    return f'.package(name: "{package_name}", path: "{path}")'
