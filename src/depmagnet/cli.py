"""Command-line interfaces for dependency vendoring and module generation."""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from depmagnet import pipeline
from depmagnet.config import DEFAULT_DEPENDENCIES_CONFIG, load_dependencies_config
from depmagnet.errors import CommandError, DepMagnetError
from depmagnet.packages import DEFAULT_PACKAGE_FILENAME
from depmagnet.vendor.pull import DependencyPull

logger = logging.getLogger("depmagnet")


class _ArgumentParser(argparse.ArgumentParser):
    """Report usage errors with the invalid-argument exit code."""

    def error(self, message: str):
        self.print_usage(sys.stderr)
        self.exit(CommandError.INVALID_ARGUMENT.value, f"{self.prog}: error: {message}\n")


def _add_verbosity_options(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--verbose", action="store_true", help="Print verbose output")
    parser.add_argument("--quiet", action="store_true", help="Quiet all normal output")
    parser.add_argument(
        "--debug", action="store_true", help="Print debug output (higher than verbose)"
    )


def _add_module_options(parser: argparse.ArgumentParser) -> None:
    _add_verbosity_options(parser)
    parser.add_argument(
        "--package-file-name",
        default=DEFAULT_PACKAGE_FILENAME,
        help="Override the normal package file name (default: %(default)s)",
    )
    parser.add_argument(
        "--project-path",
        type=Path,
        default=None,
        help="Specify the project path (default: current working directory)",
    )


def _configure_logging(args: argparse.Namespace) -> None:
    logging.basicConfig(level=logging.WARNING, format="%(message)s")
    if args.debug or args.verbose:
        logger.setLevel(logging.DEBUG)
    elif args.quiet:
        logger.setLevel(logging.WARNING)
    else:
        logger.setLevel(logging.INFO)


def _run(parser: argparse.ArgumentParser, argv: list[str] | None) -> None:
    args = parser.parse_args(argv)
    _configure_logging(args)
    try:
        args.handler(args)
    except DepMagnetError as e:
        logger.error("%s", e.message)
        sys.exit(e.kind.value)


# ---------------------------------------------------------------------------
# dependency-magnet
# ---------------------------------------------------------------------------


def _pull(args: argparse.Namespace) -> None:
    dependencies = load_dependencies_config(args.config)
    if not dependencies:
        raise DepMagnetError(
            CommandError.NO_DEPENDENCIES,
            f"No dependencies found in dependencies config file {args.config}",
        )
    DependencyPull().pull(dependencies, args.workspace_path, args.output_path)


def magnet_main(argv: list[str] | None = None) -> None:
    parser = _ArgumentParser(
        prog="dependency-magnet",
        description="Contains commands for the dependency magnet suite.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    pull = subparsers.add_parser("pull", help="Pull dependencies")
    _add_verbosity_options(pull)
    pull.add_argument(
        "--config",
        type=Path,
        default=Path(DEFAULT_DEPENDENCIES_CONFIG),
        help="Path to config file (default: %(default)s)",
    )
    pull.add_argument(
        "--workspace-path",
        type=Path,
        default=Path(".dependency_magnet"),
        help="Workspace path (default: %(default)s)",
    )
    pull.add_argument(
        "--output-path",
        type=Path,
        default=Path("Dependencies"),
        help="Output path (default: %(default)s)",
    )
    pull.set_defaults(handler=_pull)

    _run(parser, argv)


# ---------------------------------------------------------------------------
# module-generation
# ---------------------------------------------------------------------------


def _generate_imports(args: argparse.Namespace) -> None:
    pipeline.generate_imports(
        args.search_path,
        project_path=args.project_path,
        package_filename=args.package_file_name,
    )


def _generate_package(args: argparse.Namespace) -> None:
    pipeline.generate_package(
        args.root_path,
        platforms=args.platforms,
        swift_tools_version=args.swift_tools_version,
        dependencies_config=args.dependencies_config,
        dependency_output_path=args.dependency_output_path,
        package_name=args.package_name,
        products=args.product or None,
        regen_imports=args.regen_imports,
        package_filename=args.package_file_name,
    )


def _generate_xcodegen(args: argparse.Namespace) -> None:
    pipeline.generate_xcodegen(
        args.root_path,
        project_path=args.project_path,
        output_filename=args.output_filename,
        platforms=args.platforms,
        dependencies_config=args.dependencies_config,
        regen_imports=args.regen_imports,
        package_filename=args.package_file_name,
    )


def _generate_xcodegen_deps(args: argparse.Namespace) -> None:
    pipeline.generate_xcodegen_deps(
        output_filename=args.output_filename,
        dependencies_config=args.dependencies_config,
        dependency_output_path=args.dependency_output_path,
    )


def _check_cycles(args: argparse.Namespace) -> None:
    pipeline.check_cycles(
        args.root_path,
        project_path=args.project_path,
        package_filename=args.package_file_name,
    )


def _subcommand(
    subparsers: argparse._SubParsersAction,
    name: str,
    help: str,
    handler: Callable[[argparse.Namespace], None],
) -> argparse.ArgumentParser:
    parser = subparsers.add_parser(name, help=help)
    _add_module_options(parser)
    parser.set_defaults(handler=handler)
    return parser


def _add_dependencies_config(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dependencies-config",
        type=Path,
        default=Path(DEFAULT_DEPENDENCIES_CONFIG),
        help="Path to the dependencies.yml file (default: %(default)s)",
    )


def modules_main(argv: list[str] | None = None) -> None:
    parser = _ArgumentParser(
        prog="module-generation",
        description="Contains commands for module generation and handling.",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    imports = _subcommand(
        subparsers, "generate-imports", "Generate imports.yml files", _generate_imports
    )
    imports.add_argument(
        "--search-path",
        type=Path,
        default=Path("."),
        help="Root path to search for packages",
    )

    package = _subcommand(
        subparsers, "generate-package", "Generate Package.swift file", _generate_package
    )
    package.add_argument("--root-path", type=Path, required=True)
    package.add_argument(
        "--platforms",
        required=True,
        help='Comma-delimited supported platforms list (e.g. ".macOS(.v12), .iOS(.v17)")',
    )
    package.add_argument("--swift-tools-version", default="5.8")
    package.add_argument("--package-name", default=None)
    package.add_argument(
        "--product",
        action="append",
        default=[],
        help="Only emit this module and its transitive dependencies (repeatable)",
    )
    package.add_argument("--dependency-output-path", type=Path, default=None)
    package.add_argument(
        "--regen-imports",
        action="store_true",
        help="Force imports.yml regeneration for all modules",
    )
    _add_dependencies_config(package)

    xcode = _subcommand(
        subparsers,
        "generate-xcodegen",
        "Generate Xcodegen project-modules.yml",
        _generate_xcodegen,
    )
    xcode.add_argument("--root-path", type=Path, required=True)
    xcode.add_argument(
        "--output-filename", type=Path, default=Path("project-modules.yml")
    )
    xcode.add_argument(
        "--platforms",
        default="iOS",
        help="Comma-delimited list of supported platforms",
    )
    xcode.add_argument(
        "--regen-imports",
        action="store_true",
        help="Force imports.yml regeneration for all modules",
    )
    _add_dependencies_config(xcode)

    xcode_deps = _subcommand(
        subparsers,
        "generate-xcodegen-deps",
        "Generate Xcodegen project-dependencies.yml from dependencies.yml",
        _generate_xcodegen_deps,
    )
    xcode_deps.add_argument(
        "--output-filename", type=Path, default=Path("project-dependencies.yml")
    )
    xcode_deps.add_argument("--dependency-output-path", default=None)
    _add_dependencies_config(xcode_deps)

    cycles = _subcommand(
        subparsers, "check-cycles", "Fail if the module import graph has a cycle", _check_cycles
    )
    cycles.add_argument("--root-path", type=Path, required=True)

    _run(parser, argv)
