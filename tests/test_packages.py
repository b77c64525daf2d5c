from pathlib import Path

import pytest
import yaml

from depmagnet.errors import CommandError, DepMagnetError
from depmagnet.model import ModuleType
from depmagnet.packages import IMPORTS_FILENAME, Module, Package, discover_packages

from conftest import make_package, write_module


def test_empty_package_file_is_valid(project: Path) -> None:
    make_package(project, "Feature", {"": ["Foundation"], "Impl": ["Core"]})
    package = Package.from_file(project / "Feature" / "package.yml", project)

    assert package is not None
    assert package.name == "Feature"
    assert package.project_base_path == "Feature/"
    assert set(package.modules) == {ModuleType.MAIN, ModuleType.IMPL}
    impl = package.modules[ModuleType.IMPL]
    assert impl.name == "FeatureImpl"
    assert impl.project_base_path == "Feature/FeatureImpl/"


@pytest.mark.parametrize(
    "config",
    [
        "disable: [1, 2]\n",
        "disable: maybe\n",
        "settingsOverrides: [a, b]\n",
        "fileExclusions:\n  main: notalist\n",
        "key: [unclosed\n",
        "- just\n- a list\n",
    ],
)
def test_malformed_package_file_yields_none(project: Path, config: str) -> None:
    make_package(project, "Bad", {"": []}, config=config)
    assert Package.from_file(project / "Bad" / "package.yml", project) is None


def test_unreadable_package_file_yields_none(project: Path) -> None:
    assert Package.from_file(project / "Missing" / "package.yml", project) is None


def test_disabled_package_has_no_modules(project: Path) -> None:
    make_package(project, "Off", {"": ["A"]}, config="disable: true\n")
    package = Package.from_file(project / "Off" / "package.yml", project)
    assert package.modules == {}


def test_disable_tests_drops_only_tests(project: Path) -> None:
    make_package(
        project, "Feat", {"": [], "Tests": ["XCTest"]}, config="disableTests: true\n"
    )
    package = Package.from_file(project / "Feat" / "package.yml", project)
    assert set(package.modules) == {ModuleType.MAIN}


def test_module_directory_needs_a_top_level_swift_file(project: Path) -> None:
    package_dir = make_package(project, "Feat", {"": []})
    write_module(package_dir, "FeatImpl", {"nested/Deep.swift": "import X\n"})
    write_module(package_dir, "FeatTests", {"README.md": "docs"})

    package = Package.from_file(package_dir / "package.yml", project)
    assert set(package.modules) == {ModuleType.MAIN}


def test_directory_override_keeps_module_name(project: Path) -> None:
    package_dir = make_package(
        project, "Feat", {}, config="directoryOverrides:\n  impl: Sources\n"
    )
    write_module(package_dir, "Sources", {"A.swift": "import Core\n"})

    package = Package.from_file(package_dir / "package.yml", project)
    impl = package.modules[ModuleType.IMPL]
    assert impl.name == "FeatImpl"
    assert impl.project_base_path == "Feat/Sources/"
    assert impl.imported_modules == ["Core"]


def test_override_maps_drop_unknown_types(project: Path) -> None:
    make_package(
        project,
        "Feat",
        {"": []},
        config=(
            "settingsOverrides:\n"
            "  main:\n    SWIFT_VERSION: '5'\n"
            "  bogus:\n    X: Y\n"
            "fileExclusions:\n"
            "  tests: [Fixtures]\n"
        ),
    )
    package = Package.from_file(project / "Feat" / "package.yml", project)
    assert package.settings_overrides == {ModuleType.MAIN: {"SWIFT_VERSION": "5"}}
    assert package.file_exclusions == {ModuleType.TESTS: ["Fixtures"]}


def test_unquoted_build_settings_stay_strings(project: Path) -> None:
    make_package(
        project,
        "Feat",
        {"": []},
        config=(
            "disableTests: no\n"
            "settingsOverrides:\n"
            "  main:\n"
            "    ENABLE_TESTABILITY: YES\n"
            "    SWIFT_VERSION: 5\n"
            "    MARKETING_VERSION: 1.10\n"
        ),
    )
    package = Package.from_file(project / "Feat" / "package.yml", project)

    assert package is not None
    assert package.config.disable_tests is False
    assert package.settings_overrides == {
        ModuleType.MAIN: {
            "ENABLE_TESTABILITY": "YES",
            "SWIFT_VERSION": "5",
            "MARKETING_VERSION": "1.10",
        }
    }


def test_null_sections_are_absent(project: Path) -> None:
    make_package(project, "Feat", {"": []}, config="settingsOverrides:\ndisable: ~\n")
    package = Package.from_file(project / "Feat" / "package.yml", project)

    assert package.settings_overrides == {}
    assert set(package.modules) == {ModuleType.MAIN}


def test_imports_are_cached_to_yaml(project: Path) -> None:
    module_dir = write_module(
        project, "Mod", {"A.swift": "import B\nimport A2\n", "C.swift": "import B\n"}
    )
    module = Module("Mod", ModuleType.MAIN, module_dir, "Mod/")

    assert module.regenerate_imports_file() == ["A2", "B"]
    cache = module_dir / IMPORTS_FILENAME
    assert cache.read_text() == "- A2\n- B\n"
    assert yaml.safe_load(cache.read_text()) == ["A2", "B"]


def test_cached_imports_win_until_regenerated(project: Path) -> None:
    module_dir = write_module(project, "Mod", {"A.swift": "import Real\n"})
    (module_dir / IMPORTS_FILENAME).write_text("- Cached\n- On\n")

    module = Module("Mod", ModuleType.MAIN, module_dir, "Mod/")
    assert module.imported_modules == ["Cached", "On"]
    assert module.regenerate_imports_file() == ["Real"]
    assert module.imported_modules == ["Real"]


def test_unparseable_cache_falls_back_to_scan(project: Path) -> None:
    module_dir = write_module(project, "Mod", {"A.swift": "import Real\n"})
    (module_dir / IMPORTS_FILENAME).write_text("key: [unclosed\n")

    module = Module("Mod", ModuleType.MAIN, module_dir, "Mod/")
    assert module.imported_modules == ["Real"]
    assert (module_dir / IMPORTS_FILENAME).read_text() == "- Real\n"


def test_no_imports_removes_stale_cache(project: Path) -> None:
    module_dir = write_module(project, "Mod", {"A.swift": "struct A {}\n"})
    (module_dir / IMPORTS_FILENAME).write_text("- Old\n")

    module = Module("Mod", ModuleType.MAIN, module_dir, "Mod/")
    assert module.regenerate_imports_file() == []
    assert not (module_dir / IMPORTS_FILENAME).exists()


def test_stale_cache_that_cannot_be_removed(project: Path) -> None:
    module_dir = write_module(project, "Mod", {"A.swift": "struct A {}\n"})
    (module_dir / IMPORTS_FILENAME).mkdir()

    module = Module("Mod", ModuleType.MAIN, module_dir, "Mod/")
    assert module.regenerate_imports_file() == []


def test_regenerate_on_missing_directory(project: Path) -> None:
    module = Module("Gone", ModuleType.MAIN, project / "Gone", "Gone/")
    assert module.regenerate_imports_file() is None
    assert module.imported_modules == []


def test_discover_packages_walks_tree(project: Path) -> None:
    make_package(project, "A", {"": []}, parent="Modules")
    make_package(project, "B", {"": []}, parent="Modules/Nested")

    packages = discover_packages(project, project)
    assert sorted(p.name for p in packages) == ["A", "B"]
    by_name = {p.name: p for p in packages}
    assert by_name["B"].project_base_path == "Modules/Nested/B/"


def test_discover_packages_custom_marker(project: Path) -> None:
    make_package(project, "A", {"": []})
    assert discover_packages(project, project, package_filename="module.yml") == []


def test_discover_packages_fails_on_bad_marker(project: Path) -> None:
    make_package(project, "Bad", {"": []}, config="disable: [1]\n")
    with pytest.raises(DepMagnetError) as excinfo:
        discover_packages(project, project)
    assert excinfo.value.kind is CommandError.CONFIG_NOT_DECODABLE
