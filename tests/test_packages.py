"""Test version comparison and manifest scanning."""

import json
import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from shell_explorer.errors import InvalidVersionError, ManifestParseError
from shell_explorer.packages import (
    Version,
    find_package_files,
    find_packages_with_version_greater_than,
    parse_cargo_toml,
    parse_composer_json,
    parse_go_mod,
    parse_package_file,
    parse_package_json,
    parse_pipfile,
    parse_pyproject_toml,
    parse_requirement,
    parse_requirements_txt,
)
from tests.conftest import create_test_directory_structure, create_test_file


class TestVersion:
    """Test the semantic version comparator."""

    @pytest.mark.parametrize("text,expected", [
        ("1.2.3", Version(1, 2, 3)),
        ("^4.17.1", Version(4, 17, 1)),
        ("~2.0", Version(2, 0, 0)),
        (">=3", Version(3, 0, 0)),
        ("v1.0.0-beta.2", Version(1, 0, 0, "beta.2")),
        ("  = 0.5.1 ", Version(0, 5, 1)),
        ("*1.4", Version(1, 4, 0)),
    ])
    def test_parse(self, text, expected):
        assert Version.parse(text) == expected

    @pytest.mark.parametrize("text", ["latest", "", "*", "git+https://example.com/repo.git"])
    def test_parse_invalid(self, text):
        with pytest.raises(InvalidVersionError) as exc_info:
            Version.parse(text)
        assert f"Invalid version format: {text}" in str(exc_info.value)

    def test_invalid_version_is_value_error(self):
        with pytest.raises(ValueError):
            Version.parse("nope")

    @pytest.mark.parametrize("left,right", [
        ("2.0.0", "1.9.9"),
        ("1.10.0", "1.9.0"),
        ("1.0.1", "1.0.0"),
        ("1.0.0", "1.0.0-rc.1"),
        ("1.0.0-beta", "1.0.0-alpha"),
    ])
    def test_is_greater_than(self, left, right):
        assert Version.parse(left).is_greater_than(Version.parse(right))
        assert not Version.parse(right).is_greater_than(Version.parse(left))

    def test_equal_versions_are_not_greater(self):
        assert not Version.parse("1.2.3").is_greater_than(Version.parse("^1.2.3"))

    def test_sorting_agrees_with_comparator(self):
        versions = [Version.parse(v) for v in ["1.0.0-beta", "2.0.0", "1.0.0", "1.0.0-alpha"]]
        assert [str(v) for v in sorted(versions)] == [
            "1.0.0-alpha", "1.0.0-beta", "1.0.0", "2.0.0",
        ]


class TestManifestParsers:
    """Test each manifest parser."""

    def test_package_json(self, temp_dir):
        content = json.dumps({
            "dependencies": {"react": "^18.2.0"},
            "devDependencies": {"jest": "29.0.0"},
            "peerDependencies": {"react-dom": ">=18"},
            "scripts": {"test": "jest"},
        })
        assert parse_package_json(content, temp_dir / "package.json") == [
            ("react", "^18.2.0", "npm"),
            ("jest", "29.0.0", "npm"),
            ("react-dom", ">=18", "npm"),
        ]

    def test_composer_json(self, temp_dir):
        content = json.dumps({"require": {"php": ">=8.1"}, "require-dev": {"phpunit/phpunit": "^10.0"}})
        assert parse_composer_json(content, temp_dir / "composer.json") == [
            ("php", ">=8.1", "composer"),
            ("phpunit/phpunit", "^10.0", "composer"),
        ]

    def test_malformed_json_raises(self, temp_dir):
        with pytest.raises(ManifestParseError):
            parse_package_json("{not json", temp_dir / "package.json")

    def test_cargo_toml(self, temp_dir):
        content = """
[package]
name = "demo"
version = "0.1.0"

[dependencies]
serde = "1.0.190"
tokio = { version = "1.35", features = ["full"] }
local = { path = "../local" }

[dev-dependencies]
criterion = "0.5"

[build-dependencies]
cc = "1.0"
"""
        assert parse_cargo_toml(content, temp_dir / "Cargo.toml") == [
            ("serde", "1.0.190", "cargo"),
            ("tokio", "1.35", "cargo"),
            ("criterion", "0.5", "cargo"),
            ("cc", "1.0", "cargo"),
        ]

    def test_malformed_toml_raises(self, temp_dir):
        with pytest.raises(ManifestParseError):
            parse_cargo_toml("[dependencies\nserde = ", temp_dir / "Cargo.toml")

    def test_pyproject_poetry(self, temp_dir):
        content = """
[tool.poetry.dependencies]
python = "^3.12"
requests = "^2.31"

[tool.poetry.group.dev.dependencies]
pytest = { version = "^8.0" }
"""
        assert parse_pyproject_toml(content, temp_dir / "pyproject.toml") == [
            ("requests", "^2.31", "poetry"),
            ("pytest", "^8.0", "poetry"),
        ]

    def test_pyproject_pep621(self, temp_dir):
        content = """
[project]
name = "demo"
dependencies = ["requests>=2.31.0", "rich", "typer[all]==0.16.0"]

[project.optional-dependencies]
test = ["pytest>=8"]
"""
        assert parse_pyproject_toml(content, temp_dir / "pyproject.toml") == [
            ("requests", "2.31.0", "pyproject"),
            ("typer", "0.16.0", "pyproject"),
            ("pytest", "8", "pyproject"),
        ]

    def test_pipfile(self, temp_dir):
        content = """
[packages]
flask = "==3.0.0"
anything = "*"

[dev-packages]
black = {version = ">=24.1"}
"""
        assert parse_pipfile(content, temp_dir / "Pipfile") == [
            ("flask", "==3.0.0", "pipenv"),
            ("anything", "*", "pipenv"),
            ("black", ">=24.1", "pipenv"),
        ]

    def test_requirements_txt(self, temp_dir):
        content = """
# pinned
Django==4.2.7
requests[security] >= 2.31
-r other.txt
--index-url https://example.com
numpy
"""
        assert parse_requirements_txt(content, temp_dir / "requirements.txt") == [
            ("Django", "4.2.7", "pip"),
            ("requests", "2.31", "pip"),
        ]

    def test_go_mod(self, temp_dir):
        content = """module example.com/demo

go 1.21

require (
\tgithub.com/gin-gonic/gin v1.9.1
\tgolang.org/x/text v0.14.0 // indirect
)
"""
        assert parse_go_mod(content, temp_dir / "go.mod") == [
            ("github.com/gin-gonic/gin", "1.9.1", "go"),
            ("golang.org/x/text", "0.14.0", "go"),
        ]

    def test_parse_requirement(self):
        assert parse_requirement("pydantic>=2.11.7") == ("pydantic", "2.11.7")
        assert parse_requirement("rich") is None

    def test_digits_in_bare_name_are_not_a_version(self):
        assert parse_requirement("h5py") is None
        assert parse_requirement("py3dns") is None
        assert parse_requirement("h5py==3.10.0") == ("h5py", "3.10.0")
        assert parse_requirement("py3dns~=4.0") == ("py3dns", "4.0")

    def test_non_utf8_file_yields_nothing(self, temp_dir):
        path = temp_dir / "requirements.txt"
        path.write_bytes(b"caf\xe9==1.0\n")
        assert parse_package_file(path) == []

    def test_unknown_file_yields_nothing(self, temp_dir):
        path = create_test_file(temp_dir, "setup.cfg", "[metadata]")
        assert parse_package_file(path) == []


class TestFindPackageFiles:
    """Test manifest discovery."""

    def test_walk_skips_configured_dirs(self, temp_dir):
        create_test_directory_structure(temp_dir, {
            "app": {"package.json": "{}", "src": {"index.js": ""}},
            "node_modules": {"dep": {"package.json": "{}"}},
            "service": {"go.mod": "module x", "requirements.txt": ""},
            "README.md": "",
        })

        found = find_package_files(temp_dir, ["node_modules"])

        assert found == [
            temp_dir / "app" / "package.json",
            temp_dir / "service" / "go.mod",
            temp_dir / "service" / "requirements.txt",
        ]

    def test_single_manifest(self, temp_dir):
        path = create_test_file(temp_dir, "Cargo.toml", "")
        assert find_package_files(path, []) == [path]

    def test_single_other_file(self, temp_dir):
        path = create_test_file(temp_dir, "notes.txt", "")
        assert find_package_files(path, []) == []


class TestFindPackagesWithVersionGreaterThan:
    """Test the end-to-end package search."""

    def test_matches_sorted_descending(self, temp_dir, test_config):
        create_test_directory_structure(temp_dir, {
            "old": {"package.json": json.dumps({"dependencies": {"React": "^16.14.0"}})},
            "new": {"package.json": json.dumps({"dependencies": {"react": "^18.2.0"}})},
            "mid": {"package.json": json.dumps({"devDependencies": {"react": "17.0.2"}})},
            "git": {"package.json": json.dumps({"dependencies": {"react": "github:facebook/react"}})},
            "broken": {"package.json": "{oops"},
        })

        packages = find_packages_with_version_greater_than("react", "16.99", temp_dir, test_config)

        assert [(p.version, p.file_path.parent.name) for p in packages] == [
            ("^18.2.0", "new"),
            ("17.0.2", "mid"),
        ]
        assert all(p.package_type == "npm" for p in packages)

    def test_case_insensitive_name(self, temp_dir, test_config):
        create_test_file(temp_dir, "requirements.txt", "Django==4.2.7\n")

        packages = find_packages_with_version_greater_than("django", "4.0.0", temp_dir, test_config)

        assert len(packages) == 1
        assert packages[0].name == "Django"

    def test_invalid_threshold(self, temp_dir, test_config):
        with pytest.raises(InvalidVersionError):
            find_packages_with_version_greater_than("react", "latest", temp_dir, test_config)

    def test_no_manifests(self, temp_dir, test_config):
        assert find_packages_with_version_greater_than("react", "1.0.0", temp_dir, test_config) == []
