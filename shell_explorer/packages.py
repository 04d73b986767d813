"""
Dependency manifest scanning.

Walks a project tree for package manifests (npm, composer, cargo, poetry,
pipenv, pip, go) and reports every declared version of a package that is
greater than a threshold.
"""

import json
import logging
import os
import re
import tomllib
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from functools import total_ordering
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from shell_explorer.config import Config
from shell_explorer.errors import InvalidVersionError, ManifestParseError

logger = logging.getLogger(__name__)

# (name, version, package type)
Dependency = Tuple[str, str, str]

_VERSION_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:-(.+))?")
_REQUIREMENT_RE = re.compile(
    r"^([A-Za-z0-9_.\-]+)(?:\[[^\]]*\])?\s*(?:===|==|~=|!=|>=|<=|>|<)\s*([0-9]+(?:\.[0-9]+)*)"
)
_GO_REQUIRE_RE = re.compile(r"([a-zA-Z0-9./\-_]+)\s+v([0-9]+\.[0-9]+\.[0-9]+[^\s]*)")


@total_ordering
@dataclass(frozen=True)
class Version:
    major: int
    minor: int = 0
    patch: int = 0
    pre_release: str = ""

    @classmethod
    def parse(cls, text: str) -> "Version":
        """Parse versions like `1.2.3`, `^4.0`, `v2.0.0-beta.1` or `>=3`."""
        cleaned = text.strip().lstrip("v^~=><* ")
        match = _VERSION_RE.match(cleaned)
        if not match:
            raise InvalidVersionError(text)

        major, minor, patch, pre_release = match.groups()
        return cls(
            major=int(major),
            minor=int(minor or 0),
            patch=int(patch or 0),
            pre_release=pre_release or "",
        )

    def is_greater_than(self, other: "Version") -> bool:
        if self.major != other.major:
            return self.major > other.major
        if self.minor != other.minor:
            return self.minor > other.minor
        if self.patch != other.patch:
            return self.patch > other.patch

        # 1.0.0 > 1.0.0-beta; two pre-releases compare as strings
        if not self.pre_release and other.pre_release:
            return True
        if self.pre_release and not other.pre_release:
            return False
        return self.pre_release > other.pre_release

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return other.is_greater_than(self)

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release:
            text += f"-{self.pre_release}"
        return text


@dataclass
class PackageEntry:
    name: str
    version: str
    file_path: Path
    package_type: str


def _json_sections(content: str, path: Path, sections: Iterable[str], kind: str) -> List[Dependency]:
    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ManifestParseError(path, str(e)) from e

    packages = []
    for section in sections:
        deps = data.get(section) if isinstance(data, dict) else None
        if not isinstance(deps, dict):
            continue
        for name, version in deps.items():
            if isinstance(version, str):
                packages.append((name, version, kind))
    return packages


def _load_toml(content: str, path: Path) -> dict:
    try:
        return tomllib.loads(content)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(path, str(e)) from e


def _toml_table(deps, kind: str, skip: Tuple[str, ...] = ()) -> List[Dependency]:
    """Dependencies from a TOML table of `name = "ver"` or `name = {version = "ver"}`."""
    packages = []
    if not isinstance(deps, dict):
        return packages
    for name, spec in deps.items():
        if name in skip:
            continue
        if isinstance(spec, dict):
            spec = spec.get("version")
        if isinstance(spec, str):
            packages.append((name, spec, kind))
    return packages


def parse_requirement(line: str) -> Optional[Tuple[str, str]]:
    """Name and first version number of a pip requirement string."""
    match = _REQUIREMENT_RE.match(line.strip())
    if match:
        return match.group(1), match.group(2)
    return None


def parse_package_json(content: str, path: Path) -> List[Dependency]:
    return _json_sections(
        content, path, ("dependencies", "devDependencies", "peerDependencies"), "npm"
    )


def parse_composer_json(content: str, path: Path) -> List[Dependency]:
    return _json_sections(content, path, ("require", "require-dev"), "composer")


def parse_cargo_toml(content: str, path: Path) -> List[Dependency]:
    data = _load_toml(content, path)
    packages = []
    for section in ("dependencies", "dev-dependencies", "build-dependencies"):
        packages.extend(_toml_table(data.get(section), "cargo"))
    return packages


def parse_pyproject_toml(content: str, path: Path) -> List[Dependency]:
    data = _load_toml(content, path)
    packages = []

    poetry = data.get("tool", {}).get("poetry", {})
    packages.extend(_toml_table(poetry.get("dependencies"), "poetry", skip=("python",)))
    packages.extend(_toml_table(poetry.get("dev-dependencies"), "poetry"))
    for group in poetry.get("group", {}).values():
        if isinstance(group, dict):
            packages.extend(_toml_table(group.get("dependencies"), "poetry"))

    project = data.get("project", {})
    requirements = list(project.get("dependencies", []))
    for extra in project.get("optional-dependencies", {}).values():
        requirements.extend(extra)
    for requirement in requirements:
        parsed = parse_requirement(requirement) if isinstance(requirement, str) else None
        if parsed:
            packages.append((*parsed, "pyproject"))

    return packages


def parse_pipfile(content: str, path: Path) -> List[Dependency]:
    data = _load_toml(content, path)
    packages = []
    for section in ("packages", "dev-packages"):
        packages.extend(_toml_table(data.get(section), "pipenv"))
    return packages


def parse_requirements_txt(content: str, path: Path) -> List[Dependency]:
    packages = []
    for line in content.splitlines():
        line = line.strip()
        if not line or line.startswith(("#", "-")):
            continue
        parsed = parse_requirement(line)
        if parsed:
            packages.append((*parsed, "pip"))
    return packages


def parse_go_mod(content: str, path: Path) -> List[Dependency]:
    return [(name, version, "go") for name, version in _GO_REQUIRE_RE.findall(content)]


MANIFEST_PARSERS: Dict[str, Callable[[str, Path], List[Dependency]]] = {
    "package.json": parse_package_json,
    "composer.json": parse_composer_json,
    "Cargo.toml": parse_cargo_toml,
    "pyproject.toml": parse_pyproject_toml,
    "Pipfile": parse_pipfile,
    "requirements.txt": parse_requirements_txt,
    "go.mod": parse_go_mod,
}


def is_package_file(path: Path) -> bool:
    return path.name in MANIFEST_PARSERS


def find_package_files(search_path: Path, skip_dirs: Iterable[str]) -> List[Path]:
    """Manifests under search_path, or search_path itself when it is one."""
    if search_path.is_file():
        return [search_path] if is_package_file(search_path) else []

    skip = set(skip_dirs)
    found = []

    def on_error(error: OSError):
        logger.debug("Cannot read %s: %s", error.filename, error.strerror)

    for root, dirs, files in os.walk(search_path, onerror=on_error):
        logger.debug("Scanning directory: %s", root)
        kept = []
        for d in dirs:
            if d in skip:
                logger.debug("Skipping directory: %s", Path(root) / d)
            else:
                kept.append(d)
        dirs[:] = sorted(kept)

        for name in sorted(files):
            if name in MANIFEST_PARSERS:
                path = Path(root) / name
                logger.debug("Found package file: %s", path)
                found.append(path)

    return found


def parse_package_file(path: Path) -> List[Dependency]:
    """Declared dependencies of one manifest; non UTF-8 files yield nothing."""
    parser = MANIFEST_PARSERS.get(path.name)
    if parser is None:
        return []
    try:
        content = path.read_text(encoding="utf-8")
    except (UnicodeDecodeError, OSError) as e:
        logger.debug("Skipping unreadable file %s: %s", path, e)
        return []
    return parser(content, path)


def _matches_in_file(path: Path, package_name: str, threshold: Version) -> List[PackageEntry]:
    try:
        dependencies = parse_package_file(path)
    except ManifestParseError as e:
        logger.warning("%s", e)
        return []

    if dependencies:
        logger.debug("Parsed %d packages from %s", len(dependencies), path)

    matches = []
    wanted = package_name.lower()
    for name, version, kind in dependencies:
        if name.lower() != wanted:
            continue
        try:
            declared = Version.parse(version)
        except InvalidVersionError:
            continue
        if declared.is_greater_than(threshold):
            logger.debug("Found match: %s %s in %s (%s)", name, version, path, kind)
            matches.append(
                PackageEntry(name=name, version=version, file_path=path, package_type=kind)
            )
    return matches


def find_packages_with_version_greater_than(
    package_name: str,
    min_version: str,
    search_path: Optional[Path] = None,
    config: Optional[Config] = None,
) -> List[PackageEntry]:
    config = config or Config()
    threshold = Version.parse(min_version)
    search_path = Path(search_path) if search_path else Path.cwd()

    files = find_package_files(search_path, config.package_skip_dirs)

    packages: List[PackageEntry] = []
    if files:
        with ThreadPoolExecutor(max_workers=config.scan_workers) as executor:
            for matches in executor.map(
                lambda path: _matches_in_file(path, package_name, threshold), files
            ):
                packages.extend(matches)

    logger.debug(
        "Found %d package files, discovered %d matching packages", len(files), len(packages)
    )

    packages.sort(key=lambda entry: Version.parse(entry.version), reverse=True)
    return packages
