import fnmatch
import logging
import mimetypes
import shutil
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional

from shell_explorer.config import Config
from shell_explorer.display import ask_selection, build_table, console
from shell_explorer.errors import DirectoryReadError

logger = logging.getLogger(__name__)

OTHER = "Other"
MOVED = "✓ Moved"
WOULD_MOVE = "Would move"


@dataclass
class FileToOrganize:
    path: Path
    file_name: str
    category: str


@dataclass
class OrganizeEntry:
    file_name: str
    category: str
    destination: str
    status: str


class FileClassifier:
    """Maps a file to its category folder by extension, then by MIME type."""

    MIME_FALLBACKS = {
        "image/": "Images",
        "video/": "Videos",
        "audio/": "Audio",
        "text/": "Documents",
    }

    def __init__(self, config: Config):
        self.config = config
        self.extension_map = {}
        # Build reverse mapping from extensions to category folders
        for folder, extensions in config.file_categories.items():
            for ext in extensions:
                self.extension_map.setdefault(ext.lower(), folder)

    def classify(self, path: Path) -> str:
        extension = path.suffix.lower().lstrip(".")
        if extension in self.extension_map:
            return self.extension_map[extension]

        mime_type, _ = mimetypes.guess_type(path.name)
        if mime_type:
            for prefix, folder in self.MIME_FALLBACKS.items():
                if mime_type.startswith(prefix) and folder in self.config.file_categories:
                    return folder

        return OTHER


def is_dev_folder(path: Path, markers: Iterable[str]) -> bool:
    """True when a direct child of path marks it as a project folder."""
    if not path.is_dir():
        return False

    markers = list(markers)
    try:
        names = [child.name for child in path.iterdir()]
    except OSError:
        return False

    for name in names:
        for marker in markers:
            if "*" in marker or "?" in marker:
                if fnmatch.fnmatch(name, marker):
                    return True
            elif name == marker:
                return True
    return False


def get_files_to_organize(path: Path, config: Config) -> List[FileToOrganize]:
    """Top-level, non-hidden regular files sorted by category then name."""
    classifier = FileClassifier(config)
    try:
        children = list(path.iterdir())
    except OSError as e:
        raise DirectoryReadError(path, e.strerror or e) from e

    files = []
    for child in children:
        if child.name.startswith(".") or not child.is_file():
            continue
        files.append(
            FileToOrganize(path=child, file_name=child.name, category=classifier.classify(child))
        )

    files.sort(key=lambda f: (f.category, f.file_name))
    return files


def unique_destination(folder: Path, file_name: str) -> Path:
    """Destination inside folder, suffixing _1, _2, ... on name conflicts."""
    target = folder / file_name
    counter = 1
    while target.exists():
        stem = Path(file_name).stem
        suffix = Path(file_name).suffix
        target = folder / f"{stem}_{counter}{suffix}"
        counter += 1
    return target


def move_file(file: FileToOrganize, root: Path) -> OrganizeEntry:
    folder = root / file.category
    try:
        folder.mkdir(exist_ok=True)
        destination = unique_destination(folder, file.file_name)
        shutil.move(str(file.path), str(destination))
    except OSError as e:
        logger.warning("Failed to move %s: %s", file.path, e)
        return OrganizeEntry(
            file_name=file.file_name,
            category=file.category,
            destination=str(folder / file.file_name),
            status=f"✗ Error: {e}",
        )

    logger.debug("Moved: %s → %s", file.file_name, destination)
    return OrganizeEntry(
        file_name=file.file_name,
        category=file.category,
        destination=str(destination),
        status=MOVED,
    )


def _plan(files: List[FileToOrganize], root: Path, dry_run: bool) -> List[OrganizeEntry]:
    if dry_run:
        return [
            OrganizeEntry(
                file_name=f.file_name,
                category=f.category,
                destination=str(root / f.category / f.file_name),
                status=WOULD_MOVE,
            )
            for f in files
        ]
    return [move_file(f, root) for f in files]


def _select_interactively(files: List[FileToOrganize]) -> List[FileToOrganize]:
    console.print(
        build_table(
            [("#", "yellow", 5), ("File", "cyan", 50), ("Category", "magenta", 15)],
            ((str(i), f.file_name, f.category) for i, f in enumerate(files, start=1)),
        )
    )
    return [files[i] for i in ask_selection(len(files), "files to organize")]


def organize_files(
    root: Optional[Path] = None,
    dry_run: bool = False,
    interactive: bool = False,
    config: Optional[Config] = None,
) -> List[OrganizeEntry]:
    """Move loose files in root into category folders.

    Development folders (anything with a project marker such as
    package.json or .git) are left untouched.
    """
    config = config or Config()
    root = Path(root) if root else Path.cwd()

    console.print(f"🔍 Checking directory: [yellow]{root}[/yellow]")

    if is_dev_folder(root, config.dev_markers):
        console.print(
            f"⚠️  [cyan]{root}[/cyan] is a development folder. Skipping organization."
        )
        console.print(
            "[dim]Development markers found (node_modules, package.json, Cargo.toml, etc.)[/dim]"
        )
        return []

    console.print("[green]✓[/green] Not a development folder. Scanning for files to organize...")

    files = get_files_to_organize(root, config)
    if not files:
        console.print("[yellow]No files found to organize.[/yellow]")
        return []

    console.print("\n📊 Files found by category:")
    for category, count in sorted(Counter(f.category for f in files).items()):
        console.print(f"  [dim]•[/dim] {category}: [green]{count}[/green]")
    console.print()

    if interactive:
        files = _select_interactively(files)
        if not files:
            console.print("[yellow]No files selected.[/yellow]")
            return []

    if dry_run:
        console.print("🔍 Dry run mode - no files will be moved\n")

    results = _plan(files, root, dry_run)

    if not dry_run:
        moved = sum(1 for entry in results if entry.status == MOVED)
        console.print(f"\n✨ Successfully organized [bold]{moved}[/bold] files")

    return results
