"""Find and remove node_modules directories, in parallel."""

import logging
import os
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from shell_explorer.config import Config
from shell_explorer.display import ask_selection, build_table, console, truncate

logger = logging.getLogger(__name__)

NODE_MODULES = "node_modules"
DELETED = "✓ Deleted"
WOULD_REMOVE = "Would remove"


@dataclass
class NodeModulesEntry:
    path: Path
    size: int


@dataclass
class CleanedEntry:
    path: str
    size: str
    status: str


def format_size(size: int) -> str:
    """Human readable size using 1024 steps."""
    kb = 1024
    mb = kb * 1024
    gb = mb * 1024
    if size >= gb:
        return f"{size / gb:.2f} GB"
    if size >= mb:
        return f"{size / mb:.2f} MB"
    if size >= kb:
        return f"{size / kb:.2f} KB"
    return f"{size} B"


def _progress() -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    )


def find_node_modules(root: Path, skip_dirs: Iterable[str]) -> List[Path]:
    """Every node_modules directory under root, without descending into them."""
    skip = set(skip_dirs)
    found = []

    def on_error(error: OSError):
        logger.debug("Cannot read %s: %s", error.filename, error.strerror)

    for current, dirs, _files in os.walk(root, onerror=on_error):
        logger.debug("Scanning: %s", current)
        kept = []
        for name in dirs:
            path = Path(current) / name
            if path.is_symlink():
                continue
            if name == NODE_MODULES:
                found.append(path)
            elif name not in skip:
                kept.append(name)
        dirs[:] = sorted(kept)

    return sorted(found)


def _tree_size(path: Path) -> int:
    total = 0
    for current, dirs, files in os.walk(path):
        for name in files + [d for d in dirs if (Path(current) / d).is_symlink()]:
            try:
                total += (Path(current) / name).lstat().st_size
            except OSError:
                continue
    return total


def _entry_size(path: Path) -> int:
    try:
        if path.is_dir() and not path.is_symlink():
            return _tree_size(path)
        return path.lstat().st_size
    except OSError:
        return 0


def calculate_dir_size(path: Path, workers: int = 8) -> int:
    """Total bytes under path; top-level entries are sized in parallel."""
    if not path.is_dir():
        return _entry_size(path)

    try:
        entries = list(path.iterdir())
    except OSError as e:
        logger.debug("Cannot list %s: %s", path, e)
        return 0

    with ThreadPoolExecutor(max_workers=workers) as executor:
        return sum(executor.map(_entry_size, entries))


def list_node_modules(root: Path, config: Config) -> List[NodeModulesEntry]:
    console.print(f"🔍 Searching for node_modules in: [yellow]{root}[/yellow]")
    directories = find_node_modules(root, config.clean_skip_dirs)

    if not directories:
        console.print("[yellow]No node_modules directories found.[/yellow]")
        return []

    console.print(
        f"📦 Found [green]{len(directories)}[/green] node_modules directories. "
        "Calculating sizes in parallel..."
    )

    sizes: Dict[Path, int] = {}
    with _progress() as progress:
        task = progress.add_task("Calculating sizes...", total=len(directories))
        with ThreadPoolExecutor(max_workers=config.scan_workers) as executor:
            futures = {
                executor.submit(calculate_dir_size, path, config.scan_workers): path
                for path in directories
            }
            for future in as_completed(futures):
                sizes[futures[future]] = future.result()
                progress.advance(task)

    entries = [NodeModulesEntry(path=path, size=sizes[path]) for path in directories]
    total = sum(entry.size for entry in entries)
    console.print(f"\n💾 Total space that can be freed: [bold yellow]{format_size(total)}[/bold yellow]")
    return entries


def _remove(path: Path) -> Optional[str]:
    try:
        shutil.rmtree(path)
    except OSError as e:
        return str(e)
    return None


def delete_directories(paths: List[Path], workers: int) -> Dict[Path, Optional[str]]:
    """Remove every path in parallel; maps each path to its error, or None."""
    results: Dict[Path, Optional[str]] = {}
    if not paths:
        return results

    with _progress() as progress:
        task = progress.add_task("Deleting...", total=len(paths))
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = {executor.submit(_remove, path): path for path in paths}
            for future in as_completed(futures):
                path = futures[future]
                error = future.result()
                if error:
                    logger.warning("Failed to remove %s: %s", path, error)
                results[path] = error
                progress.advance(task)
    return results


def _status(error: Optional[str]) -> str:
    return DELETED if error is None else f"✗ {error}"


def _report_deleted(results: Dict[Path, Optional[str]]):
    deleted = sum(1 for error in results.values() if error is None)
    errors = len(results) - deleted
    if errors:
        console.print(
            f"\n✨ Completed! Deleted [bold]{deleted}[/bold] directories "
            f"([red]{errors}[/red] errors)"
        )
    else:
        console.print(f"\n✨ Completed! Deleted [bold]{deleted}[/bold] directories")


def interactive_clean(root: Path, config: Config) -> List[CleanedEntry]:
    entries = list_node_modules(root, config)
    if not entries:
        return []

    entries.sort(key=lambda entry: entry.size, reverse=True)
    console.print(
        build_table(
            [("#", "yellow", 5), ("Path", "cyan", 70), ("Size", "green", 12)],
            (
                (str(i), truncate(str(entry.path), 70), format_size(entry.size))
                for i, entry in enumerate(entries, start=1)
            ),
        )
    )

    selected = [entries[i] for i in ask_selection(len(entries), "directories to delete")]
    if not selected:
        console.print("[yellow]No directories selected.[/yellow]")
        return []

    selected_size = sum(entry.size for entry in selected)
    console.print(
        f"🗑️  Deleting {len(selected)} directories ({format_size(selected_size)})..."
    )
    results = delete_directories([entry.path for entry in selected], config.scan_workers)
    _report_deleted(results)

    return [
        CleanedEntry(
            path=str(entry.path),
            size=format_size(entry.size),
            status=_status(results[entry.path]),
        )
        for entry in selected
    ]


def clean_node_modules(
    root: Optional[Path] = None,
    dry_run: bool = False,
    interactive: bool = False,
    config: Optional[Config] = None,
) -> List[CleanedEntry]:
    """Remove node_modules under root.

    Interactive and dry runs size every directory first. The default mode
    deletes straight away and reports "-" as the size.
    """
    config = config or Config()
    root = Path(root) if root else Path.cwd()

    if interactive:
        return interactive_clean(root, config)

    if dry_run:
        entries = list_node_modules(root, config)
        if not entries:
            return []
        console.print("⚠️  Dry run mode - no directories will be removed")
        total = sum(entry.size for entry in entries)
        console.print(
            f"\n💾 Would free [bold]{format_size(total)}[/bold] "
            f"from [bold]{len(entries)}[/bold] directories"
        )
        return [
            CleanedEntry(path=str(entry.path), size=format_size(entry.size), status=WOULD_REMOVE)
            for entry in entries
        ]

    console.print(f"🔍 Searching for node_modules in: [yellow]{root}[/yellow]")
    directories = find_node_modules(root, config.clean_skip_dirs)
    if not directories:
        console.print("[yellow]No node_modules directories found.[/yellow]")
        return []

    console.print(
        f"📦 Found [green]{len(directories)}[/green] node_modules directories. "
        "Deleting in parallel..."
    )
    results = delete_directories(directories, config.scan_workers)
    _report_deleted(results)

    return [
        CleanedEntry(path=str(path), size="-", status=_status(results[path]))
        for path in directories
    ]
