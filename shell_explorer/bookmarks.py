"""
Chrome bookmarks: loading, analysis, export and cleanup.

Chrome keeps bookmarks in a single JSON document whose ``roots`` object
holds the bookmark bar, "other" and synced trees. Folders have a
``children`` list; bookmarks have ``type == "url"``.
"""

import html
import json
import logging
import shutil
from collections import Counter
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set, Tuple

from rich.prompt import Confirm

from shell_explorer.categories import BookmarkCategory, categorize, extract_domain
from shell_explorer.display import console, print_header, truncate
from shell_explorer.errors import BookmarkFileError, BookmarksNotFoundError

logger = logging.getLogger(__name__)

SKIPPED_ROOTS = {"sync_transaction_version"}
DEEP_NESTING_SLASHES = 3
CONFIRM_LIST_LIMIT = 20
DRY_RUN_LIST_LIMIT = 10


@dataclass
class Bookmark:
    id: str
    name: str
    url: str
    date_added: Optional[str]
    folder_path: str
    category: BookmarkCategory


@dataclass
class BookmarkFolder:
    id: str
    name: str
    path: str
    children_count: int


@dataclass
class BookmarkStats:
    total_bookmarks: int = 0
    total_folders: int = 0
    duplicates: int = 0
    empty_folders: int = 0
    deep_nesting_count: int = 0
    by_domain: Dict[str, int] = field(default_factory=dict)
    by_category: Dict[str, int] = field(default_factory=dict)


@dataclass
class DuplicateEntry:
    url: str
    count: int
    titles: List[str]


@dataclass
class DuplicateGroup:
    url: str
    bookmarks: List[Bookmark]


@dataclass
class OrganizeSuggestion:
    bookmark: Bookmark
    suggested_folder: str


class BookmarkStore:
    """A Chrome ``Bookmarks`` file, loaded lazily and written back in place."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self._data: Optional[dict] = None

    def load(self) -> dict:
        if self._data is not None:
            return self._data

        if not self.path.exists():
            raise BookmarksNotFoundError(self.path)

        try:
            with open(self.path, "r", encoding="utf-8") as f:
                self._data = json.load(f)
        except json.JSONDecodeError as e:
            raise BookmarkFileError(f"Failed to parse bookmarks JSON in {self.path}: {e}") from e
        except OSError as e:
            raise BookmarkFileError(f"Failed to read bookmarks file {self.path}: {e}") from e

        logger.debug("Loaded bookmarks from %s", self.path)
        return self._data

    def parse(self) -> Tuple[List[Bookmark], List[BookmarkFolder]]:
        bookmarks: List[Bookmark] = []
        folders: List[BookmarkFolder] = []

        roots = self.load().get("roots", {})
        if isinstance(roots, dict):
            for root_name, node in roots.items():
                if root_name in SKIPPED_ROOTS:
                    continue
                _walk(node, root_name, bookmarks, folders)

        return bookmarks, folders

    def backup(self) -> Path:
        backup_path = self.path.with_name(self.path.name + ".backup")
        shutil.copy2(self.path, backup_path)
        return backup_path

    def remove_ids(self, ids: Set[str]) -> int:
        """Drop every node whose id is in ids; returns how many went."""
        removed = 0
        roots = self.load().get("roots", {})
        if isinstance(roots, dict):
            for node in roots.values():
                removed += _remove_from_node(node, ids)
        return removed

    def save(self):
        data = self.load()
        # Chrome rejects a file whose checksum no longer matches
        data.pop("checksum", None)
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=3, ensure_ascii=False)
        except OSError as e:
            raise BookmarkFileError(f"Failed to write bookmarks file {self.path}: {e}") from e


def _walk(node, current_path: str, bookmarks: List[Bookmark], folders: List[BookmarkFolder]):
    if not isinstance(node, dict):
        return

    node_type = node.get("type") or ""
    name = node.get("name") or ""

    if node_type == "url":
        url = node.get("url") or ""
        bookmarks.append(
            Bookmark(
                id=node.get("id", ""),
                name=name,
                url=url,
                date_added=node.get("date_added"),
                folder_path=current_path,
                category=categorize(url, name),
            )
        )
    elif node_type == "folder":
        folder_path = f"{current_path}/{name}" if current_path else name
        children = node.get("children") or []
        for child in children:
            _walk(child, folder_path, bookmarks, folders)
        folders.append(
            BookmarkFolder(
                id=node.get("id", ""),
                name=name,
                path=folder_path,
                children_count=len(children),
            )
        )


def _remove_from_node(node, ids: Set[str]) -> int:
    if not isinstance(node, dict):
        return 0
    children = node.get("children")
    if not isinstance(children, list):
        return 0

    removed = sum(_remove_from_node(child, ids) for child in children)
    kept = [child for child in children if not (isinstance(child, dict) and child.get("id") in ids)]
    removed += len(children) - len(kept)
    node["children"] = kept
    return removed


# Analysis


def get_bookmark_stats(bookmarks: List[Bookmark], folders: List[BookmarkFolder]) -> BookmarkStats:
    url_counts = Counter(b.url for b in bookmarks)
    return BookmarkStats(
        total_bookmarks=len(bookmarks),
        total_folders=len(folders),
        duplicates=sum(1 for count in url_counts.values() if count > 1),
        empty_folders=sum(1 for f in folders if f.children_count == 0),
        deep_nesting_count=sum(1 for f in folders if f.path.count("/") > DEEP_NESTING_SLASHES),
        by_domain=dict(Counter(extract_domain(b.url) for b in bookmarks)),
        by_category=dict(Counter(b.category.label for b in bookmarks)),
    )


def find_duplicate_groups(bookmarks: List[Bookmark]) -> List[DuplicateGroup]:
    """URLs bookmarked more than once, with the bookmarks in document order."""
    by_url: Dict[str, List[Bookmark]] = {}
    for bookmark in bookmarks:
        by_url.setdefault(bookmark.url, []).append(bookmark)
    return [DuplicateGroup(url=url, bookmarks=group) for url, group in by_url.items() if len(group) > 1]


def find_duplicates(bookmarks: List[Bookmark]) -> List[DuplicateEntry]:
    entries = []
    for group in find_duplicate_groups(bookmarks):
        titles = list(dict.fromkeys(b.name for b in group.bookmarks))
        entries.append(DuplicateEntry(url=group.url, count=len(group.bookmarks), titles=titles))
    entries.sort(key=lambda e: e.count, reverse=True)
    return entries


def _percentages(counts: Counter, total: int) -> List[Tuple[str, int, str]]:
    rows = []
    for name, count in counts.most_common():
        pct = count / total * 100 if total else 0.0
        rows.append((name, count, f"{pct:.1f}%"))
    return rows


def get_domain_stats(bookmarks: List[Bookmark]) -> List[Tuple[str, int, str]]:
    return _percentages(Counter(extract_domain(b.url) for b in bookmarks), len(bookmarks))


def get_category_stats(bookmarks: List[Bookmark]) -> List[Tuple[str, int, str]]:
    return _percentages(Counter(b.category.label for b in bookmarks), len(bookmarks))


def get_organize_suggestions(bookmarks: List[Bookmark]) -> List[OrganizeSuggestion]:
    """Bookmarks whose folder does not already reflect their category."""
    suggestions = []
    for bookmark in bookmarks:
        if bookmark.category is BookmarkCategory.OTHER:
            continue
        suggested = bookmark.category.folder_name
        if suggested.lower() in bookmark.folder_path.lower():
            continue
        suggestions.append(OrganizeSuggestion(bookmark=bookmark, suggested_folder=suggested))
    return suggestions


def search_bookmarks(bookmarks: List[Bookmark], query: str) -> List[Bookmark]:
    query = query.lower()
    return [
        b
        for b in bookmarks
        if query in b.name.lower() or query in b.url.lower() or query in b.folder_path.lower()
    ]


def filter_by_category(bookmarks: List[Bookmark], category: str) -> List[Bookmark]:
    category = category.lower()
    return [
        b
        for b in bookmarks
        if category in b.category.label.lower() or category in b.category.folder_name.lower()
    ]


def filter_by_domain(bookmarks: List[Bookmark], domain: str) -> List[Bookmark]:
    domain = domain.lower()
    return [b for b in bookmarks if domain in extract_domain(b.url)]


# Export


def _group_by_folder(bookmarks: Iterable[Bookmark]) -> Dict[str, List[Bookmark]]:
    groups: Dict[str, List[Bookmark]] = {}
    for bookmark in bookmarks:
        groups.setdefault(bookmark.category.folder_name, []).append(bookmark)
    return dict(sorted(groups.items()))


def export_to_markdown(
    bookmarks: List[Bookmark],
    output_path: Optional[Path] = None,
    exported_on: Optional[date] = None,
) -> str:
    """Markdown list of bookmarks grouped by category folder."""
    exported_on = exported_on or date.today()
    lines = [
        "# Chrome Bookmarks Export",
        "",
        f"*Exported on: {exported_on.isoformat()}*",
        "",
        f"**Total bookmarks: {len(bookmarks)}**",
        "",
    ]
    for folder, group in _group_by_folder(bookmarks).items():
        lines.append(f"## {folder}")
        lines.append("")
        lines.extend(f"- [{b.name}]({b.url})" for b in group)
        lines.append("")
    content = "\n".join(lines) + "\n"

    if output_path:
        Path(output_path).write_text(content, encoding="utf-8")
        console.print(f"✅ Exported to: [cyan]{output_path}[/cyan]")

    return content


def export_to_chrome_html(bookmarks: List[Bookmark], output_path: Optional[Path] = None) -> str:
    """Netscape bookmark file with one folder per category, importable by Chrome."""
    groups = _group_by_folder(bookmarks)

    lines = [
        "<!DOCTYPE NETSCAPE-Bookmark-file-1>",
        "<!-- This is an automatically generated file.",
        "     It will be read and overwritten.",
        "     DO NOT EDIT! -->",
        '<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">',
        "<TITLE>Bookmarks</TITLE>",
        "<H1>Bookmarks</H1>",
        "<DL><p>",
        '    <DT><H3 ADD_DATE="1" LAST_MODIFIED="1" PERSONAL_TOOLBAR_FOLDER="true">Bookmarks bar</H3>',
        "    <DL><p>",
    ]
    for folder, group in groups.items():
        lines.append(f'        <DT><H3 ADD_DATE="1" LAST_MODIFIED="1">{html.escape(folder)}</H3>')
        lines.append("        <DL><p>")
        for b in sorted(group, key=lambda b: b.name.lower()):
            lines.append(
                f'            <DT><A HREF="{html.escape(b.url)}" ADD_DATE="1">{html.escape(b.name)}</A>'
            )
        lines.append("        </DL><p>")
    lines.append("    </DL><p>")
    lines.append("</DL><p>")
    lines.append(f"<!-- Organized {len(bookmarks)} bookmarks into {len(groups)} categories -->")
    content = "\n".join(lines) + "\n"

    if output_path:
        Path(output_path).write_text(content, encoding="utf-8")
        console.print(f"\n✅ Exported organized bookmarks to: [cyan]{output_path}[/cyan]")
        console.print("\n📋 To import into Chrome:")
        console.print("   1. Open Chrome and go to [yellow]chrome://bookmarks[/yellow] (or Cmd+Shift+O)")
        console.print("   2. Click the three-dot menu (⋮) in the top right")
        console.print("   3. Select [yellow]Import bookmarks[/yellow] → [yellow]Choose file[/yellow]")
        console.print("   4. Select the exported HTML file")
        console.print(
            f"\n💡 Your bookmarks will be organized into [green]{len(groups)}[/green] category folders"
        )

    return content


# Removal


def _list_pending(rows: List[Tuple[str, str, str]], limit: int):
    for i, (name, detail, folder) in enumerate(rows[:limit], start=1):
        console.print(f"  [yellow]{i}.[/yellow] [cyan]{name}[/cyan] - [dim]{detail}[/dim] ([magenta]{folder}[/magenta])")
    if len(rows) > limit:
        console.print(f"  ... and [yellow]{len(rows) - limit}[/yellow] more")


def _apply_removal(
    store: BookmarkStore,
    ids: Set[str],
    rows: List[Tuple[str, str, str]],
    noun: str,
    dry_run: bool,
    assume_yes: bool,
) -> int:
    """Confirm, back up, remove and save. Returns the number removed."""
    if dry_run:
        console.print("\n📋 Dry run - no changes made")
        console.print(f"Would remove {len(ids)} {noun}:")
        for name, _detail, folder in rows[:DRY_RUN_LIST_LIMIT]:
            console.print(f"  [red]•[/red] {name} ({folder})")
        if len(rows) > DRY_RUN_LIST_LIMIT:
            console.print(f"  ... and {len(rows) - DRY_RUN_LIST_LIMIT} more")
        return len(ids)

    if not assume_yes:
        print_header(f"{noun.capitalize()} to be removed:", width=80)
        _list_pending(rows, CONFIRM_LIST_LIMIT)
        console.print(f"\n⚠️  [red]{len(ids)}[/red] {noun} will be removed")
        if not Confirm.ask("\n❓ Are you sure you want to proceed?", default=False, console=console):
            console.print("[yellow]Operation cancelled.[/yellow]")
            return 0

    backup_path = store.backup()
    console.print(f"💾 Backup created: [cyan]{backup_path}[/cyan]")

    removed = store.remove_ids(ids)
    store.save()
    logger.debug("Removed %d bookmark nodes from %s", removed, store.path)

    console.print(f"\n✅ Removed [yellow]{removed}[/yellow] {noun}")
    console.print("💡 Restart Chrome to see the changes")
    return removed


def remove_duplicates(store: BookmarkStore, dry_run: bool = False, assume_yes: bool = False) -> int:
    """Remove every repeat of a URL, keeping its first occurrence."""
    bookmarks, _ = store.parse()
    groups = find_duplicate_groups(bookmarks)
    if not groups:
        console.print("[green]No duplicate bookmarks found![/green]")
        return 0

    ids: Set[str] = set()
    rows: List[Tuple[str, str, str]] = []
    for group in groups:
        for bookmark in group.bookmarks[1:]:
            ids.add(bookmark.id)
            rows.append((truncate(bookmark.name, 30), truncate(group.url, 50), truncate(bookmark.folder_path, 25)))

    console.print(
        f"\n🔍 Found [yellow]{len(groups)}[/yellow] duplicate URL groups "
        f"([yellow]{len(rows)}[/yellow] total duplicate entries)\n"
    )
    return _apply_removal(store, ids, rows, "duplicate bookmarks", dry_run, assume_yes)


def remove_dead_links(
    store: BookmarkStore,
    dead_links: List,
    dry_run: bool = False,
    assume_yes: bool = False,
) -> int:
    """Remove the bookmarks behind dead_links, matched by bookmark id."""
    if not dead_links:
        console.print("[green]No dead links to remove![/green]")
        return 0

    ids = {d.bookmark.id for d in dead_links}
    rows = [
        (truncate(d.bookmark.name, 30), d.status, truncate(d.bookmark.folder_path, 25))
        for d in dead_links
    ]
    return _apply_removal(store, ids, rows, "dead links", dry_run, assume_yes)
