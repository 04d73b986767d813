"""Rich table rendering for every listing Shell Explorer prints."""

from typing import Iterable, List, Optional, Sequence, Tuple

from rich import box
from rich.console import Console
from rich.prompt import Prompt
from rich.table import Table

console = Console()

# (header, style, max width)
Column = Tuple[str, str, Optional[int]]


def truncate(text: str, max_len: int) -> str:
    """Shorten text to max_len characters, marking the cut with '...'."""
    if len(text) <= max_len:
        return text
    return text[: max(max_len - 3, 0)] + "..."


def print_header(title: str, width: int = 60):
    console.print(f"[bold cyan]{title}[/bold cyan]")
    console.print(f"[dim]{'─' * width}[/dim]")


def build_table(
    columns: Sequence[Column],
    rows: Iterable[Sequence[str]],
    use_colors: bool = True,
    title: Optional[str] = None,
) -> Table:
    table = Table(
        title=title,
        box=box.ROUNDED,
        header_style="bold white on blue" if use_colors else "",
    )
    for header, style, width in columns:
        table.add_column(
            header,
            style=style if use_colors else "",
            max_width=width,
            overflow="fold",
            justify="left",
        )
    for row in rows:
        table.add_row(*[str(cell) for cell in row])
    return table


def _show(columns: Sequence[Column], rows: Iterable[Sequence[str]], use_colors: bool):
    console.print()
    console.print(build_table(columns, rows, use_colors))


def display_aliases_table(aliases: List, use_colors: bool = True):
    _show(
        [("Alias", "cyan", 20), ("Command", "green", 50), ("Source", "yellow", 15)],
        ((a.alias, a.command, a.source) for a in aliases),
        use_colors,
    )


def display_functions_table(functions: List, use_colors: bool = True):
    _show(
        [
            ("Function Name", "cyan", 20),
            ("Description", "green", 40),
            ("Usage", "magenta", 30),
            ("Source", "yellow", 15),
        ],
        ((f.name, f.description, f.usage, f.source) for f in functions),
        use_colors,
    )


def display_packages_table(packages: List, use_colors: bool = True):
    _show(
        [
            ("Package", "cyan", 25),
            ("Version", "green", 15),
            ("File", "yellow", 50),
            ("Type", "magenta", 10),
        ],
        ((p.name, p.version, str(p.file_path), p.package_type) for p in packages),
        use_colors,
    )


def display_cleaned_table(entries: List, use_colors: bool = True):
    _show(
        [("Path", "cyan", 60), ("Size", "yellow", 12), ("Status", "green", 20)],
        ((e.path, e.size, e.status) for e in entries),
        use_colors,
    )


def display_organize_table(entries: List, use_colors: bool = True):
    _show(
        [
            ("File", "cyan", 35),
            ("Category", "magenta", 15),
            ("Destination", "yellow", 45),
            ("Status", "green", 20),
        ],
        ((e.file_name, e.category, e.destination, e.status) for e in entries),
        use_colors,
    )


def display_bookmarks_table(bookmarks: List, use_colors: bool = True):
    _show(
        [
            ("Title", "cyan", 40),
            ("URL", "blue", 50),
            ("Category", "magenta", 25),
            ("Folder", "yellow", 30),
        ],
        (
            (
                truncate(b.name, 40),
                truncate(b.url, 50),
                b.category.label,
                truncate(b.folder_path, 30),
            )
            for b in bookmarks
        ),
        use_colors,
    )


def display_duplicates_table(entries: List, use_colors: bool = True):
    _show(
        [("URL", "blue", 60), ("Occurrences", "yellow", 12), ("Titles", "cyan", 50)],
        ((truncate(d.url, 60), d.count, ", ".join(d.titles)) for d in entries),
        use_colors,
    )


def display_domain_stats_table(entries: List, use_colors: bool = True):
    _show(
        [("Domain", "cyan", 40), ("Count", "yellow", 10), ("Percentage", "green", 12)],
        ((truncate(domain, 40), count, pct) for domain, count, pct in entries),
        use_colors,
    )


def display_category_stats_table(entries: List, use_colors: bool = True):
    _show(
        [("Category", "magenta", 30), ("Count", "yellow", 10), ("Percentage", "green", 12)],
        entries,
        use_colors,
    )


def display_organize_suggestions_table(suggestions: List, use_colors: bool = True):
    _show(
        [
            ("Bookmark", "cyan", 40),
            ("Current Folder", "yellow", 30),
            ("Suggested Folder", "green", 30),
            ("Category", "magenta", 25),
        ],
        (
            (
                truncate(s.bookmark.name, 40),
                truncate(s.bookmark.folder_path, 30),
                s.suggested_folder,
                s.bookmark.category.label,
            )
            for s in suggestions
        ),
        use_colors,
    )


def display_dead_links_table(dead_links: List, use_colors: bool = True):
    _show(
        [
            ("Title", "cyan", 40),
            ("URL", "blue", 50),
            ("Status", "red", 20),
            ("Folder", "yellow", 25),
        ],
        (
            (
                truncate(d.bookmark.name, 40),
                truncate(d.bookmark.url, 50),
                d.status,
                truncate(d.bookmark.folder_path, 25),
            )
            for d in dead_links
        ),
        use_colors,
    )


def parse_selection(answer: str, count: int) -> List[int]:
    """Turn an answer like "1,3,5-7" into zero-based indices.

    "a" or "all" selects everything; "q", "n" or an empty answer selects
    nothing. Numbers outside 1..count are ignored.
    """
    answer = answer.strip().lower()
    if answer in ("a", "all"):
        return list(range(count))
    if answer in ("", "q", "n", "none"):
        return []

    selected = set()
    for token in answer.replace(" ", ",").split(","):
        if not token:
            continue
        if "-" in token:
            start, _, end = token.partition("-")
            if not (start.isdecimal() and end.isdecimal()):
                continue
            numbers = range(max(1, int(start)), min(count, int(end)) + 1)
        elif token.isdecimal():
            numbers = [int(token)]
        else:
            continue
        selected.update(n - 1 for n in numbers if 1 <= n <= count)
    return sorted(selected)


def ask_selection(count: int, noun: str) -> List[int]:
    console.print(
        f"\nSelect {noun} by number ([yellow]1,3,5-7[/yellow]), "
        "[yellow]a[/yellow] for all, [yellow]q[/yellow] to cancel"
    )
    answer = Prompt.ask("Selection", default="q", console=console)
    return parse_selection(answer, count)
