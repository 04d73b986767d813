#!/usr/bin/env python3
"""
Shell Explorer command line.

    shell-explorer                      # same as `aliases`
    shell-explorer functions -f git
    shell-explorer packages --package react --min-version 17.0.0
    shell-explorer clean --path ~/code --dry-run
    shell-explorer organize --path ~/Downloads
    shell-explorer bookmarks duplicates
"""

import logging
from pathlib import Path
from typing import List, Optional

import typer
from rich.logging import RichHandler
from rich.table import Table

from shell_explorer import __version__
from shell_explorer import bookmarks as bm
from shell_explorer.aliases import filter_aliases, get_all_aliases
from shell_explorer.cleaner import clean_node_modules
from shell_explorer.config import Config, PreferencesManager
from shell_explorer.display import (
    console,
    display_aliases_table,
    display_bookmarks_table,
    display_category_stats_table,
    display_cleaned_table,
    display_dead_links_table,
    display_domain_stats_table,
    display_duplicates_table,
    display_functions_table,
    display_organize_suggestions_table,
    display_organize_table,
    display_packages_table,
    print_header,
)
from shell_explorer.errors import ShellExplorerError
from shell_explorer.functions import filter_functions, get_all_functions
from shell_explorer.linkcheck import find_dead_links
from shell_explorer.organizer import organize_files
from shell_explorer.packages import find_packages_with_version_greater_than

app = typer.Typer(help="Shell Explorer - Explore your shell, projects and bookmarks")
bookmarks_app = typer.Typer(help="Analyze and organize Chrome bookmarks (default: stats)")
app.add_typer(bookmarks_app, name="bookmarks")

state = {"use_colors": True, "verbose": False}

DEFAULT_DOMAIN_LIMIT = 30
DEFAULT_SUGGESTION_LIMIT = 50
TOP_DOMAINS = 10


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _fail(error: Exception):
    console.print(f"❌ {error}")
    raise typer.Exit(1)


def _limited(items: List, limit: Optional[int], default: Optional[int] = None) -> List:
    limit = limit if limit is not None else default
    return items if limit is None else items[:limit]


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Show directories and files being scanned"
    ),
    plain: bool = typer.Option(False, "--plain", "-p", help="Plain tables without colors"),
):
    """Shell Explorer - Explore your shell, projects and bookmarks."""
    state["verbose"] = verbose
    state["use_colors"] = not plain
    setup_logging(verbose)

    if ctx.invoked_subcommand is None:
        aliases(filter_pattern=None, source=None)


@app.command()
def aliases(
    filter_pattern: Optional[str] = typer.Option(
        None, "--filter", "-f", help="Filter by alias name or command (case-insensitive)"
    ),
    source: Optional[str] = typer.Option(
        None, "--source", "-s", help="Filter by source (.zshrc, .bashrc, Shell Session...)"
    ),
):
    """Show aliases from the shell session and config files."""
    print_header("🔍 Shell Alias Explorer", width=50)
    config = PreferencesManager().load_config()

    entries = get_all_aliases(config)
    if filter_pattern:
        console.print(f"🔍 Filtering by: [yellow]{filter_pattern}[/yellow]")
    if source:
        console.print(f"📁 Filtering by source: [yellow]{source}[/yellow]")
    entries = filter_aliases(entries, filter_pattern, source)

    if not entries:
        console.print("[yellow]No aliases found matching your criteria.[/yellow]")
        return

    display_aliases_table(entries, state["use_colors"])
    console.print(f"\n✨ Found [bold]{len(entries)}[/bold] aliases")


@app.command()
def functions(
    filter_pattern: Optional[str] = typer.Option(
        None, "--filter", "-f", help="Filter by name, description or usage (case-insensitive)"
    ),
    source: Optional[str] = typer.Option(None, "--source", "-s", help="Filter by source file"),
):
    """Show shell functions documented in config files."""
    print_header("🔧 Shell Function Explorer")
    config = PreferencesManager().load_config()

    entries = get_all_functions(config)
    if filter_pattern:
        console.print(f"🔍 Filtering by: [yellow]{filter_pattern}[/yellow]")
    if source:
        console.print(f"📁 Filtering by source: [yellow]{source}[/yellow]")
    entries = filter_functions(entries, filter_pattern, source)

    if not entries:
        console.print("[yellow]No functions found matching your criteria.[/yellow]")
        return

    display_functions_table(entries, state["use_colors"])
    console.print(f"\n✨ Found [bold]{len(entries)}[/bold] functions")


@app.command()
def packages(
    package: str = typer.Option(..., "--package", help="Package name to search for"),
    min_version: str = typer.Option(
        ..., "--min-version", help="Show versions greater than this (e.g. 1.0.0, 0.5.0-beta)"
    ),
    path: Optional[Path] = typer.Option(
        None, "--path", help="Directory or manifest to scan (default: current directory)"
    ),
):
    """Find package versions greater than a threshold."""
    print_header("📦 Package Version Explorer")
    config = PreferencesManager().load_config()

    console.print(
        f"🔍 Searching for package '[yellow]{package}[/yellow]' "
        f"with version > [green]{min_version}[/green]"
    )
    if path:
        console.print(f"📁 Search path: [yellow]{path}[/yellow]")

    try:
        found = find_packages_with_version_greater_than(package, min_version, path, config)
    except ShellExplorerError as e:
        _fail(e)

    if not found:
        console.print(
            f"[yellow]No packages named '{package}' found with version "
            f"greater than '{min_version}'[/yellow]"
        )
        return

    display_packages_table(found, state["use_colors"])
    console.print(f"\n✨ Found [bold]{len(found)}[/bold] package instances")


@app.command()
def clean(
    path: Optional[Path] = typer.Option(None, "--path", help="Root to search (default: current directory)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed"),
    interactive: bool = typer.Option(
        False, "--interactive", "-i", help="Choose which directories to delete"
    ),
):
    """Remove node_modules directories recursively, in parallel."""
    print_header("🧹 Node Modules Cleaner")
    config = PreferencesManager().load_config()

    results = clean_node_modules(path, dry_run=dry_run, interactive=interactive, config=config)
    if results and not interactive:
        display_cleaned_table(results, state["use_colors"])


@app.command()
def organize(
    path: Optional[Path] = typer.Option(None, "--path", help="Folder to organize (default: current directory)"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be moved"),
    interactive: bool = typer.Option(False, "--interactive", "-i", help="Choose which files to move"),
):
    """Sort loose files into category folders."""
    print_header("📂 File Organizer")
    config = PreferencesManager().load_config()

    if path and not path.is_dir():
        _fail(f"Not a directory: {path}")

    try:
        results = organize_files(path, dry_run=dry_run, interactive=interactive, config=config)
    except ShellExplorerError as e:
        _fail(e)

    if results and not interactive:
        display_organize_table(results, state["use_colors"])


@app.command(name="config")
def config_cmd(
    show: bool = typer.Option(False, "--show", "-s", help="Show current configuration"),
    edit_bookmarks_path: Optional[str] = typer.Option(
        None, "--bookmarks-path", help="Set Chrome bookmarks file"
    ),
    edit_shell: Optional[str] = typer.Option(None, "--shell", help="Set shell used for session aliases"),
    edit_timeout: Optional[int] = typer.Option(
        None, "--timeout", help="Seconds before a link check gives up"
    ),
    edit_workers: Optional[int] = typer.Option(
        None, "--workers", help="Parallel link checks"
    ),
    edit_scan_workers: Optional[int] = typer.Option(
        None, "--scan-workers", help="Threads for sizing, deleting and manifest parsing"
    ),
):
    """Manage Shell Explorer configuration."""
    prefs = PreferencesManager()

    if show:
        config = prefs.load_config()
        info = prefs.get_config_info()

        table = Table(title="Shell Explorer Configuration")
        table.add_column("Setting", style="cyan")
        table.add_column("Value", style="green")

        table.add_row("Config Directory", str(info["config_dir"]))
        table.add_row("Config File", str(info["config_file"]))
        table.add_row("Config Exists", "✓" if info["config_exists"] else "✗")
        table.add_row("Home Path", str(config.home_path))
        table.add_row("Shell", config.shell)
        table.add_row("", "")
        table.add_row("Alias Files", ", ".join(config.alias_files))
        table.add_row("Function Files", ", ".join(config.function_files))
        table.add_row("Scan Workers", str(config.scan_workers))
        table.add_row("", "")
        table.add_row("Bookmarks File", str(config.bookmarks_path))
        table.add_row("Link Check Timeout", f"{config.link_check_timeout} seconds")
        table.add_row("Link Check Workers", str(config.link_check_workers))
        table.add_row("Max Redirects", str(config.max_redirects))
        table.add_row("", "")
        table.add_row("File Categories", ", ".join(config.file_categories))

        console.print(table)
        return

    try:
        config = prefs.load_config()
        config_dict = config.model_dump()
        changed = False

        if edit_bookmarks_path:
            config_dict["bookmarks_path"] = edit_bookmarks_path
            changed = True
            console.print(f"✓ Bookmarks path updated to: {edit_bookmarks_path}")

        if edit_shell:
            config_dict["shell"] = edit_shell
            changed = True
            console.print(f"✓ Shell updated to: {edit_shell}")

        if edit_timeout is not None:
            config_dict["link_check_timeout"] = edit_timeout
            changed = True
            console.print(f"✓ Link check timeout updated to: {edit_timeout} seconds")

        if edit_workers is not None:
            config_dict["link_check_workers"] = edit_workers
            changed = True
            console.print(f"✓ Link check workers updated to: {edit_workers}")

        if edit_scan_workers is not None:
            config_dict["scan_workers"] = edit_scan_workers
            changed = True
            console.print(f"✓ Scan workers updated to: {edit_scan_workers}")

        if changed:
            config = Config.model_validate(config_dict)
            prefs.save_config(config)
        else:
            console.print("Nothing to change. Use --show to see the current configuration.")

    except ValueError as e:
        console.print(f"❌ Configuration error: {e}")
        console.print("Configuration not saved due to validation errors.")
        raise typer.Exit(1)


@app.command()
def version():
    """Show Shell Explorer version information."""
    console.print(f"🐚 Shell Explorer v{__version__}")
    console.print("Shell, project and bookmark explorer")


# Bookmarks


def _open_store() -> bm.BookmarkStore:
    config = PreferencesManager().load_config()
    return bm.BookmarkStore(config.bookmarks_path)


def _load_bookmarks(store: bm.BookmarkStore):
    console.print("📖 Loading Chrome bookmarks...")
    try:
        bookmarks, folders = store.parse()
    except ShellExplorerError as e:
        _fail(e)
    console.print(
        f"✅ Found [yellow]{len(bookmarks)}[/yellow] bookmarks in "
        f"[yellow]{len(folders)}[/yellow] folders\n"
    )
    return bookmarks, folders


@bookmarks_app.callback(invoke_without_command=True)
def bookmarks_main(ctx: typer.Context):
    """Analyze and organize Chrome bookmarks."""
    print_header("🔖 Chrome Bookmarks Organizer")
    if ctx.invoked_subcommand is None:
        stats()


@bookmarks_app.command()
def stats():
    """Totals, top domains and category breakdown."""
    bookmarks, folders = _load_bookmarks(_open_store())
    summary = bm.get_bookmark_stats(bookmarks, folders)

    print_header("📊 Bookmark Statistics", width=50)
    console.print(f"  📑 Total bookmarks: [yellow]{summary.total_bookmarks}[/yellow]")
    console.print(f"  📁 Total folders: [yellow]{summary.total_folders}[/yellow]")
    console.print(f"  🔄 Duplicate URLs: [yellow]{summary.duplicates}[/yellow]")
    console.print(f"  📂 Empty folders: [yellow]{summary.empty_folders}[/yellow]")
    console.print(
        f"  🪆 Deeply nested folders (>3 levels): [yellow]{summary.deep_nesting_count}[/yellow]"
    )
    console.print(f"  🌐 Unique domains: [yellow]{len(summary.by_domain)}[/yellow]")

    console.print()
    print_header("🔝 Top 10 Domains", width=50)
    display_domain_stats_table(bm.get_domain_stats(bookmarks)[:TOP_DOMAINS], state["use_colors"])

    console.print()
    print_header("📂 Category Breakdown", width=50)
    display_category_stats_table(bm.get_category_stats(bookmarks), state["use_colors"])


@bookmarks_app.command()
def duplicates(
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Limit number of results"),
):
    """URLs bookmarked more than once."""
    bookmarks, _ = _load_bookmarks(_open_store())
    print_header("🔄 Duplicate Bookmarks", width=50)

    entries = bm.find_duplicates(bookmarks)
    if not entries:
        console.print("[green]No duplicate bookmarks found![/green]")
        return

    entries = _limited(entries, limit)
    display_duplicates_table(entries, state["use_colors"])
    console.print(f"\n📊 Found [yellow]{len(entries)}[/yellow] duplicate URL groups")


@bookmarks_app.command(name="remove-dupes")
def remove_dupes(
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Remove duplicate bookmarks, keeping the first of each URL."""
    store = _open_store()
    _load_bookmarks(store)
    print_header("🗑️  Remove Duplicate Bookmarks", width=50)

    try:
        bm.remove_duplicates(store, dry_run=dry_run, assume_yes=yes)
    except (ShellExplorerError, OSError) as e:
        _fail(e)


@bookmarks_app.command()
def deadlinks(
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Limit number of results"),
):
    """Check every bookmark URL and list the dead ones."""
    config = PreferencesManager().load_config()
    bookmarks, _ = _load_bookmarks(bm.BookmarkStore(config.bookmarks_path))
    print_header("🔗 Checking for Dead Links", width=50)

    dead = find_dead_links(bookmarks, config, verbose=state["verbose"])
    if not dead:
        console.print("[green]No dead links found! All bookmarks are valid.[/green]")
        return

    dead = _limited(dead, limit)
    display_dead_links_table(dead, state["use_colors"])
    console.print(f"\n📊 Found [red]{len(dead)}[/red] dead links")
    console.print("\n💡 Use `shell-explorer bookmarks remove-dead` to remove these dead links")


@bookmarks_app.command(name="remove-dead")
def remove_dead(
    dry_run: bool = typer.Option(False, "--dry-run", help="Show what would be removed"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Do not ask for confirmation"),
):
    """Check every bookmark URL and remove the dead ones."""
    config = PreferencesManager().load_config()
    store = bm.BookmarkStore(config.bookmarks_path)
    bookmarks, _ = _load_bookmarks(store)
    print_header("🗑️  Remove Dead Links", width=50)

    dead = find_dead_links(bookmarks, config, verbose=state["verbose"])
    if not dead:
        console.print("[green]No dead links found! All bookmarks are valid.[/green]")
        return

    console.print(f"\n📊 Found [red]{len(dead)}[/red] dead links to remove")
    try:
        bm.remove_dead_links(store, dead, dry_run=dry_run, assume_yes=yes)
    except (ShellExplorerError, OSError) as e:
        _fail(e)


@bookmarks_app.command()
def domains(
    domain: Optional[str] = typer.Option(None, "--domain", "-d", help="Show bookmarks for this domain"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Limit number of results"),
):
    """Bookmark counts per domain, or the bookmarks of one domain."""
    bookmarks, _ = _load_bookmarks(_open_store())
    print_header("🌐 Bookmarks by Domain", width=50)

    if domain:
        matches = bm.filter_by_domain(bookmarks, domain)
        if not matches:
            console.print(f"[yellow]No bookmarks found for domain: {domain}[/yellow]")
            return
        display_bookmarks_table(matches, state["use_colors"])
        console.print(f"\n📊 Found [yellow]{len(matches)}[/yellow] bookmarks for '[cyan]{domain}[/cyan]'")
        return

    rows = _limited(bm.get_domain_stats(bookmarks), limit, DEFAULT_DOMAIN_LIMIT)
    display_domain_stats_table(rows, state["use_colors"])


@bookmarks_app.command()
def categories(
    category: Optional[str] = typer.Option(
        None, "--category", "-c", help="Show bookmarks whose category matches"
    ),
):
    """Bookmark counts per category, or the bookmarks of one category."""
    bookmarks, _ = _load_bookmarks(_open_store())
    print_header("📂 Bookmarks by Category", width=50)

    if category:
        matches = bm.filter_by_category(bookmarks, category)
        if not matches:
            console.print(f"[yellow]No bookmarks found for category: {category}[/yellow]")
            return
        display_bookmarks_table(matches, state["use_colors"])
        console.print(
            f"\n📊 Found [yellow]{len(matches)}[/yellow] bookmarks in category '[cyan]{category}[/cyan]'"
        )
        return

    display_category_stats_table(bm.get_category_stats(bookmarks), state["use_colors"])


@bookmarks_app.command()
def search(
    query: Optional[str] = typer.Option(None, "--query", "-q", help="Text to look for in title, URL or folder"),
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Limit number of results"),
):
    """Search bookmarks by title, URL or folder."""
    if not query:
        console.print("[yellow]Please provide a search query with --query <QUERY>[/yellow]")
        return

    bookmarks, _ = _load_bookmarks(_open_store())
    print_header(f"🔍 Searching for: {query}", width=50)

    matches = bm.search_bookmarks(bookmarks, query)
    if not matches:
        console.print(f"[yellow]No bookmarks found matching: {query}[/yellow]")
        return

    matches = _limited(matches, limit)
    display_bookmarks_table(matches, state["use_colors"])
    console.print(f"\n📊 Found [yellow]{len(matches)}[/yellow] matching bookmarks")


@bookmarks_app.command(name="organize")
def organize_bookmarks(
    limit: Optional[int] = typer.Option(None, "--limit", "-l", help="Limit number of results"),
):
    """Suggest category folders for misplaced bookmarks."""
    bookmarks, _ = _load_bookmarks(_open_store())
    print_header("📋 Organization Suggestions", width=50)

    suggestions = bm.get_organize_suggestions(bookmarks)
    if not suggestions:
        console.print("[green]All bookmarks are already well-organized![/green]")
        return

    suggestions = _limited(suggestions, limit, DEFAULT_SUGGESTION_LIMIT)
    display_organize_suggestions_table(suggestions, state["use_colors"])
    console.print(f"\n📊 Found [yellow]{len(suggestions)}[/yellow] bookmarks that could be reorganized")
    console.print(
        "\n💡 To apply these changes, manually reorganize in Chrome or export and reimport."
    )


@bookmarks_app.command()
def export(
    output: Path = typer.Option(Path("bookmarks_export.md"), "--output", "-o", help="Markdown file to write"),
):
    """Export bookmarks to markdown, grouped by category."""
    bookmarks, _ = _load_bookmarks(_open_store())

    console.print("📝 Exporting bookmarks to markdown...")
    try:
        bm.export_to_markdown(bookmarks, output)
    except OSError as e:
        _fail(f"Failed to write to {output}: {e}")
    console.print(
        f"\n✅ Exported [yellow]{len(bookmarks)}[/yellow] bookmarks to [cyan]{output}[/cyan]"
    )


@bookmarks_app.command(name="export-html")
def export_html(
    output: Path = typer.Option(
        Path("bookmarks_organized.html"), "--output", "-o", help="HTML file to write"
    ),
):
    """Export bookmarks as a Chrome-importable HTML file, one folder per category."""
    bookmarks, _ = _load_bookmarks(_open_store())

    console.print("📝 Exporting organized bookmarks to Chrome HTML...")
    try:
        bm.export_to_chrome_html(bookmarks, output)
    except OSError as e:
        _fail(f"Failed to write to {output}: {e}")


if __name__ == "__main__":
    app()
