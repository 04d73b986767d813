"""Test fixtures and utilities for Shell Explorer tests."""

import json
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional
import pytest

# Import the classes we need to test
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from shell_explorer.config import Config, PreferencesManager


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def home_dir(temp_dir):
    home = temp_dir / "home"
    home.mkdir()
    return home


@pytest.fixture(autouse=True)
def isolated_home(home_dir, monkeypatch):
    """Point HOME at a temp directory - tests NEVER touch the real home."""
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.setenv("USERPROFILE", str(home_dir))
    return home_dir


@pytest.fixture
def test_config(home_dir):
    """Create a test configuration rooted in the temporary home."""
    return Config(
        home_path=home_dir,
        shell="/nonexistent/shell",
        bookmarks_path=home_dir / "Bookmarks",
        scan_workers=2,
        link_check_workers=2,
        link_check_timeout=1,
    )


@pytest.fixture
def preferences_manager(home_dir):
    """PreferencesManager whose directory lives under the temporary home."""
    manager = PreferencesManager()
    assert manager.config_dir == home_dir / ".shell-explorer"
    return manager


def create_test_file(directory: Path, filename: str, content: str = "test content") -> Path:
    """Utility function to create a test file."""
    directory.mkdir(parents=True, exist_ok=True)
    file_path = directory / filename
    file_path.write_text(content)
    return file_path


def create_test_directory_structure(base_path: Path, structure: Dict[str, Any]) -> None:
    """
    Create a directory structure from a nested dictionary.

    Args:
        base_path: Base directory to create structure in
        structure: Dict where keys are directory/file names and values are:
                  - Dict for subdirectories
                  - String for file content
                  - None for empty directories
    """
    for name, content in structure.items():
        path = base_path / name

        if isinstance(content, dict):
            path.mkdir(parents=True, exist_ok=True)
            create_test_directory_structure(path, content)
        elif isinstance(content, str):
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        else:
            path.mkdir(parents=True, exist_ok=True)


def bookmark_node(node_id: str, name: str, url: str) -> Dict[str, Any]:
    return {"id": node_id, "name": name, "type": "url", "url": url, "date_added": "13300000000000000"}


def folder_node(node_id: str, name: str, children: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
    return {"id": node_id, "name": name, "type": "folder", "children": children or []}


def sample_bookmarks_document() -> Dict[str, Any]:
    """A small Chrome Bookmarks document with duplicates, nesting and an empty folder."""
    return {
        "checksum": "0123456789abcdef",
        "roots": {
            "bookmark_bar": folder_node("1", "Bookmarks bar", [
                bookmark_node("10", "GitHub", "https://github.com/"),
                bookmark_node("11", "Python docs", "https://docs.python.org/3/"),
                folder_node("12", "Dev", [
                    bookmark_node("13", "GitHub again", "https://github.com/"),
                    bookmark_node("14", "Netflix", "https://www.netflix.com/browse"),
                    folder_node("15", "Deep", [
                        folder_node("16", "Deeper", [
                            folder_node("17", "Deepest", [
                                bookmark_node("18", "Rust book", "https://doc.rust-lang.org/book/"),
                            ]),
                        ]),
                    ]),
                ]),
            ]),
            "other": folder_node("2", "Other bookmarks", [
                bookmark_node("20", "GitHub third", "https://github.com/"),
                bookmark_node("21", "Notes", "file:///home/me/notes.html"),
                folder_node("22", "Empty"),
            ]),
            "synced": folder_node("3", "Mobile bookmarks"),
        },
        "sync_transaction_version": "5",
        "version": 1,
    }


def write_bookmarks_file(path: Path, document: Optional[Dict[str, Any]] = None) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(document or sample_bookmarks_document(), indent=3))
    return path
