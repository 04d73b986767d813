import json
import os
import sys
from pathlib import Path
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from shell_explorer.display import console


DEFAULT_SKIP_DIRS = [
    "node_modules", "target", ".git", "build", "dist", ".next", ".nuxt",
    ".cache", "coverage", ".nyc_output", "__pycache__", ".pytest_cache",
    ".tox", "venv", ".venv", "vendor", ".bundle", "tmp", "temp", ".tmp",
    ".svn", ".hg", "CVS", "bin", "obj", "Debug", "Release", ".idea",
    ".vscode", ".vs", "logs", "log",
]

DEFAULT_DEV_MARKERS = [
    # Node.js
    "node_modules", "package.json", "package-lock.json", "yarn.lock", "pnpm-lock.yaml",
    # Java / JVM
    "pom.xml", "build.gradle", "gradlew", ".mvn",
    # Rust
    "Cargo.toml", "Cargo.lock",
    # Python
    "requirements.txt", "setup.py", "pyproject.toml", "Pipfile", ".venv", "venv",
    # Go
    "go.mod", "go.sum",
    # Ruby
    "Gemfile", "Gemfile.lock",
    # PHP
    "composer.json", "composer.lock",
    # .NET
    "*.csproj", "*.sln",
    # Version control and editors
    ".git", ".idea", ".vscode",
]

DEFAULT_FILE_CATEGORIES = {
    "Documents": [
        "pdf", "doc", "docx", "txt", "rtf", "odt", "xls", "xlsx", "ppt",
        "pptx", "csv", "md", "pages", "numbers", "key",
    ],
    "Images": [
        "jpg", "jpeg", "png", "gif", "bmp", "svg", "webp", "ico", "tiff",
        "tif", "raw", "cr2", "nef", "heic", "heif", "psd", "ai", "eps",
    ],
    "Videos": [
        "mp4", "mkv", "avi", "mov", "wmv", "flv", "webm", "m4v", "mpeg",
        "mpg", "3gp", "ogv",
    ],
    "Audio": ["mp3", "wav", "flac", "aac", "ogg", "wma", "m4a", "aiff", "opus"],
    "Archives": ["zip", "rar", "7z", "tar", "gz", "bz2", "xz", "tgz", "tbz2", "dmg", "iso"],
    "Code": ["sh", "bash", "zsh", "fish", "sql", "lua"],
    "Data": [
        "json", "xml", "yaml", "yml", "toml", "ini", "cfg", "conf", "plist",
        "sqlite", "db",
    ],
    "Executables": ["exe", "msi", "app", "deb", "rpm", "pkg", "appimage", "run"],
    "Fonts": ["ttf", "otf", "woff", "woff2", "eot"],
    "Ebooks": ["epub", "mobi", "azw", "azw3", "fb2", "djvu"],
}


def default_bookmarks_path(home: Path) -> Path:
    """Location of Chrome's Default profile bookmarks file for this platform."""
    if sys.platform == "darwin":
        return home / "Library/Application Support/Google/Chrome/Default/Bookmarks"
    if sys.platform.startswith("win"):
        return home / "AppData/Local/Google/Chrome/User Data/Default/Bookmarks"
    return home / ".config/google-chrome/Default/Bookmarks"


# Configuration and Preferences Management
class Config(BaseModel):
    """Configuration for Shell Explorer."""

    home_path: Path = Field(default_factory=lambda: Path.home())
    shell: str = Field(default_factory=lambda: os.environ.get("SHELL", "/bin/bash"))

    # Shell config files, relative to home_path
    alias_files: List[str] = Field(
        default=[
            ".bashrc", ".bash_profile", ".bash_aliases", ".zshrc",
            ".zsh_aliases", ".profile", ".aliases",
        ]
    )
    function_files: List[str] = Field(
        default=[
            ".zshrc", ".bashrc", ".bash_profile", ".profile",
            ".zsh_functions", ".bash_functions",
        ]
    )

    # Directory walking
    package_skip_dirs: List[str] = Field(default_factory=lambda: list(DEFAULT_SKIP_DIRS))
    clean_skip_dirs: List[str] = Field(default=[".git", "target", ".cache", ".Trash"])
    dev_markers: List[str] = Field(default_factory=lambda: list(DEFAULT_DEV_MARKERS))
    file_categories: Dict[str, List[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_FILE_CATEGORIES.items()},
        description="Category folder names and the file extensions sorted into them.",
    )

    # Bookmarks
    bookmarks_path: Optional[Path] = Field(default=None)
    link_check_timeout: int = Field(default=10, ge=1, le=120)
    link_check_workers: int = Field(default=16, ge=1, le=64)
    max_redirects: int = Field(default=5, ge=0, le=20)

    # Thread pool size for directory sizing, deletion and manifest parsing
    scan_workers: int = Field(default=8, ge=1, le=64)

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def model_post_init(self, __context):
        """Derive the bookmarks location from the home path."""
        if self.bookmarks_path is None:
            self.bookmarks_path = default_bookmarks_path(self.home_path)

    @field_validator("home_path", mode="before")
    @classmethod
    def validate_paths(cls, v):
        """Convert string paths to Path objects and expand user paths."""
        if isinstance(v, str):
            return Path(v).expanduser().resolve()
        elif isinstance(v, Path):
            return v.expanduser().resolve()
        return v

    @field_validator("bookmarks_path", mode="before")
    @classmethod
    def validate_optional_paths(cls, v):
        if v is None:
            return v
        if isinstance(v, str):
            return Path(v).expanduser()
        elif isinstance(v, Path):
            return v.expanduser()
        return v

    @field_validator("file_categories")
    @classmethod
    def normalize_extensions(cls, v):
        """Store extensions lower-cased and without a leading dot."""
        return {
            folder: [ext.lower().lstrip(".") for ext in extensions]
            for folder, extensions in v.items()
        }


class PreferencesManager:
    """Manages Shell Explorer preferences stored in ~/.shell-explorer."""

    def __init__(self):
        self.config_dir = Path.home() / ".shell-explorer"
        self.config_file = self.config_dir / "config.json"
        self.ensure_config_dir()

    def ensure_config_dir(self):
        """Create .shell-explorer directory if it doesn't exist."""
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Keep preferences out of dotfile repositories
        gitignore_file = self.config_dir / ".gitignore"
        if not gitignore_file.exists():
            gitignore_file.write_text("*\n!.gitignore\n")

    def load_config(self) -> Config:
        """Load configuration from file or create default."""
        if self.config_file.exists():
            try:
                with open(self.config_file, "r") as f:
                    data = json.load(f)
                return Config.model_validate(data)
            except (json.JSONDecodeError, ValueError) as e:
                console.print(f"⚠️  Error loading config: {e}")
                console.print("Using default configuration.")

        return Config()

    def save_config(self, config: Config):
        """Save configuration to file."""
        with open(self.config_file, "w") as f:
            f.write(config.model_dump_json(indent=2))
        console.print(f"✓ Configuration saved to {self.config_file}")

    def get_config_info(self) -> dict:
        return {
            "config_dir": self.config_dir,
            "config_file": self.config_file,
            "config_exists": self.config_file.exists(),
        }
