import logging
import subprocess
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from shell_explorer.config import Config

logger = logging.getLogger(__name__)

SESSION_SOURCE = "Shell Session"


@dataclass
class AliasEntry:
    alias: str
    command: str
    source: str


def strip_quotes(value: str) -> str:
    """Remove one pair of matching surrounding quotes."""
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def parse_alias_line(line: str) -> Optional[Tuple[str, str]]:
    """Parse `alias name=value` or a bare `name=value` into (name, command)."""
    line = line.strip()
    if line.startswith("alias "):
        line = line[len("alias "):]

    if "=" not in line:
        return None

    name, command = line.split("=", 1)
    name = name.strip()
    if not name:
        return None
    return name, strip_quotes(command.strip())


def get_session_aliases(shell: str) -> Dict[str, str]:
    """Ask the shell for the aliases it currently knows about."""
    try:
        result = subprocess.run(
            [shell, "-c", "alias"],
            capture_output=True,
            text=True,
            timeout=5,
        )
    except (OSError, subprocess.SubprocessError) as e:
        logger.debug("Could not query aliases from %s: %s", shell, e)
        return {}

    if result.returncode != 0:
        logger.debug("%s -c alias exited with %s", shell, result.returncode)
        return {}

    aliases = {}
    for line in result.stdout.splitlines():
        parsed = parse_alias_line(line)
        if parsed:
            name, command = parsed
            aliases.setdefault(name, command)
    return aliases


def parse_config_aliases(content: str) -> List[Tuple[str, str]]:
    """Extract alias definitions from shell config file content."""
    aliases = []
    for raw_line in content.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if not line.startswith("alias "):
            continue
        parsed = parse_alias_line(line)
        if parsed:
            aliases.append(parsed)
    return aliases


def get_all_aliases(config: Config) -> List[AliasEntry]:
    """Collect aliases from the live shell and every known config file.

    Session aliases come first; after that the first definition of a name
    wins, so a name defined in both .bashrc and .zshrc is listed once.
    """
    entries: List[AliasEntry] = []
    seen = set()

    for name, command in get_session_aliases(config.shell).items():
        entries.append(AliasEntry(alias=name, command=command, source=SESSION_SOURCE))
        seen.add(name)

    for file_name in config.alias_files:
        path = config.home_path / file_name
        if not path.is_file():
            continue
        logger.debug("Reading aliases from %s", path)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            continue

        for name, command in parse_config_aliases(content):
            if name in seen:
                continue
            seen.add(name)
            entries.append(AliasEntry(alias=name, command=command, source=file_name))

    entries.sort(key=lambda entry: entry.alias)
    return entries


def filter_aliases(
    aliases: List[AliasEntry], pattern: Optional[str] = None, source: Optional[str] = None
) -> List[AliasEntry]:
    if pattern:
        needle = pattern.lower()
        aliases = [
            a for a in aliases if needle in a.alias.lower() or needle in a.command.lower()
        ]
    if source:
        aliases = [a for a in aliases if source in a.source]
    return aliases
