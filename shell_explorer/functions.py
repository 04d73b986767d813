import logging
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

from shell_explorer.config import Config

logger = logging.getLogger(__name__)

MAX_DESCRIPTION = 80

_KEYWORD_DEF = re.compile(r"^function\s+([A-Za-z_][\w-]*)")
_PARENS_DEF = re.compile(r"^([A-Za-z_][\w-]*)\s*\(\)\s*(\{.*)?$")

_USAGE_KEYS = ("usage:", "use:")
_DESCRIPTION_KEYS = ("description:", "desc:", "@description", "@desc")
_PARAM_KEYS = ("@param", "@arg")


@dataclass
class FunctionEntry:
    name: str
    description: str
    usage: str
    source: str


def extract_function_name(line: str) -> Optional[str]:
    """Return the function name if the line opens a function definition.

    Recognizes `function name`, `function name()`, `function name {`,
    `name()` and `name() {`.
    """
    line = line.strip()
    match = _KEYWORD_DEF.match(line) or _PARENS_DEF.match(line)
    if match:
        return match.group(1)
    return None


def _collect_comments(lines: List[str], def_index: int) -> List[str]:
    """Comment block directly above a definition, top to bottom."""
    comments: List[str] = []
    in_block = False
    j = def_index - 1
    while j >= 0:
        text = lines[j].strip()
        if text.startswith("#"):
            comment = text.lstrip("#").strip()
            if comment:
                comments.insert(0, comment)
                in_block = True
        elif text:
            break
        elif in_block:
            comments.insert(0, "")
        j -= 1
    return comments


def _strip_key(comment: str, keys: Tuple[str, ...]) -> Optional[str]:
    lower = comment.lower()
    for key in keys:
        if lower.startswith(key):
            return comment[len(key):].strip()
    return None


def _parse_comments(comments: List[str], name: str) -> Tuple[str, str]:
    description = ""
    usage = ""
    for comment in comments:
        usage_text = _strip_key(comment, _USAGE_KEYS)
        if usage_text is not None:
            usage = usage_text
            continue

        desc_text = _strip_key(comment, _DESCRIPTION_KEYS)
        if desc_text is not None:
            description = desc_text
            continue

        param_text = _strip_key(comment, _PARAM_KEYS)
        if param_text is not None:
            if not usage and param_text:
                usage = f"{name} {param_text}"
            continue

        if not description and comment:
            description = comment
    return description, usage


def _read_body(lines: List[str], def_index: int) -> Tuple[List[str], int]:
    """Lines of the function body by brace counting, and the index it ends on."""
    body: List[str] = []
    depth = 0
    started = False
    i = def_index
    while i < len(lines):
        text = lines[i].strip()
        if not started and i > def_index and text and not text.startswith("{"):
            # Definition without a braced body
            return [], def_index
        if "{" in text:
            started = True
            depth += text.count("{")
        if started:
            depth -= text.count("}")
            body.append(text)
            if depth <= 0:
                return body, i
        i += 1
    return body, len(lines) - 1


def _usage_after(line: str) -> Optional[str]:
    position = line.lower().find("usage:")
    if position < 0:
        return None
    return line[position + len("usage:"):].strip().strip("\"'").strip()


def extract_usage_from_body(body: List[str], name: str) -> str:
    params: List[str] = []

    def add(param: str):
        if param not in params:
            params.append(param)

    for line in body:
        if line.startswith(("echo", "printf")):
            usage = _usage_after(line)
            if usage is not None:
                return usage

        if line.startswith("local ") and "$1" in line:
            add("arg1")
        if "=$2" in line or "=${2" in line:
            add("arg2")
        if "=$3" in line or "=${3" in line:
            add("arg3")

        if "$#" in line:
            if "-eq 1" in line:
                add("<arg>")
            elif "-eq 2" in line:
                add("<arg1> <arg2>")
            elif "-eq 3" in line:
                add("<arg1> <arg2> <arg3>")
            elif "-lt" in line or "-gt" in line:
                add("[args...]")

        if "getopts" in line:
            return f"{name} [options]"

        if line == "shift" or "shift " in line:
            add("[args...]")

    if params:
        return f"{name} {' '.join(params)}"
    return name


def parse_shell_functions(content: str) -> List[Tuple[str, str, str]]:
    """Find function definitions and return (name, description, usage) tuples."""
    functions = []
    lines = content.splitlines()
    i = 0
    while i < len(lines):
        name = extract_function_name(lines[i])
        if name is None:
            i += 1
            continue

        description, usage = _parse_comments(_collect_comments(lines, i), name)
        body, end = _read_body(lines, i)

        if not usage:
            usage = extract_usage_from_body(body, name)
        if not description:
            description = f"Function: {name}"
        if len(description) > MAX_DESCRIPTION:
            description = description[: MAX_DESCRIPTION - 3] + "..."

        functions.append((name, description, usage))
        i = end + 1

    return functions


def get_all_functions(config: Config) -> List[FunctionEntry]:
    functions: List[FunctionEntry] = []
    for file_name in config.function_files:
        path = config.home_path / file_name
        if not path.is_file():
            continue
        logger.debug("Reading functions from %s", path)
        try:
            content = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            logger.warning("Could not read %s: %s", path, e)
            continue

        for name, description, usage in parse_shell_functions(content):
            functions.append(
                FunctionEntry(name=name, description=description, usage=usage, source=file_name)
            )

    functions.sort(key=lambda f: f.name)
    return functions


def filter_functions(
    functions: List[FunctionEntry], pattern: Optional[str] = None, source: Optional[str] = None
) -> List[FunctionEntry]:
    if pattern:
        needle = pattern.lower()
        functions = [
            f
            for f in functions
            if needle in f.name.lower()
            or needle in f.description.lower()
            or needle in f.usage.lower()
        ]
    if source:
        functions = [f for f in functions if source in f.source]
    return functions
