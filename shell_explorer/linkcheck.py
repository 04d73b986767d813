"""Dead link detection for bookmarks."""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import requests
import urllib3
from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from shell_explorer.config import Config
from shell_explorer.display import console, truncate

logger = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
SKIPPED = "skipped"

DNS_HINTS = ("name or service not known", "nodename nor servname", "getaddrinfo", "resolve")


@dataclass
class DeadLink:
    bookmark: object
    status: str


def make_session(config: Optional[Config] = None) -> requests.Session:
    config = config or Config()
    session = requests.Session()
    session.headers.update({"User-Agent": USER_AGENT})
    session.max_redirects = config.max_redirects
    return session


def _describe(response: requests.Response) -> str:
    return f"{response.status_code} {response.reason or ''}".strip()


def _describe_error(error: requests.RequestException) -> str:
    if isinstance(error, requests.exceptions.TooManyRedirects):
        return "too many redirects"
    if isinstance(error, requests.exceptions.Timeout):
        return "timeout"
    message = str(error)
    if isinstance(error, requests.exceptions.ConnectionError):
        if any(hint in message.lower() for hint in DNS_HINTS):
            return "DNS error"
        return "connection error"
    return f"error: {truncate(message, 30)}"


def check_url_status(url: str, session: requests.Session, timeout: float = 10) -> Tuple[bool, str]:
    """(alive, status) for url.

    Anything below 400 after redirects counts as alive. Servers that refuse
    HEAD with 405 get a GET instead. Non-http(s) URLs are skipped.
    """
    if not url.startswith(("http://", "https://")):
        return True, SKIPPED

    try:
        response = session.head(url, timeout=timeout, allow_redirects=True)
        if response.status_code == 405:
            response = session.get(url, timeout=timeout, allow_redirects=True, stream=True)
            response.close()
    except requests.RequestException as e:
        logger.debug("Request to %s failed: %s", url, e)
        return False, _describe_error(e)
    except (ValueError, urllib3.exceptions.HTTPError) as e:
        # malformed hosts can fail inside urllib3 before requests wraps the error
        logger.debug("Invalid URL %s: %s", url, e)
        return False, f"error: {truncate(str(e), 30)}"

    return response.status_code < 400, _describe(response)


def find_dead_links(bookmarks: List, config: Optional[Config] = None, verbose: bool = False) -> List[DeadLink]:
    """Check every bookmark URL in parallel; dead ones come back in input order."""
    config = config or Config()
    session = make_session(config)

    console.print(
        f"🔍 Checking [yellow]{len(bookmarks)}[/yellow] bookmarks for dead links "
        "(this may take a while)...\n"
    )

    statuses: Dict[int, Tuple[bool, str]] = {}
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        TaskProgressColumn(),
        console=console,
        transient=True,
    ) as progress:
        task = progress.add_task("Checking links...", total=len(bookmarks))
        with ThreadPoolExecutor(max_workers=config.link_check_workers) as executor:
            futures = {
                executor.submit(check_url_status, b.url, session, config.link_check_timeout): i
                for i, b in enumerate(bookmarks)
            }
            for future in as_completed(futures):
                index = futures[future]
                alive, status = future.result()
                statuses[index] = (alive, status)
                if verbose and not alive:
                    progress.console.print(
                        f"  ❌ {truncate(bookmarks[index].name, 40)} - [red]{status}[/red]"
                    )
                progress.advance(task)

    dead = []
    for i, bookmark in enumerate(bookmarks):
        alive, status = statuses[i]
        if not alive and status != SKIPPED:
            dead.append(DeadLink(bookmark=bookmark, status=status))
    return dead
