"""Utility functions for cognifs."""

import re
import sys
import unicodedata
from pathlib import Path
from typing import Iterable, List, Optional

import logfire
from loguru import logger

from cognifs.constants import COMMON_DIRECTORY_NAMES, EXTENSION_CATEGORIES

MIN_TAG_LENGTH = 2
MAX_TAG_LENGTH = 30


def setup_logging(
    home_dir: Path,
    log_file: Optional[str] = None,
    log_level: str = "INFO",
    console: bool = True,
) -> None:
    """
    Configure loguru sinks.

    Args:
        home_dir: Directory that holds the log file
        log_file: Log file name, no file sink when None
        log_level: Minimum level for every sink
        console: Also log to stderr
    """
    logger.remove()

    if log_file:
        log_path = home_dir / log_file
        logger.add(
            str(log_path),
            level=log_level,
            rotation="10 MB",
            retention="10 days",
            backtrace=True,
            diagnose=False,
            enqueue=True,
            colorize=False,
        )

    if console:
        logger.add(sys.stderr, level=log_level, backtrace=True, colorize=True)

    # spans are exported only when a logfire token is configured
    logfire.configure(send_to_logfire="if-token-present", console=False)

    logger.debug(f"Logging configured: level={log_level} file={log_file}")


def sanitize_name(name: str, separator: str = "_") -> str:
    """
    Sanitize a name for filesystem use:
    - Convert to lowercase
    - Replace whitespace/punctuation runs with a single separator
    - Remove emojis and other special characters
    - Trim leading/trailing separators
    """
    # Normalize unicode and drop combining marks so accents fold to ascii letters
    name = unicodedata.normalize("NFKD", name)
    name = "".join(c for c in name if not unicodedata.combining(c))
    # Anything that is not a letter or digit becomes a break
    name = "".join(c if c.isalnum() else " " for c in name)
    name = name.lower()
    name = re.sub(r"\s+", separator, name.strip())
    return name.strip(separator)


def split_words(text: str) -> List[str]:
    """Split on whitespace, `_`, `-`, `.` and camelCase boundaries."""
    words = []
    for part in re.split(r"[\s_\-.]+", text):
        # camelCase -> camel Case
        words.extend(re.sub(r"([a-z0-9])([A-Z])", r"\1 \2", part).split())
    return [w.lower() for w in words]


def clean_tags(words: Iterable[str]) -> List[str]:
    """Keep alphanumeric words of tag length, deduplicated in order."""
    seen = set()
    tags = []
    for word in words:
        word = "".join(c for c in word if c.isalnum())
        if MIN_TAG_LENGTH <= len(word) <= MAX_TAG_LENGTH and not word.isdigit():
            if word not in seen:
                seen.add(word)
                tags.append(word)
    return tags


def extension_category(extension: str) -> Optional[str]:
    """Broad category for a file extension, e.g. `pdf` -> `document`."""
    extension = extension.lower().lstrip(".")
    for category, extensions in EXTENSION_CATEGORIES.items():
        if extension in extensions:
            return category
    return None


def extract_tags_from_path(
    path: Path, root: Optional[Path] = None, depth: Optional[int] = None
) -> List[str]:
    """
    Derive tags from a file's name and its meaningful parent directories.

    Directory names such as `documents` or `downloads` say nothing about the
    file and are skipped. When root is given only directories beneath it are
    considered, and depth limits how many parent levels are read.

    Args:
        path: File path
        root: Scan root bounding the ancestor walk
        depth: Maximum number of parent directories to read

    Returns:
        Lowercase tags in order of appearance, filename first
    """
    words = split_words(path.stem)
    for level, parent in enumerate(path.parents):
        if depth is not None and level >= depth:
            break
        if root is not None and (parent == root or root not in parent.parents):
            break
        if parent.name and parent.name.lower() not in COMMON_DIRECTORY_NAMES:
            words.extend(split_words(parent.name))
    return clean_tags(words)
