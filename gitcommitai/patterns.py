"""Glob-style exclusion patterns for diff filtering."""
import logging
import re
from typing import Iterable, List, Sequence

logger = logging.getLogger(__name__)


def _glob_to_regex(glob: str) -> str:
    return glob.replace(".", r"\.").replace("*", ".*")


def _regex_matches(regex: str, path: str, pattern: str) -> bool:
    try:
        return re.match(regex, path) is not None
    except re.error as e:
        logger.warning("Invalid exclude pattern %r: %s", pattern, e)
        return False


def matches_glob_pattern(file_path: str, pattern: str) -> bool:
    """Check whether a repository-relative path matches an exclude pattern.

    Supported forms, checked in this order:

    - ``**/name/**``: any path with a ``name`` directory segment
    - ``base/**/*.ext``: paths under ``base`` whose tail matches the glob
    - ``**/tail``: paths ending with ``tail`` at any depth
    - ``prefix/**/suffix``: paths starting with prefix and ending with suffix
    - ``dir/**``: ``dir`` itself and everything below it
    - ``*.ext`` (top level only) and other ``*`` globs
    - anything else is an exact match

    Args:
        file_path: Path relative to the repository root, ``/`` separated
        pattern: Exclude pattern

    Returns:
        bool: True if the pattern excludes the path
    """
    if not pattern:
        return False

    if pattern.startswith("**/") and pattern.endswith("/**"):
        middle = pattern[3:-3]
        return f"/{middle}/" in file_path or file_path.startswith(f"{middle}/")

    if "**/" in pattern and "*" in pattern and not pattern.endswith("**/"):
        base_path, file_pattern = pattern.split("**/", 1)
        if "*" in file_pattern:
            regex = f".*{_glob_to_regex(file_pattern)}$"
            return file_path.startswith(base_path) and _regex_matches(
                regex, file_path, pattern
            )

    if pattern.startswith("**/"):
        suffix = pattern[3:]
        return file_path.endswith(suffix) or f"/{suffix}" in file_path

    if "**/" in pattern:
        prefix, suffix = pattern.split("**/", 1)
        return (not prefix or file_path.startswith(prefix)) and (
            not suffix or file_path.endswith(suffix)
        )

    if pattern.endswith("/**"):
        base = pattern[:-3]
        return file_path == base or file_path.startswith(f"{base}/")

    if "*" in pattern:
        if pattern.startswith("*."):
            # *.ext only excludes files at the repository root
            parts = file_path.split("/")
            if len(parts) > 1:
                return False
            return parts[-1].endswith(pattern[1:])

        return _regex_matches(f"^{_glob_to_regex(pattern)}$", file_path, pattern)

    return file_path == pattern


def filter_excluded_files(
    files: Sequence[str], exclude_patterns: Iterable[str]
) -> List[str]:
    """Drop every file matched by at least one exclude pattern.

    Order is preserved. With no patterns the input comes back unchanged.
    """
    patterns = list(exclude_patterns)
    if not patterns:
        return list(files)

    return [
        path
        for path in files
        if not any(matches_glob_pattern(path, pattern) for pattern in patterns)
    ]
