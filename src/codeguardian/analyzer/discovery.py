"""Source and config file discovery."""
import fnmatch
import re
from pathlib import Path
from typing import Iterable, List, Set

# Project-root files that commonly reference packages (bundler, linter, test configs)
CONFIG_FILE_PATTERNS = ['*.{js,ts,json}', '.*.{js,ts}']

_BRACE = re.compile(r'\{([^{}]*)\}')


def expand_braces(pattern: str) -> List[str]:
    """Expand '{a,b}' alternatives, which pathlib's glob does not understand.

    >>> expand_braces('**/*.{ts,js}')
    ['**/*.ts', '**/*.js']
    """
    match = _BRACE.search(pattern)
    if not match:
        return [pattern]

    expanded = []
    for option in match.group(1).split(','):
        candidate = pattern[:match.start()] + option + pattern[match.end():]
        expanded.extend(expand_braces(candidate))
    return expanded


def is_excluded(relative_path: Path, exclude: Iterable[str]) -> bool:
    """Exclude by directory/file name component or by glob on the relative path."""
    posix = relative_path.as_posix()
    for pattern in exclude:
        if pattern in relative_path.parts:
            return True
        if any(fnmatch.fnmatch(posix, p) for p in expand_braces(pattern)):
            return True
    return False


def _glob(base_dir: Path, patterns: Iterable[str]) -> Set[Path]:
    files = set()
    for pattern in patterns:
        for expanded in expand_braces(pattern):
            files.update(p for p in base_dir.glob(expanded) if p.is_file())
    return files


def discover_source_files(project_root: str | Path, src_dir: str,
                          include: Iterable[str], exclude: Iterable[str]) -> List[Path]:
    """Find source files under <project_root>/<src_dir>.

    Args:
        project_root: Project root directory
        src_dir: Source directory relative to the root
        include: Glob patterns relative to src_dir (brace alternatives allowed)
        exclude: Path components or globs to leave out

    Returns:
        Sorted list of absolute file paths (empty if src_dir does not exist)
    """
    base_dir = (Path(project_root) / src_dir).resolve()
    if not base_dir.is_dir():
        return []

    exclude = list(exclude)
    return sorted(
        path for path in _glob(base_dir, include)
        if not is_excluded(path.relative_to(base_dir), exclude)
    )


def discover_config_files(project_root: str | Path) -> List[Path]:
    """Find config files sitting directly in the project root, dotfiles included."""
    return sorted(_glob(Path(project_root).resolve(), CONFIG_FILE_PATTERNS))
