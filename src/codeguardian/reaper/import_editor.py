"""Line-level removal of unused import specifiers.

Edits are planned per file against the original line numbers and applied
in descending line order, so deleting a line never shifts a line that is
still waiting to be edited.
"""
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

_NAME_CHARS = r'[\w$]'
_MODULE_NAME = r'''(?:[\w$]+|'[^']*'|"[^"]*")'''

_COMMA_CLEANUPS = [
    (re.compile(r',\s*,'), ','),
    (re.compile(r',\s*\{\s*\}'), ''),
    (re.compile(r'\{\s*,'), '{ '),
    (re.compile(r',\s*\}'), ' }'),
    (re.compile(r'^\s*,\s*'), ''),
    (re.compile(r'\s*,\s*$'), ''),
]


@dataclass(frozen=True)
class LineEdit:
    line: int  # 1-based, against the original file
    new_text: Optional[str]  # None deletes the line


def _name_pattern(name: str) -> str:
    return rf'(?<!{_NAME_CHARS}){re.escape(name)}(?!{_NAME_CHARS})'


def _statement_pattern(source: str) -> re.Pattern:
    # the clause never crosses a semicolon, so earlier statements on the line are left alone
    return re.compile(
        r'import\s+(?P<clause>[^;]+?)\s*from\s*(?P<quote>[\'"])'
        + re.escape(source)
        + r'(?P=quote)\s*;?'
    )


def remove_specifier(clause: str, import_name: str) -> str:
    """Remove one local binding from an import clause and tidy the commas.

    Handles namespace (``* as ns``), aliased (``a as b``), ``type``-prefixed
    and plain specifiers.
    """
    name = _name_pattern(import_name)
    specifier_patterns = [
        rf'\*\s*as\s+{name}',
        rf'(?:type\s+)?{_MODULE_NAME}\s+as\s+{name}',
        rf'(?:type\s+)?{name}',
    ]

    for pattern in specifier_patterns:
        updated, count = re.subn(pattern + r',?\s*', '', clause, count=1)
        if count:
            break
    else:
        return clause

    for regex, replacement in _COMMA_CLEANUPS:
        updated = regex.sub(replacement, updated)
    return updated


def clause_is_empty(clause: str) -> bool:
    """True when no binding is left (``{ }``, ``type {}`` or nothing at all)."""
    remaining = re.sub(r'^\s*type\b', '', clause)
    return re.search(_NAME_CHARS, remaining) is None


def rewrite_import_line(line: str, import_name: str, source: str) -> Optional[str]:
    """Remove import_name from the import of source on this line.

    Only the statement that binds import_name is touched; other statements
    sharing the line keep their text.

    Returns:
        None if the whole line should go, otherwise the new line text
        (identical to line when nothing could be removed)
    """
    if import_name not in line or source not in line:
        return line

    for match in _statement_pattern(source).finditer(line):
        clause = match.group('clause')
        new_clause = remove_specifier(clause, import_name)
        if new_clause != clause:
            break
    else:
        return line

    if clause_is_empty(new_clause):
        before, after = line[:match.start()], line[match.end():]
        if not after.strip():
            before = before.rstrip(' \t')
        remaining = before + after
        return remaining if remaining.strip() else None

    return line[:match.start('clause')] + new_clause + line[match.end('clause'):]


class ImportEditPlan:
    """Ordered edit list for one file."""

    def __init__(self, lines: List[str]):
        self.lines = lines
        self._pending: Dict[int, Optional[str]] = {}
        self.removed = 0

    def remove(self, line: int, import_name: str, source: str) -> bool:
        """Plan removal of one import; returns True if the line changes."""
        index = line - 1
        if not 0 <= index < len(self.lines):
            return False

        current = self._pending.get(line, self.lines[index])
        if current is None:
            return False

        updated = rewrite_import_line(current, import_name, source)
        if updated == current:
            return False

        self._pending[line] = updated
        self.removed += 1
        return True

    @property
    def edits(self) -> List[LineEdit]:
        """Edits in application order (descending line)."""
        return [
            LineEdit(line, text)
            for line, text in sorted(self._pending.items(), reverse=True)
        ]

    def apply(self) -> List[str]:
        return apply_line_edits(self.lines, self.edits)


def apply_line_edits(lines: List[str], edits: Iterable[LineEdit]) -> List[str]:
    """Apply edits from the bottom of the file up."""
    result = list(lines)
    for edit in sorted(edits, key=lambda e: e.line, reverse=True):
        index = edit.line - 1
        if edit.new_text is None:
            del result[index]
        else:
            result[index] = edit.new_text
    return result
