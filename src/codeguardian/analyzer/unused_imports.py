"""Unused import detection."""
import logging
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, List

from codeguardian.config import GuardianConfig
from .discovery import discover_source_files
from .extractor import ImportEntry, SymbolModel, SymbolModelExtractor
from .parser import ParseFailure, SourceParser

log = logging.getLogger(__name__)

# Textual absence of any reference is a strong signal
UNUSED_IMPORT_CONFIDENCE = 0.95

# Binding required by the classic JSX transform even when never referenced
JSX_RUNTIME_BINDING = 'React'


@dataclass(frozen=True)
class UnusedImportFinding:
    file: str
    line: int
    column: int
    import_name: str
    source: str
    confidence: float = UNUSED_IMPORT_CONFIDENCE

    def to_dict(self) -> Dict:
        return asdict(self)


class UnusedImportResolver:
    """Decide which imports of a SymbolModel are unused.

    An import is used if, in order:
        1. its local name is a used identifier,
        2. it is the JSX runtime binding and the file contains JSX,
        3. it is a namespace import and some used identifier is '<name>.<member>'.
    """

    def is_used(self, entry: ImportEntry, model: SymbolModel) -> bool:
        if entry.local_name in model.used_identifiers:
            return True

        if entry.local_name == JSX_RUNTIME_BINDING and model.has_jsx:
            return True

        if entry.is_namespace:
            prefix = entry.local_name + '.'
            return any(identifier.startswith(prefix) for identifier in model.used_identifiers)

        return False

    def resolve(self, model: SymbolModel, file_path: str | Path) -> List[UnusedImportFinding]:
        """Findings for one file, in declaration order."""
        return [
            UnusedImportFinding(
                file=str(file_path),
                line=entry.line,
                column=entry.column,
                import_name=entry.local_name,
                source=entry.source,
            )
            for entry in model.imports
            if not self.is_used(entry, model)
        ]


class UnusedImportsDetector:
    """Run parser, extractor and resolver over every configured source file."""

    def __init__(self, config: GuardianConfig):
        self.config = config
        self.parser = SourceParser()
        self.extractor = SymbolModelExtractor()
        self.resolver = UnusedImportResolver()
        self.skipped_files: List[str] = []

    def find_unused_imports(self, file_path: str | Path) -> List[UnusedImportFinding]:
        """Analyze a single file.

        Unreadable or unparsable files yield no findings and are recorded
        in skipped_files.
        """
        try:
            tree = self.parser.parse_file(file_path)
        except (OSError, UnicodeDecodeError) as e:
            log.info("Skipping unreadable file %s: %s", file_path, e)
            self.skipped_files.append(str(file_path))
            return []
        except ParseFailure as e:
            log.info("Skipping unparsable file %s", e)
            self.skipped_files.append(str(file_path))
            return []

        model = self.extractor.extract(tree)
        return self.resolver.resolve(model, file_path)

    def detect(self, project_root: str | Path) -> List[UnusedImportFinding]:
        """Detect unused imports across the project's source files.

        Args:
            project_root: Project root directory

        Returns:
            Findings concatenated file by file (files in sorted path order)
        """
        files = discover_source_files(
            project_root, self.config.src_dir, self.config.include, self.config.exclude
        )
        log.debug("Scanning %d source files for unused imports", len(files))

        findings: List[UnusedImportFinding] = []
        for file_path in files:
            findings.extend(self.find_unused_imports(file_path))
        return findings

    @staticmethod
    def group_by_file(findings: List[UnusedImportFinding]) -> Dict[str, List[UnusedImportFinding]]:
        grouped: Dict[str, List[UnusedImportFinding]] = {}
        for finding in findings:
            grouped.setdefault(finding.file, []).append(finding)
        return grouped

    def get_stats(self, findings: List[UnusedImportFinding]) -> Dict[str, int]:
        return {
            'affected_files': len(self.group_by_file(findings)),
            'total_unused': len(findings),
            # Rough estimate: 1KB per unused import
            'estimated_size_reduction': len(findings),
        }
