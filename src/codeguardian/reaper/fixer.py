"""Confidence-gated cleanup of unused imports and dependencies.

A fix run moves through a fixed sequence of passes:

    IDLE -> IMPORTS_PASS -> DEPENDENCIES_PASS -> [VERIFY_PASS] -> COMMITTED
                                                               -> ROLLED_BACK

Every file is snapshotted before its first write, so a failed verification
restores exactly the files this run touched and nothing else.
"""
import logging
from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence

from codeguardian.analyzer.unused_dependencies import UnusedDependencyFinding
from codeguardian.analyzer.unused_imports import UnusedImportFinding
from .import_editor import ImportEditPlan
from .manifest import DEPENDENCY_SECTIONS, PackageManifest
from .sandbox import TestSandbox
from .snapshot import FileSnapshot, RestoreError

log = logging.getLogger(__name__)

DEFAULT_CONFIDENCE_FLOOR = 0.8
TESTS_FAILED_ERROR = "Tests failed after cleanup"


class FixState(Enum):
    IDLE = 'idle'
    IMPORTS_PASS = 'imports_pass'
    DEPENDENCIES_PASS = 'dependencies_pass'
    VERIFY_PASS = 'verify_pass'
    COMMITTED = 'committed'
    ROLLED_BACK = 'rolled_back'


@dataclass
class FixOutcome:
    success: bool = True
    state: FixState = FixState.IDLE
    modified_files: List[str] = field(default_factory=list)
    imports_removed: int = 0
    dependencies_removed: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    rolled_back_files: List[str] = field(default_factory=list)

    def mark_modified(self, file_path: str):
        if file_path not in self.modified_files:
            self.modified_files.append(file_path)

    def to_dict(self) -> Dict:
        return {
            'success': self.success,
            'state': self.state.value,
            'modified_files': list(self.modified_files),
            'imports_removed': self.imports_removed,
            'dependencies_removed': list(self.dependencies_removed),
            'errors': list(self.errors),
            'rolled_back_files': list(self.rolled_back_files),
        }


class AutoFixer:
    """Apply unused-import and unused-dependency findings to the project."""

    def __init__(
        self,
        project_root: str | Path = ".",
        safe_mode: bool = True,
        require_tests: bool = False,
        confidence_floor: float = DEFAULT_CONFIDENCE_FLOOR,
        test_runner: Optional[Callable[[], bool]] = None,
        test_command: Optional[str] = None,
    ):
        """Initialize the fixer.

        Args:
            project_root: Project root containing package.json
            safe_mode: Only mutate findings at or above confidence_floor
            require_tests: Run the test suite after mutating and roll back on failure
            confidence_floor: Minimum confidence in safe mode
            test_runner: Callable returning True when tests pass
                (defaults to TestSandbox(project_root, test_command).run_tests)
            test_command: Command for the default test runner
        """
        self.project_root = Path(project_root).resolve()
        self.safe_mode = safe_mode
        self.require_tests = require_tests
        self.confidence_floor = confidence_floor
        self.test_runner = test_runner or TestSandbox(self.project_root, test_command).run_tests
        self.manifest = PackageManifest(self.project_root)

    def is_eligible(self, confidence: float) -> bool:
        return not self.safe_mode or confidence >= self.confidence_floor

    def _resolve(self, file_path: str) -> Path:
        path = Path(file_path)
        return path if path.is_absolute() else self.project_root / path

    def fix(
        self,
        unused_imports: Sequence[UnusedImportFinding] = (),
        unused_dependencies: Sequence[UnusedDependencyFinding] = (),
    ) -> FixOutcome:
        """Run the imports, dependencies and (optional) verify passes.

        Returns:
            FixOutcome; per-file failures are reported in errors without
            stopping the run
        """
        outcome = FixOutcome()
        snapshot = FileSnapshot()

        outcome.state = FixState.IMPORTS_PASS
        self._fix_imports(
            [f for f in unused_imports if self.is_eligible(f.confidence)], snapshot, outcome
        )

        outcome.state = FixState.DEPENDENCIES_PASS
        eligible_dependencies = [f for f in unused_dependencies if self.is_eligible(f.confidence)]
        if eligible_dependencies:
            self._fix_dependencies(eligible_dependencies, snapshot, outcome)

        if self.require_tests and outcome.modified_files:
            outcome.state = FixState.VERIFY_PASS
            if not self._verify():
                self._rollback(snapshot, outcome)
                return outcome

        outcome.state = FixState.COMMITTED
        log.info(
            "Cleanup committed: %d imports, %d dependencies, %d files",
            outcome.imports_removed, len(outcome.dependencies_removed), len(outcome.modified_files),
        )
        return outcome

    def fix_result(self, result) -> FixOutcome:
        """Convenience wrapper taking an AnalysisResult."""
        return self.fix(result.unused_imports, result.unused_dependencies)

    def _fix_imports(self, findings: List[UnusedImportFinding], snapshot: FileSnapshot, outcome: FixOutcome):
        by_file: Dict[str, List[UnusedImportFinding]] = defaultdict(list)
        for finding in findings:
            by_file[finding.file].append(finding)

        for file_name, file_findings in by_file.items():
            path = self._resolve(file_name)
            try:
                removed = self._fix_file_imports(path, file_findings, snapshot)
            except (OSError, UnicodeDecodeError) as e:
                log.warning("Failed to fix imports in %s: %s", file_name, e)
                outcome.errors.append(f"Failed to fix imports in {file_name}")
                continue

            if removed:
                outcome.imports_removed += removed
                outcome.mark_modified(str(path))

    def _fix_file_imports(
        self, path: Path, findings: List[UnusedImportFinding], snapshot: FileSnapshot
    ) -> int:
        """Rewrite one file; returns how many imports were removed (0 = untouched)."""
        content = path.read_bytes().decode('utf-8')
        plan = ImportEditPlan(content.split('\n'))

        for finding in sorted(findings, key=lambda f: (f.line, f.column), reverse=True):
            if not plan.remove(finding.line, finding.import_name, finding.source):
                log.debug("No edit for %s from %s at %s:%d",
                          finding.import_name, finding.source, path, finding.line)

        if not plan.removed:
            return 0

        new_content = '\n'.join(plan.apply())
        if new_content == content:
            return 0

        snapshot.capture(path)
        path.write_bytes(new_content.encode('utf-8'))
        return plan.removed

    def _fix_dependencies(
        self, findings: List[UnusedDependencyFinding], snapshot: FileSnapshot, outcome: FixOutcome
    ):
        try:
            data = self.manifest.read()
            removed = []
            for finding in findings:
                section = data.get(DEPENDENCY_SECTIONS[finding.kind])
                if isinstance(section, dict) and finding.name in section:
                    del section[finding.name]
                    removed.append(finding.name)

            if removed:
                snapshot.capture(self.manifest.manifest_path)
                self.manifest.write(data)
        except (OSError, ValueError, KeyError) as e:
            log.warning("Failed to fix dependencies in package.json: %s", e)
            outcome.errors.append("Failed to fix dependencies in package.json")
            return

        if removed:
            outcome.dependencies_removed.extend(removed)
            outcome.mark_modified(str(self.manifest.manifest_path))

    def _verify(self) -> bool:
        try:
            return bool(self.test_runner())
        except Exception as e:
            log.warning("Test runner raised: %s", e)
            return False

    def _rollback(self, snapshot: FileSnapshot, outcome: FixOutcome):
        outcome.success = False
        outcome.errors.append(TESTS_FAILED_ERROR)
        try:
            outcome.rolled_back_files = snapshot.restore_all()
        except RestoreError as e:
            outcome.rolled_back_files = e.restored
            outcome.errors.append(str(e))
        outcome.state = FixState.ROLLED_BACK
        log.warning("Tests failed, restored %d files", len(outcome.rolled_back_files))
