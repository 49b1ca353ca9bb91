"""Analysis orchestration: run detectors and aggregate an AnalysisResult."""
import logging
import math
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List

from codeguardian.config import GuardianConfig
from .complexity import ComplexityAnalyzer, ComplexityReport
from .unused_dependencies import UnusedDependenciesDetector, UnusedDependencyFinding
from .unused_imports import UnusedImportFinding, UnusedImportsDetector

log = logging.getLogger(__name__)

# Rough per-finding estimates
KB_PER_UNUSED_IMPORT = 1
KB_PER_UNUSED_DEPENDENCY = 50
IMPORTS_PER_CLEANUP_MINUTE = 10
MINUTES_PER_DEPENDENCY = 2


@dataclass
class AnalysisResult:
    unused_imports: List[UnusedImportFinding] = field(default_factory=list)
    unused_dependencies: List[UnusedDependencyFinding] = field(default_factory=list)
    complexity: List[ComplexityReport] = field(default_factory=list)
    skipped_files: List[str] = field(default_factory=list)

    total_files: int = 0
    total_imports: int = 0
    total_dependencies: int = 0

    estimated_bundle_size_reduction: int = 0  # KB
    estimated_cleanup_time: int = 0  # minutes

    def to_dict(self) -> Dict:
        return {
            'unused_imports': [f.to_dict() for f in self.unused_imports],
            'unused_dependencies': [f.to_dict() for f in self.unused_dependencies],
            'complexity': [c.to_dict() for c in self.complexity],
            'skipped_files': list(self.skipped_files),
            'total_files': self.total_files,
            'total_imports': self.total_imports,
            'total_dependencies': self.total_dependencies,
            'estimated_bundle_size_reduction': self.estimated_bundle_size_reduction,
            'estimated_cleanup_time': self.estimated_cleanup_time,
        }


class Analyzer:
    """Coordinates all detection for one project and one resolved config."""

    def __init__(self, project_root: str | Path, config: GuardianConfig):
        self.project_root = Path(project_root).resolve()
        self.config = config

    def analyze(self) -> AnalysisResult:
        """Run the complete analysis.

        Raises:
            ManifestMissingError: If dependency analysis is enabled and the
                project has no package.json
        """
        result = AnalysisResult()

        if self.config.analyze_unused_imports:
            detector = UnusedImportsDetector(self.config)
            result.unused_imports = detector.detect(self.project_root)
            result.skipped_files = list(detector.skipped_files)

        if self.config.analyze_unused_dependencies:
            result.unused_dependencies = UnusedDependenciesDetector(self.config).detect(self.project_root)

        result.complexity = ComplexityAnalyzer(self.config).analyze(self.project_root)

        result.total_files = len(result.complexity)
        result.total_imports = len(result.unused_imports)
        result.total_dependencies = len(result.unused_dependencies)

        result.estimated_bundle_size_reduction = (
            result.total_imports * KB_PER_UNUSED_IMPORT
            + result.total_dependencies * KB_PER_UNUSED_DEPENDENCY
        )
        result.estimated_cleanup_time = (
            math.ceil(result.total_imports / IMPORTS_PER_CLEANUP_MINUTE)
            + result.total_dependencies * MINUTES_PER_DEPENDENCY
        )

        log.info(
            "Analyzed %d files: %d unused imports, %d unused dependencies",
            result.total_files, result.total_imports, result.total_dependencies,
        )
        return result
