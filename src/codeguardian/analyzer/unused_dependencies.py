"""Unused package dependency detection.

Package usage is collected with three regular expressions over the raw
text of every source and root config file: ``import ... from '...'``,
``require('...')`` and ``import('...')``. This is a deliberately cheap
layer, independent of the syntax-tree analysis, and it is approximate in
both directions: multi-line ``import {...} from`` and ``export ... from``
statements are missed, while matches inside comments or strings count.
"""
import logging
import re
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Set

from codeguardian.config import GuardianConfig
from codeguardian.reaper.manifest import PackageManifest
from .discovery import discover_config_files, discover_source_files

log = logging.getLogger(__name__)

DEPENDENCY_CONFIDENCE = 0.85
# Dev tooling is often referenced only from configuration or scripts
DEV_DEPENDENCY_CONFIDENCE = 0.75
NOT_IMPORTED_REASON = 'Not imported in any source file'

# Build, test and lint tools run from config or CLI rather than imported
KNOWN_TOOL_PREFIXES = [
    'typescript',
    'eslint',
    'prettier',
    'webpack',
    'vite',
    'rollup',
    'jest',
    'vitest',
    'mocha',
    'chai',
    '@types/',
    'ts-node',
    'nodemon',
    'rimraf',
    'cross-env',
]

ES_IMPORT_PATTERN = re.compile(r'''import\s+.*?\s+from\s+['"]([^'"]+)['"]''')
REQUIRE_PATTERN = re.compile(r'''require\s*\(\s*['"]([^'"]+)['"]\s*\)''')
DYNAMIC_IMPORT_PATTERN = re.compile(r'''import\s*\(\s*['"]([^'"]+)['"]\s*\)''')

SPECIFIER_PATTERNS = (ES_IMPORT_PATTERN, REQUIRE_PATTERN, DYNAMIC_IMPORT_PATTERN)


@dataclass(frozen=True)
class UnusedDependencyFinding:
    name: str
    version: str
    kind: str  # 'dependency' | 'devDependency' | 'peerDependency'
    confidence: float
    reason: str = NOT_IMPORTED_REASON

    def to_dict(self) -> Dict:
        return asdict(self)


def extract_package_name(specifier: str) -> Optional[str]:
    """Reduce an import specifier to the package that provides it.

    >>> extract_package_name('@babel/parser/lib/index')
    '@babel/parser'
    >>> extract_package_name('lodash/fp')
    'lodash'
    >>> extract_package_name('./utils') is None
    True
    """
    if specifier.startswith('.') or specifier.startswith('/'):
        return None

    parts = specifier.split('/')
    if specifier.startswith('@'):
        if len(parts) >= 2:
            return f"{parts[0]}/{parts[1]}"
        return parts[0]

    return parts[0]


def extract_specifiers(content: str) -> List[str]:
    """All string specifiers matched by the three import forms, in pattern order."""
    specifiers = []
    for pattern in SPECIFIER_PATTERNS:
        specifiers.extend(match.group(1) for match in pattern.finditer(content))
    return specifiers


def collect_used_packages(content: str, used_packages: Set[str]):
    """Add every package referenced by content to used_packages."""
    for specifier in extract_specifiers(content):
        package_name = extract_package_name(specifier)
        if package_name:
            used_packages.add(package_name)


def is_package_used(package_name: str, used_packages: Set[str]) -> bool:
    """Direct match, or any used package from the same npm scope."""
    if package_name in used_packages:
        return True

    # @babel/core counts as used when @babel/parser is imported
    if '/' in package_name:
        scope = package_name.split('/')[0]
        return any(used.startswith(scope + '/') for used in used_packages)

    return False


def is_known_tool_package(name: str) -> bool:
    return any(name.startswith(tool) for tool in KNOWN_TOOL_PREFIXES)


class UnusedDependenciesDetector:
    """Diff declared package.json dependencies against referenced packages."""

    def __init__(self, config: GuardianConfig):
        self.config = config

    def scan_files(self, files: Iterable[Path]) -> Set[str]:
        """Build the set of referenced packages; unreadable files are skipped."""
        used_packages: Set[str] = set()
        for file_path in files:
            try:
                content = Path(file_path).read_text(encoding='utf-8')
            except (OSError, UnicodeDecodeError) as e:
                log.debug("Ignoring unreadable file %s: %s", file_path, e)
                continue
            collect_used_packages(content, used_packages)
        return used_packages

    def project_files(self, project_root: str | Path) -> List[Path]:
        source_files = discover_source_files(
            project_root, self.config.src_dir, self.config.include, self.config.exclude
        )
        seen = set(source_files)
        return source_files + [f for f in discover_config_files(project_root) if f not in seen]

    def detect(self, project_root: str | Path) -> List[UnusedDependencyFinding]:
        """Detect unused dependencies and devDependencies.

        Args:
            project_root: Directory containing package.json

        Returns:
            Findings for dependencies first, then devDependencies, in manifest order

        Raises:
            ManifestMissingError: If package.json does not exist
        """
        manifest = PackageManifest(project_root)
        data = manifest.read()

        used_packages = self.scan_files(self.project_files(project_root))
        log.debug("Referenced packages: %s", sorted(used_packages))

        findings: List[UnusedDependencyFinding] = []

        for name, version in PackageManifest.section(data, 'dependency').items():
            if not is_package_used(name, used_packages):
                findings.append(UnusedDependencyFinding(
                    name=name,
                    version=str(version),
                    kind='dependency',
                    confidence=DEPENDENCY_CONFIDENCE,
                ))

        for name, version in PackageManifest.section(data, 'devDependency').items():
            if is_known_tool_package(name):
                continue
            if not is_package_used(name, used_packages):
                findings.append(UnusedDependencyFinding(
                    name=name,
                    version=str(version),
                    kind='devDependency',
                    confidence=DEV_DEPENDENCY_CONFIDENCE,
                ))

        return findings

    @staticmethod
    def get_stats(findings: List[UnusedDependencyFinding]) -> Dict[str, int]:
        return {
            'total_unused': len(findings),
            'unused_dependencies': sum(1 for f in findings if f.kind == 'dependency'),
            'unused_dev_dependencies': sum(1 for f in findings if f.kind == 'devDependency'),
        }
