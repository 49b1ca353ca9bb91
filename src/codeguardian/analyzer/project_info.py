"""Project metadata detection from package.json, lockfiles and config files."""
import json
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Dict, Optional

# Checked in order; the first declared package wins
FRAMEWORK_PACKAGES = [
    ('next', 'nextjs'),
    ('nuxt', 'nuxt'),
    ('react', 'react'),
    ('vue', 'vue'),
    ('@angular/core', 'angular'),
    ('svelte', 'svelte'),
]
TEST_FRAMEWORK_PACKAGES = [
    ('jest', 'jest'),
    ('vitest', 'vitest'),
    ('mocha', 'mocha'),
    ('@playwright/test', 'playwright'),
    ('cypress', 'cypress'),
]
BUILD_TOOL_FILES = [
    (('vite.config.js', 'vite.config.ts'), 'vite'),
    (('webpack.config.js', 'webpack.config.ts'), 'webpack'),
    (('rollup.config.js', 'rollup.config.ts'), 'rollup'),
    (('.parcelrc',), 'parcel'),
    (('esbuild.config.js',), 'esbuild'),
]
LOCKFILES = [
    ('pnpm-lock.yaml', 'pnpm'),
    ('yarn.lock', 'yarn'),
    ('bun.lockb', 'bun'),
    ('package-lock.json', 'npm'),
]


@dataclass
class ProjectInfo:
    name: str
    version: str
    framework: str
    build_tool: str
    package_manager: str
    has_tests: bool
    test_framework: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)


class ProjectDetector:
    """Sniff framework, build tool, package manager and test framework."""

    def __init__(self, project_root: str | Path = "."):
        self.project_root = Path(project_root)

    def _package_json(self) -> Dict:
        path = self.project_root / 'package.json'
        try:
            data = json.loads(path.read_text(encoding='utf-8'))
        except (OSError, json.JSONDecodeError):
            return {}
        return data if isinstance(data, dict) else {}

    def _all_dependencies(self) -> Dict[str, str]:
        data = self._package_json()
        deps = {}
        for section in ('dependencies', 'devDependencies'):
            if isinstance(data.get(section), dict):
                deps.update(data[section])
        return deps

    def _root_files(self) -> set:
        try:
            return {p.name for p in self.project_root.iterdir()}
        except OSError:
            return set()

    def detect_framework(self) -> str:
        deps = self._all_dependencies()
        for package, framework in FRAMEWORK_PACKAGES:
            if package in deps:
                return framework
        return 'unknown'

    def detect_build_tool(self) -> str:
        files = self._root_files()
        for candidates, tool in BUILD_TOOL_FILES:
            if any(name in files for name in candidates):
                return tool
        return 'unknown'

    def detect_package_manager(self) -> str:
        files = self._root_files()
        for lockfile, manager in LOCKFILES:
            if lockfile in files:
                return manager
        return 'npm'

    def detect_test_framework(self) -> Optional[str]:
        deps = self._all_dependencies()
        for package, framework in TEST_FRAMEWORK_PACKAGES:
            if package in deps:
                return framework
        return None

    def get_project_info(self) -> ProjectInfo:
        data = self._package_json()
        test_framework = self.detect_test_framework()
        return ProjectInfo(
            name=data.get('name') or 'unknown',
            version=data.get('version') or '0.0.0',
            framework=self.detect_framework(),
            build_tool=self.detect_build_tool(),
            package_manager=self.detect_package_manager(),
            has_tests=test_framework is not None,
            test_framework=test_framework,
        )
