"""Tests for package.json dependency usage detection."""
import pytest

from codeguardian.analyzer.unused_dependencies import (
    NOT_IMPORTED_REASON,
    UnusedDependenciesDetector,
    extract_package_name,
    extract_specifiers,
    is_known_tool_package,
    is_package_used,
)
from codeguardian.config import GuardianConfig
from codeguardian.reaper.manifest import ManifestMissingError


@pytest.mark.parametrize("specifier, package", [
    ('react', 'react'),
    ('lodash/fp', 'lodash'),
    ('@babel/parser', '@babel/parser'),
    ('@babel/parser/lib/index', '@babel/parser'),
    ('@scope', '@scope'),
    ('./local', None),
    ('../up', None),
    ('/abs/path', None),
])
def test_extract_package_name(specifier, package):
    assert extract_package_name(specifier) == package


def test_three_textual_forms():
    content = (
        "import React from 'react';\n"
        "const fs = require(\"fs-extra\");\n"
        "const lazy = import('chart.js/auto');\n"
    )
    assert sorted(extract_specifiers(content)) == ['chart.js/auto', 'fs-extra', 'react']


def test_multiline_named_import_is_missed():
    content = "import {\n  a,\n  b,\n} from 'multi';\n"
    assert 'multi' not in extract_specifiers(content)


def test_scoped_sibling_counts_as_used():
    used = {'@babel/parser'}
    assert is_package_used('@babel/core', used)
    assert not is_package_used('@other/core', used)
    assert not is_package_used('babel', used)


@pytest.mark.parametrize("name", ['eslint', 'typescript', 'eslint-plugin-react', '@types/node', 'jest-environment-jsdom', 'cross-env'])
def test_known_tools(name):
    assert is_known_tool_package(name)


def test_unknown_tool():
    assert not is_known_tool_package('left-pad')


class TestDetector:

    def test_findings_by_kind(self, make_project):
        root = make_project(
            {
                'src/index.js': (
                    "import React from 'react';\n"
                    "const sub = require('@scope/a/sub');\n"
                ),
            },
            package_json={
                'name': 'demo',
                'dependencies': {'react': '^18.0.0', 'lodash': '^4.17.0', '@scope/b': '1.0.0'},
                'devDependencies': {'jest': '^29.0.0', '@types/react': '^18', 'left-pad': '1.3.0'},
                'peerDependencies': {'vue': '^3'},
            },
        )

        findings = UnusedDependenciesDetector(GuardianConfig()).detect(root)
        summary = [(f.name, f.kind, f.confidence) for f in findings]

        assert summary == [
            ('lodash', 'dependency', 0.85),
            ('left-pad', 'devDependency', 0.75),
        ], f"Unexpected findings: {summary}"
        assert findings[0].version == '^4.17.0'
        assert findings[0].reason == NOT_IMPORTED_REASON

    def test_root_config_files_are_scanned(self, make_project):
        root = make_project(
            {
                'src/index.ts': "export const x = 1;\n",
                'vite.config.ts': "import legacy from '@vitejs/plugin-legacy';\n",
                '.eslintrc.js': "module.exports = { parser: require('some-parser') };\n",
            },
            package_json={
                'devDependencies': {'@vitejs/plugin-legacy': '^5', 'some-parser': '^1'},
            },
        )
        assert UnusedDependenciesDetector(GuardianConfig()).detect(root) == []

    def test_undecodable_file_is_skipped(self, make_project):
        root = make_project({'src/ok.js': "import a from 'alpha';\n"}, package_json={
            'dependencies': {'alpha': '1', 'beta': '1'},
        })
        (root / 'src' / 'bad.js').write_bytes(b"import b from 'beta';\n\xff\xfe")

        findings = UnusedDependenciesDetector(GuardianConfig()).detect(root)
        assert [f.name for f in findings] == ['beta']

    def test_missing_manifest(self, tmp_path):
        with pytest.raises(ManifestMissingError):
            UnusedDependenciesDetector(GuardianConfig()).detect(tmp_path)

    def test_stats(self, make_project):
        root = make_project({'src/a.js': ""}, package_json={
            'dependencies': {'x': '1'},
            'devDependencies': {'y': '1', 'z': '1'},
        })
        findings = UnusedDependenciesDetector(GuardianConfig()).detect(root)
        assert UnusedDependenciesDetector.get_stats(findings) == {
            'total_unused': 3,
            'unused_dependencies': 1,
            'unused_dev_dependencies': 2,
        }
