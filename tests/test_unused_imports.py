"""Tests for unused import resolution and project-wide detection."""
from codeguardian.analyzer.extractor import SymbolModelExtractor
from codeguardian.analyzer.parser import SourceParser
from codeguardian.analyzer.unused_imports import (
    UNUSED_IMPORT_CONFIDENCE,
    UnusedImportFinding,
    UnusedImportResolver,
    UnusedImportsDetector,
)
from codeguardian.config import GuardianConfig


def unused_names(source: str, file_name: str = "mod.tsx"):
    tree = SourceParser().parse_source(source, file_name)
    model = SymbolModelExtractor().extract(tree)
    return [f.import_name for f in UnusedImportResolver().resolve(model, file_name)]


class TestResolver:

    def test_unused_named_import(self):
        source = "import { used, unused } from './lib';\nconsole.log(used);\n"
        assert unused_names(source) == ['unused']

    def test_aliased_import_checked_by_local_name(self):
        source = "import { original as alias } from './lib';\nalias();\n"
        assert unused_names(source) == []

    def test_react_kept_when_file_has_jsx(self):
        source = "import React from 'react';\nexport const App = () => <div />;\n"
        assert unused_names(source) == []

    def test_react_unused_without_jsx(self):
        source = "import React from 'react';\nexport const n = 1;\n"
        assert unused_names(source, "mod.ts") == ['React']

    def test_namespace_import_used_through_member(self):
        source = "import * as utils from './utils';\nutils.format(1);\n"
        assert unused_names(source, "mod.ts") == []

    def test_namespace_import_unused(self):
        source = "import * as utils from './utils';\nformat(1);\n"
        assert unused_names(source, "mod.ts") == ['utils']

    def test_type_only_usage_counts(self):
        source = "import { Config } from './types';\nlet c: Config;\n"
        assert unused_names(source, "mod.ts") == []

    def test_object_key_is_not_a_use(self):
        source = "import { name } from './n';\nconst o = { name: 1 };\n"
        assert unused_names(source, "mod.js") == ['name']

    def test_findings_in_declaration_order(self):
        source = "import a from 'a';\nimport { b, c } from 'bc';\n"
        assert unused_names(source, "mod.js") == ['a', 'b', 'c']

    def test_finding_fields(self):
        tree = SourceParser().parse_source("import { x } from 'y';\n", "f.js")
        model = SymbolModelExtractor().extract(tree)
        findings = UnusedImportResolver().resolve(model, "f.js")
        assert findings == [UnusedImportFinding('f.js', 1, 9, 'x', 'y', UNUSED_IMPORT_CONFIDENCE)]
        assert findings[0].confidence == 0.95


class TestDetector:

    def test_detect_across_files_sorted(self, make_project):
        root = make_project({
            'src/b.ts': "import { unusedB } from './x';\n",
            'src/a.ts': "import { unusedA } from './x';\n",
            'src/nested/c.js': "import used from 'u';\nused();\n",
        })
        findings = UnusedImportsDetector(GuardianConfig()).detect(root)
        assert [f.import_name for f in findings] == ['unusedA', 'unusedB']

    def test_excluded_directories_skipped(self, make_project):
        root = make_project({
            'src/node_modules/pkg/index.js': "import x from 'x';\n",
            'src/ok.js': "import y from 'y';\n",
        })
        findings = UnusedImportsDetector(GuardianConfig()).detect(root)
        assert [f.import_name for f in findings] == ['y']

    def test_parse_failure_isolated(self, make_project):
        root = make_project({
            'src/broken.js': "import { from 'x'\nconst = ;\n",
            'src/fine.js': "import z from 'z';\n",
        })
        detector = UnusedImportsDetector(GuardianConfig())
        findings = detector.detect(root)

        assert [f.import_name for f in findings] == ['z']
        assert len(detector.skipped_files) == 1
        assert detector.skipped_files[0].endswith('broken.js')

    def test_detection_is_idempotent(self, make_project):
        root = make_project({
            'src/app.tsx': (
                "import React from 'react';\n"
                "import { a, b } from './ab';\n"
                "export const App = () => <div>{a}</div>;\n"
            ),
        })
        config = GuardianConfig()
        first = UnusedImportsDetector(config).detect(root)
        second = UnusedImportsDetector(config).detect(root)
        assert first == second
        assert [f.import_name for f in first] == ['b']

    def test_missing_src_dir_yields_nothing(self, tmp_path):
        assert UnusedImportsDetector(GuardianConfig()).detect(tmp_path) == []

    def test_group_by_file_and_stats(self):
        findings = [
            UnusedImportFinding('a.js', 1, 0, 'x', 'x'),
            UnusedImportFinding('a.js', 2, 0, 'y', 'y'),
            UnusedImportFinding('b.js', 1, 0, 'z', 'z'),
        ]
        grouped = UnusedImportsDetector.group_by_file(findings)
        assert list(grouped) == ['a.js', 'b.js']
        assert len(grouped['a.js']) == 2

        stats = UnusedImportsDetector(GuardianConfig()).get_stats(findings)
        assert stats == {'affected_files': 2, 'total_unused': 3, 'estimated_size_reduction': 3}
