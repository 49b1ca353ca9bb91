"""End-to-end tests for the codeguardian CLI."""
import json

import pytest
from typer.testing import CliRunner

from codeguardian.main import app

runner = CliRunner()


@pytest.fixture
def project(make_project):
    return make_project(
        {
            'src/app.ts': "import { used, unused } from './lib';\nused();\n",
        },
        package_json={
            'name': 'cli-demo',
            'version': '1.0.0',
            'dependencies': {'lodash': '^4.17.21'},
        },
    )


def test_analyze_json(project):
    result = runner.invoke(app, ['analyze', str(project), '--json'])

    assert result.exit_code == 0, result.output
    report = json.loads(result.stdout)
    assert report['projectInfo']['name'] == 'cli-demo'
    assert [f['import_name'] for f in report['result']['unused_imports']] == ['unused']
    assert [d['name'] for d in report['result']['unused_dependencies']] == ['lodash']
    assert report['result']['estimated_bundle_size_reduction'] == 51


def test_analyze_console(project):
    result = runner.invoke(app, ['analyze', str(project)])
    assert result.exit_code == 0, result.output
    assert 'Summary' in result.output
    assert 'lodash' in result.output


def test_analyze_missing_manifest_fails(make_project):
    root = make_project({'src/a.js': "export const a = 1;\n"})
    result = runner.invoke(app, ['analyze', str(root)])
    assert result.exit_code == 1
    assert 'package.json not found' in result.output


def test_analyze_missing_path_fails(tmp_path):
    result = runner.invoke(app, ['analyze', str(tmp_path / 'nope')])
    assert result.exit_code == 1


def test_clean_dry_run_changes_nothing(project):
    before = (project / 'src' / 'app.ts').read_text(encoding='utf-8')
    manifest_before = (project / 'package.json').read_text(encoding='utf-8')

    result = runner.invoke(app, ['clean', str(project), '--dry-run'])

    assert result.exit_code == 0, result.output
    assert 'DRY RUN' in result.output
    assert (project / 'src' / 'app.ts').read_text(encoding='utf-8') == before
    assert (project / 'package.json').read_text(encoding='utf-8') == manifest_before


def test_clean_applies_fixes(project):
    result = runner.invoke(app, ['clean', str(project)])

    assert result.exit_code == 0, result.output
    assert (project / 'src' / 'app.ts').read_text(encoding='utf-8') == "import { used } from './lib';\nused();\n"
    manifest = json.loads((project / 'package.json').read_text(encoding='utf-8'))
    assert manifest['dependencies'] == {}


def test_clean_interactive_decline(project):
    before = (project / 'src' / 'app.ts').read_text(encoding='utf-8')

    result = runner.invoke(app, ['clean', str(project), '--interactive'], input='n\n')

    assert result.exit_code == 0, result.output
    assert 'cancelled' in result.output
    assert (project / 'src' / 'app.ts').read_text(encoding='utf-8') == before


def test_clean_verify_tests_rolls_back(project):
    before = (project / 'src' / 'app.ts').read_text(encoding='utf-8')

    result = runner.invoke(app, [
        'clean', str(project), '--verify-tests', '--test-command', 'definitely-not-a-real-test-binary',
    ])

    assert result.exit_code == 1
    assert (project / 'src' / 'app.ts').read_text(encoding='utf-8') == before
    assert 'Rolled back (2):' in result.output


def test_info(project):
    result = runner.invoke(app, ['info', str(project)])
    assert result.exit_code == 0, result.output
    assert 'cli-demo' in result.output


def test_init_creates_rc_file_once(project):
    result = runner.invoke(app, ['init', str(project), '--yes'])
    assert result.exit_code == 0, result.output
    assert (project / '.codeguardianrc.json').is_file()

    again = runner.invoke(app, ['init', str(project), '--yes'])
    assert again.exit_code == 1
    assert 'already exists' in again.output
