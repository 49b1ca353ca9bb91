"""Tests for the rich console reporter."""
import io

from rich.console import Console

from codeguardian.reaper.fixer import TESTS_FAILED_ERROR, FixOutcome, FixState
from codeguardian.reporters.console_reporter import ConsoleReporter


def render_fix(outcome, root):
    buffer = io.StringIO()
    reporter = ConsoleReporter(Console(file=buffer, width=120), root)
    reporter.report_fix(outcome)
    return buffer.getvalue()


def test_failed_fix_lists_modified_and_rolled_back_files(tmp_path):
    root = tmp_path.resolve()
    app = str(root / 'src' / 'app.ts')
    manifest = str(root / 'package.json')
    outcome = FixOutcome(
        success=False,
        state=FixState.ROLLED_BACK,
        modified_files=[app, manifest],
        errors=[TESTS_FAILED_ERROR],
        rolled_back_files=[app, manifest],
    )

    output = render_fix(outcome, root)

    assert 'Modified (2):' in output
    assert 'Rolled back (2):' in output
    assert output.count('src/app.ts') == 2
    assert output.count('package.json') == 2
    assert str(root) not in output, "Paths should be shown relative to the project root"
    assert TESTS_FAILED_ERROR in output


def test_successful_fix_prints_counts(tmp_path):
    outcome = FixOutcome(
        state=FixState.COMMITTED,
        modified_files=[str(tmp_path / 'a.js')],
        imports_removed=3,
        dependencies_removed=['lodash'],
    )

    output = render_fix(outcome, tmp_path)

    assert 'Successfully cleaned up' in output
    assert 'Imports removed: 3' in output
    assert 'Rolled back' not in output
