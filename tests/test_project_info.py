"""Tests for project metadata detection."""
from codeguardian.analyzer.project_info import ProjectDetector


def test_react_vite_pnpm_vitest(make_project):
    root = make_project(
        {'vite.config.ts': "export default {};\n", 'pnpm-lock.yaml': ""},
        package_json={
            'name': 'shop',
            'version': '2.1.0',
            'dependencies': {'react': '^18'},
            'devDependencies': {'vitest': '^1'},
        },
    )

    info = ProjectDetector(root).get_project_info()

    assert info.to_dict() == {
        'name': 'shop',
        'version': '2.1.0',
        'framework': 'react',
        'build_tool': 'vite',
        'package_manager': 'pnpm',
        'has_tests': True,
        'test_framework': 'vitest',
    }


def test_next_wins_over_react(make_project):
    root = make_project({}, package_json={'dependencies': {'react': '^18', 'next': '^14'}})
    assert ProjectDetector(root).detect_framework() == 'nextjs'


def test_defaults_without_manifest(tmp_path):
    info = ProjectDetector(tmp_path).get_project_info()
    assert info.name == 'unknown'
    assert info.version == '0.0.0'
    assert info.framework == 'unknown'
    assert info.build_tool == 'unknown'
    assert info.package_manager == 'npm'
    assert info.has_tests is False
    assert info.test_framework is None


def test_yarn_lockfile(make_project):
    root = make_project({'yarn.lock': ""}, package_json={})
    assert ProjectDetector(root).detect_package_manager() == 'yarn'
