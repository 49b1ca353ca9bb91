"""Shared fixtures: throwaway JS/TS projects on disk."""
import json
from pathlib import Path
from typing import Dict, Optional

import pytest


def write_project(root: Path, files: Dict[str, str], package_json: Optional[Dict] = None) -> Path:
    """Create files (relative path -> text) and an optional package.json under root."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding='utf-8')

    if package_json is not None:
        (root / 'package.json').write_text(json.dumps(package_json, indent=2) + '\n', encoding='utf-8')

    return root


@pytest.fixture
def make_project(tmp_path):
    """Factory fixture: make_project({'src/a.ts': '...'}, package_json={...})."""
    def factory(files: Dict[str, str], package_json: Optional[Dict] = None) -> Path:
        return write_project(tmp_path, files, package_json)
    return factory
