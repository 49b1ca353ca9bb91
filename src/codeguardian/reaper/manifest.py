"""package.json manifest access for dependency analysis and cleanup."""
import json
from pathlib import Path
from typing import Dict

# Manifest sections, keyed by the dependency kind they declare
DEPENDENCY_SECTIONS = {
    'dependency': 'dependencies',
    'devDependency': 'devDependencies',
    'peerDependency': 'peerDependencies',
}


class ManifestMissingError(FileNotFoundError):
    """Raised when the project has no package.json to check against."""


class PackageManifest:
    """Read and rewrite a project's package.json.

    Writes keep key order, use two-space indentation and end with a newline.
    """

    FILENAME = "package.json"

    def __init__(self, project_root: str | Path):
        """Initialize manifest.

        Args:
            project_root: Directory containing package.json
        """
        self.project_root = Path(project_root)
        self.manifest_path = self.project_root / self.FILENAME

    def exists(self) -> bool:
        return self.manifest_path.is_file()

    def read(self) -> Dict:
        """Read the manifest from disk.

        Returns:
            Parsed manifest (insertion-ordered)

        Raises:
            ManifestMissingError: If package.json does not exist
            ValueError: If package.json is not a JSON object
        """
        if not self.exists():
            raise ManifestMissingError(f"package.json not found in {self.project_root}")

        with open(self.manifest_path, 'r', encoding='utf-8') as f:
            data = json.load(f)

        if not isinstance(data, dict):
            raise ValueError(f"{self.manifest_path} is not a JSON object")
        return data

    def write(self, data: Dict):
        """Write manifest to disk atomically.

        Args:
            data: Manifest dictionary to write
        """
        # Write to temp file first for atomic operation
        temp_path = self.manifest_path.with_suffix('.tmp')
        with open(temp_path, 'w', encoding='utf-8') as f:
            f.write(json.dumps(data, indent=2, ensure_ascii=False) + '\n')

        temp_path.replace(self.manifest_path)

    @staticmethod
    def section(data: Dict, kind: str) -> Dict[str, str]:
        """Return the name -> version mapping for a dependency kind ({} if absent)."""
        section = data.get(DEPENDENCY_SECTIONS[kind])
        return section if isinstance(section, dict) else {}
