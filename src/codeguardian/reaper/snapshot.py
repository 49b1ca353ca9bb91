"""Pre-mutation file snapshots for rolling back a failed cleanup."""
import hashlib
from pathlib import Path
from typing import Dict, List


class RestoreError(IOError):
    """Raised when some snapshot files could not be written back."""

    def __init__(self, message: str, restored: List[str]):
        super().__init__(message)
        self.restored = restored


class FileSnapshot:
    """Keeps the original bytes of every file a fix run is about to modify.

    Only files captured here are ever restored, so a rollback cannot touch
    files changed by anything other than the current run.
    """

    def __init__(self):
        self._originals: Dict[Path, bytes] = {}

    def capture(self, file_path: str | Path):
        """Record file contents before its first mutation (later calls are no-ops).

        Raises:
            FileNotFoundError: If the file doesn't exist
        """
        file_path = Path(file_path)
        if file_path not in self._originals:
            self._originals[file_path] = file_path.read_bytes()

    def restore(self, file_path: str | Path):
        """Write the captured bytes back and verify them.

        Raises:
            KeyError: If the file was never captured
            IOError: If the restored content does not match the snapshot
        """
        file_path = Path(file_path)
        original = self._originals[file_path]
        file_path.write_bytes(original)

        if self.calculate_hash(file_path) != hashlib.sha256(original).hexdigest():
            raise IOError(f"Restored content differs from snapshot: {file_path}")

    def restore_all(self) -> List[str]:
        """Restore every captured file.

        Returns:
            Paths that were restored

        Raises:
            RestoreError: If any restoration fails (all files are still attempted)
        """
        restored = []
        errors = []

        for file_path in self._originals:
            try:
                self.restore(file_path)
                restored.append(str(file_path))
            except (KeyError, OSError) as e:
                errors.append(f"{file_path}: {e}")

        if errors:
            raise RestoreError("Failed to restore some files:\n" + "\n".join(errors), restored)

        return restored

    @staticmethod
    def calculate_hash(file_path: str | Path) -> str:
        """Calculate SHA256 hash of file."""
        sha256_hash = hashlib.sha256()

        with open(file_path, "rb") as f:
            for byte_block in iter(lambda: f.read(4096), b""):
                sha256_hash.update(byte_block)

        return sha256_hash.hexdigest()
