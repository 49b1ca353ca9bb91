"""Configuration management for CodeGuardian.

Resolves one settings value per run from built-in defaults, the project's
rc file (or the ``codeguardian`` key of package.json) and ``CODEGUARDIAN_*``
environment variables, including those declared in the project's .env file.
"""
import json
import os
from dataclasses import dataclass, field, asdict, fields, replace
from pathlib import Path
from typing import Dict, List, Optional

from dotenv import dotenv_values

__version__ = "0.1.0"

RC_FILENAMES = (".codeguardianrc", ".codeguardianrc.json")
PACKAGE_JSON_KEY = "codeguardian"
ENV_PREFIX = "CODEGUARDIAN_"


@dataclass
class GuardianConfig:
    """Fully resolved settings handed to every analyzer and fixer."""
    src_dir: str = "src"
    include: List[str] = field(default_factory=lambda: ["**/*.{ts,tsx,js,jsx}"])
    exclude: List[str] = field(default_factory=lambda: [
        "node_modules", "dist", "build", "coverage", ".next", ".nuxt"
    ])
    analyze_unused_imports: bool = True
    analyze_unused_dependencies: bool = True
    safe_mode: bool = True
    require_tests: bool = False
    verbose: bool = False
    output_format: str = "text"
    complexity_threshold: int = 10
    confidence_threshold: float = 0.8
    test_command: Optional[str] = None

    def to_dict(self) -> Dict:
        return asdict(self)

    def to_rc_dict(self) -> Dict:
        """Serialize using the camelCase keys of the rc file."""
        return {_to_camel(key): value for key, value in asdict(self).items()}


class ConfigError(ValueError):
    """Raised when a configuration source cannot be interpreted."""


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


_FIELD_TYPES = {f.name: f.type for f in fields(GuardianConfig)}
_CAMEL_TO_FIELD = {_to_camel(name): name for name in _FIELD_TYPES}


def _coerce(name: str, raw):
    """Convert a raw config value (JSON or environment string) to the field type."""
    current = getattr(GuardianConfig(), name)

    if isinstance(current, bool):
        if isinstance(raw, bool):
            return raw
        text = str(raw).strip().lower()
        if text in {"1", "true", "yes", "on"}:
            return True
        if text in {"0", "false", "no", "off"}:
            return False
        raise ConfigError(f"Invalid boolean for {name}: {raw!r}")

    if isinstance(current, list):
        if isinstance(raw, list):
            return [str(item) for item in raw]
        return [part.strip() for part in str(raw).split(",") if part.strip()]

    try:
        if isinstance(current, int):
            return int(raw)
        if isinstance(current, float):
            return float(raw)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid value for {name}: {raw!r}") from e

    return None if raw is None else str(raw)


def _apply_overrides(config: GuardianConfig, overrides: Dict) -> GuardianConfig:
    """Merge camelCase or snake_case keys onto config; unknown keys are ignored."""
    changes = {}
    for key, raw in overrides.items():
        name = _CAMEL_TO_FIELD.get(key, key)
        if name in _FIELD_TYPES:
            changes[name] = _coerce(name, raw)
    return replace(config, **changes)


def _read_json(path: Path) -> Dict:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Expected a JSON object in {path}")
    return data


def find_rc_file(project_root: Path) -> Optional[Path]:
    """Return the first rc file present in project_root."""
    for filename in RC_FILENAMES:
        candidate = project_root / filename
        if candidate.is_file():
            return candidate
    return None


def _env_overrides(project_root: Path, environ: Optional[Dict[str, str]] = None) -> Dict[str, str]:
    """Collect CODEGUARDIAN_* values; the process environment wins over .env."""
    values: Dict[str, str] = {}

    env_path = project_root / ".env"
    if env_path.is_file():
        values.update({k: v for k, v in dotenv_values(env_path).items() if v is not None})

    values.update(os.environ if environ is None else environ)

    return {
        key[len(ENV_PREFIX):].lower(): value
        for key, value in values.items()
        if key.startswith(ENV_PREFIX)
    }


def load_config(project_root: str | Path = ".",
                environ: Optional[Dict[str, str]] = None) -> GuardianConfig:
    """Resolve the configuration for a project.

    Precedence (lowest first): defaults, package.json ``codeguardian`` key,
    rc file, .env file, process environment.

    Args:
        project_root: Project root directory
        environ: Environment mapping to read instead of os.environ

    Returns:
        Resolved GuardianConfig

    Raises:
        ConfigError: If a configuration source is malformed
    """
    project_root = Path(project_root)
    config = GuardianConfig()

    package_json = project_root / "package.json"
    if package_json.is_file():
        try:
            embedded = json.loads(package_json.read_text(encoding="utf-8")).get(PACKAGE_JSON_KEY)
        except (json.JSONDecodeError, AttributeError):
            embedded = None
        if isinstance(embedded, dict):
            config = _apply_overrides(config, embedded)

    rc_file = find_rc_file(project_root)
    if rc_file:
        config = _apply_overrides(config, _read_json(rc_file))

    return _apply_overrides(config, _env_overrides(project_root, environ))


def init_config(project_root: str | Path, extra: Optional[Dict] = None) -> Path:
    """Write .codeguardianrc.json with default settings.

    Args:
        project_root: Project root directory
        extra: Additional top-level keys (e.g. detected framework)

    Returns:
        Path of the created file

    Raises:
        FileExistsError: If the config file already exists
    """
    config_path = Path(project_root) / ".codeguardianrc.json"
    if config_path.exists():
        raise FileExistsError("Config file already exists")

    data = GuardianConfig().to_rc_dict()
    data.update(extra or {})
    config_path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
    return config_path
