"""
Configuration — Centralized settings management

Config hierarchy (highest to lowest priority):
  1. Environment variables (HELM_STORAGE_ROOT, HELM_BUSY_TIMEOUT_MS)
  2. Project config (.helm/config.yaml)
  3. User config (~/.helm/config.yaml)
  4. Defaults

Identity has its own chain, resolved per command:
  --as flag -> HELM_IDENTITY -> identity.name in config

The store never reads any of this. Commands resolve settings here and pass
plain values down.
"""

import os
import logging
import yaml
from pathlib import Path
from dataclasses import dataclass, field
from typing import Optional, Dict, Any, Mapping

from .core.action import Method, Role
from .core.errors import IdentityRequired
from .core.schema import DEFAULT_BUSY_TIMEOUT_MS
from .presentation.symbols import get_symbols


logger = logging.getLogger(__name__)

IDENTITY_ENV = "HELM_IDENTITY"
STORAGE_ROOT_ENV = "HELM_STORAGE_ROOT"
BUSY_TIMEOUT_ENV = "HELM_BUSY_TIMEOUT_MS"

DEFAULT_STORAGE_ROOT = "~/.helm/voyages"
DEFAULT_GH_CONFIG_ROOT = "~/.helm/gh-config"

IDENTITY_REQUIRED_HINT = (
    "identity required: pass --as <identity>, set HELM_IDENTITY, "
    "or run `helm config --set identity.name=<identity>`"
)


@dataclass
class IdentityConfig:
    """Who is acting, and the default provenance tags."""
    name: Optional[str] = None
    role: str = Role.HUMAN.value
    method: str = Method.MANUAL.value
    gh_config_root: str = DEFAULT_GH_CONFIG_ROOT  # one gh config dir per identity

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_roles = [r.value for r in Role]
        if self.role not in valid_roles:
            return f"Unknown role '{self.role}'. Valid: {', '.join(valid_roles)}"

        valid_methods = [m.value for m in Method]
        if self.method not in valid_methods:
            return f"Unknown method '{self.method}'. Valid: {', '.join(valid_methods)}"

        if self.name is not None and not self.name.strip():
            return "Identity name cannot be blank"
        return None


@dataclass
class StorageConfig:
    """Where voyage stores live and how long to wait for a busy one."""
    root: str = DEFAULT_STORAGE_ROOT
    busy_timeout_ms: int = DEFAULT_BUSY_TIMEOUT_MS

    @property
    def path(self) -> Path:
        return Path(self.root).expanduser()

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        if not self.root:
            return "Storage root cannot be empty"
        if isinstance(self.busy_timeout_ms, bool) or not isinstance(self.busy_timeout_ms, int):
            return f"busy_timeout_ms must be an integer, got '{self.busy_timeout_ms}'"
        if self.busy_timeout_ms < 0:
            return f"busy_timeout_ms must be >= 0, got {self.busy_timeout_ms}"
        return None


@dataclass
class DisplayConfig:
    """Display preferences."""
    symbols: str = "auto"  # "unicode" | "ascii" | "auto"

    def validate(self) -> Optional[str]:
        """Validate config. Returns error message or None if valid."""
        valid_symbols = ("unicode", "ascii", "auto")
        if self.symbols not in valid_symbols:
            return f"Unknown symbols setting '{self.symbols}'. Valid: {', '.join(valid_symbols)}"
        return None


@dataclass
class Config:
    """Application configuration."""
    identity: IdentityConfig = field(default_factory=IdentityConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "identity": {
                "name": self.identity.name,
                "role": self.identity.role,
                "method": self.identity.method,
                "gh_config_root": self.identity.gh_config_root,
            },
            "storage": {
                "root": self.storage.root,
                "busy_timeout_ms": self.storage.busy_timeout_ms,
            },
            "display": {
                "symbols": self.display.symbols,
            },
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Config':
        """Create from dictionary."""
        identity_data = data.get("identity") or {}
        storage_data = data.get("storage") or {}
        display_data = data.get("display") or {}

        return cls(
            identity=IdentityConfig(
                name=identity_data.get("name"),
                role=identity_data.get("role", Role.HUMAN.value),
                method=identity_data.get("method", Method.MANUAL.value),
                gh_config_root=identity_data.get("gh_config_root", DEFAULT_GH_CONFIG_ROOT),
            ),
            storage=StorageConfig(
                root=storage_data.get("root", DEFAULT_STORAGE_ROOT),
                busy_timeout_ms=storage_data.get("busy_timeout_ms", DEFAULT_BUSY_TIMEOUT_MS),
            ),
            display=DisplayConfig(
                symbols=display_data.get("symbols", "auto"),
            ),
        )

    def validate(self) -> Optional[str]:
        for section in (self.identity, self.storage, self.display):
            error = section.validate()
            if error:
                return error
        return None


class ConfigManager:
    """
    Manages configuration loading and persistence.

    Hierarchy:
      1. Environment overrides
      2. Project config (.helm/config.yaml)
      3. User config (~/.helm/config.yaml)
      4. Defaults
    """

    USER_CONFIG_DIR = Path.home() / ".helm"
    USER_CONFIG_FILE = USER_CONFIG_DIR / "config.yaml"
    PROJECT_CONFIG_DIR = ".helm"
    PROJECT_CONFIG_FILE = "config.yaml"

    # section -> setting -> parser for `set`
    SETTINGS = {
        "identity": {"name": str, "role": str, "method": str, "gh_config_root": str},
        "storage": {"root": str, "busy_timeout_ms": int},
        "display": {"symbols": str},
    }

    def __init__(self, project_dir: Optional[Path] = None, user_config_path: Optional[Path] = None):
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._user_config_path = Path(user_config_path) if user_config_path else self.USER_CONFIG_FILE
        self._config: Optional[Config] = None

    @property
    def project_config_path(self) -> Path:
        return self.project_dir / self.PROJECT_CONFIG_DIR / self.PROJECT_CONFIG_FILE

    @property
    def user_config_path(self) -> Path:
        return self._user_config_path

    def load(self) -> Config:
        """Load configuration from all sources."""
        if self._config is not None:
            return self._config

        # Start with defaults
        config_data: Dict[str, Any] = {}

        # Layer 1: User config, then project config (higher priority)
        for path in (self.user_config_path, self.project_config_path):
            config_data = self._merge(config_data, self._read(path))

        # Layer 2: Environment overrides
        if os.environ.get(STORAGE_ROOT_ENV):
            config_data.setdefault("storage", {})["root"] = os.environ[STORAGE_ROOT_ENV]
        if os.environ.get(BUSY_TIMEOUT_ENV):
            try:
                timeout = int(os.environ[BUSY_TIMEOUT_ENV])
            except ValueError:
                logger.warning("Ignoring %s=%r: not an integer", BUSY_TIMEOUT_ENV, os.environ[BUSY_TIMEOUT_ENV])
            else:
                config_data.setdefault("storage", {})["busy_timeout_ms"] = timeout

        self._config = Config.from_dict(config_data)
        return self._config

    def _read(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            with open(path) as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Ignoring unreadable config %s: %s", path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring config %s: top level is not a mapping", path)
            return {}
        return data

    def save_project(self, config: Config):
        """Save configuration to project config file."""
        self._write(self.project_config_path, config)

    def save_user(self, config: Config):
        """Save configuration to user config file."""
        self._write(self.user_config_path, config)

    def _write(self, path: Path, config: Config):
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            yaml.dump(config.to_dict(), f, default_flow_style=False)
        self._config = config

    def set(self, key: str, value: str, scope: str = "user") -> Optional[str]:
        """
        Set a configuration value.

        Args:
            key: Dot-separated key (e.g., "identity.name")
            value: Value to set
            scope: "project" or "user"

        Returns:
            Error message or None if successful
        """
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return f"Invalid key format: {key}. Use 'section.setting' (e.g., 'identity.name')"

        section, setting = parts
        if section not in self.SETTINGS:
            return f"Unknown section: {section}. Valid: {', '.join(self.SETTINGS)}"

        parsers = self.SETTINGS[section]
        if setting not in parsers:
            return f"Unknown {section} setting: {setting}. Valid: {', '.join(parsers)}"

        try:
            parsed = parsers[setting](value)
        except ValueError:
            return f"Invalid value for {key}: '{value}'"

        section_config = getattr(config, section)
        previous = getattr(section_config, setting)
        setattr(section_config, setting, parsed)

        error = section_config.validate()
        if error:
            setattr(section_config, setting, previous)
            return error

        if scope == "project":
            self.save_project(config)
        else:
            self.save_user(config)
        return None

    def get(self, key: str) -> Optional[str]:
        """Get a configuration value."""
        config = self.load()

        parts = key.split(".")
        if len(parts) != 2:
            return None

        section, setting = parts
        if setting not in self.SETTINGS.get(section, {}):
            return None

        value = getattr(getattr(config, section), setting)
        return None if value is None else str(value)

    def _merge(self, base: Dict, override: Dict) -> Dict:
        """Deep merge two dicts, override wins."""
        result = base.copy()
        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge(result[key], value)
            else:
                result[key] = value
        return result

    def display(self) -> str:
        """Format config for display."""
        config = self.load()
        symbols = get_symbols(config.display.symbols)

        env_identity = os.environ.get(IDENTITY_ENV)
        if env_identity:
            identity_status = f"{symbols.check_pass} {env_identity} (from {IDENTITY_ENV})"
        elif config.identity.name:
            identity_status = f"{symbols.check_pass} {config.identity.name}"
        else:
            identity_status = f"{symbols.check_fail} Not set"

        lines = [
            "Configuration:",
            "",
            "Identity:",
            f"  Name: {identity_status}",
            f"  Role: {config.identity.role}",
            f"  Method: {config.identity.method}",
            f"  GitHub configs: {config.identity.gh_config_root}",
            "",
            "Storage:",
            f"  Root: {config.storage.path}",
            f"  Busy timeout: {config.storage.busy_timeout_ms} ms",
            "",
            "Display:",
            f"  Symbols: {config.display.symbols}",
            "",
            "Config files:",
            f"  User: {self.user_config_path}",
            f"  Project: {self.project_config_path}",
        ]
        return "\n".join(lines)


def resolve_identity(explicit: Optional[str], config: Config,
                     environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Resolve the acting identity.

    Explicit value first, then HELM_IDENTITY, then identity.name from config.
    Empty values fall through. Raises IdentityRequired when nothing is set.
    """
    environ = os.environ if environ is None else environ

    if explicit:
        return explicit
    if environ.get(IDENTITY_ENV):
        return environ[IDENTITY_ENV]
    if config.identity.name:
        return config.identity.name
    raise IdentityRequired(IDENTITY_REQUIRED_HINT)


# Convenience function
def get_config(project_dir: Optional[Path] = None) -> Config:
    """Load configuration for a project."""
    return ConfigManager(project_dir).load()
