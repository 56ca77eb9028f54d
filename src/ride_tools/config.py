"""
Configuration file support for ride-tools.

Provides hierarchical configuration loading from:
1. Project config: .ride-tools.toml or ride-tools.toml in project root
2. User config: ~/.config/ride-tools/config.toml

CLI arguments override config file values, and project config overrides user config.
"""

import sys
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from ride_tools.exceptions import ConfigurationError
from ride_tools.track.coords import TileCoords

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

# Config file names to search for in project directories
CONFIG_FILENAMES = [".ride-tools.toml", "ride-tools.toml"]

# User-level config path
USER_CONFIG_PATH = Path.home() / ".config" / "ride-tools" / "config.toml"

# All known config keys for validation
KNOWN_KEYS = {
    "defaults": {"verbose", "quiet"},
    "server": {"host", "port", "read_size"},
    "actions": {"timeout_seconds"},
    "track": {"circuit_origin"},
    "sandbox": {"map_size", "latency_seconds"},
}


@dataclass
class DefaultsConfig:
    """Default options for CLI commands."""

    verbose: bool = False
    quiet: bool = False


@dataclass
class ServerConfig:
    """Protocol server configuration."""

    host: str = "127.0.0.1"
    port: int = 8080
    read_size: int = 4096


@dataclass
class ActionsConfig:
    """External action configuration."""

    timeout_seconds: float = 10.0


@dataclass
class TrackConfig:
    """Track construction configuration."""

    # [x, y, z, direction]; unset means each session's first piece is the origin
    circuit_origin: list[int] | None = None

    def origin(self) -> TileCoords | None:
        """Fixed circuit origin as TileCoords, or None."""
        if self.circuit_origin is None:
            return None
        x, y, z, direction = self.circuit_origin
        return TileCoords(x, y, z, direction)


@dataclass
class SandboxConfig:
    """In-memory sandbox world configuration."""

    map_size: int = 256
    latency_seconds: float = 0.0


@dataclass
class Config:
    """Merged configuration from all sources."""

    defaults: DefaultsConfig = field(default_factory=DefaultsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    actions: ActionsConfig = field(default_factory=ActionsConfig)
    track: TrackConfig = field(default_factory=TrackConfig)
    sandbox: SandboxConfig = field(default_factory=SandboxConfig)

    # Track which file each setting came from (for --show)
    _sources: dict = field(default_factory=dict, repr=False)

    @classmethod
    def load(cls, start_dir: Path | None = None) -> "Config":
        """
        Load configuration with precedence: project > user > defaults.

        Args:
            start_dir: Directory to start searching from (default: current directory)

        Returns:
            Merged configuration object
        """
        if start_dir is None:
            start_dir = Path.cwd()

        config = cls()
        sources: dict[str, str] = {}

        # Load user config first (lower precedence)
        if USER_CONFIG_PATH.exists():
            user_data = _load_toml_file(USER_CONFIG_PATH)
            if user_data:
                _merge_config(config, user_data, str(USER_CONFIG_PATH), sources)

        # Load project config (higher precedence)
        project_config = _find_project_config(start_dir)
        if project_config:
            project_data = _load_toml_file(project_config)
            if project_data:
                _merge_config(config, project_data, str(project_config), sources)

        config._sources = sources
        return config

    def get_source(self, key: str) -> str:
        """Get the source file for a config key."""
        return self._sources.get(key, "default")


def _find_project_config(start_dir: Path) -> Path | None:
    """
    Find project config by walking up the directory tree.

    Stops at .git directory or filesystem root.

    Args:
        start_dir: Directory to start searching from

    Returns:
        Path to config file if found, None otherwise
    """
    current = start_dir.resolve()

    while True:
        for filename in CONFIG_FILENAMES:
            config_path = current / filename
            if config_path.is_file():
                return config_path

        # Stop at .git directory (project root)
        if (current / ".git").exists():
            break

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _load_toml_file(path: Path) -> dict[str, Any]:
    """
    Load a TOML file.

    Raises:
        ConfigurationError: If the file is unreadable or not valid TOML
    """
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigurationError(f"Invalid TOML in {path}: {e}", {"file": str(path)}) from e
    except OSError as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}", {"file": str(path)}) from e


def _merge_config(
    config: Config, data: dict[str, Any], source: str, sources: dict[str, str]
) -> None:
    """
    Merge loaded config data into Config object.

    Args:
        config: Config object to update
        data: Raw config data from TOML
        source: Source file path (for tracking)
        sources: Dict to update with source info
    """
    for key in data:
        if key not in KNOWN_KEYS:
            warnings.warn(f"Unknown config key '{key}' in {source}", stacklevel=3)

    for section, known in KNOWN_KEYS.items():
        if section not in data:
            continue
        section_data = data[section]
        if not isinstance(section_data, dict):
            raise ConfigurationError(
                f"Config section '{section}' must be a table", {"file": source}
            )
        _warn_unknown_keys(section_data, known, section, source)

        target = getattr(config, section)
        for key in sorted(known & section_data.keys()):
            value = section_data[key]
            _check_value(section, key, value, getattr(target, key), source)
            setattr(target, key, value)
            sources[f"{section}.{key}"] = source


def _check_value(section: str, key: str, value: Any, current: Any, source: str) -> None:
    """Reject values whose type does not match the setting."""
    name = f"{section}.{key}"
    if section == "track" and key == "circuit_origin":
        if not (
            isinstance(value, list)
            and len(value) == 4
            and all(isinstance(v, int) and not isinstance(v, bool) for v in value)
        ):
            raise ConfigurationError(
                f"'{name}' must be a list of four integers [x, y, z, direction]",
                {"file": source, "value": value},
            )
        return

    if isinstance(current, bool):
        ok = isinstance(value, bool)
    elif isinstance(current, float):
        ok = isinstance(value, (int, float)) and not isinstance(value, bool)
    elif isinstance(current, int):
        ok = isinstance(value, int) and not isinstance(value, bool)
    else:
        ok = isinstance(value, type(current))

    if not ok:
        raise ConfigurationError(
            f"'{name}' must be of type {type(current).__name__}",
            {"file": source, "value": value},
        )


def _warn_unknown_keys(data: dict[str, Any], known: set[str], section: str, source: str) -> None:
    """Warn about unknown keys in a config section."""
    for key in data:
        if key not in known:
            warnings.warn(f"Unknown config key '{section}.{key}' in {source}", stacklevel=4)


def generate_template() -> str:
    """
    Generate a template config file with all options documented.

    Returns:
        Template TOML string
    """
    return """# ride-tools configuration file
# Place as .ride-tools.toml in project root or ~/.config/ride-tools/config.toml for user defaults

[defaults]
# Log at DEBUG level when serving (same as --debug)
# verbose = false

# Only log warnings and errors when serving
# quiet = false

[server]
# Address the protocol server binds to
# host = "127.0.0.1"

# TCP port
# port = 8080

# Bytes read from a connection per chunk
# read_size = 4096

[actions]
# Upper bound on each world action before ActionTimeout is reported
# timeout_seconds = 10.0

[track]
# Fixed circuit origin [x, y, z, direction] in tiles.
# When unset, each construct's first placed piece is its origin.
# circuit_origin = [5, 5, 0, 0]

[sandbox]
# Map size of the in-memory world, in tiles
# map_size = 256

# Simulated delay applied to every action, in seconds
# latency_seconds = 0.0
"""


def get_config_paths() -> dict[str, Path | None]:
    """
    Get paths to config files that would be loaded.

    Returns:
        Dict with 'user' and 'project' keys
    """
    project_config = _find_project_config(Path.cwd())

    return {
        "user": USER_CONFIG_PATH if USER_CONFIG_PATH.exists() else None,
        "project": project_config,
    }
