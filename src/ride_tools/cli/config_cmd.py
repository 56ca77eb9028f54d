"""
Config command for ride-tools CLI.

Provides commands to view and initialize configuration.

Usage:
    rtt config --show          Show effective configuration with sources
    rtt config --init          Create template config file
    rtt config --paths         Show config file paths
"""

import argparse
import sys
from pathlib import Path

from ride_tools.config import (
    CONFIG_FILENAMES,
    KNOWN_KEYS,
    USER_CONFIG_PATH,
    Config,
    generate_template,
    get_config_paths,
)
from ride_tools.exceptions import ConfigurationError


def main(argv: list[str] | None = None) -> int:
    """Main entry point for config command."""
    parser = argparse.ArgumentParser(
        prog="rtt config",
        description="Manage ride-tools configuration",
    )

    action_group = parser.add_mutually_exclusive_group()
    action_group.add_argument(
        "--show",
        action="store_true",
        help="Show effective configuration with sources",
    )
    action_group.add_argument(
        "--init",
        action="store_true",
        help="Create template config file in current directory",
    )
    action_group.add_argument(
        "--paths",
        action="store_true",
        help="Show config file paths",
    )
    parser.add_argument(
        "--user",
        action="store_true",
        help="Use user config (~/.config/ride-tools/config.toml) for --init",
    )

    args = parser.parse_args(argv)

    try:
        if args.init:
            return _init_config(args.user)
        elif args.paths:
            return _show_paths()
        else:
            return _show_config()

    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


def _show_config() -> int:
    """Show effective configuration with sources."""
    config = Config.load()

    print("# Effective ride-tools configuration")
    print()

    for section, keys in KNOWN_KEYS.items():
        print(f"[{section}]")
        section_obj = getattr(config, section)
        for key in sorted(keys):
            _print_value(key, getattr(section_obj, key), config.get_source(f"{section}.{key}"))
        print()

    return 0


def _print_value(key: str, value, source: str) -> None:
    """Print a config value with its source."""
    if isinstance(value, str):
        formatted = f'"{value}"'
    elif isinstance(value, bool):
        formatted = "true" if value else "false"
    elif value is None:
        formatted = "# not set"
    else:
        formatted = str(value)

    # Show just the filename for brevity
    source_display = Path(source).name if source != "default" else source

    print(f"{key} = {formatted}  # from: {source_display}")


def _show_paths() -> int:
    """Show config file paths."""
    paths = get_config_paths()

    print("Config file paths:")
    print()

    print(f"User config: {USER_CONFIG_PATH}")
    print("  Status: exists" if paths["user"] else "  Status: not found")
    print()

    print(f"Project config search: {', '.join(CONFIG_FILENAMES)}")
    if paths["project"]:
        print(f"  Found: {paths['project']}")
    else:
        print("  Status: not found")

    return 0


def _init_config(user: bool = False) -> int:
    """Create a template config file."""
    if user:
        target = USER_CONFIG_PATH
        target.parent.mkdir(parents=True, exist_ok=True)
    else:
        target = Path.cwd() / CONFIG_FILENAMES[0]  # .ride-tools.toml

    if target.exists():
        print(f"Error: Config file already exists: {target}", file=sys.stderr)
        print("Remove it first or edit manually.", file=sys.stderr)
        return 1

    try:
        target.write_text(generate_template())
        print(f"Created config template: {target}")
        print()
        print("Edit the file to customize your settings.")
        print("Uncomment and modify values as needed.")
        return 0
    except OSError as e:
        print(f"Error writing config file: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
