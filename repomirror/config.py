#!/usr/bin/env python3

import os
import json
import tomllib
from pathlib import Path

import logging
import sys

import yaml

logger = logging.getLogger("repomirror")

# Read once at import; tests pass explicit roots instead of patching these.
REPOS_DIR_ENV = "NOIR_MCP_REPOS_DIR"
CONFIG_ENV = "REPOMIRROR_CONFIG"


def configure_logging(level=None, fmt=None):
    """Configure stderr logging for the repomirror package.

    Level and format default to the ``logging`` section of the loaded config.
    stdout is left alone since the MCP server speaks JSON-RPC over it.
    """
    if level is None or fmt is None:
        log_config = load_config().get("logging", {})
        level = level or log_config.get("level", "INFO")
        fmt = fmt or log_config.get("format", "%(levelname)s: %(message)s")

    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        level=level,
        format=fmt,
        handlers=[
            logging.StreamHandler(sys.stderr)
        ],
        force=True,
    )


def get_mirror_root():
    """Get the base directory that holds every mirrored working tree.

    ``$NOIR_MCP_REPOS_DIR/repos`` when the override is set, otherwise
    ``~/.noir-mcp/repos``.
    """
    base = os.environ.get(REPOS_DIR_ENV) or str(Path.home() / ".noir-mcp")
    return Path(base).expanduser() / "repos"


def get_config_path():
    """Get the path to the configuration file.

    Checks in order:
    1. REPOMIRROR_CONFIG environment variable
    2. ~/.repomirror/config.{json,toml,yaml,yml}
    """
    if CONFIG_ENV in os.environ:
        path = Path(os.environ[CONFIG_ENV])
        if path.exists():
            return path

    config_dir = Path.home() / '.repomirror'
    for filename in ['config.json', 'config.toml', 'config.yaml', 'config.yml']:
        path = config_dir / filename
        if path.exists() and path.stat().st_size > 0:
            return path

    return config_dir / 'config.json'


def load_config():
    """Load configuration from file."""
    config_path = get_config_path()

    config = get_default_config()

    if config_path.exists():
        try:
            if config_path.suffix.lower() in ['.toml']:
                with open(config_path, 'rb') as f:
                    file_config = tomllib.load(f)
            elif config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'r') as f:
                    file_config = yaml.safe_load(f) or {}
            else:
                with open(config_path, 'r') as f:
                    file_config = json.load(f)

            config = merge_configs(config, file_config)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")

    config = apply_env_overrides(config)

    return config


def get_default_config():
    """Get default configuration."""
    return {
        "general": {
            "git_timeout_seconds": 300,
        },
        "search": {
            "matcher": "rg",
            "timeout_seconds": 30,
            "max_output_bytes": 10 * 1024 * 1024,
            "default_max_results": 50,
            "ignore_directories": [".git", "node_modules"],
        },
        "logging": {
            "level": "INFO",
            "format": "%(levelname)s: %(message)s"
        },
    }


def merge_configs(base_config, override_config):
    """
    Recursively merge two configuration dictionaries.

    Args:
        base_config (dict): Base configuration
        override_config (dict): Configuration to merge/override with

    Returns:
        dict: Merged configuration
    """
    merged = base_config.copy()

    for key, value in override_config.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
            merged[key] = merge_configs(merged[key], value)
        else:
            merged[key] = value

    return merged


def apply_env_overrides(config):
    """
    Apply environment variable overrides to configuration.
    Environment variables follow the pattern: REPOMIRROR_SECTION_KEY
    For example: REPOMIRROR_SEARCH_TIMEOUT_SECONDS=60
    """
    env_prefix = "REPOMIRROR_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == CONFIG_ENV:
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        if value.lower() in ('true', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest config key that prefixes the remaining parts wins
            best_match_len = 0
            matched_key = None

            for config_key in current_level.keys():
                config_key_parts = config_key.split('_')
                if key_parts[i:i + len(config_key_parts)] == config_key_parts:
                    if len(config_key_parts) > best_match_len:
                        best_match_len = len(config_key_parts)
                        matched_key = config_key

            if not matched_key:
                break

            if i + best_match_len == len(key_parts):
                current_level[matched_key] = typed_value
                break

            if isinstance(current_level[matched_key], dict):
                current_level = current_level[matched_key]
                i += best_match_len
            else:
                break

    return config
