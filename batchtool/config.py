#!/usr/bin/env python3

import os
import re
import json
import tomllib
import subprocess
from datetime import timedelta
from pathlib import Path

import logging
import sys

import yaml

logger = logging.getLogger("batchtool")

CONFIG_NAME = "batch-tool"
CONFIG_SUFFIXES = ['.json', '.toml', '.yaml', '.yml']

# Mappings whose keys are user data (label names), not setting names
_VERBATIM_SECTIONS = {('repos', 'aliases')}

_DURATION_PART = re.compile(r'(\d+(?:\.\d+)?)(ms|h|m|s|d)')
_DURATION_UNITS = {
    'ms': 'milliseconds',
    's': 'seconds',
    'm': 'minutes',
    'h': 'hours',
    'd': 'days',
}


def configure_logging(level="WARNING", fmt="%(levelname)s: %(message)s"):
    """Attach a stderr handler to the batchtool logger."""
    root = logging.getLogger("batchtool")
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(fmt))
        root.addHandler(handler)
    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))


def get_config_path(explicit=None):
    """Get the path to the configuration file.

    Checks in order:
    1. An explicitly passed path (``--config``)
    2. BATCHTOOL_CONFIG environment variable
    3. batch-tool.{json,toml,yaml,yml} in the working directory
    4. The same names in $XDG_CONFIG_HOME (or ~/.config)
    """
    if explicit:
        return Path(explicit).expanduser()

    if 'BATCHTOOL_CONFIG' in os.environ:
        path = Path(os.environ['BATCHTOOL_CONFIG']).expanduser()
        if path.exists():
            return path

    search_dirs = [Path.cwd()]
    xdg_config_home = os.environ.get('XDG_CONFIG_HOME')
    if xdg_config_home:
        search_dirs.append(Path(xdg_config_home))
    else:
        search_dirs.append(Path.home() / '.config')

    for directory in search_dirs:
        for suffix in CONFIG_SUFFIXES:
            path = directory / f"{CONFIG_NAME}{suffix}"
            if path.exists():
                return path

    return None


def read_config_file(config_path):
    """Read a single JSON, TOML or YAML configuration file into a dict."""
    suffix = config_path.suffix.lower()
    if suffix == '.toml':
        with open(config_path, 'rb') as f:
            return tomllib.load(f)
    if suffix in ('.yaml', '.yml'):
        with open(config_path, 'r') as f:
            return yaml.safe_load(f) or {}
    with open(config_path, 'r') as f:
        return json.load(f)


def load_config(path=None):
    """Load configuration from file, defaults and environment."""
    config = get_default_config()

    config_path = get_config_path(path)
    if config_path is not None and config_path.exists():
        try:
            file_config = normalize_keys(read_config_file(config_path))
            config = merge_configs(config, file_config)
            logger.debug(f"Using config file: {config_path}")
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.error(f"Error loading config from {config_path}: {e}")
    elif path:
        logger.warning(f"Config file {config_path} does not exist, using defaults")

    return apply_env_overrides(config)


def default_git_directory():
    """$GOPATH/src when a Go workspace is configured, otherwise the working directory."""
    gopath = os.environ.get('GOPATH')
    if not gopath:
        try:
            result = subprocess.run(
                ['go', 'env', 'GOPATH'],
                capture_output=True,
                text=True,
                timeout=5
            )
            if result.returncode == 0 and result.stdout.strip():
                gopath = result.stdout.strip()
        except (subprocess.TimeoutExpired, FileNotFoundError):
            pass

    if not gopath:
        return os.getcwd()
    return os.path.join(gopath, 'src')


def get_default_config():
    """Get default configuration."""
    return {
        "git": {
            "user": "git",
            "host": "github.com",
            "provider": "github",
            "project": "",
            "projects": [],
            "directory": default_git_directory(),
            "default_branch": "main",
        },
        "repos": {
            "sort": True,
            "skip_unwanted": True,
            "unwanted_labels": ["deprecated", "poc"],
            "catch_all": "all",
            "aliases": {},
            "cache": {
                "path": "",
                "ttl": "24h",
            },
            "tokens": {
                "label": "~",
                "skip": "!",
                "forced": "+",
            },
        },
        "github": {
            "token": "",
            "api_url": "https://api.github.com",
            "timeout_seconds": 30,
            "rate_limit": {
                "max_retries": 3,
                "max_delay_seconds": 60,
            },
        },
        "logging": {
            "level": "WARNING",
            "format": "%(levelname)s: %(message)s",
        },
    }


def normalize_keys(config, _path=()):
    """
    Rewrite hyphenated setting names to their underscore form.

    Config files may spell settings with hyphens, as
    ``repos.skip-unwanted`` or ``git.default-branch``; both spellings are
    accepted. Alias names under ``repos.aliases`` are left as written.
    """
    normalized = {}
    for key, value in config.items():
        name = key.replace('-', '_') if isinstance(key, str) else key
        if isinstance(value, dict) and _path + (name,) not in _VERBATIM_SECTIONS:
            value = normalize_keys(value, _path + (name,))
        normalized[name] = value
    return normalized


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
    Environment variables follow the pattern: BATCHTOOL_SECTION_SUBSECTION_KEY
    For example: BATCHTOOL_REPOS_SKIP_UNWANTED=false
    """
    env_prefix = "BATCHTOOL_"

    for env_key, value in os.environ.items():
        if not env_key.startswith(env_prefix) or env_key == "BATCHTOOL_CONFIG":
            continue

        key_parts = env_key[len(env_prefix):].lower().split('_')

        if value.lower() in ('true', '1', 'yes', 'on'):
            typed_value = True
        elif value.lower() in ('false', '0', 'no', 'off'):
            typed_value = False
        elif value.isdigit():
            typed_value = int(value)
        else:
            typed_value = value

        current_level = config
        i = 0
        while i < len(key_parts):
            # Longest config key that is a prefix of the remaining parts
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
                if isinstance(current_level[matched_key], list) and isinstance(typed_value, str):
                    typed_value = [v.strip() for v in typed_value.split(',') if v.strip()]
                current_level[matched_key] = typed_value
                break

            if not isinstance(current_level[matched_key], dict):
                break
            current_level = current_level[matched_key]
            i += best_match_len

    return config


def get_setting(config, dotted_key, default=None):
    """Look up a nested setting such as ``repos.cache.ttl``."""
    current = config
    for part in dotted_key.split('.'):
        if not isinstance(current, dict) or part not in current:
            return default
        current = current[part]
    return current


def parse_duration(value):
    """
    Parse a duration into a timedelta.

    Accepts numbers (seconds), timedeltas and strings such as
    "24h", "1h30m", "5s", "250ms" or "7d".
    """
    if isinstance(value, timedelta):
        return value
    if isinstance(value, (int, float)):
        return timedelta(seconds=value)

    text = str(value).strip().lower()
    if text.isdigit():
        return timedelta(seconds=int(text))

    total = timedelta()
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            raise ValueError(f"Invalid duration: {value!r}")
        amount, unit = match.groups()
        total += timedelta(**{_DURATION_UNITS[unit]: float(amount)})
        pos = match.end()

    if pos == 0 or pos != len(text):
        raise ValueError(f"Invalid duration: {value!r}")
    return total
