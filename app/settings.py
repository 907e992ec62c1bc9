from constants import *
import copy
import yaml
import os
from limits import parse_many

import logging

# Retrieve main logger
logger = logging.getLogger("main")


# Cache variable
_cached_settings = None
_cached_settings_file = None


def _merge_with_defaults(settings):
    # Deep merge with defaults to ensure new keys are present
    merged_settings = copy.deepcopy(DEFAULT_SETTINGS)
    for section, values in (settings or {}).items():
        if isinstance(values, dict) and section in merged_settings and isinstance(merged_settings[section], dict):
            merged_settings[section].update(values)
        else:
            merged_settings[section] = values
    return merged_settings


def load_settings(force=False, config_file=None):
    global _cached_settings, _cached_settings_file

    config_file = config_file or _cached_settings_file or CONFIG_FILE

    if _cached_settings and not force and config_file == _cached_settings_file:
        return _cached_settings

    if os.path.exists(config_file):
        logger.debug(f"Reading configuration file: {config_file}")
        with open(config_file, "r") as yaml_file:
            settings = yaml.safe_load(yaml_file) or {}
        settings = _merge_with_defaults(settings)

    else:
        settings = copy.deepcopy(DEFAULT_SETTINGS)
        _write_settings(settings, config_file)

    _cached_settings = settings
    _cached_settings_file = config_file
    return settings


def _write_settings(settings, config_file=None):
    config_file = config_file or _cached_settings_file or CONFIG_FILE
    try:
        os.makedirs(os.path.dirname(config_file), exist_ok=True)
        with open(config_file, "w") as yaml_file:
            yaml.dump(settings, yaml_file)
    except OSError as e:
        logger.error(f"Unable to write configuration file {config_file}: {e}")


def verify_settings(section, data):
    success = True
    errors = []
    if section == "generation":
        if "record_solicitations" in data and not isinstance(data["record_solicitations"], bool):
            success = False
            errors.append({"path": "generation/record_solicitations", "error": "Must be a boolean."})
    elif section == "auth":
        if "login_rate_limit" in data:
            limit = data["login_rate_limit"]
            valid = isinstance(limit, str) and bool(limit.strip())
            if valid:
                try:
                    parse_many(limit)
                except ValueError:
                    valid = False
            if not valid:
                success = False
                errors.append({"path": "auth/login_rate_limit", "error": "Must be a rate limit string such as '10 per minute'."})
    return success, errors


def set_generation_settings(record_solicitations=None):
    settings = load_settings()
    if record_solicitations is not None:
        settings["generation"]["record_solicitations"] = record_solicitations
    _write_settings(settings)
    reload_conf()


def set_auth_settings(login_rate_limit=None):
    settings = load_settings()
    if login_rate_limit is not None:
        settings["auth"]["login_rate_limit"] = login_rate_limit.strip()
    _write_settings(settings)
    reload_conf()


def reload_conf():
    """Reload application settings cache"""
    global _cached_settings
    _cached_settings = None
    return load_settings(force=True)
