#!/usr/bin/env python3
import math, os
from pathlib import Path
from urllib.parse import urlsplit, urlunsplit
import yaml

CONFIG_FILE = Path(__file__).with_name("mongo_bootstrap.yml")
DEFAULT_URI = "mongodb://localhost:27017/admin?directConnection=true"

PROFILES = {
    # first-boot hook inside the database container
    "local": {
        "host": "localhost:27017",
        "await_primary": True,
        "provision_admin": True,
    },
    # initiate from a sibling container, fire and forget
    "remote": {
        "host": "mongodb:27017",
        "await_primary": False,
        "provision_admin": False,
    },
}

BASE_DEFAULTS = {
    "rs_name": "rs0",
    "uri": DEFAULT_URI,
    "username": None,
    "password": None,
    "max_attempts": 60,
    "interval": 1.0,
    "server_selection_timeout_ms": 5000,
}

# env var -> settings key
ENV_KEYS = {
    "MONGO_REPLICA_SET_NAME": "rs_name",
    "MONGO_INITDB_ROOT_USERNAME": "username",
    "MONGO_INITDB_ROOT_PASSWORD": "password",
    "MONGO_BOOTSTRAP_URI": "uri",
    "MONGO_BOOTSTRAP_MAX_ATTEMPTS": "max_attempts",
    "MONGO_BOOTSTRAP_INTERVAL": "interval",
}

class ConfigError(ValueError):
    pass

def load_config(path: Path):
    path = Path(path)
    if not path.exists():
        return {}
    with path.open() as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping at the top level, got {type(data).__name__}")
    return data

def _file_settings(cfg, profile):
    merged = {k: v for k, v in cfg.items() if k not in ("profile", "profiles")}
    profiles = cfg.get("profiles") or {}
    if not isinstance(profiles, dict):
        raise ConfigError("profiles must be a mapping")
    per_profile = profiles.get(profile) or {}
    if not isinstance(per_profile, dict):
        raise ConfigError(f"profiles.{profile} must be a mapping")
    merged.update(per_profile)
    return merged

def _env_settings(environ, profile):
    found = {}
    for var, key in ENV_KEYS.items():
        value = environ.get(var)
        if value:
            found[key] = value
    # the advertised host only comes from the environment for the remote variant
    if profile == "remote" and environ.get("MONGO_REPLICA_SET_HOST"):
        found["host"] = environ["MONGO_REPLICA_SET_HOST"]
    return found

def _validate(settings):
    for key in ("rs_name", "host", "uri"):
        if not settings.get(key) or not str(settings[key]).strip():
            raise ConfigError(f"'{key}' must not be empty")
        settings[key] = str(settings[key]).strip()
    try:
        settings["max_attempts"] = int(settings["max_attempts"])
    except (TypeError, ValueError):
        raise ConfigError(f"max_attempts must be an integer, got {settings['max_attempts']!r}")
    if settings["max_attempts"] < 0:
        raise ConfigError("max_attempts must not be negative")
    try:
        settings["interval"] = float(settings["interval"])
    except (TypeError, ValueError):
        raise ConfigError(f"interval must be a number of seconds, got {settings['interval']!r}")
    # nan/inf would break the bounded polling wait
    if not math.isfinite(settings["interval"]) or settings["interval"] < 0:
        raise ConfigError(f"interval must be a finite, non-negative number of seconds, got {settings['interval']!r}")
    try:
        settings["server_selection_timeout_ms"] = int(settings["server_selection_timeout_ms"])
    except (TypeError, ValueError):
        raise ConfigError("server_selection_timeout_ms must be an integer")
    for key in ("await_primary", "provision_admin"):
        if not isinstance(settings[key], bool):
            raise ConfigError(f"{key} must be true or false, got {settings[key]!r}")
    return settings

def load_settings(environ=None, profile=None, config_path=None, overrides=None):
    """Build the settings dict the Initializer runs with.

    Precedence, lowest first: profile defaults, the YAML file (top-level keys,
    then ``profiles.<name>``), environment variables, ``overrides``.
    """
    environ = os.environ if environ is None else environ
    if config_path is None:
        config_path = environ.get("MONGO_BOOTSTRAP_CONFIG") or None
    if config_path is None:
        # only the default file next to the scripts is optional
        config_path = CONFIG_FILE
    elif not Path(config_path).exists():
        raise ConfigError(f"Config file not found: {config_path}")
    cfg = load_config(config_path)

    profile = profile or environ.get("MONGO_BOOTSTRAP_PROFILE") or cfg.get("profile") or "local"
    if profile not in PROFILES:
        raise ConfigError(f"Unknown profile '{profile}'. Choose one of: {', '.join(sorted(PROFILES))}")

    settings = dict(BASE_DEFAULTS)
    settings.update(PROFILES[profile])
    settings.update(_file_settings(cfg, profile))
    settings.update(_env_settings(environ, profile))
    settings.update({k: v for k, v in (overrides or {}).items() if v is not None})
    settings["profile"] = profile
    return _validate(settings)

def mask_uri(uri):
    parts = urlsplit(uri)
    if parts.password is None:
        return uri
    netloc = parts.netloc.replace(f":{parts.password}@", ":****@", 1)
    return urlunsplit(parts._replace(netloc=netloc))
