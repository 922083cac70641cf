# -*- coding: utf-8 -*-
"""
Configuration loader for Log Compass.

Reads ``config/logcompass.ini`` via ``configparser`` and exposes typed
accessors to the rest of the system.  Also provides ``${VAR}``
environment-variable interpolation and the ``BatchOptions`` bundle that
the batch orchestrator and the command-line scripts consume.
"""

import os
import re
import logging
import configparser

log = logging.getLogger(__name__)

CONFIG_FILENAME = "logcompass.ini"

# Default config file search paths, in priority order
CONFIG_SEARCH_PATHS = [
    os.path.join(os.path.dirname(__file__), os.pardir, os.pardir, "config"),
    "/etc/logcompass",
    "/opt/logcompass/config",
]

# Sensor IDs above this value have never been issued; a larger number
# almost always means the ID was scraped from the wrong field.
DEFAULT_SENSOR_ID_CEILING = 150

# Number of leading lines inspected by the content-based fallbacks
DEFAULT_PEEK_LINES = 100
DEFAULT_HEADER_SCAN_LINES = 200

_ENV_TOKEN = re.compile(r"\$\{([^}]+)\}")


class LogCompassConfig(object):
    """Thin wrapper around ``ConfigParser`` with convenience methods
    for typed access and environment-variable substitution."""

    def __init__(self, config_path=None):
        self._parser = configparser.ConfigParser(interpolation=None)
        self._path = config_path
        self._loaded = False

    # ---------------------------------------------------------------
    # Loading
    # ---------------------------------------------------------------

    def load(self, path=None):
        """Read the INI file from *path* or search the default locations."""
        if path is not None:
            self._path = path

        if self._path and os.path.isfile(self._path):
            log.info("Loading config from %s", self._path)
            self._parser.read(self._path)
            self._loaded = True
            return

        for search_dir in CONFIG_SEARCH_PATHS:
            candidate = os.path.join(search_dir, CONFIG_FILENAME)
            if os.path.isfile(candidate):
                log.info("Found config at %s", candidate)
                self._parser.read(candidate)
                self._path = candidate
                self._loaded = True
                return

        log.warning("No configuration file found; using defaults")

    def is_loaded(self):
        return self._loaded

    @property
    def path(self):
        return self._path

    # ---------------------------------------------------------------
    # Typed accessors
    # ---------------------------------------------------------------

    def get(self, section, key, fallback=None):
        try:
            value = self._parser.get(section, key)
        except (configparser.NoSectionError, configparser.NoOptionError):
            return fallback
        value = self._interpolate_env(value)
        if value is None:
            log.debug("Config: [%s] %s names an unset environment variable", section, key)
            return fallback
        return value

    def get_int(self, section, key, fallback=0):
        raw = self.get(section, key)
        if raw is None:
            return fallback
        try:
            return int(raw)
        except (ValueError, TypeError):
            log.warning("Config: bad integer for [%s] %s = %r", section, key, raw)
            return fallback

    def get_float(self, section, key, fallback=0.0):
        raw = self.get(section, key)
        if raw is None:
            return fallback
        try:
            return float(raw)
        except (ValueError, TypeError):
            log.warning("Config: bad float for [%s] %s = %r", section, key, raw)
            return fallback

    def get_bool(self, section, key, fallback=False):
        raw = self.get(section, key)
        if raw is None:
            return fallback
        return raw.strip().lower() in ("1", "true", "yes", "on")

    def get_list(self, section, key, separator=",", fallback=None):
        raw = self.get(section, key)
        if raw is None:
            return fallback if fallback is not None else []
        return [item.strip() for item in raw.split(separator) if item.strip()]

    def sections(self):
        return self._parser.sections()

    def items(self, section):
        try:
            return self._parser.items(section)
        except configparser.NoSectionError:
            return []

    # ---------------------------------------------------------------
    # Environment variable interpolation
    # ---------------------------------------------------------------

    @staticmethod
    def _interpolate_env(value):
        """Replace ``${VAR}`` tokens with the corresponding environment
        variable.  Returns ``None`` when any variable is unset, so the
        option reads as not configured."""
        if "${" not in value:
            return value

        unset = [name for name in _ENV_TOKEN.findall(value) if name not in os.environ]
        if unset:
            return None
        return _ENV_TOKEN.sub(lambda match: os.environ[match.group(1)], value)

    # ---------------------------------------------------------------
    # Debug dump
    # ---------------------------------------------------------------

    def dump(self):
        """Return the loaded configuration as printable lines."""
        if not self._loaded:
            return ["Config not loaded (defaults in effect)"]
        lines = ["--- Log Compass Configuration ---", "Source: %s" % self._path]
        for section in self._parser.sections():
            lines.append("[%s]" % section)
            for key, value in self._parser.items(section):
                lines.append("  %s = %s" % (key, value))
        lines.append("--- End Configuration ---")
        return lines


# -------------------------------------------------------------------
# BatchOptions -- the configuration surface consumed by run_batch()
# -------------------------------------------------------------------

class BatchOptions(object):
    """Options for one batch run.

    Built from the ``[batch]`` and ``[identity]`` sections; keyword
    overrides (typically from the command line) win over the file.
    """

    __slots__ = (
        "source_dirs", "output_dir", "recursive", "clean",
        "keep_original", "verbose", "family", "sensor_id_ceiling",
    )

    def __init__(self, source_dirs=None, output_dir=None, recursive=True,
                 clean=True, keep_original=False, verbose=False,
                 family=None, sensor_id_ceiling=DEFAULT_SENSOR_ID_CEILING):
        self.source_dirs = list(source_dirs or [])
        self.output_dir = output_dir
        self.recursive = recursive
        self.clean = clean
        self.keep_original = keep_original
        self.verbose = verbose
        self.family = family
        self.sensor_id_ceiling = sensor_id_ceiling

    @classmethod
    def from_config(cls, config, **overrides):
        opts = cls(
            source_dirs=config.get_list("batch", "source_dirs"),
            output_dir=config.get("batch", "output_dir"),
            recursive=config.get_bool("batch", "recursive", fallback=True),
            clean=config.get_bool("batch", "clean", fallback=True),
            keep_original=config.get_bool("batch", "keep_original", fallback=False),
            verbose=config.get_bool("batch", "verbose", fallback=False),
            family=config.get("batch", "family"),
            sensor_id_ceiling=config.get_int(
                "identity", "sensor_id_ceiling",
                fallback=DEFAULT_SENSOR_ID_CEILING,
            ),
        )
        for key, value in overrides.items():
            if value is None:
                continue
            if key not in cls.__slots__:
                raise TypeError("unknown batch option: %s" % key)
            setattr(opts, key, value)
        return opts

    def as_dict(self):
        return dict((name, getattr(self, name)) for name in self.__slots__)

    def __repr__(self):
        return "BatchOptions(%s)" % ", ".join(
            "%s=%r" % (name, getattr(self, name)) for name in self.__slots__
        )


# -------------------------------------------------------------------
# Module-level convenience: load once and share
# -------------------------------------------------------------------

_global_config = None


def load_config(path=None):
    """Load (or return the already-loaded) Log Compass configuration."""
    global _global_config
    if _global_config is None:
        _global_config = LogCompassConfig(path)
        _global_config.load(path)
    return _global_config


def reset_config():
    """Forget the cached configuration (used by scripts and tests)."""
    global _global_config
    _global_config = None
