"""Configuration: built-in defaults, optional YAML file, CLI overrides."""

import copy
import logging
import os
from dataclasses import dataclass, field

import yaml

from synthlog.errors import ConfigurationError
from synthlog.formatters import VALID_FORMATS
from synthlog.random_source import VALID_SOURCES

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV = "CONFIG_PATH"

DEFAULT_SCHEME_CHOICES = {"https": 60, "http": 40}
DEFAULT_STATUS_CHOICES = {200: 70, 301: 15, 400: 5, 404: 10, 503: 5}
DEFAULT_CACHE_CHOICES = {"HIT": 60, "MISS": 20, "-": 20}

VALID_BYTES_MODELS = ("exponential", "normal")
VALID_ERROR_POLICIES = ("skip", "zero", "fail")

DEFAULTS = {
    "generator": {
        "site_count": 10_000,
        "bytes_sent_max": 10_000_000,
        "bytes_model": "exponential",
        "bytes_sent_mean": 5000,
        "bytes_sent_std_dev": 2000,
        "bytes_sent_min": 0,
        "duration_secs": 10.0,
        "iteration_count": None,
        "tps": 0,
        "random_source": "fast",
        "seed": None,
        "error_policy": "skip",
    },
    "output": {
        "log_file": "access.log",
        "log_format": "ltsv",
        "console_output": False,
    },
    "choices": {
        "scheme": DEFAULT_SCHEME_CHOICES,
        "status": DEFAULT_STATUS_CHOICES,
        "cache": DEFAULT_CACHE_CHOICES,
    },
}


@dataclass(frozen=True)
class GeneratorConfig:
    site_count: int = 10_000
    bytes_sent_max: int = 10_000_000
    bytes_model: str = "exponential"
    bytes_sent_mean: float = 5000
    bytes_sent_std_dev: float = 2000
    bytes_sent_min: int = 0
    duration_secs: float | None = 10.0
    iteration_count: int | None = None
    tps: int = 0
    random_source: str = "fast"
    seed: int | None = None
    error_policy: str = "skip"
    log_file: str = "access.log"
    log_format: str = "ltsv"
    console_output: bool = False
    scheme_choices: dict = field(default_factory=lambda: DEFAULT_SCHEME_CHOICES.copy())
    status_choices: dict = field(default_factory=lambda: DEFAULT_STATUS_CHOICES.copy())
    cache_choices: dict = field(default_factory=lambda: DEFAULT_CACHE_CHOICES.copy())

    @classmethod
    def from_dict(cls, d: dict) -> "GeneratorConfig":
        gen = d.get("generator", {})
        out = d.get("output", {})
        choices = d.get("choices", {})
        defaults = cls()
        return cls(
            site_count=gen.get("site_count", defaults.site_count),
            bytes_sent_max=gen.get("bytes_sent_max", defaults.bytes_sent_max),
            bytes_model=gen.get("bytes_model", defaults.bytes_model),
            bytes_sent_mean=gen.get("bytes_sent_mean", defaults.bytes_sent_mean),
            bytes_sent_std_dev=gen.get("bytes_sent_std_dev", defaults.bytes_sent_std_dev),
            bytes_sent_min=gen.get("bytes_sent_min", defaults.bytes_sent_min),
            duration_secs=gen.get("duration_secs", defaults.duration_secs),
            iteration_count=gen.get("iteration_count", defaults.iteration_count),
            tps=gen.get("tps", defaults.tps),
            random_source=gen.get("random_source", defaults.random_source),
            seed=gen.get("seed", defaults.seed),
            error_policy=gen.get("error_policy", defaults.error_policy),
            log_file=out.get("log_file", defaults.log_file),
            log_format=out.get("log_format", defaults.log_format),
            console_output=out.get("console_output", defaults.console_output),
            scheme_choices=dict(choices.get("scheme", defaults.scheme_choices)),
            status_choices=dict(choices.get("status", defaults.status_choices)),
            cache_choices=dict(choices.get("cache", defaults.cache_choices)),
        )

    def validate(self) -> "GeneratorConfig":
        """Raise ConfigurationError for values no run could start with."""
        for name in ("site_count", "bytes_sent_max", "bytes_sent_min", "tps"):
            _require_int(name, getattr(self, name))
        for name in ("iteration_count", "seed"):
            if getattr(self, name) is not None:
                _require_int(name, getattr(self, name))
        for name in ("bytes_sent_mean", "bytes_sent_std_dev"):
            _require_number(name, getattr(self, name))
        if self.duration_secs is not None:
            _require_number("duration_secs", self.duration_secs)
        if not isinstance(self.console_output, bool):
            raise ConfigurationError(f"console_output must be true or false, got {self.console_output!r}")
        if self.site_count <= 0:
            raise ConfigurationError(f"site_count must be positive, got {self.site_count}")
        if self.bytes_sent_max <= 0:
            raise ConfigurationError(f"bytes_sent_max must be positive, got {self.bytes_sent_max}")
        if self.bytes_model not in VALID_BYTES_MODELS:
            raise ConfigurationError(
                f"bytes_model must be one of {VALID_BYTES_MODELS}, got {self.bytes_model!r}"
            )
        if self.bytes_model == "normal":
            if self.bytes_sent_std_dev < 0:
                raise ConfigurationError("bytes_sent_std_dev must not be negative")
            if self.bytes_sent_min > self.bytes_sent_max:
                raise ConfigurationError(
                    f"bytes_sent_min {self.bytes_sent_min} exceeds bytes_sent_max {self.bytes_sent_max}"
                )
        if self.iteration_count is None and self.duration_secs is None:
            raise ConfigurationError("either iteration_count or duration_secs must be set")
        if self.iteration_count is not None and self.iteration_count < 0:
            raise ConfigurationError("iteration_count must not be negative")
        if self.duration_secs is not None and self.duration_secs < 0:
            raise ConfigurationError("duration_secs must not be negative")
        if self.tps < 0:
            raise ConfigurationError("tps must not be negative")
        if self.random_source not in VALID_SOURCES:
            raise ConfigurationError(
                f"random_source must be one of {VALID_SOURCES}, got {self.random_source!r}"
            )
        if self.error_policy not in VALID_ERROR_POLICIES:
            raise ConfigurationError(
                f"error_policy must be one of {VALID_ERROR_POLICIES}, got {self.error_policy!r}"
            )
        if self.log_format not in VALID_FORMATS:
            raise ConfigurationError(
                f"log_format must be one of {VALID_FORMATS}, got {self.log_format!r}"
            )
        return self


def _require_int(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}")


def _require_number(name: str, value) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigurationError(f"{name} must be a number, got {value!r}")


def _merge_sections(base: dict, override: dict) -> dict:
    """Merge *override* into *base* one section deep.

    Keys inside a section replace the default wholesale, so a choice table
    given in YAML replaces the built-in table rather than extending it.
    """
    result = copy.deepcopy(base)
    for section, values in override.items():
        if section in result and isinstance(result[section], dict) and isinstance(values, dict):
            result[section].update(copy.deepcopy(values))
        else:
            result[section] = copy.deepcopy(values)
    return result


def load_yaml_config(path: str | None) -> dict:
    """Load a YAML config file. Returns an empty dict if there is nothing to load."""
    path = path or os.environ.get(CONFIG_PATH_ENV)
    if not path:
        return {}
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file %s not found, using defaults", path)
        return {}
    except yaml.YAMLError as e:
        raise ConfigurationError(f"invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"config file {path} must contain a mapping")
    logger.info("Loaded YAML config from %s", path)
    return data


def load_config(path: str | None = None, overrides: dict | None = None) -> GeneratorConfig:
    """Build a validated GeneratorConfig from defaults, YAML and overrides.

    ``overrides`` uses the same section layout as the YAML file.
    """
    merged = _merge_sections(DEFAULTS, load_yaml_config(path))
    if overrides:
        merged = _merge_sections(merged, overrides)
    return GeneratorConfig.from_dict(merged).validate()
