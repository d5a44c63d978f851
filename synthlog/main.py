#!/usr/bin/env python3
"""synthlog — synthetic access-log generator entry point."""

import argparse
import logging
import sys

from synthlog.config import VALID_BYTES_MODELS, VALID_ERROR_POLICIES, load_config
from synthlog.errors import ConfigurationError, GeneratorError
from synthlog.formatters import VALID_FORMATS
from synthlog.generator import GenerationLoop
from synthlog.output import LogWriter
from synthlog.random_source import VALID_SOURCES, make_random_source

logger = logging.getLogger(__name__)

# CLI flag -> (config section, key)
_OVERRIDES = {
    "bytes_sent_max": ("generator", "bytes_sent_max"),
    "site_count": ("generator", "site_count"),
    "tps": ("generator", "tps"),
    "duration": ("generator", "duration_secs"),
    "count": ("generator", "iteration_count"),
    "bytes_model": ("generator", "bytes_model"),
    "bytes_sent_mean": ("generator", "bytes_sent_mean"),
    "bytes_sent_std_dev": ("generator", "bytes_sent_std_dev"),
    "bytes_sent_min": ("generator", "bytes_sent_min"),
    "random_source": ("generator", "random_source"),
    "seed": ("generator", "seed"),
    "error_policy": ("generator", "error_policy"),
    "log_file": ("output", "log_file"),
    "format": ("output", "log_format"),
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="synthlog",
        description="Generate synthetic access-log records at controlled distributions.",
    )
    parser.add_argument("--config", default=None, help="YAML config file (or $CONFIG_PATH)")
    parser.add_argument("--bytes-sent-max", type=int, default=None, help="Maximum bytes_sent")
    parser.add_argument("--site-count", type=int, default=None, help="Number of distinct hosts")
    parser.add_argument("--log-file", default=None, help="Output log file path")
    parser.add_argument("--tps", type=int, default=None, help="Records per second (0=unlimited)")
    parser.add_argument("--duration", type=float, default=None, help="Run duration in seconds")
    parser.add_argument("--count", type=int, default=None, help="Number of iterations to run")
    parser.add_argument("--bytes-model", choices=VALID_BYTES_MODELS, default=None,
                        help="bytes_sent distribution")
    parser.add_argument("--bytes-sent-mean", type=float, default=None,
                        help="Mean for the normal bytes_sent model")
    parser.add_argument("--bytes-sent-std-dev", type=float, default=None,
                        help="Standard deviation for the normal bytes_sent model")
    parser.add_argument("--bytes-sent-min", type=int, default=None,
                        help="Lower clamp for the normal bytes_sent model")
    parser.add_argument("--random-source", choices=VALID_SOURCES, default=None,
                        help="Random source implementation")
    parser.add_argument("--seed", type=int, default=None, help="Seed for the fast random source")
    parser.add_argument("--error-policy", choices=VALID_ERROR_POLICIES, default=None,
                        help="Per-iteration error handling")
    parser.add_argument("--format", choices=VALID_FORMATS, default=None, help="Output line format")
    parser.add_argument("--console", action="store_true", help="Also echo records to stdout")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _collect_overrides(args) -> dict:
    overrides: dict = {}
    for attr, (section, key) in _OVERRIDES.items():
        value = getattr(args, attr)
        if value is not None:
            overrides.setdefault(section, {})[key] = value
    # An explicit count without a duration runs to the count.
    if args.count is not None and args.duration is None:
        overrides["generator"]["duration_secs"] = None
    if args.console:
        overrides.setdefault("output", {})["console_output"] = True
    return overrides


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    # Internal logging to stderr (separate from generated log output)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s [GENERATOR] %(levelname)s %(message)s",
        stream=sys.stderr,
    )

    try:
        config = load_config(args.config, _collect_overrides(args))
        source = make_random_source(config.random_source, config.seed)
        writer = LogWriter(config.log_file, config.log_format, config.console_output)
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    except GeneratorError as e:
        logger.error("Failed to start: %s", e)
        return 1

    with writer:
        loop = GenerationLoop(config, writer, source)
        try:
            result = loop.run()
        except ConfigurationError as e:
            logger.error("Invalid configuration: %s", e)
            return 2
        except GeneratorError as e:
            logger.error("Run aborted: %s", e)
            print(f"lineCount={loop.result.iterations}")
            return 1

    print(f"lineCount={result.iterations}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
