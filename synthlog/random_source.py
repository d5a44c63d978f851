"""Uniform integer sources backing every draw the generator makes.

Two interchangeable implementations share the ``next(n)`` contract:

* :class:`FastRandomSource`: Mersenne Twister seeded once from the wall
  clock (or an explicit seed for reproducible runs).
* :class:`SecureRandomSource`: OS entropy pool via :mod:`secrets`.

Both return values in ``[0, n)`` without modulo bias: ``randrange`` and
``randbelow`` reject out-of-range ``getrandbits`` results instead of
reducing them.
"""

import logging
import random
import secrets
import threading
import time
from typing import Protocol

from synthlog.errors import ConfigurationError, EntropyUnavailable, InvalidRange

logger = logging.getLogger(__name__)

VALID_SOURCES = ("fast", "secure")


class RandomSource(Protocol):
    def next(self, n: int) -> int:
        ...


def _check_range(n) -> None:
    if isinstance(n, bool) or not isinstance(n, int) or n <= 0:
        raise InvalidRange(f"draw range must be a positive integer, got {n!r}")


class FastRandomSource:
    """Non-cryptographic source; single owner, no locking."""

    def __init__(self, seed: int | None = None):
        if seed is None:
            seed = time.time_ns()
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def next(self, n: int) -> int:
        _check_range(n)
        return self._rng.randrange(n)


class SecureRandomSource:
    """Cryptographically secure source, safe to share between choosers.

    Calls into the OS entropy primitive are serialised with a lock. Failures
    of that primitive surface as :class:`EntropyUnavailable`.
    """

    def __init__(self, randbelow=None):
        self._randbelow = randbelow or secrets.randbelow
        self._lock = threading.Lock()

    def next(self, n: int) -> int:
        _check_range(n)
        with self._lock:
            try:
                return self._randbelow(n)
            except (OSError, NotImplementedError) as e:
                raise EntropyUnavailable(f"entropy source failed: {e}") from e


def make_random_source(kind: str, seed: int | None = None) -> RandomSource:
    """Build the source named by *kind* (``"fast"`` or ``"secure"``)."""
    if kind == "fast":
        source = FastRandomSource(seed)
        logger.info("Using fast random source (seed=%d)", source.seed)
        return source
    if kind == "secure":
        if seed is not None:
            logger.warning("Seed %d ignored by the secure random source", seed)
        logger.info("Using secure random source")
        return SecureRandomSource()
    raise ConfigurationError(f"unknown random source {kind!r}, expected one of {VALID_SOURCES}")
