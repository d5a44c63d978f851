"""Distribution transforms that turn uniform draws into field values."""

import math

from synthlog.random_source import RandomSource

# Resolution of the uniform draw fed into the exponential-decay curve.
BYTES_DRAW_MAX = 1_000_000
# x runs over [0, BYTES_DECAY_SCALE) as the draw runs over [0, BYTES_DRAW_MAX).
BYTES_DECAY_SCALE = 10

_UNIT_BITS = 53
_UNIT_MAX = 1 << _UNIT_BITS


def host_index(source: RandomSource, site_count: int) -> int:
    return source.next(site_count)


def format_host(index: int) -> str:
    return f"{index}.example.jp"


def rand_host(source: RandomSource, site_count: int) -> str:
    """Pick one of *site_count* hosts uniformly."""
    return format_host(host_index(source, site_count))


def bytes_sent_from_draw(v: int, bytes_sent_max: int) -> int:
    """Map a draw ``v`` in ``[0, BYTES_DRAW_MAX)`` onto ``exp(-x) / e``.

    ``v = 0`` gives ``floor(bytes_sent_max / e)``; the value decays towards
    zero as ``v`` approaches ``BYTES_DRAW_MAX``.
    """
    x = v / BYTES_DRAW_MAX * BYTES_DECAY_SCALE
    y = math.exp(-x) / math.e
    return math.floor(bytes_sent_max * y)


def rand_bytes_sent(source: RandomSource, bytes_sent_max: int) -> int:
    return bytes_sent_from_draw(source.next(BYTES_DRAW_MAX), bytes_sent_max)


def _unit_open_closed(source: RandomSource) -> float:
    """Uniform float in (0, 1]."""
    return (source.next(_UNIT_MAX) + 1) / _UNIT_MAX


def _unit_closed_open(source: RandomSource) -> float:
    """Uniform float in [0, 1)."""
    return source.next(_UNIT_MAX) / _UNIT_MAX


def gauss(source: RandomSource, mean: float, std_dev: float) -> float:
    """Normal variate by the Box-Muller transform over two uniform draws."""
    u1 = _unit_open_closed(source)
    u2 = _unit_closed_open(source)
    z = math.sqrt(-2.0 * math.log(u1)) * math.cos(2.0 * math.pi * u2)
    return mean + std_dev * z


def clamp(value: int, lo: int, hi: int) -> int:
    return max(lo, min(hi, value))


def rand_bytes_sent_normal(source: RandomSource, mean: float, std_dev: float,
                           lo: int, hi: int) -> int:
    """Normal bytes-sent truncated to an int, then clamped into ``[lo, hi]``."""
    return clamp(int(gauss(source, mean, std_dev)), lo, hi)
