"""Tests for the host and bytes-sent transforms."""

import math

import pytest

from synthlog.errors import EntropyUnavailable, InvalidRange
from synthlog.random_source import FastRandomSource
from synthlog.transforms import (
    BYTES_DRAW_MAX,
    bytes_sent_from_draw,
    clamp,
    gauss,
    host_index,
    rand_bytes_sent,
    rand_bytes_sent_normal,
    rand_host,
)

UNIT_MAX = 1 << 53


class TestHost:
    def test_format(self, scripted_source):
        assert rand_host(scripted_source([7]), 10) == "7.example.jp"

    def test_draws_over_site_count(self, scripted_source):
        source = scripted_source([0])
        host_index(source, 10_000)
        assert source.requests == [10_000]

    def test_indices_in_range(self):
        source = FastRandomSource(seed=11)
        for _ in range(1000):
            host = rand_host(source, 10)
            index = int(host.split(".", 1)[0])
            assert 0 <= index < 10
            assert host.endswith(".example.jp")

    def test_zero_sites(self):
        with pytest.raises(InvalidRange):
            rand_host(FastRandomSource(seed=1), 0)


class TestExponentialBytes:
    def test_zero_draw_gives_max_over_e(self):
        assert bytes_sent_from_draw(0, 1000) == math.floor(1000 / math.e) == 367
        assert bytes_sent_from_draw(0, 10_000_000) == math.floor(10_000_000 / math.e)

    def test_last_draw_approaches_zero(self):
        assert bytes_sent_from_draw(BYTES_DRAW_MAX - 1, 1000) == 0
        # exp(-10) / e of ten million is about 167
        assert bytes_sent_from_draw(BYTES_DRAW_MAX - 1, 10_000_000) <= 168

    def test_exact_shape(self):
        for v in (1, 12_345, 500_000, 999_999):
            x = v / 1_000_000 * 10
            assert bytes_sent_from_draw(v, 10_000_000) == math.floor(10_000_000 * (math.exp(-x) / math.e))

    def test_monotonically_non_increasing(self):
        values = [bytes_sent_from_draw(v, 10_000_000) for v in range(0, BYTES_DRAW_MAX, 997)]
        assert all(a >= b for a, b in zip(values, values[1:]))

    def test_draw_resolution(self, scripted_source):
        source = scripted_source([0])
        assert rand_bytes_sent(source, 1000) == 367
        assert source.requests == [BYTES_DRAW_MAX]

    def test_values_in_bounds(self):
        source = FastRandomSource(seed=5)
        for _ in range(2000):
            assert 0 <= rand_bytes_sent(source, 1000) <= 1000

    def test_source_error_propagates(self):
        class DeadSource:
            def next(self, n):
                raise EntropyUnavailable("no entropy")

        with pytest.raises(EntropyUnavailable):
            rand_bytes_sent(DeadSource(), 1000)


class TestGauss:
    def test_unit_first_draw_returns_mean(self, scripted_source):
        # u1 == 1.0 makes the Box-Muller radius zero
        assert gauss(scripted_source([UNIT_MAX - 1, 12345]), 250.0, 40.0) == 250.0

    def test_uses_two_draws(self, scripted_source):
        source = scripted_source([UNIT_MAX - 1, 0])
        gauss(source, 0.0, 1.0)
        assert source.requests == [UNIT_MAX, UNIT_MAX]

    def test_sample_moments(self):
        source = FastRandomSource(seed=2024)
        n = 20_000
        samples = [gauss(source, 100.0, 15.0) for _ in range(n)]
        mean = sum(samples) / n
        var = sum((s - mean) ** 2 for s in samples) / (n - 1)
        assert mean == pytest.approx(100.0, abs=0.5)
        assert math.sqrt(var) == pytest.approx(15.0, rel=0.03)


class TestClampedNormalBytes:
    def test_extreme_upper_tail_clamped(self, scripted_source):
        # u1 = 2**-53, u2 = 0 gives z of about +8.57
        source = scripted_source([0, 0])
        assert rand_bytes_sent_normal(source, 500, 1000, 0, 1000) == 1000

    def test_extreme_lower_tail_clamped(self, scripted_source):
        # u2 = 0.5 flips the cosine to -1
        source = scripted_source([0, UNIT_MAX // 2])
        assert rand_bytes_sent_normal(source, 500, 1000, 0, 1000) == 0

    def test_zero_std_dev_returns_truncated_mean(self):
        source = FastRandomSource(seed=1)
        assert rand_bytes_sent_normal(source, 42.9, 0, 0, 100) == 42

    def test_always_within_bounds(self):
        source = FastRandomSource(seed=77)
        for _ in range(5000):
            value = rand_bytes_sent_normal(source, 500, 10_000, 100, 900)
            assert 100 <= value <= 900
            assert isinstance(value, int)

    def test_degenerate_bounds(self):
        source = FastRandomSource(seed=3)
        assert {rand_bytes_sent_normal(source, 0, 50, 10, 10) for _ in range(100)} == {10}

    @pytest.mark.parametrize("value, expected", [(-5, 0), (0, 0), (5, 5), (10, 10), (11, 10)])
    def test_clamp(self, value, expected):
        assert clamp(value, 0, 10) == expected
