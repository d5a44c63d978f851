import pytest

from synthlog.errors import EntropyUnavailable, SinkError
from synthlog.random_source import FastRandomSource


class ScriptedSource:
    """Returns pre-set values in order and records every requested range."""

    def __init__(self, values):
        self._values = list(values)
        self.requests = []

    def next(self, n):
        self.requests.append(n)
        return self._values.pop(0)


class CountingSource:
    def __init__(self, seed=1):
        self._inner = FastRandomSource(seed)
        self.calls = 0

    def next(self, n):
        self.calls += 1
        return self._inner.next(n)


class FlakySource:
    """Seeded source whose listed call numbers (1-based) raise EntropyUnavailable."""

    def __init__(self, fail_on, seed=1):
        self._inner = FastRandomSource(seed)
        self._fail_on = set(fail_on)
        self.calls = 0

    def next(self, n):
        self.calls += 1
        value = self._inner.next(n)
        if self.calls in self._fail_on:
            raise EntropyUnavailable("entropy pool exhausted")
        return value


class ListSink:
    def __init__(self, on_emit=None):
        self.records = []
        self._on_emit = on_emit

    def emit(self, record):
        if self._on_emit:
            self._on_emit()
        self.records.append(record)


class FailingSink:
    """Raises SinkError on the listed emit numbers (1-based)."""

    def __init__(self, fail_on):
        self.records = []
        self._fail_on = set(fail_on)
        self.calls = 0

    def emit(self, record):
        self.calls += 1
        if self.calls in self._fail_on:
            raise SinkError("disk full")
        self.records.append(record)


class FakeClock:
    def __init__(self, start=0.0):
        self.now = start
        self.sleeps = []

    def time(self):
        return self.now

    def sleep(self, secs):
        self.sleeps.append(secs)
        self.now += secs

    def advance(self, secs=1.0):
        self.now += secs


@pytest.fixture
def scripted_source():
    return ScriptedSource


@pytest.fixture
def counting_source():
    return CountingSource()


@pytest.fixture
def flaky_source():
    return FlakySource


@pytest.fixture
def list_sink():
    return ListSink()


@pytest.fixture
def list_sink_factory():
    return ListSink


@pytest.fixture
def failing_sink():
    return FailingSink


@pytest.fixture
def clock():
    return FakeClock()
