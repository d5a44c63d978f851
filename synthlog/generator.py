"""Generation loop: draws one access record per iteration and hands it to a sink."""

import functools
import logging
import time
from dataclasses import dataclass
from enum import Enum

from synthlog.config import GeneratorConfig
from synthlog.errors import ConfigurationError, DrawError, GeneratorError, SinkError
from synthlog.models import ZERO_VALUES, AccessRecord
from synthlog.random_source import RandomSource
from synthlog.sampler import Chooser
from synthlog.throttle import Throttle
from synthlog.transforms import rand_bytes_sent, rand_bytes_sent_normal, rand_host

logger = logging.getLogger(__name__)


class RunState(Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    ABORTED = "aborted"


class ErrorPolicy(Enum):
    """What an iteration does when a draw or the sink fails.

    SKIP: log it, count the iteration, emit nothing.
    ZERO: log it, emit the record with the failed fields zeroed.
    FAIL: propagate the error and abort the run.
    """

    SKIP = "skip"
    ZERO = "zero"
    FAIL = "fail"


@dataclass
class RunResult:
    state: RunState = RunState.IDLE
    iterations: int = 0
    records_emitted: int = 0
    records_skipped: int = 0
    draw_errors: int = 0
    sink_errors: int = 0
    elapsed_secs: float = 0.0

    @property
    def actual_rate(self) -> float:
        return self.iterations / max(self.elapsed_secs, 0.001)


class RecordSynthesizer:
    """Holds the choosers and transforms that make up one access record."""

    def __init__(self, source: RandomSource, scheme: Chooser, status: Chooser,
                 cache_status: Chooser, site_count: int, bytes_sent):
        self._draws = (
            ("scheme", scheme.choose),
            ("status", status.choose),
            ("cache_status", cache_status.choose),
            ("host", functools.partial(rand_host, source, site_count)),
            ("bytes_sent", bytes_sent),
        )

    @classmethod
    def from_config(cls, config: GeneratorConfig, source: RandomSource) -> "RecordSynthesizer":
        """Build every chooser up front; malformed choice tables raise here."""
        if config.bytes_model == "normal":
            bytes_sent = functools.partial(
                rand_bytes_sent_normal, source,
                config.bytes_sent_mean, config.bytes_sent_std_dev,
                config.bytes_sent_min, config.bytes_sent_max,
            )
        else:
            bytes_sent = functools.partial(rand_bytes_sent, source, config.bytes_sent_max)
        return cls(
            source,
            scheme=Chooser.from_weights(source, config.scheme_choices),
            status=Chooser.from_weights(source, config.status_choices),
            cache_status=Chooser.from_weights(source, config.cache_choices),
            site_count=config.site_count,
            bytes_sent=bytes_sent,
        )

    @property
    def draws(self) -> tuple:
        """(field name, draw function) pairs in the fixed draw order."""
        return self._draws

    def synthesize(self, on_error=None) -> tuple[AccessRecord, list[str]]:
        """Draw every field in order; return the record and the names of failed fields.

        Without ``on_error`` a DrawError propagates. With it, ``on_error(name, exc)``
        is called and the field takes its zero value; it may re-raise.
        """
        values = {}
        failed = []
        for name, draw in self._draws:
            try:
                values[name] = draw()
            except DrawError as e:
                if on_error is None:
                    raise
                on_error(name, e)
                failed.append(name)
                values[name] = ZERO_VALUES[name]
        return AccessRecord(**values), failed


class GenerationLoop:
    """Runs the synthesizer until the iteration count or deadline is reached.

    The stopping bound is checked at the top of each iteration. With both an
    iteration count and a duration configured, whichever is hit first wins.
    """

    def __init__(self, config: GeneratorConfig, sink, source: RandomSource,
                 time_func=None, sleep_func=None):
        self._config = config
        self._sink = sink
        self._source = source
        self._policy = ErrorPolicy.SKIP
        self._time_func = time_func or time.monotonic
        self._throttle = Throttle(config.tps, time_func=self._time_func, sleep_func=sleep_func)
        self._result = RunResult()

    @property
    def state(self) -> RunState:
        return self._result.state

    @property
    def result(self) -> RunResult:
        return self._result

    def run(self) -> RunResult:
        if self.state is not RunState.IDLE:
            raise RuntimeError(f"generation loop already {self.state.value}")

        try:
            self._config.validate()
            self._policy = ErrorPolicy(self._config.error_policy)
            synthesizer = RecordSynthesizer.from_config(self._config, self._source)
        except ConfigurationError as e:
            self._result.state = RunState.ABORTED
            logger.error("Generator setup failed, run aborted: %s", e)
            raise

        self._result.state = RunState.RUNNING
        start = self._time_func()
        limit = self._config.iteration_count
        due = None
        if self._config.duration_secs is not None:
            due = start + self._config.duration_secs
        logger.info(
            "Generation started (iterations=%s, duration=%ss, tps=%d, error_policy=%s)",
            limit, self._config.duration_secs, self._config.tps, self._policy.value,
        )

        self._throttle.reset()
        try:
            while not self._bound_reached(limit, due):
                self._iterate(synthesizer)
                self._result.iterations += 1
                if not self._bound_reached(limit, due):
                    self._throttle.wait()
        except GeneratorError as e:
            self._result.state = RunState.ABORTED
            self._result.elapsed_secs = self._time_func() - start
            logger.error("Run aborted after %d iterations: %s", self._result.iterations, e)
            raise

        self._result.elapsed_secs = self._time_func() - start
        self._result.state = RunState.COMPLETED
        logger.info(
            "Generation completed: %d iterations, %d emitted, %d skipped, "
            "%d draw errors, %d sink errors in %.3fs",
            self._result.iterations, self._result.records_emitted,
            self._result.records_skipped, self._result.draw_errors,
            self._result.sink_errors, self._result.elapsed_secs,
        )
        return self._result

    def _bound_reached(self, limit, due) -> bool:
        if limit is not None and self._result.iterations >= limit:
            return True
        return due is not None and self._time_func() >= due

    def _on_draw_error(self, name: str, error: DrawError) -> None:
        self._result.draw_errors += 1
        logger.warning("Failed to draw %s: %s", name, error)
        if self._policy is ErrorPolicy.FAIL:
            raise error

    def _iterate(self, synthesizer: RecordSynthesizer) -> None:
        record, failed = synthesizer.synthesize(on_error=self._on_draw_error)
        if failed and self._policy is ErrorPolicy.SKIP:
            self._result.records_skipped += 1
            return

        try:
            self._sink.emit(record)
        except SinkError as e:
            self._result.sink_errors += 1
            logger.warning("Failed to emit record: %s", e)
            if self._policy is ErrorPolicy.FAIL:
                raise
            return
        self._result.records_emitted += 1
