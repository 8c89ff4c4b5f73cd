from __future__ import annotations

import contextlib
import cProfile
import time
from typing import Generator
from typing import NamedTuple


class Record(NamedTuple):
    event: str
    size: int
    duration: float


class Perf:
    """per-key timings, only recorded when profiling was requested

    the buffer size is recorded with every event since each edit rebuilds
    the whole line index.
    """

    def __init__(self) -> None:
        self._prof: cProfile.Profile | None = None
        self._records: list[Record] = []
        self._event: tuple[str, int] | None = None
        self._time: float | None = None

    def start(self, event: str, size: int) -> None:
        if self._prof:
            assert self._event is None, self._event
            self._event = (event, size)
            self._time = time.monotonic()
            self._prof.enable()

    def end(self) -> None:
        if self._prof:
            assert self._event is not None
            assert self._time is not None
            self._prof.disable()
            duration = time.monotonic() - self._time
            self._records.append(Record(*self._event, duration))
            self._event = self._time = None

    def init_profiling(self) -> None:
        self._prof = cProfile.Profile()
        self.start('startup', 0)

    def save_profiles(self, filename: str) -> None:
        assert self._prof is not None
        self._prof.dump_stats(f'{filename}.pstats')
        with open(filename, 'w', encoding='UTF-8') as f:
            f.write('μs\tbytes\tevent\n')
            for record in self._records:
                us = int(record.duration * 1000 * 1000)
                f.write(f'{us}\t{record.size}\t{record.event}\n')


@contextlib.contextmanager
def perf_log(filename: str | None) -> Generator[Perf, None, None]:
    perf = Perf()
    if filename is None:
        yield perf
    else:
        perf.init_profiling()
        try:
            yield perf
        finally:
            perf.end()
            perf.save_profiles(filename)
