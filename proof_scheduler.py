"""
Bounded worker pool that runs every (proof, iteration) work unit exactly once.

Two constraints hold at all times:
  - at most `parallel_jobs` units execute concurrently;
  - two iterations of the same proof never execute concurrently.

Work units are generated up front in proof-major order. A free worker takes the first
pending unit whose proof is not locked; if every pending unit belongs to a locked proof
it sleeps on the lock table's condition until some proof is released. A slow proof thus
never blocks workers from making progress on other proofs.
"""

import sys
import threading
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Iterable, List, Optional

from proof_errors import LaunchError
from proof_locks import ProofLockTable
from timing_sink import TimingRecord, TimingSink

_print_lock = threading.Lock()


def log(msg: str, err: bool = False) -> None:
    with _print_lock:
        print(msg, file=sys.stderr if err else sys.stdout, flush=True)


@dataclass(frozen=True)
class WorkUnit:
    proof: str
    iteration: int


def generate_work_units(proofs: Iterable[str], iterations: int) -> List[WorkUnit]:
    return [WorkUnit(p, i) for p in proofs for i in range(iterations)]


class ProofScheduler:
    def __init__(
        self,
        proofs: Iterable[str],
        iterations: int,
        parallel_jobs: int,
        invoke: Callable[[str, int], float],
        sink: TimingSink,
    ):
        if iterations < 1:
            raise ValueError(f"iterations must be >= 1, got {iterations}")
        if parallel_jobs < 1:
            raise ValueError(f"parallel_jobs must be >= 1, got {parallel_jobs}")

        self.proofs = list(proofs)
        self.iterations = iterations
        self.parallel_jobs = parallel_jobs
        self.invoke = invoke
        self.sink = sink

        self._cond = threading.Condition()
        self.locks = ProofLockTable(self.proofs, condition=self._cond)
        self._pending: Deque[WorkUnit] = deque(generate_work_units(self.proofs, iterations))
        self.total = len(self._pending)
        self._records: List[TimingRecord] = []
        self._fatal: Optional[BaseException] = None

    def _next_unit(self) -> Optional[WorkUnit]:
        with self._cond:
            while True:
                if self._fatal is not None or not self._pending:
                    return None
                for unit in self._pending:
                    if self.locks.try_acquire(unit.proof):
                        self._pending.remove(unit)
                        return unit
                # every pending proof is in flight
                self._cond.wait()

    def _execute(self, unit: WorkUnit) -> TimingRecord:
        try:
            seconds = self.invoke(unit.proof, unit.iteration)
        except LaunchError as e:
            log(f"[WARN] {unit.proof} iteration {unit.iteration}: {e}")
            return TimingRecord(unit.proof, unit.iteration, None, str(e))
        return TimingRecord(unit.proof, unit.iteration, seconds)

    def _abort(self, exc: BaseException) -> None:
        with self._cond:
            if self._fatal is None:
                self._fatal = exc
            self._cond.notify_all()

    def _worker(self) -> None:
        while True:
            unit = self._next_unit()
            if unit is None:
                return
            try:
                try:
                    rec = self._execute(unit)
                finally:
                    self.locks.release(unit.proof)
                self.sink.record(rec)
            except Exception as e:
                self._abort(e)
                return

            with self._cond:
                self._records.append(rec)
                if not rec.failed:
                    log(f"[INFO] {rec.proof} finished after {rec.seconds:.3f}s")
                log(f"[INFO] COMPLETED [{len(self._records)}/{self.total}] runs")
                self._cond.notify_all()

    def run(self) -> List[TimingRecord]:
        """Run every work unit and return the records in completion order.

        A LaunchError only turns its own unit into a failure record. Anything else raised
        by a worker (notably SinkWriteError) is re-raised here at once; units still in
        flight are left to finish on their daemon threads.
        """
        workers = [
            threading.Thread(target=self._worker, name=f"proof-worker-{i}", daemon=True)
            for i in range(min(self.parallel_jobs, self.total))
        ]
        for w in workers:
            w.start()
        with self._cond:
            self._cond.wait_for(lambda: self._fatal is not None or len(self._records) == self.total)
            if self._fatal is not None:
                raise self._fatal
            return list(self._records)
