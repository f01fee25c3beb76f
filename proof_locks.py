import threading
from typing import Dict, Iterable, Optional


class _Ticket:
    __slots__ = ("next_ticket", "now_serving")

    def __init__(self) -> None:
        self.next_ticket = 0
        self.now_serving = 0

    @property
    def held(self) -> bool:
        return self.next_ticket > self.now_serving

    @property
    def queued(self) -> int:
        # waiters behind the current holder
        return max(self.next_ticket - self.now_serving - 1, 0)


class ProofLockTable:
    """One FIFO ticket lock per proof.

    Iterations of the same proof are serialized because the make targets of a proof share
    its build directory. Distinct proofs never contend. All locks share one condition, which
    can be handed in by a scheduler that wants to wake up whenever any proof is released.
    The scheduler itself only uses try_acquire() and sleeps on that condition; acquire()
    is the blocking form for callers that want to queue on one proof.
    """

    def __init__(self, proofs: Iterable[str], condition: Optional[threading.Condition] = None):
        self._cond = condition if condition is not None else threading.Condition()
        self._tickets: Dict[str, _Ticket] = {p: _Ticket() for p in proofs}

    def _ticket(self, proof: str) -> _Ticket:
        try:
            return self._tickets[proof]
        except KeyError:
            raise KeyError(f"unknown proof: {proof}") from None

    def acquire(self, proof: str) -> None:
        with self._cond:
            t = self._ticket(proof)
            mine = t.next_ticket
            t.next_ticket += 1
            self._cond.wait_for(lambda: t.now_serving == mine)

    def try_acquire(self, proof: str) -> bool:
        with self._cond:
            t = self._ticket(proof)
            if t.held:
                return False
            t.next_ticket += 1
            return True

    def release(self, proof: str) -> None:
        with self._cond:
            t = self._ticket(proof)
            if not t.held:
                raise RuntimeError(f"release of unheld proof lock: {proof}")
            t.now_serving += 1
            self._cond.notify_all()

    def is_locked(self, proof: str) -> bool:
        with self._cond:
            return self._ticket(proof).held

    def waiters(self, proof: str) -> int:
        with self._cond:
            return self._ticket(proof).queued
