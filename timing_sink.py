import csv
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from proof_errors import SinkWriteError


@dataclass(frozen=True)
class TimingRecord:
    proof: str
    iteration: int
    seconds: Optional[float] = None  # None marks a unit that could not be launched
    error: Optional[str] = None

    @property
    def failed(self) -> bool:
        return self.seconds is None


def format_seconds(seconds: Optional[float]) -> str:
    # repr of a float round-trips exactly; failures are left empty
    return "" if seconds is None else repr(float(seconds))


class TimingSink:
    """Accumulates timings per proof and keeps the CSV artifact current after every record.

    The artifact holds one line per proof, `name,d1,d2,...`, with durations in iteration
    order. It is rewritten through a temp file + fsync + rename, so it never contains a
    partial line and a record is on disk once record() returns.
    """

    def __init__(self, output_path: Path, proofs: Iterable[str], iterations: int):
        self.output_path = Path(output_path)
        self.iterations = iterations
        self._rows: Dict[str, Dict[int, Optional[float]]] = {p: {} for p in proofs}
        self._lock = threading.Lock()

    def open(self) -> "TimingSink":
        try:
            self.output_path.parent.mkdir(parents=True, exist_ok=True)
            with self.output_path.open("w", newline="", encoding="utf-8"):
                pass
        except OSError as e:
            raise SinkWriteError(f"Output file is not writable: {self.output_path} ({e})") from e
        return self

    def record(self, rec: TimingRecord) -> None:
        with self._lock:
            row = self._rows.get(rec.proof)
            if row is None:
                raise ValueError(f"record for unknown proof: {rec.proof}")
            if not 0 <= rec.iteration < self.iterations:
                raise ValueError(f"iteration {rec.iteration} of {rec.proof} outside [0, {self.iterations})")
            if rec.iteration in row:
                raise ValueError(f"duplicate record for {rec.proof} iteration {rec.iteration}")
            row[rec.iteration] = rec.seconds
            self._flush()

    def rows(self) -> List[List[str]]:
        out: List[List[str]] = []
        for proof, row in self._rows.items():
            if not row:
                continue
            out.append([proof] + [format_seconds(row[i]) for i in sorted(row)])
        return out

    def _flush(self) -> None:
        tmp_name = None
        try:
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.output_path.name}.", suffix=".tmp", dir=str(self.output_path.parent)
            )
            with os.fdopen(fd, "w", newline="", encoding="utf-8") as f:
                writer = csv.writer(f, lineterminator="\n")
                writer.writerows(self.rows())
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, self.output_path)
            tmp_name = None
        except OSError as e:
            raise SinkWriteError(f"Could not write timings to {self.output_path}: {e}") from e
        finally:
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass


def read_timing_matrix(path: Path) -> Dict[str, List[Optional[float]]]:
    matrix: Dict[str, List[Optional[float]]] = {}
    with Path(path).open("r", newline="", encoding="utf-8") as f:
        for row in csv.reader(f):
            if not row:
                continue
            name, cells = row[0], row[1:]
            matrix[name] = [float(c) if c.strip() else None for c in cells]
    return matrix
