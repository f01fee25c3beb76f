"""
Run the external verification command for one (proof, iteration) and time it.

Per iteration the proof is first brought to a clean, built state with the untimed
prepare commands (by default `make veryclean` then `make goto`), then the measured
command (`make result`) runs and its wall-clock time is returned.

Exit codes are deliberately ignored: only "the process terminated" is observed, so a
proof that fails fast looks like a proof that passes fast. Validate the suite separately
before trusting the timings.

Child processes spawned by the measured command (cbmc, goto-instrument, ...) are not
tracked. Killing this process does not kill them.
"""

import os
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional

from proof_errors import LaunchError

DEFAULT_PREPARE_TARGETS = ["veryclean", "goto"]
DEFAULT_MEASURE_TARGET = "result"


@dataclass(frozen=True)
class ProofCommand:
    # tokens may use {proof} and {proof_dir}
    measure: List[str]
    prepare: List[List[str]] = field(default_factory=list)

    @classmethod
    def for_make(
        cls,
        target: str = DEFAULT_MEASURE_TARGET,
        prepare_targets: Optional[List[str]] = None,
        make: str = "make",
    ) -> "ProofCommand":
        if prepare_targets is None:
            prepare_targets = DEFAULT_PREPARE_TARGETS
        return cls(measure=[make, target], prepare=[[make, t] for t in prepare_targets])

    def render(self, proof: str, proof_dir: Path) -> "ProofCommand":
        def fill(cmd: List[str]) -> List[str]:
            # only the two placeholders; other braces pass through to make
            return [tok.replace("{proof}", proof).replace("{proof_dir}", str(proof_dir)) for tok in cmd]

        return ProofCommand(measure=fill(self.measure), prepare=[fill(c) for c in self.prepare])


class ProofInvoker:
    def __init__(self, proofs: Dict[str, Path], command: ProofCommand):
        self.proofs = dict(proofs)
        self.command = command

    def _spawn(self, proof: str, proof_dir: Path, cmd: List[str]) -> subprocess.CompletedProcess:
        try:
            return subprocess.run(
                cmd,
                cwd=str(proof_dir),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
                env=os.environ.copy(),
            )
        except (OSError, ValueError) as e:
            # FileNotFoundError / PermissionError for a missing executable or cwd
            raise LaunchError(proof, cmd, str(e)) from e

    def run(self, proof: str, iteration: int) -> float:
        """Run one iteration of `proof` and return the measured command's elapsed seconds.

        Raises LaunchError if any command cannot be started.
        """
        proof_dir = self.proofs.get(proof)
        if proof_dir is None:
            raise LaunchError(proof, None, "unknown proof")

        cmd = self.command.render(proof, proof_dir)
        for prep in cmd.prepare:
            self._spawn(proof, proof_dir, prep)

        start = time.perf_counter()
        self._spawn(proof, proof_dir, cmd.measure)
        return time.perf_counter() - start
