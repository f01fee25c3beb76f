from typing import List, Optional


class ProofTimingError(Exception):
    pass


class DiscoveryError(ProofTimingError):
    """No proofs to measure: bad proofs directory or everything filtered out."""


class LaunchError(ProofTimingError):
    """The external command for one work unit could not be started."""

    def __init__(self, proof: str, command: Optional[List[str]], reason: str):
        self.proof = proof
        self.command = command or []
        self.reason = reason
        cmd = " ".join(self.command)
        super().__init__(f"could not launch '{cmd}' for {proof}: {reason}")


class SinkWriteError(ProofTimingError):
    """Timing results could not be durably written."""
