from pathlib import Path
from typing import Dict, Iterable, Optional, Set

from proof_errors import DiscoveryError


def safe_read_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8", errors="ignore")
    except OSError:
        return ""


def is_proof_dir(d: Path) -> bool:
    # a proof directory is any subdirectory holding a Makefile
    try:
        return d.is_dir() and (d / "Makefile").is_file()
    except OSError:
        return False


def discover_proofs(proofs_root: Path) -> Dict[str, Path]:
    proofs_root = Path(proofs_root)
    if not proofs_root.is_dir():
        raise DiscoveryError(f"Proofs directory does not exist: {proofs_root}")

    try:
        entries = list(proofs_root.iterdir())
    except OSError as e:
        raise DiscoveryError(f"Cannot list proofs directory {proofs_root}: {e}") from e

    proof_dirs = sorted((d for d in entries if is_proof_dir(d)), key=lambda p: p.name)
    if not proof_dirs:
        raise DiscoveryError(f"No proof directories (subdirectories with a Makefile) in {proofs_root}")
    return {d.name: d for d in proof_dirs}


def load_skip_list(path: Path) -> Set[str]:
    out: Set[str] = set()
    if not path.exists():
        raise DiscoveryError(f"Skip list file not found: {path}")
    for line in safe_read_text(path).splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        out.add(s.rstrip("/"))
    return out


def select_proofs(
    proofs: Dict[str, Path],
    only: Optional[Iterable[str]] = None,
    skip: Optional[Iterable[str]] = None,
) -> Dict[str, Path]:
    wanted = {s.strip().rstrip("/") for s in (only or []) if s and s.strip()}
    skipped = {s.strip().rstrip("/") for s in (skip or []) if s and s.strip()}

    selected: Dict[str, Path] = {}
    for name, path in proofs.items():
        if wanted and name not in wanted:
            continue
        if name in skipped:
            print(f"[INFO] Skipping proof (in skip list): {name}")
            continue
        selected[name] = path

    if not selected:
        raise DiscoveryError("No proofs left to measure after applying --proof-id/--skip-proof filters")
    return selected
