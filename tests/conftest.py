"""Shared fixtures: fake proof directories whose 'make' is a tiny shell script."""
import os
import stat
from pathlib import Path

import pytest


def write_script(path: Path, body: str) -> Path:
    path.write_text("#!/bin/sh\n" + body + "\n", encoding="utf-8")
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


def make_proof_dir(root: Path, name: str, fake_make: str = None) -> Path:
    d = root / name
    d.mkdir(parents=True)
    (d / "Makefile").write_text("result:\n\t@true\n", encoding="utf-8")
    if fake_make is not None:
        write_script(d / "fake-make", fake_make)
    return d


@pytest.fixture
def proofs_root(tmp_path):
    root = tmp_path / "proofs"
    root.mkdir()
    return root
