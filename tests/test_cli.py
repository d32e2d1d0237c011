from __future__ import annotations

import subprocess
import sys
from pathlib import Path

import trimesh

REPO_ROOT = Path(__file__).resolve().parent.parent
SCRIPT = REPO_ROOT / "scripts" / "generate_apron.py"


def test_cli_writes_splayed_apron(tmp_path: Path):
    out = tmp_path / "front.stl"
    cmd = [
        sys.executable,
        str(SCRIPT),
        "--length", "30",
        "--splay", "8",
        "--position", "front",
        "--tenon", "0.33", "2", "1.5",
        "-o", str(out),
    ]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode == 0, proc.stderr
    assert "Vertices:" in proc.stdout
    assert "Solids:    3" in proc.stdout
    assert out.exists()
    loaded = trimesh.load(str(out), force="mesh")
    assert len(loaded.faces) == 12 + 2 * 10


def test_cli_rejects_bad_dimensions():
    cmd = [sys.executable, str(SCRIPT), "--length", "-5"]
    proc = subprocess.run(cmd, capture_output=True, text=True)
    assert proc.returncode != 0
    assert "length" in proc.stdout
