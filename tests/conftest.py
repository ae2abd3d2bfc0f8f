import os
import time
from pathlib import Path

import pytest


def age(path: Path, seconds: float) -> None:
    """Set the modification time of `path` to `seconds` ago."""
    t = time.time() - seconds
    os.utime(path, (t, t))


def write(path: Path, content: str = "data", mode: int = 0o600) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    os.chmod(path, mode)
    return path


@pytest.fixture
def roots(tmp_path):
    src = tmp_path / "src"
    dst = tmp_path / "dest"
    src.mkdir()
    dst.mkdir()
    return src, dst
