import os
import time
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from conftest import age, write
from lazyarchive import scanner as scanner_mod
from lazyarchive.errors import MoveError, ScanError
from lazyarchive.models import MoverConfig
from lazyarchive.policy import fail_fast
from lazyarchive.relocator import Relocator

T = 10  # seconds


def make_relocator(src, dst, on_error=None):
    return Relocator(MoverConfig(
        source=src,
        dest=dst,
        interval=timedelta(seconds=T),
        min_file_age=timedelta(seconds=2 * T),
        min_dir_age=timedelta(seconds=3 * T),
        on_error=on_error,
    ))


class Recorder:
    def __init__(self, resume=True):
        self.resume = resume
        self.errors = []

    def __call__(self, config, error):
        self.errors.append(error)
        return self.resume


def snapshot(root: Path):
    return sorted(p.relative_to(root).as_posix() for p in root.rglob("*"))


def test_iteration_without_candidates_is_a_noop(roots):
    src, dst = roots
    write(src / "a" / "fresh.txt")
    before_src, before_dst = snapshot(src), snapshot(dst)
    policy = Recorder()

    result = make_relocator(src, dst, policy).iterate()

    assert result.is_noop
    assert policy.errors == []
    assert snapshot(src) == before_src
    assert snapshot(dst) == before_dst


def test_moves_only_aged_files(roots):
    src, dst = roots
    old = write(src / "old.txt", "old")
    young = write(src / "young.txt", "young")
    age(old, 3 * T)

    result = make_relocator(src, dst).iterate()

    assert [m.src for m in result.moved] == [old]
    assert not old.exists()
    assert young.exists()
    assert (dst / "old.txt").read_text(encoding="utf-8") == "old"
    assert not (dst / "young.txt").exists()


def test_source_root_is_never_removed(roots):
    src, dst = roots
    (src / "empty").mkdir()
    age(src / "empty", 100 * T)
    age(src, 100 * T)

    result = make_relocator(src, dst).iterate()

    assert result.removed_dirs == [src / "empty"]
    assert src.is_dir()


def test_directory_with_young_content_is_kept_without_policy(roots):
    src, dst = roots
    write(src / "old_dir" / "fresh.txt")
    age(src / "old_dir", 100 * T)
    policy = Recorder()

    result = make_relocator(src, dst, policy).iterate()

    assert result.kept_dirs == [src / "old_dir"]
    assert (src / "old_dir" / "fresh.txt").exists()
    assert policy.errors == []


def test_scenario_files_then_directories_deepest_first(roots):
    src, dst = roots
    write(src / "a" / "afile.txt", "A!")
    write(src / "a" / "b" / "bfile.txt", "B!")
    write(src / "a" / "b" / "c" / "cfile.txt", "C!")
    relocator = make_relocator(src, dst)

    # Right after creation nothing is old enough.
    assert relocator.iterate().is_noop
    assert not (dst / "a").exists()

    # Past the file age, files move but the directories are too young.
    result = relocator.iterate(now=datetime.now(timezone.utc) + timedelta(seconds=2 * T + 1))
    assert len(result.moved) == 3
    for rel, content in [("a/afile.txt", "A!"), ("a/b/bfile.txt", "B!"), ("a/b/c/cfile.txt", "C!")]:
        assert (dst / rel).read_text(encoding="utf-8") == content
        assert not (src / rel).exists()
    for rel in ["a", "a/b", "a/b/c"]:
        assert (src / rel).is_dir()

    # Moving the files touched the directories, so they need the full directory age again.
    assert relocator.iterate(now=datetime.now(timezone.utc) + timedelta(seconds=2 * T)).is_noop

    result = relocator.iterate(now=datetime.now(timezone.utc) + timedelta(seconds=3 * T + 1))
    assert result.removed_dirs == [src / "a" / "b" / "c", src / "a" / "b", src / "a"]
    assert snapshot(src) == []
    assert src.is_dir()


def blocked_tree(src, dst):
    first = write(src / "a" / "x.txt")
    second = write(src / "b" / "y.txt")
    age(first, 3 * T)
    age(second, 3 * T)
    write(dst / "a", "blocks the a/ directory")
    return first, second


def test_move_failure_resumes_with_raw_error(roots):
    src, dst = roots
    first, second = blocked_tree(src, dst)
    policy = Recorder(resume=True)

    result = make_relocator(src, dst, policy).iterate()

    assert len(policy.errors) == 1
    assert type(policy.errors[0]) is MoveError
    assert [m.src for m in result.moved] == [second]
    assert first.exists()


def test_move_failure_stop_leaves_remaining_candidates(roots):
    src, dst = roots
    first, second = blocked_tree(src, dst)
    (src / "old_empty").mkdir()
    age(src / "old_empty", 100 * T)

    with pytest.raises(MoveError):
        make_relocator(src, dst, fail_fast).iterate()

    assert first.exists()
    assert second.exists()
    assert (src / "old_empty").is_dir()


def failing_scandir(monkeypatch, bad_name):
    real_scandir = os.scandir

    def scandir(path):
        if Path(path).name == bad_name:
            raise PermissionError(13, "Permission denied", str(path))
        return real_scandir(path)

    monkeypatch.setattr(scanner_mod.os, "scandir", scandir)


def test_scan_failure_resume_moves_what_was_collected(roots, monkeypatch):
    src, dst = roots
    collected = write(src / "a.txt")
    age(collected, 3 * T)
    (src / "bad").mkdir()
    missed = write(src / "c.txt")
    age(missed, 3 * T)
    failing_scandir(monkeypatch, "bad")
    policy = Recorder(resume=True)

    result = make_relocator(src, dst, policy).iterate()

    assert len(policy.errors) == 1
    assert isinstance(policy.errors[0], ScanError)
    assert [m.src for m in result.moved] == [collected]
    assert missed.exists()


def test_scan_failure_stop_aborts_iteration(roots, monkeypatch):
    src, dst = roots
    collected = write(src / "a.txt")
    age(collected, 3 * T)
    (src / "bad").mkdir()
    failing_scandir(monkeypatch, "bad")

    with pytest.raises(ScanError):
        make_relocator(src, dst, Recorder(resume=False)).iterate()

    assert collected.exists()


@pytest.fixture
def new_york_time():
    if not hasattr(time, "tzset"):
        pytest.skip("needs time.tzset")
    old = os.environ.get("TZ")
    os.environ["TZ"] = "America/New_York"
    time.tzset()
    yield
    if old is None:
        del os.environ["TZ"]
    else:
        os.environ["TZ"] = old
    time.tzset()


def set_mtime(path: Path, when: datetime) -> None:
    t = when.timestamp()
    os.utime(path, (t, t))


def test_ages_are_real_time_across_dst_change(roots, new_york_time):
    # 2024-03-10 07:00Z is when New York springs forward from EST to EDT.
    src, dst = roots
    now = datetime(2024, 3, 10, 7, 5, tzinfo=timezone.utc)
    young = write(src / "young.txt")
    old = write(src / "old.txt")
    (src / "recent_dir").mkdir()
    set_mtime(young, datetime(2024, 3, 10, 6, 58, tzinfo=timezone.utc))
    set_mtime(old, datetime(2024, 3, 10, 6, 30, tzinfo=timezone.utc))
    set_mtime(src / "recent_dir", datetime(2024, 3, 10, 6, 30, tzinfo=timezone.utc))
    relocator = Relocator(MoverConfig(
        source=src,
        dest=dst,
        min_file_age=timedelta(minutes=30),
        min_dir_age=timedelta(hours=1),
    ))

    result = relocator.iterate(now=now)

    assert [m.src for m in result.moved] == [old]
    assert young.exists()
    assert (src / "recent_dir").is_dir()
    assert result.removed_dirs == []
