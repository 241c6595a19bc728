from datetime import datetime

import pytest

from db_agent.execution.files import (
    FileWriteError,
    delete_files,
    find_backups,
    resolve_inside,
    write_file,
)


def test_write_creates_parent_directories(tmp_path):
    written = write_file(tmp_path, "src/app/api/songs/route.ts", "export {}\n")

    assert written.path.read_text(encoding="utf-8") == "export {}\n"
    assert written.backup_path is None


def test_existing_file_is_backed_up(tmp_path):
    target = tmp_path / "src" / "db" / "schema.ts"
    target.parent.mkdir(parents=True)
    target.write_text("old", encoding="utf-8")

    written = write_file(tmp_path, "src/db/schema.ts", "new", backup_timestamp="20240101120000")

    assert target.read_text(encoding="utf-8") == "new"
    assert written.backup_path == target.with_name("schema.ts.backup-20240101120000")
    assert written.backup_path.read_text(encoding="utf-8") == "old"


def test_no_backup_for_new_files(tmp_path):
    written = write_file(tmp_path, "new.ts", "x", backup_timestamp=datetime(2024, 1, 1).strftime("%Y%m%d%H%M%S"))

    assert written.backup_path is None


@pytest.mark.parametrize("rel_path", ["../outside.ts", "/etc/passwd", "."])
def test_paths_outside_root_are_rejected(tmp_path, rel_path):
    with pytest.raises(FileWriteError) as excinfo:
        resolve_inside(tmp_path, rel_path)

    assert excinfo.value.file_path == rel_path


def test_os_failure_becomes_file_write_error(tmp_path):
    (tmp_path / "src").write_text("a file, not a directory", encoding="utf-8")

    with pytest.raises(FileWriteError, match="src/app/page.tsx"):
        write_file(tmp_path, "src/app/page.tsx", "content")


def test_find_backups_skips_ignored_directories(tmp_path):
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "page.tsx.backup-20240101000000").write_text("", encoding="utf-8")
    (tmp_path / "page.tsx").write_text("", encoding="utf-8")
    (tmp_path / "node_modules" / "pkg").mkdir(parents=True)
    (tmp_path / "node_modules" / "pkg" / "index.js.backup-1").write_text("", encoding="utf-8")

    assert find_backups(tmp_path) == [tmp_path / "src" / "page.tsx.backup-20240101000000"]


def test_delete_files_reports_failures(tmp_path):
    present = tmp_path / "a.backup-1"
    present.write_text("", encoding="utf-8")
    missing = tmp_path / "b.backup-1"

    deleted, failed = delete_files([missing, present])

    assert deleted == [present]
    assert failed == [missing]
    assert not present.exists()
