"""Tests for source archive creation."""

import io
import os
import tarfile

import pytest

from shipctl.core.exceptions import TransferError
from shipctl.deploy.archive import checksum, create_archive, is_excluded_file


def archive_names(data: bytes) -> list[str]:
    with tarfile.open(fileobj=io.BytesIO(data), mode="r:gz") as tar:
        return tar.getnames()


@pytest.fixture
def source_tree(tmp_path):
    (tmp_path / "main.py").write_text("print('hi')\n")
    (tmp_path / "src").mkdir()
    (tmp_path / "src" / "app.py").write_text("app = 1\n")
    (tmp_path / "node_modules" / "left-pad").mkdir(parents=True)
    (tmp_path / "node_modules" / "left-pad" / "index.js").write_text("")
    (tmp_path / ".git").mkdir()
    (tmp_path / ".git" / "HEAD").write_text("ref: refs/heads/main\n")
    (tmp_path / "src" / "__pycache__").mkdir()
    (tmp_path / "src" / "__pycache__" / "app.cpython-312.pyc").write_bytes(b"\x00")
    (tmp_path / ".env").write_text("SECRET=1\n")
    (tmp_path / "debug.log").write_text("log\n")
    (tmp_path / "lib.so").write_bytes(b"\x7fELF")
    return tmp_path


class TestCreateArchive:
    def test_exclusions(self, source_tree):
        names = archive_names(create_archive(source_tree))
        assert "main.py" in names
        assert "src/app.py" in names
        assert not any(n.startswith("node_modules") for n in names)
        assert not any(n.startswith(".git") for n in names)
        assert not any("__pycache__" in n for n in names)
        assert ".env" not in names
        assert "debug.log" not in names
        assert "lib.so" not in names

    def test_deterministic_order(self, source_tree):
        names = archive_names(create_archive(source_tree))
        assert names == sorted(names)

    def test_symlink_stored_as_link(self, tmp_path):
        (tmp_path / "real.txt").write_text("data\n")
        os.symlink("real.txt", tmp_path / "alias.txt")

        with tarfile.open(fileobj=io.BytesIO(create_archive(tmp_path)), mode="r:gz") as tar:
            member = tar.getmember("alias.txt")
            assert member.issym()
            assert member.linkname == "real.txt"

    def test_missing_directory(self, tmp_path):
        with pytest.raises(TransferError):
            create_archive(tmp_path / "missing")


class TestChecksum:
    def test_sha256(self):
        assert checksum(b"") == "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"

    def test_matches_archive_bytes(self, source_tree):
        data = create_archive(source_tree)
        assert checksum(data) == checksum(bytes(data))
        assert len(checksum(data)) == 64


class TestExcludedFiles:
    @pytest.mark.parametrize("name", [".env", ".env.local", ".DS_Store", "app.log", "tool.exe", "x.dll", "y.so"])
    def test_excluded(self, name):
        assert is_excluded_file(name)

    @pytest.mark.parametrize("name", ["main.go", ".env.example", "logfile.txt"])
    def test_included(self, name):
        assert not is_excluded_file(name)
