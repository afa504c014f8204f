"""Source archive creation for remote builds."""

import fnmatch
import hashlib
import io
import os
import tarfile
from pathlib import Path

from shipctl.core.exceptions import TransferError
from shipctl.core.logging import get_logger

logger = get_logger(__name__)

EXCLUDED_DIRS = frozenset({
    ".git",
    "node_modules",
    "vendor",
    "dist",
    "build",
    "target",
    "__pycache__",
    ".idea",
    ".vscode",
    ".terraform",
    ".next",
    ".nuxt",
    "bin",
    "logs",
})

EXCLUDED_FILES = (".env", ".env.local", ".DS_Store", "*.log", "*.exe", "*.dll", "*.so")


def is_excluded_file(name: str) -> bool:
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in EXCLUDED_FILES)


def iter_source_files(root: Path) -> list[str]:
    """Relative paths to archive, sorted, with excluded directories pruned."""
    paths: list[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in EXCLUDED_DIRS)
        rel_dir = os.path.relpath(dirpath, root)

        # symlinked directories are listed in dirnames but not descended into
        for name in dirnames:
            if os.path.islink(os.path.join(dirpath, name)):
                paths.append(os.path.normpath(os.path.join(rel_dir, name)))

        for name in filenames:
            if is_excluded_file(name):
                continue
            paths.append(os.path.normpath(os.path.join(rel_dir, name)))
    return sorted(paths)


def create_archive(source_dir: str | Path) -> bytes:
    """Gzip-compressed tar of a source tree. Symlinks are stored as links."""
    root = Path(source_dir)
    if not root.is_dir():
        raise TransferError(f"Source directory not found: {source_dir}")

    buffer = io.BytesIO()
    count = 0
    try:
        with tarfile.open(fileobj=buffer, mode="w:gz") as tar:
            for rel in iter_source_files(root):
                tar.add(root / rel, arcname=rel, recursive=False)
                count += 1
    except OSError as e:
        raise TransferError(f"Failed to create archive: {e}")

    data = buffer.getvalue()
    logger.info(f"Created source archive: {count} files, {len(data)} bytes")
    return data


def checksum(data: bytes) -> str:
    """SHA-256 hex digest."""
    return hashlib.sha256(data).hexdigest()
