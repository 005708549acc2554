"""Shared fixtures for classifiles tests."""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from classifiles.context import RunContext
from classifiles.detector import FileType
from classifiles.errors import DetectionError
from classifiles.logger import create_session_logger


PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00\x00\x00\rIHDR" + b"\x00" * 17
GIF_BYTES = b"GIF89a\x01\x00\x01\x00\x80\x00\x00" + b"\x00" * 16
PDF_BYTES = b"%PDF-1.4\n1 0 obj\n<< >>\nendobj\ntrailer\n<< >>\n%%EOF\n"


class FakeDetector:
    """Deterministic detector keyed on the first bytes of a file."""

    TYPES = {
        b"PNG": FileType("image/png", "png", ("png",)),
        b"JPG": FileType("image/jpeg", "jpg", ("jpg", "jpeg", "jpe")),
        b"TXT": FileType("text/plain", "txt", ("txt", "text", "conf")),
        b"RAW": FileType("application/x-raw", None, ()),
    }

    def __init__(self, logger=None):
        self.logger = logger
        self.calls = []

    def detect(self, path):
        path = Path(path)
        self.calls.append(path)
        head = path.read_bytes()[:3]
        if head == b"BAD":
            raise DetectionError(path, "unreadable")
        return self.TYPES.get(head, FileType.unknown())


def snapshot(root: Path) -> dict:
    """Map every entry under root to (kind, payload) for tree comparison."""
    result = {}
    for dirpath, dirnames, filenames in os.walk(root):
        for name in dirnames + filenames:
            path = Path(dirpath) / name
            rel = str(path.relative_to(root))
            if path.is_symlink():
                result[rel] = ("link", os.readlink(path))
            elif path.is_dir():
                result[rel] = ("dir", None)
            else:
                result[rel] = ("file", path.read_bytes())
    return result


@pytest.fixture()
def logger(tmp_path):
    log = create_session_logger(session_name=f"test-{tmp_path.name}")
    yield log
    log.finalize()


@pytest.fixture()
def make_context(logger):
    def factory(operation="scan", dry_run=False):
        return RunContext(operation, logger=logger, dry_run=dry_run)
    return factory


@pytest.fixture()
def fake_detector(logger):
    return FakeDetector(logger)


@pytest.fixture()
def input_tree(tmp_path):
    """A small input tree with nested directories and mixed content."""
    root = tmp_path / "input"
    (root / "photos" / "2023").mkdir(parents=True)
    (root / "docs").mkdir()
    (root / "photos" / "photo.jpg").write_bytes(b"PNG data")
    (root / "photos" / "2023" / "photo.jpg").write_bytes(b"PNG other")
    (root / "photos" / "cat.JPEG").write_bytes(b"JPG data")
    (root / "docs" / "notes").write_bytes(b"TXT hello")
    (root / "docs" / "readme.txt").write_bytes(b"TXT readme")
    (root / "docs" / "blob.bin").write_bytes(b"???")
    return root
