"""Tests for content-based type detection and the MIME info database."""

from __future__ import annotations

import magic
import pytest

from classifiles.config import ClassifilesConfig
from classifiles.detector import FileType, TypeDetector, sanitize_label
from classifiles.errors import DetectionError, FatalError
from classifiles.mime_info import MimeInfoDb

from conftest import GIF_BYTES, PDF_BYTES, PNG_BYTES


MIME_XML = """<?xml version="1.0" encoding="utf-8"?>
<mime-type xmlns="http://www.freedesktop.org/standards/shared-mime-info" type="{mime}">
  <comment>test type</comment>
  {globs}
</mime-type>
"""


def write_mime_xml(root, mime, patterns):
    path = root / f"{mime}.xml"
    path.parent.mkdir(parents=True, exist_ok=True)
    globs = "\n  ".join(f'<glob pattern="{p}"/>' for p in patterns)
    path.write_text(MIME_XML.format(mime=mime, globs=globs), encoding="utf-8")
    return path


@pytest.fixture()
def detector(tmp_path, logger):
    # no shared-mime-info database: extensions come from mimetypes only
    config = ClassifilesConfig(mime_info_db_root=tmp_path / "no-mime-db")
    return TypeDetector(config, logger)


# =============================================================================
# Labels
# =============================================================================


class TestSanitizeLabel:
    """Tests for turning a MIME type into a single path segment."""

    @pytest.mark.parametrize("mime, expected", [
        ("image/png", "image-png"),
        ("Text/Plain", "text-plain"),
        ("application/vnd.oasis.opendocument.text", "application-vnd.oasis.opendocument.text"),
        ("weird\\type", "weird-type"),
        ("", "unknown"),
        (None, "unknown"),
        ("..", "unknown"),
        (".", "unknown"),
    ])
    def test_sanitize(self, mime, expected):
        assert sanitize_label(mime) == expected

    def test_label_has_no_separator(self):
        assert "/" not in FileType("a/b/c", None).label


class TestFileType:
    """Tests for extension consistency checks."""

    def test_matches_case_insensitively(self):
        file_type = FileType("image/jpeg", "jpg", ("jpg", "jpeg"))
        assert file_type.matches_extension("IMG_0001.JPEG")

    def test_no_extension_never_matches(self):
        assert not FileType("text/plain", "txt", ("txt",)).matches_extension("README")

    def test_unknown(self):
        unknown = FileType.unknown()
        assert unknown.mime is None
        assert unknown.ext is None
        assert unknown.label == "unknown"


# =============================================================================
# MIME info database
# =============================================================================


class TestMimeInfoDb:
    """Tests for the shared-mime-info / mimetypes extension lookup."""

    def test_reads_globs_from_xml(self, tmp_path):
        root = tmp_path / "mime"
        write_mime_xml(root, "application/x-test", ["*.tst", "*.test", "Makefile.*", "*.[ch]"])

        db = MimeInfoDb(root)

        assert db.get("application/x-test") == ["tst", "test"]
        assert db.guess_extension("application/x-test") == "tst"

    def test_xml_without_glob_is_generic(self, tmp_path):
        root = tmp_path / "mime"
        write_mime_xml(root, "application/x-noext", [])

        db = MimeInfoDb(root)

        assert db.get("application/x-noext") == []
        assert db.guess_extension("application/x-noext") is None

    def test_falls_back_to_mimetypes(self, tmp_path):
        db = MimeInfoDb(tmp_path / "missing")
        assert db.guess_extension("image/png") == "png"

    def test_unknown_type(self, tmp_path):
        db = MimeInfoDb(tmp_path / "missing")
        assert db.get("get/schwifty") is None

    def test_xml_and_mimetypes_are_merged(self, tmp_path):
        root = tmp_path / "mime"
        write_mime_xml(root, "image/png", ["*.png", "*.apng"])

        db = MimeInfoDb(root)

        assert db.get("image/png")[:2] == ["png", "apng"]

    def test_invalid_xml_is_ignored(self, tmp_path, logger):
        root = tmp_path / "mime"
        (root / "image").mkdir(parents=True)
        (root / "image" / "png.xml").write_text("<not closed", encoding="utf-8")

        db = MimeInfoDb(root, logger)

        assert db.guess_extension("image/png") == "png"

    def test_set_overrides_preferred_extension(self, tmp_path):
        db = MimeInfoDb(tmp_path / "missing")
        db.set("application/x-custom", "cst")
        assert db.get("application/x-custom") == ["cst"]

    def test_root_that_is_a_file_is_ignored(self, tmp_path, logger):
        path = tmp_path / "file"
        path.write_text("", encoding="utf-8")
        db = MimeInfoDb(path, logger)
        assert db.db_root_path is None


# =============================================================================
# Detector (libmagic)
# =============================================================================


class TestTypeDetector:
    """Tests that exercise libmagic on small signature files."""

    def test_png_with_jpg_name(self, tmp_path, detector):
        path = tmp_path / "photo.jpg"
        path.write_bytes(PNG_BYTES)

        file_type = detector.detect(path)

        assert file_type.mime == "image/png"
        assert file_type.ext == "png"
        assert file_type.label == "image-png"
        assert not file_type.matches_extension("photo.jpg")

    def test_gif(self, tmp_path, detector):
        path = tmp_path / "anim"
        path.write_bytes(GIF_BYTES)

        file_type = detector.detect(path)

        assert file_type.mime == "image/gif"
        assert file_type.ext == "gif"

    def test_pdf(self, tmp_path, detector):
        path = tmp_path / "paper.bin"
        path.write_bytes(PDF_BYTES)
        assert detector.detect(path).mime == "application/pdf"

    def test_plain_text(self, tmp_path, detector):
        path = tmp_path / "notes"
        path.write_text("just some plain words\nacross two lines\n", encoding="utf-8")

        file_type = detector.detect(path)

        assert file_type.mime == "text/plain"
        assert file_type.ext == "txt"

    def test_missing_file_raises(self, tmp_path, detector):
        with pytest.raises(DetectionError):
            detector.detect(tmp_path / "gone")

    def test_directory_raises(self, tmp_path, detector):
        with pytest.raises(DetectionError):
            detector.detect(tmp_path)

    def test_bad_magic_db_falls_back_to_default(self, tmp_path, logger):
        config = ClassifilesConfig(
            mime_info_db_root=tmp_path / "no-mime-db",
            libmagic_db_file=tmp_path / "missing.mgc",
        )
        path = tmp_path / "image"
        path.write_bytes(PNG_BYTES)

        assert TypeDetector(config, logger).detect(path).mime == "image/png"

    def test_unusable_default_magic_db_is_fatal(self, tmp_path, logger, monkeypatch):
        def broken_magic(**flags):
            raise magic.MagicException("could not find any valid magic files")

        monkeypatch.setattr(magic, "Magic", broken_magic)
        config = ClassifilesConfig(mime_info_db_root=tmp_path / "no-mime-db")

        with pytest.raises(FatalError, match="libmagic"):
            TypeDetector(config, logger)

    def test_uses_mime_info_database(self, tmp_path, logger):
        root = tmp_path / "mime"
        write_mime_xml(root, "image/png", ["*.pngx"])
        path = tmp_path / "image"
        path.write_bytes(PNG_BYTES)

        file_type = TypeDetector(ClassifilesConfig(mime_info_db_root=root), logger).detect(path)

        assert file_type.ext == "pngx"
        assert "png" in file_type.extensions
