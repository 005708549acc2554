"""
파일 유형 판별 모듈: libmagic 내용 분석 기반 MIME 유형 및 확장자 판별
"""

import os
from pathlib import Path
from typing import Optional, Tuple
from dataclasses import dataclass

import magic

from .config import ClassifilesConfig, OUTPUT_UNKNOWN
from .errors import DetectionError, FatalError
from .mime_info import MimeInfoDb


# libmagic 확장자 모드가 모를 때 돌려주는 값
_MAGIC_NO_EXTENSION = "???"


def sanitize_label(mime: Optional[str]) -> str:
    """
    MIME 유형을 폴더 이름으로 쓸 수 있게 변환 (image/png -> image-png)

    Args:
        mime: MIME 유형 또는 None

    Returns:
        경로 구분자가 없는 폴더 이름
    """
    if not mime:
        return OUTPUT_UNKNOWN

    label = mime.strip().lower()
    for sep in {"/", "\\", "\0", os.sep, os.altsep}:
        if sep:
            label = label.replace(sep, "-")

    if label in ("", ".", ".."):
        return OUTPUT_UNKNOWN
    return label


@dataclass(frozen=True)
class FileType:
    """판별된 파일 유형"""
    mime: Optional[str] = None
    ext: Optional[str] = None
    # 이 유형과 일치한다고 볼 수 있는 모든 확장자
    extensions: Tuple[str, ...] = ()

    @classmethod
    def unknown(cls) -> "FileType":
        return cls()

    @property
    def label(self) -> str:
        """출력 폴더 이름"""
        return sanitize_label(self.mime)

    def matches_extension(self, file_name: str) -> bool:
        """파일 이름의 확장자가 이 유형과 일치하는지 확인"""
        current = Path(file_name).suffix[1:].lower()
        if not current:
            return False
        return current == self.ext or current in self.extensions


class TypeDetector:
    """
    파일 유형 판별 클래스

    파일 이름이 아닌 내용(매직 바이트)으로 MIME 유형을 판별하고,
    MIME 정보 데이터베이스에서 대표 확장자를 찾는다.
    """

    def __init__(self, config: ClassifilesConfig = None, logger=None):
        """
        Args:
            config: 설정 객체 (None이면 기본 설정 사용)
            logger: 로거 (None이면 로그 없음)
        """
        self.config = config or ClassifilesConfig()
        self.logger = logger
        self.mime_info_db = MimeInfoDb(self.config.mime_info_db_root, logger)
        self._magic_mime = self._open_magic(mime=True)
        self._magic_ext = self._open_magic(extension=True)

    def _warn(self, message: str, details=None):
        if self.logger:
            self.logger.warning(message, details=details)

    def _open_magic(self, **flags) -> Optional[magic.Magic]:
        """
        libmagic 핸들 생성

        설정된 데이터베이스 파일을 읽지 못하면 기본 데이터베이스로 대체한다.
        MIME 핸들은 반드시 있어야 하며, 확장자 핸들은 없으면 None.
        """
        db_file = self.config.libmagic_db_file
        if db_file is not None:
            try:
                return magic.Magic(magic_file=str(db_file), **flags)
            except (magic.MagicException, NotImplementedError) as e:
                self._warn("libmagic 데이터베이스를 불러올 수 없어 기본값을 사용합니다",
                           details={"db_file": db_file, "error": e})

        if flags.get("extension"):
            try:
                return magic.Magic(**flags)
            except (magic.MagicException, NotImplementedError) as e:
                self._warn("libmagic 확장자 모드를 사용할 수 없습니다", details={"error": e})
                return None

        try:
            return magic.Magic(**flags)
        except magic.MagicException as e:
            raise FatalError(f"libmagic을 초기화할 수 없습니다: {e.message}") from e

    def detect(self, path: Path) -> FileType:
        """
        파일 유형 판별

        Args:
            path: 파일 경로

        Returns:
            FileType (유형을 알 수 없으면 FileType.unknown())

        Raises:
            DetectionError: 파일을 열거나 읽을 수 없을 때
        """
        path = Path(path)
        try:
            # 권한/존재 오류를 libmagic 오류보다 먼저 드러낸다
            with open(path, "rb") as f:
                f.read(1)
            raw_mime = self._magic_mime.from_file(str(path))
        except OSError as e:
            raise DetectionError(path, e.strerror or str(e)) from e
        except magic.MagicException as e:
            raise DetectionError(path, f"libmagic 오류: {e.message}") from e

        mime = (raw_mime or "").split(";")[0].strip().lower()
        if not mime:
            return FileType.unknown()

        ext = self.mime_info_db.guess_extension(mime)
        if ext is None and mime in self.config.libmagic_used_for:
            ext = self._magic_extension(path)
            if ext is not None:
                # libmagic은 MIME과 확장자를 한 번에 주지 않으므로 결과를 캐시
                self.mime_info_db.set(mime, ext)

        file_type = FileType(
            mime=mime,
            ext=ext,
            extensions=tuple(self.mime_info_db.get(mime) or ()),
        )
        if self.logger:
            self.logger.log_detection(str(path), mime, ext)
        return file_type

    def _magic_extension(self, path: Path) -> Optional[str]:
        """libmagic 확장자 모드로 확장자 추정 (a/b/c 중 첫 번째)"""
        if self._magic_ext is None:
            return None
        try:
            exts = self._magic_ext.from_file(str(path))
        except (OSError, magic.MagicException):
            return None

        if not exts or exts == _MAGIC_NO_EXTENSION:
            return None
        ext = exts.split("/")[0].strip().lower()
        return ext or None
