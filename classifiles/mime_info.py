"""
MIME 정보 데이터베이스 모듈: MIME 유형 -> 확장자 조회

조회 순서:
1. freedesktop shared-mime-info XML (<root>/<type>.xml 의 <glob pattern="*.ext">)
2. Python mimetypes 레지스트리
"""

import mimetypes
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, List, Optional


class MimeInfoDb:
    """MIME 유형별 확장자 조회 및 캐시"""

    def __init__(self, db_root_path: Optional[Path], logger=None):
        """
        Args:
            db_root_path: shared-mime-info 루트 (보통 /usr/share/mime)
            logger: 로거 (경고 출력용, 선택)
        """
        self.logger = logger
        self.db_root_path: Optional[Path] = None

        if db_root_path is not None:
            db_root_path = Path(db_root_path)
            if db_root_path.is_dir():
                self.db_root_path = db_root_path
            elif db_root_path.exists():
                self._warn("db_root_path가 디렉토리가 아니므로 무시합니다", db_root_path)
            else:
                self._warn("존재하지 않는 db_root_path를 무시합니다", db_root_path)

        # MIME 유형 -> 확장자 목록 (빈 목록: 알려진 유형이지만 확장자 없음, None: 알 수 없음)
        self._mime_cache: Dict[str, Optional[List[str]]] = {}

    def _warn(self, message: str, path: Path):
        if self.logger:
            self.logger.warning(message, source=str(path))

    def get(self, mime: str) -> Optional[List[str]]:
        """
        MIME 유형의 확장자 목록 조회 (첫 번째가 대표 확장자)

        Args:
            mime: MIME 유형 (예: image/png)

        Returns:
            점 없는 확장자 리스트, 알 수 없는 유형이면 None
        """
        if mime not in self._mime_cache:
            self._mime_cache[mime] = self._lookup(mime)
        return self._mime_cache[mime]

    def set(self, mime: str, ext: str):
        """외부(libmagic)에서 알아낸 확장자를 대표 확장자로 등록"""
        known = [e for e in (self.get(mime) or []) if e != ext]
        self._mime_cache[mime] = [ext] + known

    def guess_extension(self, mime: str) -> Optional[str]:
        """대표 확장자 (없으면 None)"""
        extensions = self.get(mime)
        return extensions[0] if extensions else None

    def _lookup(self, mime: str) -> Optional[List[str]]:
        xml_exts = self._load_mime_info(mime)
        py_exts = self._lookup_mimetypes(mime)

        if xml_exts is None and not py_exts:
            return None

        merged: List[str] = []
        for ext in (xml_exts or []) + py_exts:
            if ext not in merged:
                merged.append(ext)
        return merged

    def _load_mime_info(self, mime: str) -> Optional[List[str]]:
        """
        shared-mime-info XML 파일에서 glob 확장자 추출

        Returns:
            확장자 리스트 (파일이 없거나 읽을 수 없으면 None)
        """
        if self.db_root_path is None or not mime or ".." in mime.split("/"):
            return None

        mime_path = self.db_root_path / f"{mime}.xml"
        if not mime_path.is_file():
            return None

        try:
            tree = ET.parse(mime_path)
        except (OSError, ET.ParseError) as e:
            self._warn(f"MIME 정보 파일을 읽을 수 없습니다: {e}", mime_path)
            return None

        extensions = []
        for node in tree.iter():
            # 네임스페이스가 붙은 태그: {http://www.freedesktop.org/...}glob
            if not node.tag.endswith("glob"):
                continue
            pattern = node.get("pattern", "")
            if not pattern.startswith("*."):
                continue
            ext = pattern[2:].lower()
            if ext and not any(ch in ext for ch in "*?[") and ext not in extensions:
                extensions.append(ext)
        return extensions

    @staticmethod
    def _lookup_mimetypes(mime: str) -> List[str]:
        extensions = []
        preferred = mimetypes.guess_extension(mime, strict=False)
        if preferred:
            extensions.append(preferred.lstrip(".").lower())
        for ext in mimetypes.guess_all_extensions(mime, strict=False):
            ext = ext.lstrip(".").lower()
            if ext not in extensions:
                extensions.append(ext)
        return extensions
