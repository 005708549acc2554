"""
설정 모듈: 파일 유형 판별 설정 및 상수 정의
"""

from pathlib import Path
from typing import List, Optional
from dataclasses import dataclass, field


# 유형을 알 수 없는 파일이 들어가는 폴더
OUTPUT_UNKNOWN = "unknown"

# 변환된 링크 파일의 시작 표식 (이 바이트열 바로 뒤에 링크 대상 경로가 온다)
LINK_MARKER = b"classifiles-symlink:"

# 기본 freedesktop shared-mime-info 데이터베이스 위치
DEFAULT_MIME_INFO_ROOT = Path("/usr/share/mime")


@dataclass
class ClassifilesConfig:
    """파일 분류 도구 설정 클래스"""

    # shared-mime-info XML 데이터베이스 루트
    mime_info_db_root: Path = field(default_factory=lambda: DEFAULT_MIME_INFO_ROOT)

    # libmagic 데이터베이스 파일 (None이면 libmagic 기본값)
    libmagic_db_file: Optional[Path] = None

    # 확장자를 libmagic에서 추가로 알아낼 MIME 유형들
    libmagic_used_for: List[str] = field(default_factory=lambda: [
        "application/zip",
    ])

    def __post_init__(self):
        """초기화 후 처리"""
        self.mime_info_db_root = Path(self.mime_info_db_root)
        if self.libmagic_db_file is not None:
            self.libmagic_db_file = Path(self.libmagic_db_file)
        self.libmagic_used_for = [m.lower() for m in self.libmagic_used_for]
