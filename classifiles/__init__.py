"""
classifiles - 파일 내용 유형별 링크 트리 도구

제공 기능:
- TypeDetector: libmagic 기반 파일 유형/확장자 판별
- ScanBuilder: 입력 트리 -> 유형별 심볼릭 링크 트리
- LinkConverter: 심볼릭 링크 <-> 링크 텍스트 파일 (backup/restore)
- RunContext: 실행별 집계와 오류 기록
"""

from .config import ClassifilesConfig
from .context import RunContext
from .detector import FileType, TypeDetector
from .scanner import ScanBuilder, scan
from .link_converter import LinkConverter, backup, restore

__version__ = "0.1.0"

__all__ = [
    'ClassifilesConfig',
    'RunContext',
    'FileType',
    'TypeDetector',
    'ScanBuilder',
    'LinkConverter',
    'scan',
    'backup',
    'restore',
]
