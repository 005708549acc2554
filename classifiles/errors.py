"""
오류 모듈: 치명적 오류와 파일 단위 오류 구분
"""

from pathlib import Path


class ClassifilesError(Exception):
    """classifiles 기본 예외"""


class FatalError(ClassifilesError):
    """실행 전체를 중단시키는 오류 (루트 디렉토리, 설정 파일 등)"""


class PerFileError(ClassifilesError):
    """
    파일 단위 오류

    해당 항목만 건너뛰고 실행은 계속된다.
    """

    def __init__(self, path: Path, message: str):
        super().__init__(f"{path}: {message}")
        self.path = Path(path)
        self.message = message


class DetectionError(PerFileError):
    """파일 유형 판별 실패 (읽기 권한, I/O 오류 등)"""


class LinkError(PerFileError):
    """링크 생성, 변환, 복사 실패"""


class RestoreError(PerFileError):
    """변환된 링크 파일의 내용이 올바르지 않음"""
