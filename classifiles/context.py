"""
실행 컨텍스트 모듈: 한 번의 scan/backup/restore 실행 동안의 집계와 오류 기록
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .errors import PerFileError
from .logger import ClassifilesLogger, create_session_logger


@dataclass
class RunContext:
    """
    실행 컨텍스트

    작업마다 새로 만들어 명시적으로 전달한다 (전역 상태 없음).
    """
    operation: str
    logger: ClassifilesLogger = field(default_factory=create_session_logger)
    dry_run: bool = False
    processed: int = 0
    unchanged: int = 0
    skipped: int = 0
    ignored: int = 0
    errors: List[Dict[str, str]] = field(default_factory=list)

    def record_success(self):
        """처리 성공 기록"""
        self.processed += 1

    def record_unchanged(self):
        """이미 원하는 상태인 항목 기록 (처리 성공으로 집계)"""
        self.processed += 1
        self.unchanged += 1

    def record_ignored(self):
        """처리 대상이 아닌 항목 기록 (특수 파일 등)"""
        self.ignored += 1

    def record_failure(self, error: PerFileError, action: Optional[str] = None):
        """
        파일 단위 오류 기록

        Args:
            error: 발생한 오류
            action: 로그에 남길 작업 이름 (None이면 operation)
        """
        self.skipped += 1
        self.errors.append({
            "file": str(error.path),
            "type": type(error).__name__,
            "error": error.message,
        })
        self.logger.error(
            f"{action or self.operation} 건너뜀",
            source=str(error.path),
            error=error.message,
        )

    @property
    def attempted(self) -> int:
        """처리를 시도한 항목 수"""
        return self.processed + self.skipped

    @property
    def all_failed(self) -> bool:
        """시도한 항목이 있고 모두 실패했는지 여부"""
        return self.skipped > 0 and self.processed == 0

    def exit_code(self) -> int:
        """종료 코드 (모두 실패하면 2, 그 외 0)"""
        return 2 if self.all_failed else 0

    def summary(self) -> Dict:
        """실행 결과 요약"""
        return {
            "작업": self.operation + (" [DRY RUN]" if self.dry_run else ""),
            "처리": self.processed,
            "변경 없음": self.unchanged,
            "건너뜀 (오류)": self.skipped,
            "대상 아님": self.ignored,
        }

    def log_summary(self):
        """요약을 로거에 출력"""
        self.logger.log_summary(self.summary())
