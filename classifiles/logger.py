"""
로깅 모듈: 분류 및 링크 변환 작업의 상세 로깅
"""

import logging
import json
from pathlib import Path
from datetime import datetime
from typing import Dict, List, Optional
from dataclasses import dataclass, asdict


@dataclass
class LogEntry:
    """로그 항목"""
    timestamp: str
    level: str
    action: str
    source: Optional[str] = None
    destination: Optional[str] = None
    status: str = ""
    details: Optional[Dict] = None
    error: Optional[str] = None


class ClassifilesLogger:
    """classifiles 전용 로거"""

    def __init__(self, log_dir: Optional[Path] = None, session_name: str = None,
                 verbose: bool = False):
        """
        Args:
            log_dir: 로그 파일 저장 디렉토리 (None이면 콘솔에만 출력)
            session_name: 세션 이름 (None이면 자동 생성)
            verbose: True면 콘솔에 디버그 로그까지 출력
        """
        self.session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.session_name = session_name or self.session_id
        self.verbose = verbose

        # 로그 파일 경로
        self.log_dir = Path(log_dir) if log_dir is not None else None
        self.log_file = None
        self.json_log_file = None
        if self.log_dir is not None:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self.log_file = self.log_dir / f"classifiles_{self.session_id}.log"
            self.json_log_file = self.log_dir / f"classifiles_{self.session_id}.json"

        # Python 표준 로거 설정
        self._setup_logger()

        # JSON 로그 저장용 리스트
        self.entries: List[LogEntry] = []

        self.debug("세션 시작", details={"session": self.session_name})

    def _setup_logger(self):
        """표준 로거 설정"""
        self.logger = logging.getLogger(f"classifiles.{self.session_name}")
        self.logger.setLevel(logging.DEBUG)

        # 기존 핸들러 제거
        self.logger.handlers = []

        # 콘솔 핸들러 (stderr)
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG if self.verbose else logging.INFO)
        console_handler.setFormatter(logging.Formatter('%(message)s'))
        self.logger.addHandler(console_handler)

        # 파일 핸들러
        if self.log_file is not None:
            file_handler = logging.FileHandler(self.log_file, encoding='utf-8')
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(logging.Formatter(
                '%(asctime)s | %(levelname)-8s | %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            ))
            self.logger.addHandler(file_handler)

    def _create_entry(self, level: str, action: str, **kwargs) -> LogEntry:
        """로그 항목 생성"""
        entry = LogEntry(
            timestamp=datetime.now().isoformat(),
            level=level,
            action=action,
            **kwargs
        )
        self.entries.append(entry)
        return entry

    def _format_message(self, action: str, source: str = None,
                        destination: str = None, details: Dict = None) -> str:
        """로그 메시지 포맷팅"""
        parts = [action]
        if source:
            parts.append(f"| 원본: {source}")
        if destination:
            parts.append(f"| 대상: {destination}")
        if details:
            detail_str = ", ".join(f"{k}={v}" for k, v in details.items())
            parts.append(f"| {detail_str}")
        return " ".join(parts)

    def debug(self, action: str, source: str = None, destination: str = None,
              details: Dict = None):
        """디버그 로그"""
        self._create_entry("DEBUG", action, source=source, destination=destination,
                           details=details)
        self.logger.debug(self._format_message(action, source, destination, details))

    def info(self, action: str, source: str = None, destination: str = None,
             details: Dict = None, status: str = ""):
        """정보 로그"""
        self._create_entry("INFO", action, source=source, destination=destination,
                           details=details, status=status)
        self.logger.info(self._format_message(action, source, destination, details))

    def warning(self, action: str, source: str = None, destination: str = None,
                details: Dict = None):
        """경고 로그"""
        self._create_entry("WARNING", action, source=source, destination=destination,
                           details=details)
        self.logger.warning(self._format_message(action, source, destination, details))

    def error(self, action: str, source: str = None, error: str = None,
              details: Dict = None):
        """오류 로그"""
        self._create_entry("ERROR", action, source=source, error=error,
                           details=details)
        msg = self._format_message(action, source, details=details)
        if error:
            msg += f" | 오류: {error}"
        self.logger.error(msg)

    def log_detection(self, file_path: str, label: str, ext: Optional[str]):
        """파일 유형 판별 로그"""
        self.debug(
            "유형 판별",
            source=file_path,
            details={"type": label, "ext": ext or "-"}
        )

    def log_link(self, source: str, destination: str, action: str, status: str,
                 error: str = None):
        """링크 생성/변환 로그"""
        if status == "success":
            self.info(f"{action} 완료", source=source, destination=destination,
                      status=status)
        elif status == "dry_run":
            self.info(f"[DRY RUN] {action} 예정", source=source,
                      destination=destination, status=status)
        elif status == "unchanged":
            self.debug(f"{action} 생략 (이미 존재)", source=source,
                       destination=destination)
        else:
            self.error(f"{action} 실패", source=source, error=error,
                       details={"destination": destination} if destination else None)

    def log_summary(self, summary: Dict):
        """요약 정보 로그"""
        self.info("=" * 50)
        self.info("작업 요약")
        for key, value in summary.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 50)

    def save_json_log(self):
        """JSON 형식 로그 저장"""
        if self.json_log_file is None:
            return

        log_data = {
            "session_id": self.session_id,
            "session_name": self.session_name,
            "start_time": self.entries[0].timestamp if self.entries else None,
            "end_time": datetime.now().isoformat(),
            "total_entries": len(self.entries),
            "entries": [asdict(entry) for entry in self.entries],
        }

        try:
            with open(self.json_log_file, 'w', encoding='utf-8') as f:
                json.dump(log_data, f, ensure_ascii=False, indent=2)
        except OSError as e:
            self.logger.error(f"JSON 로그 저장 실패: {e}")
            return

        self.logger.debug(f"JSON 로그 저장: {self.json_log_file}")

    def finalize(self):
        """세션 종료 및 로그 저장"""
        self.debug("세션 종료", details={"total_entries": len(self.entries)})
        self.save_json_log()

        # 핸들러 정리
        for handler in self.logger.handlers[:]:
            handler.close()
            self.logger.removeHandler(handler)

    def get_log_paths(self) -> Dict[str, Optional[Path]]:
        """로그 파일 경로 반환"""
        return {
            "text_log": self.log_file,
            "json_log": self.json_log_file,
        }


def create_session_logger(log_dir: Path = None, session_name: str = None,
                          verbose: bool = False) -> ClassifilesLogger:
    """
    새 세션 로거 생성 헬퍼 함수

    Args:
        log_dir: 로그 디렉토리 (None이면 파일 로그 없음)
        session_name: 세션 이름
        verbose: 디버그 로그 콘솔 출력 여부

    Returns:
        ClassifilesLogger 인스턴스
    """
    return ClassifilesLogger(log_dir=log_dir, session_name=session_name, verbose=verbose)
