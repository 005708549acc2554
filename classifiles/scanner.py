"""
스캔 모듈: 입력 폴더의 파일을 유형별 출력 폴더에 심볼릭 링크로 정리
"""

import os
import stat
from pathlib import Path
from typing import Optional, Set, Tuple

from .context import RunContext
from .detector import FileType, TypeDetector
from .errors import DetectionError, FatalError, LinkError, PerFileError
from .logger import create_session_logger
from .walker import iter_tree


def append_ext_if_needed(file_name: str, file_type: FileType) -> str:
    """
    파일 이름에 판별된 확장자가 없으면 덧붙임

    photo.jpg 가 실제로 PNG이면 photo.jpg.png 가 된다.
    """
    if file_type.ext is None or file_type.matches_extension(file_name):
        return file_name
    return f"{file_name}.{file_type.ext}"


def _links_to(path: Path, source: Path) -> bool:
    """path가 source를 가리키는 심볼릭 링크인지 확인"""
    try:
        return os.path.islink(path) and os.readlink(path) == str(source)
    except OSError:
        return False


def check_input_root(input_path: Path):
    """
    입력 경로 검사

    Raises:
        FatalError: 존재하지 않거나 읽을 수 없을 때
    """
    if not input_path.exists():
        raise FatalError(f"입력 경로가 존재하지 않습니다: {input_path}")
    if not os.access(input_path, os.R_OK):
        raise FatalError(f"입력 경로를 읽을 수 없습니다: {input_path}")
    if input_path.is_dir() and not os.access(input_path, os.X_OK):
        raise FatalError(f"입력 폴더에 접근할 수 없습니다: {input_path}")


def prepare_output_root(output_path: Path, dry_run: bool = False):
    """
    출력 폴더 확인 및 생성

    Raises:
        FatalError: 디렉토리가 아니거나 만들 수 없거나 쓸 수 없을 때
    """
    if output_path.exists() or output_path.is_symlink():
        if not output_path.is_dir():
            raise FatalError(f"출력 경로가 디렉토리가 아닙니다: {output_path}")
    elif dry_run:
        return
    else:
        try:
            output_path.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FatalError(f"출력 폴더를 만들 수 없습니다: {output_path} - {e}") from e

    if not os.access(output_path, os.W_OK | os.X_OK):
        raise FatalError(f"출력 폴더에 쓸 수 없습니다: {output_path}")


class ScanBuilder:
    """
    스캔 클래스

    입력 트리의 일반 파일마다 유형을 판별하고
    <출력>/<유형>/<이름> 에 원본 절대 경로를 가리키는 링크를 만든다.
    """

    def __init__(self, detector: TypeDetector, context: RunContext):
        self.detector = detector
        self.context = context
        # 드라이 런에서 이미 배정한 경로 (충돌 번호 계산용)
        self._planned: Set[Path] = set()

    @property
    def logger(self):
        return self.context.logger

    def _get_unique_path(self, path: Path, source: Path) -> Tuple[Path, bool]:
        """
        충돌 방지를 위한 고유 경로 생성

        Args:
            path: 희망 경로
            source: 링크 대상 (원본 절대 경로)

        Returns:
            (경로, 이미 같은 링크가 있는지 여부)
        """
        stem = path.stem
        suffix = path.suffix
        parent = path.parent
        candidate = path
        counter = 0

        while True:
            if candidate not in self._planned:
                if not os.path.lexists(candidate):
                    return candidate, False
                if _links_to(candidate, source):
                    return candidate, True
            counter += 1
            candidate = parent / f"{stem}_{counter}{suffix}"

    def destination_for(self, source: Path, file_type: FileType, output_root: Path) -> Path:
        """원본 파일의 출력 링크 경로 (충돌 처리 전)"""
        output_name = append_ext_if_needed(source.name, file_type)
        return output_root / file_type.label / output_name

    def process_file(self, source: Path, output_root: Path):
        """
        파일 하나 처리 (판별 -> 경로 결정 -> 링크 생성)

        Raises:
            PerFileError: 판별 또는 링크 생성 실패
        """
        file_type = self.detector.detect(source)
        destination, exists = self._get_unique_path(
            self.destination_for(source, file_type, output_root), source
        )

        if exists:
            self.logger.log_link(str(source), str(destination), "링크", "unchanged")
            self.context.record_unchanged()
            return

        if self.context.dry_run:
            self._planned.add(destination)
            self.logger.log_link(str(source), str(destination), "링크", "dry_run")
            self.context.record_success()
            return

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            os.symlink(source, destination)
        except OSError as e:
            raise LinkError(source, f"링크 생성 실패 ({destination}): {e.strerror or e}") from e

        self.logger.log_link(str(source), str(destination), "링크", "success")
        self.context.record_success()

    def _process_entry(self, entry: Path, output_root: Path):
        try:
            mode = entry.lstat().st_mode
        except OSError as e:
            raise DetectionError(entry, e.strerror or str(e)) from e

        if stat.S_ISDIR(mode):
            return
        if not stat.S_ISREG(mode):
            # 심볼릭 링크, 장치, FIFO, 소켓은 분류하지 않음
            self.logger.debug("일반 파일이 아니므로 제외", source=str(entry))
            self.context.record_ignored()
            return

        self.process_file(entry, output_root)

    def run(self, input_path: Path, output_path: Path) -> RunContext:
        """
        스캔 실행

        Args:
            input_path: 입력 폴더 (또는 파일 하나)
            output_path: 출력 폴더

        Returns:
            실행 컨텍스트

        Raises:
            FatalError: 입력/출력 루트 오류
        """
        input_path = Path(os.path.abspath(input_path))
        output_path = Path(os.path.abspath(output_path))

        check_input_root(input_path)
        prepare_output_root(output_path, self.context.dry_run)

        self.logger.info("스캔 시작", source=str(input_path), destination=str(output_path))

        if input_path.is_dir():
            entries = iter_tree(input_path, exclude=output_path)
        else:
            entries = iter([input_path])

        for entry in entries:
            try:
                self._process_entry(entry, output_path)
            except PerFileError as e:
                self.context.record_failure(e, "스캔")

        self.context.log_summary()
        return self.context


def scan(input_path: Path, output_path: Path, detector: TypeDetector,
         context: Optional[RunContext] = None) -> RunContext:
    """
    입력 트리를 유형별 링크 트리로 정리하는 헬퍼 함수

    Args:
        input_path: 입력 폴더
        output_path: 출력 폴더
        detector: 파일 유형 판별기
        context: 실행 컨텍스트 (None이면 새로 생성)

    Returns:
        실행 컨텍스트
    """
    if context is None:
        context = RunContext("scan", logger=detector.logger or create_session_logger())
    return ScanBuilder(detector, context).run(input_path, output_path)
