"""
링크 변환 모듈: 심볼릭 링크 <-> 링크 텍스트 파일 변환 (FAT32 등 보관용)

변환된 링크 파일 형식 (한 줄, 끝 줄바꿈 없음):

    classifiles-symlink:<링크 대상>

<링크 대상>은 readlink 결과 바이트 그대로이다. 파일 이름과 상대 경로는
원래 링크와 같다.
"""

import os
import secrets
import shutil
import stat
from pathlib import Path
from typing import Callable, Optional

from .config import LINK_MARKER
from .context import RunContext
from .errors import FatalError, LinkError, PerFileError, RestoreError
from .logger import create_session_logger
from .scanner import check_input_root, prepare_output_root
from .walker import iter_tree


# 링크 대상 최대 길이 (Linux PATH_MAX)
MAX_TARGET_BYTES = 4096


def encode_link(target: str) -> bytes:
    """링크 대상을 변환된 링크 파일 내용으로 인코딩"""
    return LINK_MARKER + os.fsencode(target)


def is_link_file(path: Path) -> bool:
    """
    변환된 링크 파일인지 확인 (시작 표식만 검사)

    Raises:
        OSError: 파일을 읽을 수 없을 때
    """
    with open(path, "rb") as f:
        return f.read(len(LINK_MARKER)) == LINK_MARKER


def decode_link(path: Path) -> str:
    """
    변환된 링크 파일에서 링크 대상 읽기

    Args:
        path: 변환된 링크 파일

    Returns:
        링크 대상 경로 문자열

    Raises:
        RestoreError: 표식이 없거나 대상이 비었거나 올바른 경로가 아닐 때
        OSError: 파일을 읽을 수 없을 때
    """
    with open(path, "rb") as f:
        if f.read(len(LINK_MARKER)) != LINK_MARKER:
            raise RestoreError(path, "변환된 링크 표식이 없습니다")
        raw = f.read(MAX_TARGET_BYTES + 1)

    if not raw:
        raise RestoreError(path, "링크 대상이 비어 있습니다")
    if len(raw) > MAX_TARGET_BYTES:
        raise RestoreError(path, f"링크 대상이 너무 깁니다 (>{MAX_TARGET_BYTES} bytes)")
    if b"\0" in raw:
        raise RestoreError(path, "링크 대상에 NUL 문자가 있습니다")
    return os.fsdecode(raw)


def _temp_path(destination: Path) -> Path:
    # 이름 길이와 무관한 짧은 고정 길이 이름
    return destination.parent / f".cf-{os.getpid()}-{secrets.token_hex(4)}"


def _replace_via_temp(destination: Path, create: Callable[[Path], None]):
    """
    임시 경로에 항목을 만든 뒤 os.replace로 대상과 교체

    대상이 링크여도 따라가지 않고 항목 자체를 바꾼다.
    """
    temp = _temp_path(destination)
    if os.path.lexists(temp):
        os.unlink(temp)
    try:
        create(temp)
        os.replace(temp, destination)
    except BaseException:
        if os.path.lexists(temp):
            os.unlink(temp)
        raise


def _write_bytes(data: bytes) -> Callable[[Path], None]:
    def create(temp: Path):
        with open(temp, "xb") as f:
            f.write(data)
    return create


def _symlink_to(target: str) -> Callable[[Path], None]:
    def create(temp: Path):
        os.symlink(target, temp)
    return create


def _copy_from(source: Path) -> Callable[[Path], None]:
    def create(temp: Path):
        shutil.copy2(source, temp, follow_symlinks=False)
    return create


class LinkConverter:
    """
    링크 변환 클래스

    backup: 심볼릭 링크 -> 링크 텍스트 파일
    restore: 링크 텍스트 파일 -> 심볼릭 링크

    입력과 출력 폴더가 같으면 제자리에서 교체하고, 다르면 나머지
    일반 파일과 폴더 구조도 함께 복사한다.
    """

    def __init__(self, context: RunContext):
        self.context = context

    @property
    def logger(self):
        return self.context.logger

    def _apply(self, action: str, source: Path, destination: Path,
               create: Callable[[Path], None]):
        """항목 하나를 만들거나 교체 (드라이 런이면 로그만)"""
        if self.context.dry_run:
            self.logger.log_link(str(source), str(destination), action, "dry_run")
            self.context.record_success()
            return

        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            _replace_via_temp(destination, create)
        except OSError as e:
            raise LinkError(source, f"{action} 실패 ({destination}): {e.strerror or e}") from e

        self.logger.log_link(str(source), str(destination), action, "success")
        self.context.record_success()

    def _make_directory(self, destination: Path):
        if self.context.dry_run:
            return
        try:
            destination.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise FatalError(f"폴더를 만들 수 없습니다: {destination} - {e}") from e

    def _backup_entry(self, entry: Path, destination: Path, in_place: bool):
        mode = entry.lstat().st_mode

        if stat.S_ISLNK(mode):
            try:
                target = os.readlink(entry)
            except OSError as e:
                raise LinkError(entry, f"링크 대상을 읽을 수 없습니다: {e.strerror or e}") from e
            self._apply("링크 백업", entry, destination, _write_bytes(encode_link(target)))
        elif stat.S_ISDIR(mode):
            if not in_place:
                self._make_directory(destination)
        elif stat.S_ISREG(mode) and not in_place:
            self._apply("복사", entry, destination, _copy_from(entry))
        else:
            self.context.record_ignored()

    def _restore_entry(self, entry: Path, destination: Path, in_place: bool):
        mode = entry.lstat().st_mode

        if stat.S_ISREG(mode):
            try:
                marked = is_link_file(entry)
            except OSError as e:
                raise LinkError(entry, f"파일을 읽을 수 없습니다: {e.strerror or e}") from e

            if marked:
                try:
                    target = decode_link(entry)
                except OSError as e:
                    raise LinkError(entry, f"파일을 읽을 수 없습니다: {e.strerror or e}") from e
                self._apply("링크 복원", entry, destination, _symlink_to(target))
            elif not in_place:
                self._apply("복사", entry, destination, _copy_from(entry))
            else:
                self.context.record_ignored()
        elif stat.S_ISDIR(mode):
            if not in_place:
                self._make_directory(destination)
        elif stat.S_ISLNK(mode) and not in_place:
            try:
                target = os.readlink(entry)
            except OSError as e:
                raise LinkError(entry, f"링크 대상을 읽을 수 없습니다: {e.strerror or e}") from e
            self._apply("링크 복사", entry, destination, _symlink_to(target))
        else:
            self.context.record_ignored()

    def _run(self, title: str, input_path: Path, output_path: Path, handle_entry) -> RunContext:
        input_path = Path(os.path.abspath(input_path))
        output_path = Path(os.path.abspath(output_path))

        check_input_root(input_path)
        if not input_path.is_dir():
            raise FatalError(f"입력 경로가 디렉토리가 아닙니다: {input_path}")

        in_place = os.path.realpath(input_path) == os.path.realpath(output_path)
        if not in_place:
            prepare_output_root(output_path, self.context.dry_run)

        self.logger.info(f"{title} 시작", source=str(input_path), destination=str(output_path))

        exclude = None if in_place else output_path
        for entry in iter_tree(input_path, exclude=exclude):
            destination = output_path / entry.relative_to(input_path)
            try:
                try:
                    handle_entry(entry, destination, in_place)
                except OSError as e:
                    raise LinkError(entry, f"항목을 읽을 수 없습니다: {e.strerror or e}") from e
            except PerFileError as e:
                self.context.record_failure(e, title)

        self.context.log_summary()
        return self.context

    def backup(self, input_path: Path, output_path: Path) -> RunContext:
        """
        심볼릭 링크를 링크 텍스트 파일로 변환

        Args:
            input_path: 링크 트리 (보통 scan 출력)
            output_path: 결과 폴더 (input_path와 같으면 제자리 변환)

        Returns:
            실행 컨텍스트

        Raises:
            FatalError: 루트 폴더 또는 폴더 단위 I/O 오류
        """
        return self._run("백업", input_path, output_path, self._backup_entry)

    def restore(self, input_path: Path, output_path: Path) -> RunContext:
        """
        링크 텍스트 파일을 심볼릭 링크로 복원 (backup의 역변환)

        Args:
            input_path: 백업된 트리
            output_path: 결과 폴더 (input_path와 같으면 제자리 변환)

        Returns:
            실행 컨텍스트

        Raises:
            FatalError: 루트 폴더 또는 폴더 단위 I/O 오류
        """
        return self._run("복원", input_path, output_path, self._restore_entry)


def backup(input_path: Path, output_path: Path,
           context: Optional[RunContext] = None) -> RunContext:
    """심볼릭 링크 -> 링크 텍스트 파일 변환 헬퍼 함수"""
    if context is None:
        context = RunContext("backup", logger=create_session_logger())
    return LinkConverter(context).backup(input_path, output_path)


def restore(input_path: Path, output_path: Path,
            context: Optional[RunContext] = None) -> RunContext:
    """링크 텍스트 파일 -> 심볼릭 링크 복원 헬퍼 함수"""
    if context is None:
        context = RunContext("restore", logger=create_session_logger())
    return LinkConverter(context).restore(input_path, output_path)
