"""
classifiles CLI - 명령행 인터페이스

사용법:
    classifiles scan    INPUT_DIR OUTPUT_DIR
    classifiles backup  INPUT_DIR OUTPUT_DIR
    classifiles restore INPUT_DIR OUTPUT_DIR
    classifiles detect  PATH...
"""

import sys
import argparse
from pathlib import Path
from typing import List, Optional

from .config_loader import load_config
from .context import RunContext
from .detector import TypeDetector
from .errors import FatalError, PerFileError
from .link_converter import LinkConverter
from .logger import ClassifilesLogger, create_session_logger
from .scanner import ScanBuilder
from .walker import iter_tree


EXIT_FATAL = 1


def build_parser() -> argparse.ArgumentParser:
    """인자 파서 생성"""
    parser = argparse.ArgumentParser(
        prog="classifiles",
        description="파일 내용 유형별 링크 트리 생성 및 링크 백업/복원 도구",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
사용 예시:
    # 유형별 링크 트리 만들기
    classifiles scan ~/Downloads ~/Sorted

    # FAT32 보관용으로 링크를 텍스트 파일로 변환 (제자리)
    classifiles backup ~/Sorted ~/Sorted

    # 다시 링크로 복원
    classifiles restore ~/Sorted ~/Sorted
        """
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML 설정 파일 (기본: 내장 설정)"
    )
    parser.add_argument(
        "--log-dir",
        type=str,
        default=None,
        help="텍스트/JSON 로그 저장 폴더 (기본: 파일 로그 없음)"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="디버그 로그 출력"
    )

    sub = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (
        ("scan", "입력 폴더의 파일을 유형별 링크 트리로 정리"),
        ("backup", "심볼릭 링크를 링크 텍스트 파일로 변환"),
        ("restore", "링크 텍스트 파일을 심볼릭 링크로 복원"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("input_dir", help="입력 폴더")
        p.add_argument("output_dir", help="출력 폴더 (입력과 같으면 제자리 변환)")
        p.add_argument(
            "--dry-run",
            action="store_true",
            help="실제 변경 없이 미리보기"
        )

    d = sub.add_parser("detect", help="파일 유형과 확장자 출력")
    d.add_argument("paths", nargs="+", help="파일 또는 폴더")

    return parser


def run_scan(args: argparse.Namespace, logger: ClassifilesLogger) -> int:
    """scan 실행"""
    config = load_config(Path(args.config) if args.config else None)
    detector = TypeDetector(config, logger)
    context = RunContext("scan", logger=logger, dry_run=args.dry_run)
    ScanBuilder(detector, context).run(Path(args.input_dir), Path(args.output_dir))
    return context.exit_code()


def run_backup(args: argparse.Namespace, logger: ClassifilesLogger) -> int:
    """backup 실행"""
    context = RunContext("backup", logger=logger, dry_run=args.dry_run)
    LinkConverter(context).backup(Path(args.input_dir), Path(args.output_dir))
    return context.exit_code()


def run_restore(args: argparse.Namespace, logger: ClassifilesLogger) -> int:
    """restore 실행"""
    context = RunContext("restore", logger=logger, dry_run=args.dry_run)
    LinkConverter(context).restore(Path(args.input_dir), Path(args.output_dir))
    return context.exit_code()


def run_detect(args: argparse.Namespace, logger: ClassifilesLogger) -> int:
    """detect 실행: 경로마다 '경로: 유형 [확장자]' 출력"""
    config = load_config(Path(args.config) if args.config else None)
    detector = TypeDetector(config, logger)
    context = RunContext("detect", logger=logger)

    for path_str in args.paths:
        path = Path(path_str)
        if not path.exists():
            raise FatalError(f"경로가 존재하지 않습니다: {path}")
        if path.is_dir():
            files = [p for p in iter_tree(path) if p.is_file() and not p.is_symlink()]
        else:
            files = [path]

        for file_path in files:
            try:
                file_type = detector.detect(file_path)
            except PerFileError as e:
                context.record_failure(e, "판별")
                continue
            print(f"{file_path}: {file_type.mime or file_type.label} [{file_type.ext or '-'}]")
            context.record_success()

    return context.exit_code()


COMMANDS = {
    "scan": run_scan,
    "backup": run_backup,
    "restore": run_restore,
    "detect": run_detect,
}


def main(argv: Optional[List[str]] = None) -> int:
    """
    CLI 진입점

    Returns:
        종료 코드 (0: 성공, 1: 치명적 오류, 2: 모든 항목 실패)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        logger = create_session_logger(
            log_dir=Path(args.log_dir) if args.log_dir else None,
            verbose=args.verbose,
        )
    except OSError as e:
        print(f"오류: 로그 폴더를 만들 수 없습니다: {e}", file=sys.stderr)
        return EXIT_FATAL

    try:
        return COMMANDS[args.command](args, logger)
    except FatalError as e:
        logger.error("실행 중단", error=str(e))
        return EXIT_FATAL
    finally:
        logger.finalize()


if __name__ == "__main__":
    sys.exit(main())
