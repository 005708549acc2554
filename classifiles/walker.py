"""
디렉토리 순회 모듈: 결정적(사전순) 재귀 순회
"""

import os
from pathlib import Path
from typing import Iterator, Optional

from .errors import FatalError


def _raise_fatal(error: OSError):
    raise FatalError(f"디렉토리를 읽을 수 없습니다: {error.filename} - {error.strerror}") from error


def _is_same_dir(path: str, real_target: str) -> bool:
    # 링크는 항목으로 남겨 둔다
    return not os.path.islink(path) and os.path.realpath(path) == real_target


def iter_tree(root: Path, exclude: Optional[Path] = None) -> Iterator[Path]:
    """
    디렉토리 아래의 모든 항목을 사전순으로 순회

    심볼릭 링크는 따라가지 않으며 (디렉토리를 가리키는 링크도 항목으로만
    반환), 디렉토리 자체도 항목으로 반환한다.

    Args:
        root: 순회할 디렉토리
        exclude: 순회에서 제외할 하위 디렉토리 (출력 폴더가 입력 폴더 안에 있을 때)

    Yields:
        각 항목의 경로

    Raises:
        FatalError: 디렉토리를 읽을 수 없을 때
    """
    excluded = os.path.realpath(exclude) if exclude is not None else None

    for dirpath, dirnames, filenames in os.walk(root, onerror=_raise_fatal):
        if excluded is not None:
            dirnames[:] = [
                d for d in dirnames
                if not _is_same_dir(os.path.join(dirpath, d), excluded)
            ]
        entries = sorted(dirnames + filenames)

        # 호출자가 링크를 바꿔도 os.walk가 다시 확인하지 않도록 먼저 제외
        dirnames[:] = sorted(
            d for d in dirnames if not os.path.islink(os.path.join(dirpath, d))
        )

        for name in entries:
            yield Path(dirpath) / name
