#!/usr/bin/env python3
"""
classifiles - 메인 진입점

사용법:
    # 유형별 링크 트리 만들기
    python main.py scan 입력폴더 출력폴더 [--dry-run]

    # 링크 -> 링크 텍스트 파일 (FAT32 등 보관용)
    python main.py backup 입력폴더 출력폴더

    # 링크 텍스트 파일 -> 링크
    python main.py restore 입력폴더 출력폴더

기능:
    1. 파일 내용(libmagic) 기반 유형 판별
    2. 유형별 폴더에 원본을 가리키는 심볼릭 링크 생성
    3. 심볼릭 링크 백업/복원 (정확히 되돌릴 수 있는 변환)
"""

import sys

from classifiles.cli import main


if __name__ == "__main__":
    sys.exit(main())
