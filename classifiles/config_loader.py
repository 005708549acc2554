"""
YAML 설정 파일 로더
"""

import yaml
from pathlib import Path
from typing import Optional, Dict, Any

from .config import ClassifilesConfig
from .errors import FatalError


def load_yaml_config(config_path: Path) -> Dict[str, Any]:
    """
    YAML 설정 파일 로드

    Args:
        config_path: YAML 파일 경로

    Returns:
        설정 딕셔너리

    Raises:
        FatalError: 파일이 없거나 읽을 수 없거나 YAML 형식이 아닐 때
    """
    if not config_path.exists():
        raise FatalError(f"설정 파일을 찾을 수 없습니다: {config_path}")

    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        raise FatalError(f"설정 파일을 읽을 수 없습니다: {config_path} - {e}") from e

    if config_data is None:
        return {}
    if not isinstance(config_data, dict):
        raise FatalError(f"설정 파일 최상위는 매핑이어야 합니다: {config_path}")

    return config_data


def expand_path(path_str: str) -> Path:
    """경로 확장 (~/ 처리)"""
    return Path(path_str).expanduser()


def create_config_from_yaml(yaml_path: Path) -> ClassifilesConfig:
    """
    YAML 파일에서 ClassifilesConfig 생성

    Args:
        yaml_path: YAML 설정 파일 경로

    Returns:
        ClassifilesConfig 인스턴스
    """
    data = load_yaml_config(yaml_path)
    config = ClassifilesConfig()

    # shared-mime-info 데이터베이스
    mime_info = data.get('mime_info_db') or {}
    libmagic = data.get('libmagic') or {}
    if not isinstance(mime_info, dict) or not isinstance(libmagic, dict):
        raise FatalError(f"mime_info_db/libmagic 항목은 매핑이어야 합니다: {yaml_path}")

    if mime_info.get('root'):
        config.mime_info_db_root = expand_path(mime_info['root'])

    # libmagic 설정
    if libmagic.get('db_file'):
        config.libmagic_db_file = expand_path(libmagic['db_file'])
    if 'used_for' in libmagic:
        used_for = libmagic['used_for'] or []
        if not isinstance(used_for, list):
            raise FatalError(f"libmagic.used_for 항목은 목록이어야 합니다: {yaml_path}")
        config.libmagic_used_for = [str(m).lower() for m in used_for]

    return config


def load_config(config_path: Optional[Path] = None) -> ClassifilesConfig:
    """
    설정 로드 (경로가 없으면 기본 설정)

    Args:
        config_path: YAML 설정 파일 경로 또는 None

    Returns:
        ClassifilesConfig 인스턴스
    """
    if config_path is None:
        return ClassifilesConfig()
    return create_config_from_yaml(Path(config_path))
