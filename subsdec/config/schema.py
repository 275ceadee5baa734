"""
subsdec 설정 스키마 정의 모듈입니다.

역할:
- Pydantic v2 BaseModel 기반으로 config.yaml의 전체 구조를 타입 안전하게 정의
- 각 섹션(system, decoder)을 독립적인 중첩 모델로 분리
- 필드별 기본값, 허용 범위, 유효성 검증(validator)을 포함

사용 예시:
    >>> from subsdec.config.schema import AppConfig
    >>> config = AppConfig(**yaml_data)
    >>> print(config.decoder.encoding)
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field, field_validator

# 모듈 로거 설정
logger = logging.getLogger(__name__)


# =============================================================================
# system 섹션: 시스템 전역 설정
# =============================================================================

class SystemConfig(BaseModel):
    """
    시스템 전역 설정을 정의하는 모델입니다.

    역할:
    - 로깅 레벨 및 포맷 지정
    - 세션 식별자 관리
    """
    # 로그 출력 레벨
    log_level: str = Field(default="INFO", description="로그 레벨 (DEBUG | INFO | WARNING | ERROR)")
    # 로그 출력 포맷
    log_format: str = Field(default="text", description="로그 포맷 (json | text)")
    # 로그 파일 저장 디렉토리 경로
    log_dir: str = Field(default="output/logs", description="로그 저장 디렉토리")
    # 세션 고유 식별자 (빈 문자열이면 UUID로 자동 생성)
    session_id: str = Field(default="", description="세션 ID (비어있으면 UUID 자동생성)")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """로그 레벨이 유효한 Python 로깅 레벨인지 검증합니다."""
        allowed_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        # 대소문자 구분 없이 비교 후 대문자로 정규화
        upper_value = value.upper()
        if upper_value not in allowed_levels:
            error_message = f"log_level은 {allowed_levels} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return upper_value

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, value: str) -> str:
        """로그 포맷이 지원되는 형식인지 검증합니다."""
        allowed_formats = ("json", "text")
        if value not in allowed_formats:
            error_message = f"log_format은 {allowed_formats} 중 하나여야 합니다. 입력값: '{value}'"
            raise ValueError(error_message)
        return value


# =============================================================================
# decoder 섹션: 텍스트 자막 디코더 설정
# =============================================================================

class DecoderConfig(BaseModel):
    """
    텍스트 자막 디코더 설정입니다.

    역할:
    - 자막 문자 인코딩 지정 (빈 값이면 로케일 기본값 사용)
    - UTF-8 자동 감지 활성화/비활성화
    - 자막 가로 정렬 기본값 지정
    - 서식(굵게/기울임 등) 적용 여부 제어
    """
    # 자막 문자 인코딩 ("" = 미지정, "system" = 플랫폼 기본 코드셋)
    encoding: str = Field(default="", description="자막 인코딩 (\"\" | system | 인코딩 이름)")
    # 인코딩이 지정되지 않았을 때 사용할 로케일 기본 인코딩
    locale_encoding: str = Field(default="CP1252", description="로케일 기본 인코딩")
    # UTF-8 자동 감지 여부
    autodetect_utf8: bool = Field(default=True, description="UTF-8 자동 감지 여부")
    # 가로 정렬 (0=중앙, 1=왼쪽, 2=오른쪽)
    align: int = Field(default=0, description="가로 정렬 (0=center | 1=left | 2=right)")
    # 서식 적용 여부 (False이면 마크업은 제거되지만 스타일은 기본값 유지)
    formatted: bool = Field(default=True, description="서식 자막 적용 여부")

    @field_validator("align")
    @classmethod
    def validate_align(cls, value: int) -> int:
        """정렬 값이 0~2 범위인지 검증합니다."""
        if value not in (0, 1, 2):
            error_message = f"align은 0(center), 1(left), 2(right) 중 하나여야 합니다. 입력값: {value}"
            raise ValueError(error_message)
        return value

    @field_validator("locale_encoding")
    @classmethod
    def validate_locale_encoding(cls, value: str) -> str:
        """로케일 기본 인코딩은 비어 있을 수 없습니다."""
        if not value.strip():
            raise ValueError("locale_encoding은 비어 있을 수 없습니다")
        return value.strip()

    @field_validator("encoding")
    @classmethod
    def strip_encoding(cls, value: str) -> str:
        """인코딩 이름 앞뒤 공백을 제거합니다."""
        return value.strip()


# =============================================================================
# 최상위 AppConfig: 모든 섹션을 통합하는 루트 모델
# =============================================================================

class AppConfig(BaseModel):
    """
    애플리케이션 전체 설정을 통합하는 최상위 모델입니다.

    역할:
    - config.yaml의 모든 섹션을 하나의 타입 안전한 객체로 통합
    - Pydantic v2 유효성 검증을 통해 설정 무결성 보장
    - 각 섹션이 누락된 경우 기본값으로 자동 생성

    사용 예시:
        >>> import yaml
        >>> with open("config.yaml") as f:
        ...     raw = yaml.safe_load(f)
        >>> config = AppConfig(**raw)
        >>> print(config.decoder.autodetect_utf8)
        True
    """
    # 시스템 전역 설정
    system: SystemConfig = Field(default_factory=SystemConfig, description="시스템 설정")
    # 디코더 설정
    decoder: DecoderConfig = Field(default_factory=DecoderConfig, description="디코더 설정")
