"""
subsdec 설정 관리 모듈입니다.

역할:
- YAML 설정 파일을 로드하고 Pydantic 스키마로 유효성 검증
- 환경변수 오버라이드 지원 (접두사: SUBSDEC_)
- dot-notation 기반 설정값 조회 (예: "decoder.encoding")
- watchdog 기반 파일 변경 감지 및 핫스왑
- 설정 변경 시 구독자(콜백) 통보

사용 예시:
    >>> manager = ConfigManager()
    >>> config = manager.load("config.yaml")
    >>> align = manager.get("decoder.align")
    >>> manager.subscribe(lambda old, new: print("설정 변경됨"))
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path
from typing import Any, Callable, Optional

import yaml
from pydantic import ValidationError
from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from subsdec.config.schema import AppConfig

logger = logging.getLogger(__name__)

# 환경변수 오버라이드 접두사
ENV_PREFIX = "SUBSDEC_"

# 설정 변경 콜백 타입: (이전 설정, 새 설정) -> None
ConfigChangeCallback = Callable[[AppConfig, AppConfig], None]


class ConfigLoadError(Exception):
    """설정 파일 로드 중 발생하는 에러의 기본 클래스입니다."""
    pass


class ConfigValidationError(ConfigLoadError):
    """설정 스키마 검증 실패 시 발생하는 에러입니다."""
    pass


class ConfigFileNotFoundError(ConfigLoadError):
    """설정 파일을 찾을 수 없을 때 발생하는 에러입니다."""
    pass


class _ConfigFileHandler(FileSystemEventHandler):
    """감시 대상 설정 파일의 수정 이벤트만 ConfigManager에 전달합니다."""

    def __init__(self, manager: "ConfigManager", target_filename: str) -> None:
        super().__init__()
        self._manager = manager
        self._target_filename = target_filename

    def on_modified(self, event: Any) -> None:
        if event.is_directory:
            return
        if Path(event.src_path).name == self._target_filename:
            logger.info(f"설정 파일 변경 감지: {event.src_path}")
            self._manager._on_file_changed(event)


class ConfigManager:
    """
    YAML 설정 파일을 로드하고 관리하는 매니저 클래스입니다.

    역할:
    - YAML 파일 파싱 및 Pydantic 유효성 검증
    - 환경변수 오버라이드 (SUBSDEC_ 접두사)
    - dot-notation 설정값 조회
    - 파일 변경 감지(watchdog) 및 구독자 통보
    - 검증 실패 시 이전 설정 유지

    사용 예시:
        >>> manager = ConfigManager()
        >>> config = manager.load("config.yaml")
        >>> print(manager.get("decoder.locale_encoding"))
        'CP1252'
    """

    def __init__(self) -> None:
        # 현재 활성 설정 객체 (로드 전에는 None)
        self._config: Optional[AppConfig] = None
        # 설정 파일 경로 (로드 시 설정됨)
        self._config_filepath: Optional[Path] = None
        # 설정 변경 시 호출할 콜백 목록
        self._subscribers: list[ConfigChangeCallback] = []
        self._lock: threading.RLock = threading.RLock()
        # watch() 호출 시 생성되는 watchdog Observer
        self._observer: Optional[Observer] = None

    @property
    def config(self) -> Optional[AppConfig]:
        """현재 활성 설정 객체를 반환합니다."""
        with self._lock:
            return self._config

    def load(self, filepath: str | Path) -> AppConfig:
        """
        YAML 설정 파일을 로드하고 Pydantic 스키마로 검증합니다.

        처리 순서:
        1. 파일 존재 여부 확인
        2. YAML 파싱
        3. 환경변수 오버라이드 적용
        4. Pydantic 스키마 검증
        5. 검증 통과 시 활성 설정으로 교체

        파라미터:
            filepath (str | Path): YAML 설정 파일 경로

        반환값:
            AppConfig: 검증 완료된 설정 객체

        에러:
            ConfigFileNotFoundError: 파일이 존재하지 않을 때
            ConfigValidationError: 스키마 검증 실패 시
            ConfigLoadError: YAML 파싱 실패 등 기타 에러
        """
        filepath = Path(filepath)
        logger.info(f"설정 파일 로드 시작: {filepath}")

        if not filepath.exists():
            error_message = f"설정 파일을 찾을 수 없습니다: {filepath}"
            logger.error(error_message)
            raise ConfigFileNotFoundError(error_message)

        validated_config = self._read_and_validate(filepath)

        with self._lock:
            self._config = validated_config
            self._config_filepath = filepath

        logger.info(
            f"설정 로드 성공: "
            f"encoding='{validated_config.decoder.encoding}', "
            f"autodetect_utf8={validated_config.decoder.autodetect_utf8}, "
            f"align={validated_config.decoder.align}, "
            f"log_level={validated_config.system.log_level}"
        )
        return validated_config

    def load_defaults(self) -> AppConfig:
        """
        설정 파일 없이 기본값과 환경변수 오버라이드만으로 설정을 구성합니다.

        반환값:
            AppConfig: 검증 완료된 설정 객체
        """
        validated_config = self._validate_config(self._apply_env_overrides({}))
        with self._lock:
            self._config = validated_config
        logger.info("설정 파일 없이 기본 설정 사용")
        return validated_config

    def get(self, key: str, default: Any = None) -> Any:
        """
        dot-notation으로 설정값을 조회합니다.

        예: "decoder.encoding" -> config.decoder.encoding

        파라미터:
            key (str): dot-notation 설정 키
            default (Any): 키가 존재하지 않을 때 반환할 기본값

        반환값:
            Any: 설정값 또는 기본값

        에러:
            RuntimeError: 설정이 로드되지 않은 상태에서 호출 시
        """
        with self._lock:
            if self._config is None:
                error_message = "설정이 아직 로드되지 않았습니다. load()를 먼저 호출하세요."
                logger.error(error_message)
                raise RuntimeError(error_message)

            current_value: Any = self._config
            for part in key.split("."):
                if isinstance(current_value, dict):
                    if part not in current_value:
                        return default
                    current_value = current_value[part]
                elif hasattr(current_value, part):
                    current_value = getattr(current_value, part)
                else:
                    logger.debug(f"설정 키 '{key}'에서 '{part}' 부분을 찾을 수 없음, 기본값 반환")
                    return default

            return current_value

    def subscribe(self, callback: ConfigChangeCallback) -> None:
        """
        설정 변경 시 호출될 콜백 함수를 등록합니다.

        파라미터:
            callback (ConfigChangeCallback): (이전_설정, 새_설정) -> None 형태의 콜백
        """
        self._subscribers.append(callback)
        logger.info(f"설정 변경 구독자 등록 완료 (총 {len(self._subscribers)}명)")

    def unsubscribe(self, callback: ConfigChangeCallback) -> None:
        """등록된 설정 변경 콜백을 제거합니다."""
        try:
            self._subscribers.remove(callback)
            logger.info(f"설정 변경 구독자 제거 완료 (남은 구독자: {len(self._subscribers)}명)")
        except ValueError:
            logger.warning("제거할 구독자를 찾을 수 없습니다")

    def watch(self, filepath: str | Path | None = None) -> None:
        """
        watchdog을 사용하여 설정 파일 변경을 감시합니다.

        파일이 수정되면 자동으로 리로드하고, 검증 통과 시
        등록된 구독자들에게 변경 사항을 통보합니다.

        파라미터:
            filepath (str | Path | None): 감시할 파일 경로.
                None이면 마지막으로 로드한 파일 경로를 사용합니다.
        """
        watch_path = Path(filepath) if filepath else self._config_filepath

        if watch_path is None:
            logger.warning("감시할 파일 경로가 지정되지 않았습니다. load()를 먼저 호출하세요.")
            return

        if self._observer is not None:
            logger.debug("이미 설정 파일을 감시 중입니다")
            return

        if filepath is not None:
            with self._lock:
                self._config_filepath = watch_path

        observer = Observer()
        observer.schedule(
            _ConfigFileHandler(self, watch_path.name),
            path=str(watch_path.parent),
            recursive=False,
        )
        observer.daemon = True
        observer.start()
        self._observer = observer

        logger.info(f"설정 파일 감시 활성화 완료: {watch_path}")

    def stop_watch(self) -> None:
        """설정 파일 감시를 중지합니다."""
        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5)
            self._observer = None
            logger.info("설정 파일 감시 중지 완료")

    def validate_schema(self, raw_config: dict) -> bool:
        """
        딕셔너리 데이터가 AppConfig 스키마를 만족하는지 검증합니다.

        반환값:
            bool: 검증 통과 시 True, 실패 시 False
        """
        try:
            AppConfig(**raw_config)
            return True
        except ValidationError as validation_error:
            logger.warning(f"스키마 검증 실패: {validation_error}")
            return False

    # =========================================================================
    # 내부 메서드 (private)
    # =========================================================================

    def _read_and_validate(self, filepath: Path) -> AppConfig:
        """YAML 파싱, 환경변수 오버라이드, 스키마 검증을 차례로 수행합니다."""
        try:
            raw_config = self._parse_yaml_file(filepath)
            raw_config = self._apply_env_overrides(raw_config)
            return self._validate_config(raw_config)

        except ConfigLoadError:
            raise

        except Exception as unexpected_error:
            error_message = f"설정 로드 중 예상치 못한 에러: {unexpected_error}"
            logger.error(error_message, exc_info=True)
            raise ConfigLoadError(error_message) from unexpected_error

    def _parse_yaml_file(self, filepath: Path) -> dict:
        """
        YAML 파일을 읽어서 딕셔너리로 파싱합니다.

        에러:
            ConfigLoadError: 파일 읽기 또는 파싱 실패 시
        """
        try:
            with open(filepath, "r", encoding="utf-8") as config_file:
                raw_data = yaml.safe_load(config_file)

        except yaml.YAMLError as yaml_error:
            error_message = f"YAML 파싱 에러: {yaml_error}"
            logger.error(error_message)
            raise ConfigLoadError(error_message) from yaml_error

        except OSError as file_error:
            error_message = f"파일 읽기 에러: {file_error}"
            logger.error(error_message)
            raise ConfigLoadError(error_message) from file_error

        if raw_data is None:
            logger.warning(f"설정 파일이 비어있습니다: {filepath}")
            return {}

        if not isinstance(raw_data, dict):
            error_message = f"설정 파일의 최상위 구조가 딕셔너리가 아닙니다: {type(raw_data)}"
            raise ConfigLoadError(error_message)

        return raw_data

    def _apply_env_overrides(self, raw_config: dict) -> dict:
        """
        SUBSDEC_ 접두사 환경변수로 설정값을 오버라이드합니다.

        환경변수 매핑 규칙:
        - 접두사 제거 후 첫 번째 언더스코어가 섹션 구분자
        - 예: SUBSDEC_DECODER_ENCODING -> decoder.encoding
        - 예: SUBSDEC_DECODER_AUTODETECT_UTF8 -> decoder.autodetect_utf8
        - 예: SUBSDEC_SYSTEM_LOG_LEVEL -> system.log_level
        """
        override_count = 0

        for env_key, env_value in os.environ.items():
            if not env_key.startswith(ENV_PREFIX):
                continue

            config_path = env_key[len(ENV_PREFIX):].lower()
            path_parts = config_path.split("_", 1)

            if len(path_parts) < 2:
                logger.debug(f"환경변수 '{env_key}' 무시 (키 경로 부족)")
                continue

            section_name, field_name = path_parts
            section = raw_config.setdefault(section_name, {})
            if not isinstance(section, dict):
                logger.warning(f"환경변수 '{env_key}' 무시 ('{section_name}' 섹션이 딕셔너리가 아님)")
                continue

            section[field_name] = self._convert_env_value(field_name, env_value)
            logger.info(f"환경변수 오버라이드: {env_key} -> {section_name}.{field_name}")
            override_count += 1

        if override_count > 0:
            logger.info(f"환경변수 오버라이드 적용 완료: {override_count}건")

        return raw_config

    def _convert_env_value(self, field_name: str, value: str) -> Any:
        """
        환경변수 문자열 값을 적절한 Python 타입으로 변환합니다.

        변환 규칙:
        - 인코딩 관련 필드 -> str (원본 유지, 예: "1252"를 숫자로 바꾸지 않음)
        - "true"/"false" (대소문자 무관) -> bool
        - 정수 형식 문자열 -> int
        - 그 외 -> str
        """
        if field_name.endswith("encoding"):
            return value

        if value.lower() == "true":
            return True
        if value.lower() == "false":
            return False

        try:
            return int(value)
        except ValueError:
            return value

    def _validate_config(self, raw_config: dict) -> AppConfig:
        """
        딕셔너리를 Pydantic AppConfig 모델로 검증하고 변환합니다.

        에러:
            ConfigValidationError: Pydantic 검증 실패 시
        """
        try:
            return AppConfig(**raw_config)

        except ValidationError as validation_error:
            error_details = validation_error.errors()
            for error_detail in error_details:
                field_path = " -> ".join(str(loc) for loc in error_detail["loc"])
                logger.error(
                    f"설정 검증 실패 - 필드: {field_path}, "
                    f"에러: {error_detail['msg']}, "
                    f"입력값: {error_detail.get('input', 'N/A')}"
                )

            error_message = f"설정 스키마 검증 실패: {len(error_details)}개 에러 발생"
            raise ConfigValidationError(error_message) from validation_error

    def _on_file_changed(self, event: Any) -> None:
        """
        설정 파일 변경 감지 시 호출되는 핸들러입니다.

        검증에 실패하면 이전 설정을 그대로 유지합니다.
        """
        if self._config_filepath is None:
            logger.warning("설정 파일 경로가 설정되지 않아 리로드를 건너뜁니다")
            return

        try:
            new_config = self._read_and_validate(self._config_filepath)
        except ConfigLoadError as load_error:
            logger.error(f"설정 핫스왑 실패, 이전 설정을 유지합니다: {load_error}")
            return

        with self._lock:
            previous_config = self._config
            self._config = new_config

        logger.info("설정 핫스왑 성공: 새 설정이 적용되었습니다")

        if previous_config is not None:
            self._notify_subscribers(previous_config, new_config)

    def _notify_subscribers(
        self,
        previous_config: AppConfig,
        new_config: AppConfig,
    ) -> None:
        """
        등록된 모든 구독자에게 설정 변경을 통보합니다.

        개별 구독자의 콜백 실행 중 에러가 발생해도
        다른 구독자의 통보는 계속 진행합니다.
        """
        for subscriber_index, callback in enumerate(list(self._subscribers)):
            try:
                callback(previous_config, new_config)
            except Exception as callback_error:
                logger.error(
                    f"구독자 {subscriber_index + 1} 콜백 실행 중 에러: {callback_error}",
                    exc_info=True,
                )
