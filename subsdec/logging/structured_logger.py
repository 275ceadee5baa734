"""
subsdec 로그 출력 설정

디코더 세션 하나가 로그 두 곳을 씁니다.
콘솔(stderr)과 log_dir 아래의 subsdec.log 파일이며, 파일은 10MB 단위로 5개까지 순환합니다.
stdout은 디코딩 결과 전용이라 로그를 쓰지 않습니다.

json 포맷에서는 레코드의 extra 값이 그대로 필드가 됩니다.
예를 들어 변환 실패 로그의 pts_us, encoding이 JSON 필드로 남습니다.

사용 예시:
    >>> setup_logging(config)
    >>> logging.getLogger("subsdec.decoder").error("변환 실패", extra={"encoding": "CP949"})
"""

from __future__ import annotations

import logging
import logging.handlers
import sys
import uuid
from pathlib import Path
from typing import Optional

from pythonjsonlogger import jsonlogger

from subsdec.config.schema import AppConfig

LOG_FILENAME = "subsdec.log"
LOG_MAX_BYTES = 10 * 1024 * 1024
LOG_BACKUP_COUNT = 5

# 텍스트 포맷에 찍히는 세션 ID 길이
SESSION_PREFIX_LENGTH = 8

_SESSION_ID: str = ""

logger = logging.getLogger(__name__)


def setup_logging(config: AppConfig, session_id: Optional[str] = None) -> None:
    """
    root logger를 디코더 세션용으로 다시 구성합니다.

    이전 핸들러는 닫고 제거하므로 여러 번 호출해도 핸들러가 쌓이지 않습니다.
    로그 파일을 열 수 없으면 콘솔만 사용합니다.

    파라미터:
        config: AppConfig 인스턴스 (system 섹션 사용)
        session_id: 세션 식별자. 없으면 config.system.session_id, 그것도 없으면 UUID
    """
    global _SESSION_ID
    _SESSION_ID = _resolve_session_id(config, session_id)

    system = config.system
    level = getattr(logging, system.log_level, logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    for old in root.handlers[:]:
        root.removeHandler(old)
        old.close()

    handlers, file_error = _build_handlers(Path(system.log_dir))
    formatter = _build_formatter(system.log_format, _SESSION_ID)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        root.addHandler(handler)

    if file_error is not None:
        logger.warning(f"로그 파일을 열 수 없어 콘솔에만 기록합니다: {file_error}")
    logger.info(
        f"로깅 초기화: level={system.log_level}, format={system.log_format}, "
        f"session={_SESSION_ID}"
    )


def _resolve_session_id(config: AppConfig, session_id: Optional[str]) -> str:
    return session_id or config.system.session_id or str(uuid.uuid4())


def _build_handlers(log_dir: Path) -> tuple[list[logging.Handler], Optional[OSError]]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=log_dir / LOG_FILENAME,
                maxBytes=LOG_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding="utf-8",
            )
        )
    except OSError as exc:
        return handlers, exc
    return handlers, None


def _build_formatter(log_format: str, session_id: str) -> logging.Formatter:
    if log_format == "json":
        return _JsonFormatter(session_id)
    return _TextFormatter(session_id)


def _session_prefix(session_id: str) -> str:
    return session_id[:SESSION_PREFIX_LENGTH] if session_id else "no-sid"


class _JsonFormatter(jsonlogger.JsonFormatter):
    """레코드마다 session_id, module(로거 이름), level을 붙입니다."""

    def __init__(self, session_id: str = "") -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s %(message)s",
            datefmt="%Y-%m-%dT%H:%M:%S",
        )
        self._session_id = session_id

    def add_fields(
        self,
        log_record: dict,
        record: logging.LogRecord,
        message_dict: dict,
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            session_id=self._session_id,
            module=record.name,
            level=record.levelname,
        )


class _TextFormatter(logging.Formatter):
    def __init__(self, session_id: str = "") -> None:
        super().__init__(
            fmt=f"%(asctime)s [{_session_prefix(session_id)}] %(levelname)-8s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )


class StructuredLogger:
    """setup_logging 이후의 세션 정보를 조회합니다."""

    @staticmethod
    def get(name: str) -> logging.Logger:
        return logging.getLogger(name)

    @staticmethod
    def get_session_id() -> str:
        """현재 세션 ID. setup_logging 전에는 빈 문자열입니다."""
        return _SESSION_ID
