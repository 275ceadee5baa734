"""
로그 출력 설정 단위 테스트

검증 항목:
- 콘솔 로그는 stderr (stdout은 디코딩 결과 전용)
- subsdec.log 파일 순환 설정
- 텍스트 포맷의 세션 ID 8자 접두어
- 디코더 변환 실패가 JSON 로그에 pts_us, encoding 필드로 남음
"""

from __future__ import annotations

import json
import logging
import logging.handlers
import sys

import pytest

from subsdec.config.schema import AppConfig
from subsdec.decoder import SubtitlePacket
from subsdec.decoder.subtitle_decoder import SubtitleDecoder
from subsdec.logging.structured_logger import (
    LOG_BACKUP_COUNT,
    LOG_FILENAME,
    LOG_MAX_BYTES,
    StructuredLogger,
    setup_logging,
)


@pytest.fixture(autouse=True)
def reset_root_logger():
    """각 테스트 후 root logger 핸들러 초기화."""
    yield
    root = logging.getLogger()
    for h in root.handlers[:]:
        root.removeHandler(h)
        h.close()


def _make_config(tmp_path, log_format: str = "text", session_id: str = "") -> AppConfig:
    return AppConfig(**{
        "system": {
            "log_level": "DEBUG",
            "log_format": log_format,
            "log_dir": str(tmp_path / "logs"),
            "session_id": session_id,
        },
    })


def _read_log(tmp_path) -> str:
    for handler in logging.getLogger().handlers:
        handler.flush()
    return (tmp_path / "logs" / LOG_FILENAME).read_text(encoding="utf-8")


class TestHandlers:
    def test_console_goes_to_stderr(self, tmp_path):
        setup_logging(_make_config(tmp_path))
        console = [h for h in logging.getLogger().handlers if type(h) is logging.StreamHandler]
        assert len(console) == 1
        assert console[0].stream is sys.stderr

    def test_rotating_log_file(self, tmp_path):
        setup_logging(_make_config(tmp_path))
        rotating = [
            h for h in logging.getLogger().handlers
            if isinstance(h, logging.handlers.RotatingFileHandler)
        ]
        assert len(rotating) == 1
        assert rotating[0].maxBytes == LOG_MAX_BYTES
        assert rotating[0].backupCount == LOG_BACKUP_COUNT
        # 초기화 로그가 파일에 기록됨
        assert "로깅 초기화" in _read_log(tmp_path)

    def test_setup_twice_replaces_handlers(self, tmp_path):
        config = _make_config(tmp_path)
        setup_logging(config)
        setup_logging(config)
        assert len(logging.getLogger().handlers) == 2


class TestSessionPrefix:
    def test_text_log_has_eight_char_prefix(self, tmp_path):
        setup_logging(_make_config(tmp_path, session_id="abcdefghijkl"))
        logging.getLogger("subsdec.test").info("세션 접두어")
        content = _read_log(tmp_path)
        assert "[abcdefgh] " in content
        assert "[abcdefghi" not in content

    def test_generated_session_id(self, tmp_path):
        setup_logging(_make_config(tmp_path))
        session_id = StructuredLogger.get_session_id()
        assert len(session_id) == 36
        assert f"[{session_id[:8]}]" in _read_log(tmp_path)

    def test_explicit_session_id_wins(self, tmp_path):
        setup_logging(_make_config(tmp_path, session_id="from-config"), session_id="explicit")
        assert StructuredLogger.get_session_id() == "explicit"


class TestDecoderJsonLog:
    def test_conversion_failure_fields(self, tmp_path):
        setup_logging(_make_config(tmp_path, log_format="json", session_id="json-session"))

        with SubtitleDecoder(AppConfig(), declared_encoding="ASCII") as decoder:
            assert decoder.decode(SubtitlePacket(data=b"bad\xff", pts_us=1_000_000)) is None

        records = [json.loads(line) for line in _read_log(tmp_path).splitlines() if line]
        failures = [
            record for record in records
            if record["module"] == "subsdec.decoder.subtitle_decoder" and record["level"] == "ERROR"
        ]
        assert len(failures) == 1
        assert failures[0]["encoding"] == "ASCII"
        assert failures[0]["pts_us"] == 1_000_000
        assert failures[0]["session_id"] == "json-session"
