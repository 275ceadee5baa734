"""
ConfigManager 단위 테스트

검증 항목:
- YAML 로드 및 기본값 채움
- SUBSDEC_ 환경변수 오버라이드 (타입 변환 포함)
- dot-notation 조회
- 잘못된 값 / 없는 파일 / 깨진 YAML 에러
- 파일 변경 시 구독자 통보, 실패 시 이전 설정 유지
"""

from __future__ import annotations

import os
from pathlib import Path

import pytest

from subsdec.config.config_manager import (
    ConfigFileNotFoundError,
    ConfigLoadError,
    ConfigManager,
    ConfigValidationError,
)
from subsdec.config.schema import AppConfig, DecoderConfig, SystemConfig


@pytest.fixture(autouse=True)
def clear_env(monkeypatch):
    """호스트 환경의 SUBSDEC_ 변수가 테스트에 섞이지 않도록 제거."""
    for key in list(os.environ):
        if key.startswith("SUBSDEC_"):
            monkeypatch.delenv(key, raising=False)


def _write_config(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def config_file(tmp_path) -> Path:
    return _write_config(
        tmp_path / "config.yaml",
        "system:\n"
        "  log_level: debug\n"
        "decoder:\n"
        "  encoding: ' CP949 '\n"
        "  autodetect_utf8: false\n"
        "  align: 1\n",
    )


# =============================================================================
# 스키마
# =============================================================================

class TestSchema:
    def test_defaults(self):
        config = AppConfig()
        assert config.system.log_format == "text"
        assert config.decoder.encoding == ""
        assert config.decoder.locale_encoding == "CP1252"
        assert config.decoder.autodetect_utf8 is True
        assert config.decoder.align == 0
        assert config.decoder.formatted is True

    def test_log_level_normalized(self):
        assert SystemConfig(log_level="warning").log_level == "WARNING"

    @pytest.mark.parametrize("field, value", [
        ("log_level", "verbose"),
        ("log_format", "xml"),
    ])
    def test_invalid_system_values(self, field, value):
        with pytest.raises(ValueError):
            SystemConfig(**{field: value})

    @pytest.mark.parametrize("align", [-1, 3])
    def test_invalid_align(self, align):
        with pytest.raises(ValueError):
            DecoderConfig(align=align)

    def test_blank_locale_encoding_rejected(self):
        with pytest.raises(ValueError):
            DecoderConfig(locale_encoding="  ")


# =============================================================================
# 로드
# =============================================================================

class TestLoad:
    def test_load_file(self, config_file):
        manager = ConfigManager()
        config = manager.load(config_file)
        assert config.system.log_level == "DEBUG"
        assert config.decoder.encoding == "CP949"
        assert config.decoder.autodetect_utf8 is False
        assert config.decoder.align == 1
        # 파일에 없는 필드는 기본값
        assert config.decoder.formatted is True
        assert manager.config is config

    def test_load_empty_file(self, tmp_path):
        path = _write_config(tmp_path / "empty.yaml", "")
        config = ConfigManager().load(path)
        assert config == AppConfig()

    def test_load_defaults(self):
        config = ConfigManager().load_defaults()
        assert config == AppConfig()

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigFileNotFoundError):
            ConfigManager().load(tmp_path / "nope.yaml")

    def test_invalid_yaml(self, tmp_path):
        path = _write_config(tmp_path / "bad.yaml", "decoder: [unclosed\n")
        with pytest.raises(ConfigLoadError):
            ConfigManager().load(path)

    def test_non_mapping_root(self, tmp_path):
        path = _write_config(tmp_path / "list.yaml", "- a\n- b\n")
        with pytest.raises(ConfigLoadError):
            ConfigManager().load(path)

    def test_validation_error(self, tmp_path):
        path = _write_config(tmp_path / "invalid.yaml", "decoder:\n  align: 5\n")
        with pytest.raises(ConfigValidationError):
            ConfigManager().load(path)

    def test_validate_schema(self):
        manager = ConfigManager()
        assert manager.validate_schema({"decoder": {"align": 2}}) is True
        assert manager.validate_schema({"decoder": {"align": 9}}) is False


# =============================================================================
# 환경변수 오버라이드
# =============================================================================

class TestEnvOverrides:
    def test_string_override(self, monkeypatch, config_file):
        monkeypatch.setenv("SUBSDEC_DECODER_ENCODING", "Shift_JIS")
        config = ConfigManager().load(config_file)
        assert config.decoder.encoding == "Shift_JIS"

    def test_numeric_encoding_stays_string(self, monkeypatch):
        monkeypatch.setenv("SUBSDEC_DECODER_LOCALE_ENCODING", "1252")
        config = ConfigManager().load_defaults()
        assert config.decoder.locale_encoding == "1252"

    def test_bool_and_int_conversion(self, monkeypatch):
        monkeypatch.setenv("SUBSDEC_DECODER_AUTODETECT_UTF8", "FALSE")
        monkeypatch.setenv("SUBSDEC_DECODER_ALIGN", "2")
        config = ConfigManager().load_defaults()
        assert config.decoder.autodetect_utf8 is False
        assert config.decoder.align == 2

    def test_system_section_override(self, monkeypatch):
        monkeypatch.setenv("SUBSDEC_SYSTEM_LOG_FORMAT", "json")
        config = ConfigManager().load_defaults()
        assert config.system.log_format == "json"

    def test_key_without_field_ignored(self, monkeypatch):
        monkeypatch.setenv("SUBSDEC_DECODER", "x")
        assert ConfigManager().load_defaults() == AppConfig()

    def test_invalid_env_value_rejected(self, monkeypatch):
        monkeypatch.setenv("SUBSDEC_DECODER_ALIGN", "7")
        with pytest.raises(ConfigValidationError):
            ConfigManager().load_defaults()


# =============================================================================
# 조회
# =============================================================================

class TestGet:
    def test_get_nested_value(self, config_file):
        manager = ConfigManager()
        manager.load(config_file)
        assert manager.get("decoder.encoding") == "CP949"
        assert manager.get("system.log_level") == "DEBUG"

    def test_get_missing_key_returns_default(self, config_file):
        manager = ConfigManager()
        manager.load(config_file)
        assert manager.get("decoder.unknown", "fallback") == "fallback"

    def test_get_before_load_raises(self):
        with pytest.raises(RuntimeError):
            ConfigManager().get("decoder.encoding")


# =============================================================================
# 핫스왑
# =============================================================================

class TestHotReload:
    def test_file_change_notifies_subscribers(self, config_file):
        manager = ConfigManager()
        manager.load(config_file)
        received = []
        manager.subscribe(lambda old, new: received.append((old, new)))

        _write_config(config_file, "decoder:\n  align: 2\n")
        manager._on_file_changed(None)

        assert len(received) == 1
        old, new = received[0]
        assert old.decoder.align == 1
        assert new.decoder.align == 2
        assert manager.config.decoder.align == 2

    def test_invalid_change_keeps_previous_config(self, config_file):
        manager = ConfigManager()
        previous = manager.load(config_file)
        received = []
        manager.subscribe(lambda old, new: received.append(new))

        _write_config(config_file, "decoder:\n  align: 42\n")
        manager._on_file_changed(None)

        assert received == []
        assert manager.config is previous

    def test_failing_subscriber_does_not_block_others(self, config_file):
        manager = ConfigManager()
        manager.load(config_file)
        received = []

        def _broken(old, new):
            raise RuntimeError("boom")

        manager.subscribe(_broken)
        manager.subscribe(lambda old, new: received.append(new))
        manager._on_file_changed(None)
        assert len(received) == 1

    def test_unsubscribe(self, config_file):
        manager = ConfigManager()
        manager.load(config_file)
        received = []
        callback = lambda old, new: received.append(new)  # noqa: E731
        manager.subscribe(callback)
        manager.unsubscribe(callback)
        manager._on_file_changed(None)
        assert received == []

    def test_watch_and_stop(self, config_file):
        manager = ConfigManager()
        manager.load(config_file)
        manager.watch()
        try:
            assert manager._observer is not None
        finally:
            manager.stop_watch()
        assert manager._observer is None

    def test_watch_without_path_is_noop(self):
        manager = ConfigManager()
        manager.watch()
        assert manager._observer is None
