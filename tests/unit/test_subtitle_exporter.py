"""
SubtitleExporter 단위 테스트

검증 항목:
- dict 변환 (정렬 이름, 색상 16진수, 플래그 이름)
- 텍스트 포맷 (시각, 정렬, 다음 자막까지 표시)
- JSONL 저장 / 증분 추가 / UTF-8 원문 유지
"""

from __future__ import annotations

import json

import pytest

from subsdec.decoder import DecodedSubtitle
from subsdec.decoder.subtitle_exporter import SubtitleExporter, _us_to_timestamp
from subsdec.text import Alignment, Style, StyleFlag, TextSegment


def _make_subtitle(
    text: str = "안녕",
    start_us: int = 1_000_000,
    stop_us: int = 3_500_000,
    align: Alignment = Alignment.BOTTOM,
    style: Style = Style(),
) -> DecodedSubtitle:
    return DecodedSubtitle(
        start_us=start_us,
        stop_us=stop_us,
        ephemeral=start_us == stop_us,
        align=align,
        segments=[TextSegment(text, style)],
    )


@pytest.fixture
def exporter() -> SubtitleExporter:
    return SubtitleExporter()


class TestToDict:
    def test_basic_fields(self, exporter):
        data = exporter.to_dict(_make_subtitle())
        assert data["start_us"] == 1_000_000
        assert data["stop_us"] == 3_500_000
        assert data["ephemeral"] is False
        assert data["text"] == "안녕"
        assert data["align"] == {"value": 8, "vertical": "bottom", "horizontal": "center"}

    def test_alignment_names(self, exporter):
        data = exporter.to_dict(_make_subtitle(align=Alignment.TOP | Alignment.RIGHT))
        assert data["align"]["vertical"] == "top"
        assert data["align"]["horizontal"] == "right"

    def test_middle_left(self, exporter):
        data = exporter.to_dict(_make_subtitle(align=Alignment.LEFT))
        assert data["align"]["vertical"] == "middle"
        assert data["align"]["horizontal"] == "left"

    def test_style_serialization(self, exporter):
        style = Style(
            flags=StyleFlag.BOLD | StyleFlag.STRIKEOUT,
            font_name="Arial",
            font_size=24,
            font_color=0xFF0000,
        )
        segment = exporter.to_dict(_make_subtitle(style=style))["segments"][0]
        assert segment["text"] == "안녕"
        assert segment["style"]["flags"] == ["bold", "strikeout"]
        assert segment["style"]["font_name"] == "Arial"
        assert segment["style"]["font_size"] == 24
        assert segment["style"]["font_color"] == "#FF0000"
        assert segment["style"]["background_color"] == "#FFFFFF"
        assert segment["style"]["outline_color"] == "#000000"

    def test_default_style_has_no_flags(self, exporter):
        segment = exporter.to_dict(_make_subtitle())["segments"][0]
        assert segment["style"]["flags"] == []
        assert segment["style"]["font_name"] is None

    def test_result_is_json_serializable(self, exporter):
        json.dumps(exporter.to_dict(_make_subtitle()))


class TestFormatText:
    def test_format(self, exporter):
        text = exporter.format_text(_make_subtitle(text="line1\nline2"))
        assert text == "[00:00:01.000 --> 00:00:03.500] (bottom-center)\nline1\nline2"

    def test_ephemeral_end(self, exporter):
        text = exporter.format_text(_make_subtitle(stop_us=1_000_000))
        assert text.startswith("[00:00:01.000 --> ...]")

    @pytest.mark.parametrize(
        "us, expected",
        [
            (0, "00:00:00.000"),
            (1_500, "00:00:00.001"),
            (3_723_456_000, "01:02:03.456"),
            (-1, "00:00:00.000"),
        ],
    )
    def test_us_to_timestamp(self, us, expected):
        assert _us_to_timestamp(us) == expected


class TestJsonl:
    def test_export_writes_one_line_per_subtitle(self, exporter, tmp_path):
        path = tmp_path / "out" / "subs.jsonl"
        exporter.export_jsonl([_make_subtitle("a"), _make_subtitle("b")], path)
        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert json.loads(lines[1])["text"] == "b"

    def test_export_keeps_non_ascii(self, exporter, tmp_path):
        path = tmp_path / "subs.jsonl"
        exporter.export_jsonl([_make_subtitle("자막")], path)
        assert "자막" in path.read_text(encoding="utf-8")

    def test_export_overwrites(self, exporter, tmp_path):
        path = tmp_path / "subs.jsonl"
        exporter.export_jsonl([_make_subtitle("old")], path)
        exporter.export_jsonl([_make_subtitle("new")], path)
        lines = path.read_text(encoding="utf-8").splitlines()
        assert [json.loads(line)["text"] for line in lines] == ["new"]

    def test_append(self, exporter, tmp_path):
        path = tmp_path / "subs.jsonl"
        exporter.export_jsonl([_make_subtitle("a")], path)
        exporter.append_jsonl([_make_subtitle("b")], path)
        lines = path.read_text(encoding="utf-8").splitlines()
        assert [json.loads(line)["text"] for line in lines] == ["a", "b"]

    def test_write_error_propagates(self, exporter, tmp_path):
        # 디렉토리 경로에는 파일을 쓸 수 없음
        target = tmp_path / "dir.jsonl"
        target.mkdir()
        with pytest.raises(OSError):
            exporter.export_jsonl([_make_subtitle()], target)
