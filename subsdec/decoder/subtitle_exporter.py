"""
디코딩 결과 내보내기 모듈입니다.

역할:
- DecodedSubtitle을 JSON 직렬화 가능한 dict로 변환
- JSON Lines 파일로 저장 (전체 저장 / 증분 추가)
- 스타일 정보를 뺀 사람이 읽기 쉬운 텍스트 포맷 생성

사용 예시:
    >>> exporter = SubtitleExporter()
    >>> exporter.export_jsonl(subtitles, "output/subtitles/session.jsonl")
    >>> print(exporter.format_text(subtitles[0]))
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterable

from subsdec.decoder import DecodedSubtitle
from subsdec.text import Alignment, Style, StyleFlag, TextSegment

logger = logging.getLogger(__name__)

_FLAG_NAMES = (
    (StyleFlag.BOLD, "bold"),
    (StyleFlag.ITALIC, "italic"),
    (StyleFlag.UNDERLINE, "underline"),
    (StyleFlag.STRIKEOUT, "strikeout"),
)


class SubtitleExporter:
    """
    디코딩된 자막을 파일이나 문자열로 내보내는 클래스입니다.

    파일 저장 실패 시 OSError를 로깅한 뒤 상위로 전파합니다.
    """

    def to_dict(self, subtitle: DecodedSubtitle) -> dict[str, Any]:
        """
        DecodedSubtitle을 JSON 직렬화 가능한 dict로 변환합니다.

        색상은 "#RRGGBB", 플래그는 이름 목록, 정렬은 vertical/horizontal 이름으로 기록합니다.
        """
        vertical, horizontal = _alignment_names(subtitle.align)
        return {
            "start_us": subtitle.start_us,
            "stop_us": subtitle.stop_us,
            "ephemeral": subtitle.ephemeral,
            "align": {
                "value": int(subtitle.align),
                "vertical": vertical,
                "horizontal": horizontal,
            },
            "text": subtitle.text,
            "segments": [_segment_to_dict(segment) for segment in subtitle.segments],
        }

    def format_text(self, subtitle: DecodedSubtitle) -> str:
        """
        시각과 텍스트만 담은 한 덩어리의 문자열을 만듭니다.

        형식:
            [시작 --> 종료] (정렬)
            자막텍스트
        """
        vertical, horizontal = _alignment_names(subtitle.align)
        start_str = _us_to_timestamp(subtitle.start_us)
        end_str = "..." if subtitle.ephemeral else _us_to_timestamp(subtitle.stop_us)
        return f"[{start_str} --> {end_str}] ({vertical}-{horizontal})\n{subtitle.text}"

    def export_jsonl(self, subtitles: Iterable[DecodedSubtitle], filepath: str | Path) -> None:
        """
        자막 목록을 JSON Lines 파일로 저장합니다 (기존 내용 덮어씀).

        파라미터:
            subtitles: 저장할 DecodedSubtitle 목록
            filepath: 저장할 .jsonl 파일 경로
        """
        self.append_jsonl(subtitles, filepath, truncate=True)

    def append_jsonl(
        self,
        subtitles: Iterable[DecodedSubtitle],
        filepath: str | Path,
        *,
        truncate: bool = False,
    ) -> None:
        """
        자막을 JSON Lines 파일에 한 줄씩 추가합니다 (증분 쓰기).

        파라미터:
            subtitles: 추가할 DecodedSubtitle 목록
            filepath: 저장할 .jsonl 파일 경로
            truncate: True이면 파일을 새로 생성, False이면 추가
        """
        filepath = Path(filepath)
        filepath.parent.mkdir(parents=True, exist_ok=True)
        mode = "w" if truncate else "a"

        count = 0
        try:
            with open(filepath, mode, encoding="utf-8") as f:
                for subtitle in subtitles:
                    f.write(json.dumps(self.to_dict(subtitle), ensure_ascii=False))
                    f.write("\n")
                    count += 1

            logger.info(f"JSONL 파일 저장 완료: {filepath} (+{count}개)")

        except OSError as exc:
            logger.error(f"JSONL 파일 저장 실패: {filepath}, 오류: {exc}")
            raise


# =============================================================================
# 헬퍼
# =============================================================================

def _segment_to_dict(segment: TextSegment) -> dict[str, Any]:
    return {"text": segment.text, "style": _style_to_dict(segment.style)}


def _style_to_dict(style: Style) -> dict[str, Any]:
    return {
        "flags": [name for flag, name in _FLAG_NAMES if style.flags & flag],
        "font_name": style.font_name,
        "mono_font_name": style.mono_font_name,
        "font_size": style.font_size,
        "font_color": _color_to_hex(style.font_color),
        "outline_color": _color_to_hex(style.outline_color),
        "shadow_color": _color_to_hex(style.shadow_color),
        "background_color": _color_to_hex(style.background_color),
        "font_alpha": style.font_alpha,
        "outline_width": style.outline_width,
        "shadow_width": style.shadow_width,
    }


def _color_to_hex(value: int) -> str:
    return f"#{value & 0xFFFFFF:06X}"


def _alignment_names(align: Alignment) -> tuple[str, str]:
    if align & Alignment.TOP:
        vertical = "top"
    elif align & Alignment.BOTTOM:
        vertical = "bottom"
    else:
        vertical = "middle"

    if align & Alignment.LEFT:
        horizontal = "left"
    elif align & Alignment.RIGHT:
        horizontal = "right"
    else:
        horizontal = "center"

    return vertical, horizontal


def _us_to_timestamp(us: int) -> str:
    """
    마이크로초를 HH:MM:SS.mmm 형식으로 변환합니다.

    예: 3_723_456_000 -> "01:02:03.456"
    """
    total_ms = max(0, us) // 1000
    ms = total_ms % 1000
    total_sec = total_ms // 1000
    sec = total_sec % 60
    total_min = total_sec // 60
    minutes = total_min % 60
    hours = total_min // 60
    return f"{hours:02d}:{minutes:02d}:{sec:02d}.{ms:03d}"
