"""
자막 텍스트 모델 패키지

공통 데이터 타입:
- StyleFlag: 굵게/기울임/밑줄/취소선 플래그
- Style: 세그먼트 하나에 적용되는 불변 스타일 스냅샷
- TextSegment: 같은 스타일을 공유하는 텍스트 구간
- Alignment: 화면 정렬 비트마스크 (세로 + 가로)
- ParseOutcome: 마크업 파서 결과 (세그먼트 목록 + 정렬)
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field


class StyleFlag(enum.IntFlag):
    """독립적으로 조합 가능한 글꼴 스타일 플래그입니다."""
    NONE = 0
    BOLD = 0x01
    ITALIC = 0x02
    UNDERLINE = 0x20
    STRIKEOUT = 0x40


class Alignment(enum.IntFlag):
    """
    자막 정렬 비트마스크입니다.

    세로 값(TOP | MIDDLE | BOTTOM) 하나와 가로 값(LEFT | CENTER | RIGHT) 하나를
    OR로 조합합니다. CENTER와 MIDDLE은 값 0입니다.
    """
    CENTER = 0
    LEFT = 0x1
    RIGHT = 0x2
    TOP = 0x4
    BOTTOM = 0x8

    MIDDLE = 0


# 기본 스타일 값 (렌더러 기본값과 동일)
DEFAULT_FONT_COLOR = 0xFFFFFF
DEFAULT_OUTLINE_COLOR = 0x000000
DEFAULT_SHADOW_COLOR = 0x000000
DEFAULT_BACKGROUND_COLOR = 0xFFFFFF
DEFAULT_FONT_ALPHA = 0xFF
DEFAULT_OUTLINE_WIDTH = 1
DEFAULT_SHADOW_WIDTH = 0


@dataclass(frozen=True)
class Style:
    """
    텍스트 세그먼트 하나에 적용되는 스타일 스냅샷입니다.

    불변 객체이며, 변경이 필요하면 dataclasses.replace()로 새 값을 만듭니다.

    필드:
        flags: StyleFlag 조합
        font_name: 글꼴 이름 (<font face=...>)
        mono_font_name: 고정폭 글꼴 이름 (<font family=...>)
        font_size: 글꼴 크기 (0 = 렌더러 기본값)
        font_color: 글자 색상 (0xRRGGBB)
        outline_color: 외곽선 색상
        shadow_color: 그림자 색상
        background_color: 배경 색상
        font_alpha: 글자 투명도 (0~255)
        outline_width: 외곽선 두께
        shadow_width: 그림자 두께
    """
    flags: StyleFlag = StyleFlag.NONE
    font_name: str | None = None
    mono_font_name: str | None = None
    font_size: int = 0
    font_color: int = DEFAULT_FONT_COLOR
    outline_color: int = DEFAULT_OUTLINE_COLOR
    shadow_color: int = DEFAULT_SHADOW_COLOR
    background_color: int = DEFAULT_BACKGROUND_COLOR
    font_alpha: int = DEFAULT_FONT_ALPHA
    outline_width: int = DEFAULT_OUTLINE_WIDTH
    shadow_width: int = DEFAULT_SHADOW_WIDTH


@dataclass(frozen=True)
class TextSegment:
    """같은 스타일을 공유하는 최대 텍스트 구간입니다."""
    text: str
    style: Style = field(default_factory=Style)


@dataclass(frozen=True)
class ParseOutcome:
    """
    마크업 파싱 결과입니다.

    필드:
        segments: 입력 순서대로 정렬된 세그먼트 목록 (최소 1개)
        align: 최종 정렬 비트마스크
    """
    segments: list[TextSegment]
    align: Alignment

    @property
    def text(self) -> str:
        """모든 세그먼트 텍스트를 순서대로 이어 붙인 문자열입니다."""
        return "".join(segment.text for segment in self.segments)


class MarkupParseError(Exception):
    """마크업 파싱이 중단되어 결과를 만들 수 없을 때 발생하는 에러입니다."""
    pass
