"""
자막 마크업 파서 모듈입니다.

역할:
- 디코딩된 자막 텍스트를 왼쪽에서 오른쪽으로 한 번 스캔
- <b> <i> <u> <s> <font ...> 태그와 닫는 태그로 스타일 스택을 push/pop
- <br/>을 줄바꿈으로 변환
- {\\anN} 정렬 코드, {Y:ibu} 스타일 코드, 기타 {X:...} 지시어 처리
- 인식하지 못한 구문은 일반 텍스트로 남김 (에러 없음)

지원 마크업:
    <b>, <i>, <u>, <s>, <font face= family= size= color= outline-color=
    shadow-color= back-color= outline-level= shadow-level= alpha=>,
    </b>, </i>, </u>, </s>, </font>, <br/>,
    {\\an1} ~ {\\an9}, {Y:i} {y:b} {Y:u} (조합 가능), {c:$bbggrr} 같은 무시 지시어
    (속성 없는 <font>는 일반 텍스트)

사용 예시:
    >>> parser = MarkupParser()
    >>> outcome = parser.parse("a<b>b</b>c", Alignment.BOTTOM)
    >>> [segment.text for segment in outcome.segments]
    ['a', 'b', 'c']
"""

from __future__ import annotations

import logging
import re
from typing import Any, Callable, Optional

from subsdec.text import (
    Alignment,
    MarkupParseError,
    ParseOutcome,
    Style,
    StyleFlag,
    TextSegment,
)
from subsdec.text.color_table import get_color
from subsdec.text.style_stack import StyleStack

logger = logging.getLogger(__name__)

ColorLookup = Callable[[str], int]

# 여는 태그 -> 추가할 플래그 (모두 3글자)
_FLAG_TAGS: dict[str, StyleFlag] = {
    "<b>": StyleFlag.BOLD,
    "<i>": StyleFlag.ITALIC,
    "<u>": StyleFlag.UNDERLINE,
    "<s>": StyleFlag.STRIKEOUT,
}

# pop을 일으키는 닫는 태그 이름
_CLOSABLE_TAGS = frozenset({"b", "i", "u", "s", "font"})

# {Y:...} 블록의 스타일 코드
_BRACE_STYLE_CODES: dict[str, StyleFlag] = {
    "i": StyleFlag.ITALIC,
    "b": StyleFlag.BOLD,
    "u": StyleFlag.UNDERLINE,
}

_ALIGN_CODE = re.compile(r"\\an([1-9])")

# 키패드 배치: 1~3 하단, 4~6 중단, 7~9 상단 / 열마다 왼쪽, 중앙, 오른쪽
_KEYPAD_VERTICAL = (Alignment.BOTTOM, Alignment.MIDDLE, Alignment.TOP)
_KEYPAD_HORIZONTAL = (Alignment.LEFT, Alignment.CENTER, Alignment.RIGHT)

# <font> 속성 이름 -> Style 필드
_STRING_ATTRIBUTES = {
    "face": "font_name",
    "family": "mono_font_name",
}
_INTEGER_ATTRIBUTES = {
    "size": "font_size",
    "outline-level": "outline_width",
    "shadow-level": "shadow_width",
    "alpha": "font_alpha",
}
_COLOR_ATTRIBUTES = {
    "color": "font_color",
    "outline-color": "outline_color",
    "shadow-color": "shadow_color",
    "back-color": "background_color",
}

_LEADING_INTEGER = re.compile(r"\s*([+-]?\d+)")


def keypad_alignment(code: int) -> Alignment:
    """
    {\\anN}의 N(1~9)을 정렬 비트마스크로 변환합니다.

    에러:
        ValueError: N이 1~9 범위를 벗어날 때
    """
    if not 1 <= code <= 9:
        raise ValueError(f"정렬 코드는 1~9 범위여야 합니다: {code}")
    index = code - 1
    return _KEYPAD_VERTICAL[index // 3] | _KEYPAD_HORIZONTAL[index % 3]


def _parse_integer(value: str) -> int:
    # atoi와 같이 앞부분의 숫자만 읽고, 없으면 0
    match = _LEADING_INTEGER.match(value)
    return int(match.group(1)) if match else 0


class _SegmentChain:
    """
    세그먼트 목록을 만드는 누적 버퍼입니다.

    현재 세그먼트의 텍스트는 조각 리스트에 모았다가
    다음 세그먼트가 시작될 때 하나의 문자열로 확정합니다.
    """

    def __init__(self) -> None:
        self._segments: list[TextSegment] = []
        self._pieces: list[str] = []
        self._style = Style()

    def append(self, text: str) -> None:
        self._pieces.append(text)

    def start(self, style: Style) -> None:
        self._seal()
        self._style = style

    def finish(self) -> list[TextSegment]:
        self._seal()
        return self._segments

    def _seal(self) -> None:
        self._segments.append(TextSegment("".join(self._pieces), self._style))
        self._pieces = []


class _ParseRun:
    """parse() 호출 한 번의 스캔 상태입니다."""

    def __init__(self, text: str, align: Alignment, color_lookup: ColorLookup) -> None:
        self._text = text
        self._align = align
        self._color_lookup = color_lookup
        self._chain = _SegmentChain()
        self._stack = StyleStack()
        # 패킷마다 첫 번째 {\anN}만 적용
        self._has_align = False

    def run(self) -> ParseOutcome:
        text = self._text
        length = len(text)
        pos = 0

        while pos < length:
            char = text[pos]
            if char == "<":
                pos = self._consume_tag(pos)
            elif char == "{":
                pos = self._consume_brace(pos)
            else:
                # 줄바꿈 포함 일반 문자
                self._chain.append(char)
                pos += 1

        return ParseOutcome(segments=self._chain.finish(), align=self._align)

    # -------------------------------------------------------------------------
    # <...> 태그
    # -------------------------------------------------------------------------

    def _consume_tag(self, pos: int) -> int:
        text = self._text
        head = text[pos:pos + 6].lower()

        if head.startswith("<br/>"):
            self._chain.append("\n")
            return pos + 5

        flag = _FLAG_TAGS.get(head[:3])
        if flag is not None:
            self._push(flag)
            return pos + 3

        # 속성 없는 <font>는 태그가 아님
        if head.startswith("<font") and len(head) == 6 and head[5].isspace():
            return self._consume_font_tag(pos + 5)

        if head.startswith("</"):
            end = text.find(">", pos + 2)
            if end != -1 and text[pos + 2:end].lower() in _CLOSABLE_TAGS:
                self._chain.start(self._stack.pop())
                return end + 1

        # 알 수 없는 태그: '<'만 글자로 남기고 나머지는 다시 스캔
        self._chain.append("<")
        return pos + 1

    def _consume_font_tag(self, pos: int) -> int:
        attributes, pos = _scan_attributes(self._text, pos)

        changes: dict[str, Any] = {}
        for name, value in attributes:
            name = name.lower()
            if name in _STRING_ATTRIBUTES:
                changes[_STRING_ATTRIBUTES[name]] = value
            elif name in _INTEGER_ATTRIBUTES:
                changes[_INTEGER_ATTRIBUTES[name]] = _parse_integer(value)
            elif name in _COLOR_ATTRIBUTES:
                changes[_COLOR_ATTRIBUTES[name]] = self._color_lookup(value)
            else:
                logger.debug(f"알 수 없는 font 속성 무시: {name}")

        self._push(StyleFlag.NONE, **changes)
        return pos

    # -------------------------------------------------------------------------
    # {...} 블록
    # -------------------------------------------------------------------------

    def _consume_brace(self, pos: int) -> int:
        text = self._text
        close = text.find("}", pos + 1)
        if close == -1:
            self._chain.append("{")
            return pos + 1

        body = text[pos + 1:close]

        if body.startswith("\\"):
            if not self._has_align:
                match = _ALIGN_CODE.fullmatch(body)
                if match:
                    self._align = keypad_alignment(int(match.group(1)))
                    self._has_align = True
                    logger.debug(f"정렬 코드 적용: {body} -> {self._align!r}")
            return close + 1

        if len(body) >= 2 and body[1] == ":":
            if body[0] in "Yy":
                for code in body[2:]:
                    flag = _BRACE_STYLE_CODES.get(code)
                    if flag is None:
                        break
                    self._push(flag)
            return close + 1

        self._chain.append("{")
        return pos + 1

    def _push(self, flag: StyleFlag, **changes: Any) -> None:
        self._chain.start(self._stack.push(flag, **changes))


def _scan_attributes(text: str, pos: int) -> tuple[list[tuple[str, str]], int]:
    """
    <font 뒤의 name=value 목록을 읽습니다.

    반환값:
        (속성 목록, 태그 종료 문자 '>' 다음 위치 또는 텍스트 끝)
    """
    length = len(text)
    attributes: list[tuple[str, str]] = []

    while pos < length:
        while pos < length and text[pos].isspace():
            pos += 1
        if pos >= length:
            break
        if text[pos] == ">":
            return attributes, pos + 1

        start = pos
        while pos < length and not text[pos].isspace() and text[pos] not in "=>":
            pos += 1
        name = text[start:pos]

        while pos < length and text[pos].isspace():
            pos += 1
        if pos < length and text[pos] == "=":
            pos += 1
            while pos < length and text[pos].isspace():
                pos += 1
            value, pos = _scan_value(text, pos)
            if name:
                attributes.append((name, value))

    return attributes, length


def _scan_value(text: str, pos: int) -> tuple[str, int]:
    length = len(text)
    if pos < length and text[pos] in "\"'":
        quote = text[pos]
        end = text.find(quote, pos + 1)
        if end != -1:
            return text[pos + 1:end], end + 1
        # 닫는 따옴표가 없으면 태그 끝까지를 값으로 사용
        tag_end = text.find(">", pos + 1)
        end = tag_end if tag_end != -1 else length
        return text[pos + 1:end], end

    start = pos
    while pos < length and not text[pos].isspace() and text[pos] != ">":
        pos += 1
    return text[start:pos], pos


class MarkupParser:
    """
    자막 텍스트를 스타일 세그먼트 목록과 정렬 값으로 변환하는 파서입니다.

    파서 인스턴스는 상태를 갖지 않으므로 여러 패킷에 재사용할 수 있습니다.
    스캔 상태(스타일 스택, 정렬 적용 여부)는 parse() 호출마다 새로 만듭니다.

    파라미터:
        color_lookup: 색상 이름 -> 0xRRGGBB 변환 함수 (기본: HTML 색상 테이블)
    """

    def __init__(self, color_lookup: Optional[ColorLookup] = None) -> None:
        self._color_lookup = color_lookup or get_color

    def parse(self, text: str, align: Alignment) -> ParseOutcome:
        """
        자막 텍스트를 파싱합니다.

        텍스트는 첫 번째 NUL 문자에서 끝난 것으로 간주합니다.

        파라미터:
            text: 디코딩된 자막 텍스트
            align: 호출자가 정한 기본 정렬 값 ({\\anN}이 있으면 교체됨)

        반환값:
            ParseOutcome: 세그먼트 목록(최소 1개)과 최종 정렬 값

        에러:
            MarkupParseError: 메모리 부족으로 파싱을 끝낼 수 없을 때.
                만들던 세그먼트는 모두 버려집니다.
        """
        terminator = text.find("\x00")
        if terminator != -1:
            text = text[:terminator]

        try:
            return _ParseRun(text, Alignment(align), self._color_lookup).run()
        except MemoryError as exc:
            raise MarkupParseError(f"자막 파싱 중 메모리 부족 (길이 {len(text)})") from exc
