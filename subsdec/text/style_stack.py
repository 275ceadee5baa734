"""
중첩 마크업 범위를 추적하는 스타일 스택 모듈입니다.

역할:
- 여는 태그마다 현재 스타일을 복사·수정한 스냅샷을 push
- 닫는 태그마다 pop 후 새 최상위 스타일(없으면 기본 스타일)을 현재 스타일로 사용
- Style은 불변 값이므로 스택과 세그먼트가 같은 객체를 공유해도 안전

사용 예시:
    >>> stack = StyleStack()
    >>> bold = stack.push(StyleFlag.BOLD)
    >>> stack.pop() == Style()
    True
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any

from subsdec.text import Style, StyleFlag


class StyleStack:
    """
    Style 스냅샷의 LIFO 스택입니다.

    빈 스택에서 pop()을 호출해도 에러 없이 기본 스타일을 반환합니다.
    짝이 맞지 않는 닫는 태그를 허용하기 위한 동작입니다.
    """

    def __init__(self) -> None:
        self._entries: list[Style] = []

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def depth(self) -> int:
        """현재 중첩 깊이를 반환합니다."""
        return len(self._entries)

    @property
    def current(self) -> Style:
        """현재 범위에서 보이는 스타일입니다. 스택이 비어 있으면 기본 스타일입니다."""
        if self._entries:
            return self._entries[-1]
        return Style()

    def push(self, flags: StyleFlag = StyleFlag.NONE, **changes: Any) -> Style:
        """
        현재 스타일을 복사하여 플래그와 속성을 적용한 뒤 스택에 쌓습니다.

        파라미터:
            flags: 기존 플래그에 OR로 추가할 StyleFlag
            changes: Style 필드 변경값 (예: font_color=0xFF0000)

        반환값:
            Style: 새로 쌓인 스타일
        """
        base = self.current
        style = replace(base, flags=base.flags | flags, **changes)
        self._entries.append(style)
        return style

    def pop(self) -> Style:
        """
        최상위 스타일을 제거하고 새 현재 스타일을 반환합니다.

        스택이 비어 있으면 아무것도 제거하지 않고 기본 스타일을 반환합니다.
        """
        if self._entries:
            self._entries.pop()
        return self.current
