"""
StyleStack 단위 테스트

검증 항목:
- push는 현재 스타일을 복사하여 플래그/속성을 누적
- pop은 이전 스타일을 복원, 빈 스택 pop은 기본 스타일
- 쌓인 스타일은 불변 (이후 push가 이전 값을 바꾸지 않음)
"""

from __future__ import annotations

import dataclasses

import pytest

from subsdec.text import Style, StyleFlag
from subsdec.text.style_stack import StyleStack


def test_empty_stack_current_is_default():
    stack = StyleStack()
    assert stack.current == Style()
    assert stack.depth == 0
    assert len(stack) == 0


def test_push_adds_flag_to_current():
    stack = StyleStack()
    style = stack.push(StyleFlag.BOLD)
    assert style.flags == StyleFlag.BOLD
    assert stack.current is style
    assert stack.depth == 1


def test_nested_push_accumulates_flags():
    stack = StyleStack()
    stack.push(StyleFlag.BOLD)
    style = stack.push(StyleFlag.ITALIC)
    assert style.flags == StyleFlag.BOLD | StyleFlag.ITALIC


def test_push_with_attribute_changes_keeps_flags():
    stack = StyleStack()
    stack.push(StyleFlag.UNDERLINE)
    style = stack.push(font_color=0xFF0000, font_size=24)
    assert style.flags == StyleFlag.UNDERLINE
    assert style.font_color == 0xFF0000
    assert style.font_size == 24
    # 변경하지 않은 필드는 기본값 유지
    assert style.outline_width == Style().outline_width


def test_pop_restores_previous_style():
    stack = StyleStack()
    bold = stack.push(StyleFlag.BOLD)
    stack.push(StyleFlag.ITALIC)
    assert stack.pop() == bold
    assert stack.pop() == Style()


def test_pop_on_empty_stack_is_noop():
    stack = StyleStack()
    assert stack.pop() == Style()
    assert stack.depth == 0


def test_pushed_styles_are_independent():
    stack = StyleStack()
    red = stack.push(font_color=0xFF0000)
    stack.push(font_color=0x00FF00)
    assert red.font_color == 0xFF0000


def test_style_is_frozen():
    style = StyleStack().push(StyleFlag.BOLD)
    with pytest.raises(dataclasses.FrozenInstanceError):
        style.font_size = 10  # type: ignore[misc]
