"""
HTML 색상 테이블 단위 테스트

검증 항목:
- 대소문자/공백 무관 이름 조회
- 알 수 없는 이름은 0
- 테이블 크기와 읽기 전용 여부
"""

from __future__ import annotations

import pytest

from subsdec.text.color_table import HTML_COLORS, get_color


class TestGetColor:
    @pytest.mark.parametrize(
        "name, expected",
        [
            ("Red", 0xFF0000),
            ("red", 0xFF0000),
            ("RED", 0xFF0000),
            ("Lime", 0x00FF00),
            ("Blue", 0x0000FF),
            ("White", 0xFFFFFF),
            ("AliceBlue", 0xF0F8FF),
            ("YellowGreen", 0x9ACD32),
        ],
    )
    def test_known_names(self, name, expected):
        assert get_color(name) == expected

    def test_surrounding_whitespace_ignored(self):
        assert get_color("  Navy ") == 0x000080

    def test_gray_and_grey_are_same(self):
        assert get_color("DarkSlateGray") == get_color("darkslategrey") == 0x2F4F4F

    def test_fuchsia_and_magenta_are_same(self):
        assert get_color("Fuchsia") == get_color("Magenta") == 0xFF00FF

    def test_unknown_name_returns_zero(self):
        assert get_color("not-a-color") == 0

    def test_hex_literal_is_not_parsed(self):
        """이름만 지원: 16진수 표기는 알 수 없는 이름으로 취급"""
        assert get_color("#FF0000") == 0

    def test_empty_name_returns_zero(self):
        assert get_color("") == 0


class TestHtmlColors:
    def test_table_size(self):
        assert len(HTML_COLORS) == 147

    def test_keys_are_lowercase(self):
        assert all(name == name.lower() for name in HTML_COLORS)

    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            HTML_COLORS["red"] = 0  # type: ignore[index]
