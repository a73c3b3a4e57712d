from __future__ import annotations

import pytest

from lsysdraw.color import HSL, format_hex, hsl2rgb, normalize_hex, parse_hex, rgb2hsl, shift_color


def _channels_close(left: str, right: str, tolerance: int = 1) -> bool:
    return all(abs(a - b) <= tolerance for a, b in zip(parse_hex(left), parse_hex(right)))


@pytest.mark.parametrize("color", ["#FF0000", "#00FF00", "#123456", "#000000", "#FFFFFF", "#7f3fa0"])
def test_hsl_round_trip(color: str) -> None:
    assert _channels_close(hsl2rgb(rgb2hsl(color)), color)


def test_rgb2hsl_primary_values() -> None:
    red = rgb2hsl("#FF0000")
    assert (red.h, red.s, red.l) == pytest.approx((0.0, 1.0, 0.5))
    blue = rgb2hsl("#0000FF")
    assert blue.h == pytest.approx(240.0)
    grey = rgb2hsl("#808080")
    assert grey.s == 0
    assert grey.h == 0


def test_hsl2rgb_wraps_hue() -> None:
    assert hsl2rgb(HSL(h=360.0, s=1.0, l=0.5)) == "#FF0000"
    assert hsl2rgb(HSL(h=-120.0, s=1.0, l=0.5)) == "#0000FF"


def test_hex_helpers() -> None:
    assert parse_hex("#0a0B0c") == (10, 11, 12)
    assert format_hex((300, -4, 16)) == "#FF0010"
    assert normalize_hex(" #abcdef ") == "#ABCDEF"
    with pytest.raises(ValueError):
        parse_hex("red")
    with pytest.raises(ValueError):
        parse_hex("#12345")


class TestShiftColor:
    def test_hue_rotates_forward_and_back(self) -> None:
        modifier = HSL(h=120.0, s=1.0, l=1.0)
        shifted = shift_color("#FF0000", modifier)
        assert shifted == "#00FF00"
        assert shift_color(shifted, modifier, inverse=True) == "#FF0000"

    def test_saturation_and_lightness_are_clamped(self) -> None:
        modifier = HSL(h=0.0, s=3.0, l=4.0)
        assert shift_color("#804040", modifier) == "#FFFFFF"

    def test_inverse_with_zero_factor_keeps_component(self) -> None:
        modifier = HSL(h=0.0, s=0.0, l=1.0)
        assert shift_color("#FF0000", modifier) == "#808080"
        assert _channels_close(shift_color("#FF0000", modifier, inverse=True), "#FF0000")
