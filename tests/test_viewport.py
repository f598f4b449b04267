import pytest

from mandelblocks.viewport import Viewport, parse_rect, parse_size, pixel_to_complex


def test_parse_rect():
    assert parse_rect("-2.0:2.0:-1.0:1.0") == Viewport(-2.0, 2.0, -1.0, 1.0)
    assert Viewport.parse("0:1:2:3") == Viewport(0.0, 1.0, 2.0, 3.0)


@pytest.mark.parametrize("text", ["", "1:2:3", "1:2:3:4:5", "a:b:c:d", "-2::-1:1", "nan:1:2:3", "inf:1:2:3"])
def test_parse_rect_rejects_malformed(text):
    with pytest.raises(ValueError):
        parse_rect(text)


def test_parse_size():
    assert parse_size("640x480") == (640, 480)
    assert parse_size("8X8") == (8, 8)


@pytest.mark.parametrize("text", ["", "640", "640x", "x480", "axb", "0x10", "10x-1", "1x2x3", "6.5x4"])
def test_parse_size_rejects_malformed(text):
    with pytest.raises(ValueError):
        parse_size(text)


def test_origin_maps_to_lower_bounds():
    viewport = Viewport(-2.0, 2.0, -1.0, 1.0)
    assert pixel_to_complex(viewport, 8, 8, 0, 0) == complex(-2.0, -1.0)


def test_mapping_uses_absolute_spans():
    viewport = Viewport(-2.0, 1.0, -1.5, 0.5)
    point = pixel_to_complex(viewport, 4, 5, 3, 4)
    assert point.real == 3 / 4 * (abs(1.0) + abs(-2.0)) + -2.0
    assert point.imag == 4 / 5 * (abs(0.5) + abs(-1.5)) + -1.5


def test_mapping_differs_from_linear_interpolation_off_origin():
    # both bounds positive: |max| + |min| is 4, max - min would be 2
    viewport = Viewport(1.0, 3.0, 1.0, 3.0)
    point = pixel_to_complex(viewport, 4, 4, 3, 3)
    assert point == complex(4.0, 4.0)
    assert point.real != 3 / 4 * (3.0 - 1.0) + 1.0


def test_last_pixel_approaches_upper_bounds():
    viewport = Viewport(-2.0, 2.0, -1.0, 1.0)
    point = pixel_to_complex(viewport, 100, 50, 99, 49)
    assert point.real == pytest.approx(2.0 - 4.0 / 100)
    assert point.imag == pytest.approx(1.0 - 2.0 / 50)
