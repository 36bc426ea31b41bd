"""Tests for the local contrast heuristic."""

import pytest

from critic_testutils import make_png, make_two_tone_png
from uicritic.client.contrast import contrast_ratio, evaluate_contrast, relative_luminance


def test_luminance_extremes():
    assert relative_luminance((0, 0, 0)) == 0.0
    assert relative_luminance((255, 255, 255)) == pytest.approx(1.0)


def test_contrast_ratio_is_order_independent():
    assert contrast_ratio(0.0, 1.0) == pytest.approx(21.0)
    assert contrast_ratio(1.0, 0.0) == pytest.approx(21.0)


def test_black_on_white_passes():
    result = evaluate_contrast(make_two_tone_png((0, 0, 0), (255, 255, 255)))

    assert result.status == "Pass"
    assert result.ratio == pytest.approx(21.0)


def test_light_gray_on_white_fails():
    result = evaluate_contrast(make_two_tone_png((200, 200, 200), (255, 255, 255)))

    assert result.status == "Fail"
    assert result.ratio < 3.0


def test_mid_contrast_needs_review():
    # #8c8c8c on white is roughly 3.4:1.
    result = evaluate_contrast(make_two_tone_png((140, 140, 140), (255, 255, 255)))

    assert result.status == "Needs Review"
    assert 3.0 <= result.ratio < 4.5


def test_flat_image_needs_review():
    result = evaluate_contrast(make_png((50, 50), (120, 40, 200)))

    assert result.status == "Needs Review"
    assert result.ratio == pytest.approx(1.0)


def test_large_image_is_sampled():
    result = evaluate_contrast(make_two_tone_png((0, 0, 0), (255, 255, 255), size=1200))

    assert result.status == "Pass"
