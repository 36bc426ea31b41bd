"""Local contrast heuristic.

Estimates the WCAG contrast ratio between the darkest and lightest tones that
make up a meaningful share of the design. It is a first-pass scan, not an
element-level audit.
"""

from __future__ import annotations

import io
from dataclasses import dataclass

from PIL import Image

_SAMPLE_DIMENSION = 256
_LOW_PERCENTILE = 0.02
_HIGH_PERCENTILE = 0.98

AA_NORMAL_TEXT = 4.5
AA_LARGE_TEXT = 3.0

PASS_NOTES = (
    "Overall contrast appears adequate based on initial scan. "
    "Review specific text elements for WCAG AA/AAA compliance."
)
FAIL_NOTES = (
    "Potential contrast issues detected. Check low-contrast text "
    "(e.g., light gray on white) or text over complex backgrounds."
)
REVIEW_NOTES = (
    "Contrast meets the 3:1 large-text threshold but not 4.5:1. "
    "Check body text against WCAG AA."
)
FLAT_NOTES = "No distinct foreground and background tones were detected. Review manually."


@dataclass(frozen=True)
class ContrastResult:
    status: str  # "Pass" | "Fail" | "Needs Review"
    notes: str
    ratio: float


def _linearize(channel: int) -> float:
    c = channel / 255.0
    if c <= 0.03928:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


_LINEAR = [_linearize(value) for value in range(256)]


def relative_luminance(rgb: tuple[int, int, int]) -> float:
    r, g, b = rgb
    return 0.2126 * _LINEAR[r] + 0.7152 * _LINEAR[g] + 0.0722 * _LINEAR[b]


def contrast_ratio(lighter: float, darker: float) -> float:
    if darker > lighter:
        lighter, darker = darker, lighter
    return (lighter + 0.05) / (darker + 0.05)


def evaluate_contrast(raw: bytes) -> ContrastResult:
    """Score the tonal spread of an encoded image."""
    img = Image.open(io.BytesIO(raw))
    img = img.convert("RGB")
    img.thumbnail((_SAMPLE_DIMENSION, _SAMPLE_DIMENSION))

    data = img.tobytes()
    pixels = zip(data[0::3], data[1::3], data[2::3])
    luminances = sorted(relative_luminance(pixel) for pixel in pixels)
    last = len(luminances) - 1
    darker = luminances[int(last * _LOW_PERCENTILE)]
    lighter = luminances[int(last * _HIGH_PERCENTILE)]
    ratio = round(contrast_ratio(lighter, darker), 2)

    if ratio < 1.1:
        return ContrastResult(status="Needs Review", notes=FLAT_NOTES, ratio=ratio)
    if ratio >= AA_NORMAL_TEXT:
        return ContrastResult(status="Pass", notes=PASS_NOTES, ratio=ratio)
    if ratio >= AA_LARGE_TEXT:
        return ContrastResult(status="Needs Review", notes=REVIEW_NOTES, ratio=ratio)
    return ContrastResult(status="Fail", notes=FAIL_NOTES, ratio=ratio)
