"""Shared fixtures."""

from pathlib import Path

import pytest
from fontTools.fontBuilder import FontBuilder
from fontTools.pens.ttGlyphPen import TTGlyphPen

UNITS_PER_EM = 1000
ADVANCE = 700


def _draw_o(pen: TTGlyphPen) -> None:
    # Outer ring clockwise, counter counter-clockwise (TrueType convention)
    pen.moveTo((100, 0))
    pen.lineTo((100, 700))
    pen.lineTo((600, 700))
    pen.lineTo((600, 0))
    pen.closePath()
    pen.moveTo((250, 200))
    pen.lineTo((450, 200))
    pen.lineTo((450, 500))
    pen.lineTo((250, 500))
    pen.closePath()


def _draw_i(pen: TTGlyphPen) -> None:
    pen.moveTo((100, 0))
    pen.lineTo((100, 700))
    pen.lineTo((250, 700))
    pen.lineTo((250, 0))
    pen.closePath()


@pytest.fixture
def font_path(tmp_path: Path) -> Path:
    """A minimal TrueType font with a square 'O', a bar 'I' and a space."""
    order = [".notdef", "space", "O", "I"]
    glyphs = {name: TTGlyphPen(None).glyph() for name in order[:2]}
    for name, draw in (("O", _draw_o), ("I", _draw_i)):
        pen = TTGlyphPen(None)
        draw(pen)
        glyphs[name] = pen.glyph()

    builder = FontBuilder(UNITS_PER_EM, isTTF=True)
    builder.setupGlyphOrder(order)
    builder.setupCharacterMap({ord(" "): "space", ord("O"): "O", ord("I"): "I"})
    builder.setupGlyf(glyphs)
    builder.setupHorizontalMetrics({name: (ADVANCE, 0) for name in order})
    builder.setupHorizontalHeader(ascent=800, descent=-200)
    builder.setupNameTable({"familyName": "Signcraft Test", "styleName": "Regular"})
    builder.setupOS2()
    builder.setupPost()

    path = tmp_path / "test.ttf"
    builder.save(str(path))
    return path
