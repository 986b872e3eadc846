"""Font reader turning glyph outlines into path commands.

This module provides the FontReader class for loading TTF/OTF fonts with
fonttools and converting glyph outlines into the path commands understood by
the curve sampler.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Any

from fontTools.pens.basePen import decomposeQuadraticSegment, decomposeSuperBezierSegment
from fontTools.pens.recordingPen import RecordingPen
from fontTools.ttLib import TTFont, TTLibError

from signcraft.domain import PathCommand
from signcraft.exceptions import FontLoadError, GlyphNotFoundError

Coordinate = tuple[float, float]


def _move(point: Coordinate, dx: float) -> tuple[float, float]:
    return (point[0] + dx, point[1])


def recording_to_commands(recording: Sequence[tuple[str, tuple[Any, ...]]],
                          dx: float = 0.0) -> list[PathCommand]:
    """Convert a RecordingPen recording into absolute path commands.

    TrueType ``qCurveTo`` runs with several off-curve points are split into
    plain quadratic segments, and CFF ``curveTo`` runs with more than three
    points into plain cubic segments. Contours made only of off-curve points
    start at the implied on-curve midpoint of their last and first points.

    Args:
        recording: ``pen.value`` of a RecordingPen
        dx: Horizontal offset added to every x coordinate

    Returns:
        Commands using M, L, Q, C and Z
    """
    commands: list[PathCommand] = []

    for operator, operands in recording:
        if operator == "moveTo":
            commands.append(PathCommand("M", _move(operands[0], dx)))

        elif operator == "lineTo":
            commands.append(PathCommand("L", _move(operands[0], dx)))

        elif operator == "qCurveTo":
            points = list(operands)
            if points[-1] is None:
                # Closed contour without on-curve points
                points = points[:-1]
                first, last = points[0], points[-1]
                implied = ((first[0] + last[0]) / 2, (first[1] + last[1]) / 2)
                commands.append(PathCommand("M", _move(implied, dx)))
                points.append(implied)
            if len(points) == 1:
                commands.append(PathCommand("L", _move(points[0], dx)))
                continue
            for control, end in decomposeQuadraticSegment(points):
                commands.append(PathCommand("Q", (*_move(control, dx), *_move(end, dx))))

        elif operator == "curveTo":
            segments = (
                [tuple(operands)] if len(operands) == 3
                else decomposeSuperBezierSegment(list(operands))
            )
            for c1, c2, end in segments:
                commands.append(
                    PathCommand("C", (*_move(c1, dx), *_move(c2, dx), *_move(end, dx)))
                )

        elif operator == "closePath":
            commands.append(PathCommand("Z"))

    return commands


class FontReader:
    """Loads TTF/OTF fonts and extracts glyph outlines.

    Example:
        reader = FontReader(Path("font.ttf"))
        reader.load()
        commands = reader.text_commands("OPEN")
    """

    def __init__(self, font_path: Path) -> None:
        """Initialize the font reader.

        Args:
            font_path: Path to the TTF or OTF font file
        """
        self._font_path = font_path
        self._font: TTFont | None = None

    def load(self) -> None:
        """Load the font file.

        Raises:
            FontLoadError: If the file is missing or not a font
        """
        if not self._font_path.exists():
            raise FontLoadError(str(self._font_path), "file not found")

        try:
            self._font = TTFont(str(self._font_path))
        except (TTLibError, OSError) as e:
            raise FontLoadError(str(self._font_path), str(e)) from e

    def close(self) -> None:
        """Release the font file."""
        if self._font is not None:
            self._font.close()
            self._font = None

    def _require_font(self) -> TTFont:
        if self._font is None:
            raise RuntimeError("Font not loaded. Call load() first.")
        return self._font

    @property
    def units_per_em(self) -> int:
        """Return the font's units per em.

        Raises:
            RuntimeError: If font has not been loaded yet
        """
        return self._require_font()["head"].unitsPerEm  # type: ignore[attr-defined]

    def glyph_name(self, char: str) -> str:
        """Glyph name mapped to a character.

        Raises:
            GlyphNotFoundError: If the font has no glyph for the character
        """
        cmap = self._require_font().getBestCmap() or {}
        name = cmap.get(ord(char))
        if name is None:
            raise GlyphNotFoundError(char)
        return name

    def advance_width(self, char: str) -> int:
        """Horizontal advance of a character in font units."""
        font = self._require_font()
        return font["hmtx"][self.glyph_name(char)][0]  # type: ignore[index]

    def glyph_commands(self, char: str, dx: float = 0.0) -> list[PathCommand]:
        """Outline of one character as path commands in font units.

        Args:
            char: Character to draw
            dx: Horizontal offset in font units

        Returns:
            Path commands (empty for blank glyphs such as space)
        """
        glyph_set = self._require_font().getGlyphSet()
        pen = RecordingPen()
        glyph_set[self.glyph_name(char)].draw(pen)
        return recording_to_commands(pen.value, dx)

    def text_commands(self, text: str, tracking: float = 0.0) -> list[list[PathCommand]]:
        """Lay out a line of text left to right.

        Args:
            text: Characters to draw
            tracking: Extra spacing between characters in font units

        Returns:
            One command list per character, already offset by the pen position
        """
        pen_x = 0.0
        result: list[list[PathCommand]] = []
        for char in text:
            result.append(self.glyph_commands(char, pen_x))
            pen_x += self.advance_width(char) + tracking
        return result
