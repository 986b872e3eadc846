"""Flattening of SVG-style path commands into point sequences.

Supports move, line, horizontal/vertical line, quadratic and cubic Bezier
(including the smooth S/T forms), elliptical arc and close commands in both
absolute and relative form.

Bezier segments are sampled at a fixed number of uniform parameter steps
(``max(10, resolution // 10)``) unless an adaptive tolerance is supplied, in
which case they are recursively subdivided until the chord deviation is
within tolerance. Arcs are always approximated by 20 straight-chord steps to
their end point; the radii and flags are read but not used.

Malformed commands (too few operands) are skipped and counted, never raised.
"""

import re
from collections.abc import Iterable

import structlog

from signcraft.core._bezier import (
    flatten_cubic,
    flatten_quadratic,
    sample_cubic,
    sample_quadratic,
)
from signcraft.domain import Path, PathCommand, Point2D

logger = structlog.get_logger(__name__)

ARC_SAMPLES = 20
MIN_CURVE_SAMPLES = 10

_COMMAND_RE = re.compile(r"[MLHVCSQTAZ][^MLHVCSQTAZ]*", re.IGNORECASE)
_NUMBER_RE = re.compile(r"[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

# Operands consumed per repetition of each command
_ARITY: dict[str, int] = {
    "M": 2,
    "L": 2,
    "H": 1,
    "V": 1,
    "C": 6,
    "S": 4,
    "Q": 4,
    "T": 2,
    "A": 7,
    "Z": 0,
}


def parse_path_data(path_data: str) -> list[PathCommand]:
    """Tokenize SVG path data into commands.

    Non-numeric operand text is ignored, so ``"L 10 abc 20"`` yields
    ``L(10, 20)``.

    Args:
        path_data: SVG ``d`` attribute text

    Returns:
        Commands in document order
    """
    commands: list[PathCommand] = []
    for token in _COMMAND_RE.findall(path_data.strip()):
        args = tuple(float(n) for n in _NUMBER_RE.findall(token[1:]))
        commands.append(PathCommand(token[0], args))
    return commands


def curve_samples(resolution: int) -> int:
    """Fixed-step sample count for one Bezier segment."""
    return max(MIN_CURVE_SAMPLES, resolution // 10)


class CurveSampler:
    """Converts path commands into ordered point sequences.

    Example:
        sampler = CurveSampler(resolution=100)
        path = sampler.sample(parse_path_data("M0 0 Q 50 100 100 0 Z"))
    """

    def __init__(self, resolution: int = 100, tolerance: float | None = None) -> None:
        """Initialize the sampler.

        Args:
            resolution: Controls fixed-step Bezier sampling density
            tolerance: When set, Bezier curves are flattened adaptively so no
                chord deviates from the curve by more than this distance
        """
        self.resolution = resolution
        self.tolerance = tolerance if tolerance and tolerance > 0 else None
        self.skipped_commands = 0

    def sample(self, commands: Iterable[PathCommand]) -> Path:
        """Flatten all commands into a single path.

        Sub-paths started by additional move commands are concatenated, which
        matches how outline shapes are extruded as one polygon.

        Args:
            commands: Parsed path commands

        Returns:
            Path closed if the last command is a close command
        """
        points: list[Point2D] = []
        closed = False
        for subpath in self._walk(commands):
            points.extend(subpath.points)
            closed = subpath.closed
        return Path(points=_dedupe(points), closed=closed)

    def sample_subpaths(self, commands: Iterable[PathCommand]) -> list[Path]:
        """Flatten commands, returning one path per move command.

        Args:
            commands: Parsed path commands

        Returns:
            Non-empty sub-paths in document order
        """
        return [
            Path(points=_dedupe(subpath.points), closed=subpath.closed)
            for subpath in self._walk(commands)
            if subpath.points
        ]

    def _walk(self, commands: Iterable[PathCommand]) -> list[Path]:
        subpaths: list[Path] = []
        current: list[Point2D] = []
        cursor = Point2D(0.0, 0.0)
        start = cursor
        # Last control point, for S/T reflection
        last_control: Point2D | None = None
        last_kind = ""

        for command in commands:
            kind = command.kind
            arity = _ARITY.get(kind)
            if arity is None:
                self.skipped_commands += 1
                logger.debug("unknown_command_skipped", command=command.name)
                continue

            args = command.args
            rel = command.is_relative

            if kind == "Z":
                if current and not cursor.is_close(start):
                    current.append(start)
                if current:
                    subpaths.append(Path(points=current, closed=True))
                    current = []
                cursor = start
                last_control = None
                last_kind = kind
                continue

            groups = len(args) // arity
            if groups == 0 or len(args) % arity:
                self.skipped_commands += 1
                logger.debug("malformed_command_skipped", command=command.name,
                             operands=len(args), arity=arity)
            if groups == 0:
                continue

            for g in range(groups):
                a = args[g * arity:(g + 1) * arity]
                if not current and not (kind == "M" and g == 0):
                    # Drawing without a preceding move starts at the cursor
                    current = [cursor]

                if kind == "M" and g == 0:
                    if current:
                        subpaths.append(Path(points=current))
                    cursor = _resolve(cursor, a[0], a[1], rel)
                    start = cursor
                    current = [cursor]
                    last_control = None
                elif kind in ("M", "L"):
                    # Extra coordinate pairs after a move are implicit line-tos
                    cursor = _resolve(cursor, a[0], a[1], rel)
                    current.append(cursor)
                    last_control = None
                elif kind == "H":
                    cursor = Point2D(cursor.x + a[0] if rel else a[0], cursor.y)
                    current.append(cursor)
                    last_control = None
                elif kind == "V":
                    cursor = Point2D(cursor.x, cursor.y + a[0] if rel else a[0])
                    current.append(cursor)
                    last_control = None
                elif kind in ("Q", "T"):
                    if kind == "Q":
                        control = _resolve(cursor, a[0], a[1], rel)
                        end = _resolve(cursor, a[2], a[3], rel)
                    else:
                        control = _reflect(cursor, last_control if last_kind in ("Q", "T") else None)
                        end = _resolve(cursor, a[0], a[1], rel)
                    current.extend(self._quadratic([cursor, control, end]))
                    cursor = end
                    last_control = control
                elif kind in ("C", "S"):
                    if kind == "C":
                        control1 = _resolve(cursor, a[0], a[1], rel)
                        control2 = _resolve(cursor, a[2], a[3], rel)
                        end = _resolve(cursor, a[4], a[5], rel)
                    else:
                        control1 = _reflect(cursor, last_control if last_kind in ("C", "S") else None)
                        control2 = _resolve(cursor, a[0], a[1], rel)
                        end = _resolve(cursor, a[2], a[3], rel)
                    current.extend(self._cubic([cursor, control1, control2, end]))
                    cursor = end
                    last_control = control2
                elif kind == "A":
                    end = _resolve(cursor, a[5], a[6], rel)
                    current.extend(_arc_chord(cursor, end))
                    cursor = end
                    last_control = None

                last_kind = kind

        if current:
            subpaths.append(Path(points=current))
        return subpaths

    def _quadratic(self, control_points: list[Point2D]) -> list[Point2D]:
        if self.tolerance is not None:
            return flatten_quadratic(control_points, self.tolerance)[1:]
        return sample_quadratic(control_points, curve_samples(self.resolution))[1:]

    def _cubic(self, control_points: list[Point2D]) -> list[Point2D]:
        if self.tolerance is not None:
            return flatten_cubic(control_points, self.tolerance)[1:]
        return sample_cubic(control_points, curve_samples(self.resolution))[1:]


def sample_commands(commands: Iterable[PathCommand], resolution: int = 100,
                    tolerance: float | None = None) -> Path:
    """Flatten already-parsed commands with a throwaway sampler."""
    return CurveSampler(resolution, tolerance).sample(commands)


def sample_path_data(path_data: str, resolution: int = 100,
                     tolerance: float | None = None) -> Path:
    """Parse and flatten SVG path data in one step.

    Args:
        path_data: SVG ``d`` attribute text
        resolution: Fixed-step sampling density
        tolerance: Adaptive flattening tolerance (None = fixed-step)

    Returns:
        Flattened path
    """
    return sample_commands(parse_path_data(path_data), resolution, tolerance)


def _resolve(cursor: Point2D, x: float, y: float, relative: bool) -> Point2D:
    if relative:
        return Point2D(cursor.x + x, cursor.y + y)
    return Point2D(x, y)


def _reflect(cursor: Point2D, control: Point2D | None) -> Point2D:
    if control is None:
        return cursor
    return Point2D(2 * cursor.x - control.x, 2 * cursor.y - control.y)


def _arc_chord(start: Point2D, end: Point2D) -> list[Point2D]:
    return [
        Point2D(
            start.x + (end.x - start.x) * (i / ARC_SAMPLES),
            start.y + (end.y - start.y) * (i / ARC_SAMPLES),
        )
        for i in range(1, ARC_SAMPLES + 1)
    ]


def _dedupe(points: list[Point2D]) -> list[Point2D]:
    result: list[Point2D] = []
    for point in points:
        if result and result[-1].is_close(point):
            continue
        result.append(point)
    return result
