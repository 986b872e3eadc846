"""CLI application entry point for signcraft.

This module provides the main CLI interface using Typer.
"""

import re
from collections.abc import Callable
from pathlib import Path
from typing import Annotated

import typer

from signcraft import __version__
from signcraft.cli.output import (
    SYM_DOT,
    console,
    print_error,
    print_header,
    print_input,
    print_step,
    print_success,
)
from signcraft.config import (
    BackingPlateConfig,
    ConnectorConfig,
    ExtrusionConfig,
    HolePattern,
    LithophaneConfig,
    LoggingConfig,
    PlateShape,
    SamplingConfig,
    SignCraftSettings,
    TracingConfig,
    TubeConfig,
)
from signcraft.core import SignProcessor
from signcraft.domain import Mesh
from signcraft.exceptions import InputError, SignCraftError
from signcraft.io import STLFormat

# Create the Typer app
app = typer.Typer(
    name="signcraft",
    help="Generate printable STL meshes for signs, plates, lithophanes and neon-style lettering.",
    add_completion=False,
    no_args_is_help=True,
)

OutputOption = Annotated[
    Path | None,
    typer.Option("--output", "-o", help="Output STL path"),
]
AsciiOption = Annotated[
    bool,
    typer.Option("--ascii", help="Write ASCII STL instead of binary"),
]
LogFileOption = Annotated[
    Path | None,
    typer.Option("--log-file", help="Write detailed logs to file"),
]
QuietOption = Annotated[
    bool,
    typer.Option("--quiet", "-q", help="Minimal console output"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]SignCraft[/bold blue] v{__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    _version: Annotated[  # noqa: ARG001
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """Generate printable STL meshes for signs."""


def _require_file(path: Path, kind: str) -> None:
    if not path.exists():
        print_error(
            f"Input file not found: {path}",
            details=f"The {kind} '{path}' does not exist or is not accessible.",
        )
        raise typer.Exit(code=1)
    if not path.is_file():
        print_error(
            f"Input path is not a file: {path}",
            details=f"Please provide a path to a {kind}.",
        )
        raise typer.Exit(code=1)


def _slug(text: str) -> str:
    """File-name-safe form of free text."""
    slug = re.sub(r"[^A-Za-z0-9]+", "-", text).strip("-").lower()
    return slug or "sign"


def _generate(
    settings: SignCraftSettings,
    step: str,
    source: str,
    build: Callable[[SignProcessor], Mesh],
    output: Path,
    ascii_stl: bool,
    quiet: bool,
    detail: str | None = None,
) -> None:
    """Run one generation request and write its STL.

    Args:
        settings: Settings for the request
        step: Step label shown while generating
        source: Input description shown to the user
        build: Produces the mesh from a processor
        output: Output STL path
        ascii_stl: Write ASCII instead of binary
        quiet: Suppress console output
        detail: Secondary input information
    """
    if not quiet:
        print_header(__version__)
        print_input(source, detail)

    try:
        processor = SignProcessor(settings, quiet=quiet)

        if not quiet:
            print_step(step)
        mesh = build(processor)

        if not quiet:
            print_step("Writing STL")
        stl_format = STLFormat.ASCII if ascii_stl else STLFormat.BINARY
        processor.export(mesh, output, format=stl_format)

        if not quiet:
            print_success(str(output), processor.stats)

    except KeyboardInterrupt:
        if not quiet:
            console.print(f"\n{SYM_DOT} [bold]Cancelled[/bold]")
        raise typer.Exit(code=130) from None  # Standard Unix SIGINT exit code
    except InputError as e:
        print_error(f"Could not read input: {e}")
        raise typer.Exit(code=1)
    except SignCraftError as e:
        print_error(str(e))
        raise typer.Exit(code=1)
    except OSError as e:
        print_error(f"Could not write output: {e}")
        raise typer.Exit(code=1)


def _logging(log_file: Path | None, quiet: bool) -> LoggingConfig:
    return LoggingConfig(log_file=log_file, log_level="ERROR" if quiet else "WARNING")


@app.command()
def plate(
    shape: Annotated[
        PlateShape,
        typer.Option("--shape", "-s", help="Plate outline", case_sensitive=False),
    ] = PlateShape.RECTANGLE,
    width: Annotated[float, typer.Option("--width", "-w", help="Width in mm")] = 200.0,
    height: Annotated[float, typer.Option("--height", help="Height in mm")] = 100.0,
    thickness: Annotated[float, typer.Option("--thickness", "-t", help="Thickness in mm")] = 3.0,
    corner_radius: Annotated[
        float,
        typer.Option("--corner-radius", help="Corner radius in mm for rounded-rect plates"),
    ] = 0.0,
    holes: Annotated[
        HolePattern,
        typer.Option("--holes", help="Mounting hole layout", case_sensitive=False),
    ] = HolePattern.CORNERS,
    hole_diameter: Annotated[
        float, typer.Option("--hole-diameter", help="Hole diameter in mm")
    ] = 4.0,
    hole_inset: Annotated[
        float, typer.Option("--hole-inset", help="Hole distance from the edges in mm")
    ] = 10.0,
    grid_spacing: Annotated[
        float, typer.Option("--grid-spacing", help="Hole spacing for grid and perimeter layouts")
    ] = 50.0,
    output: OutputOption = None,
    ascii_stl: AsciiOption = False,
    log_file: LogFileOption = None,
    quiet: QuietOption = False,
) -> None:
    """Generate a backing plate with mounting holes.

    Example:
        signcraft plate --shape rounded-rect --corner-radius 8 --holes perimeter
    """
    plate_settings = BackingPlateConfig(
        shape=shape,
        width=width,
        height=height,
        thickness=thickness,
        corner_radius=corner_radius,
        hole_pattern=holes,
        hole_diameter=hole_diameter,
        hole_inset=hole_inset,
        grid_spacing=grid_spacing,
    )
    settings = SignCraftSettings(plate=plate_settings, logging=_logging(log_file, quiet))

    _generate(
        settings,
        step="Building plate",
        source=f"{shape.value} plate",
        detail=f"{width:g} x {height:g} x {thickness:g} mm {SYM_DOT} {holes.value} holes",
        build=lambda processor: processor.plate(),
        output=output or Path("plate.stl"),
        ascii_stl=ascii_stl,
        quiet=quiet,
    )


@app.command()
def lithophane(
    image: Annotated[Path, typer.Argument(help="Image file", show_default=False)],
    width: Annotated[float, typer.Option("--width", "-w", help="Width in mm")] = 100.0,
    height: Annotated[float, typer.Option("--height", help="Height in mm")] = 100.0,
    base: Annotated[
        float, typer.Option("--base", help="Thickness of the brightest pixel in mm")
    ] = 0.8,
    depth: Annotated[
        float, typer.Option("--depth", "-d", help="Extra thickness of the darkest pixel in mm")
    ] = 2.4,
    invert: Annotated[bool, typer.Option("--invert", help="Invert luminance")] = False,
    smoothing: Annotated[
        int, typer.Option("--smoothing", help="Gaussian blur radius in samples (0-10)")
    ] = 0,
    frame: Annotated[bool, typer.Option("--frame", help="Add a frame around the edge")] = False,
    frame_thickness: Annotated[
        float, typer.Option("--frame-thickness", help="Frame width in mm")
    ] = 3.0,
    resolution: Annotated[
        int, typer.Option("--resolution", "-r", help="Max samples across the image")
    ] = 200,
    output: OutputOption = None,
    ascii_stl: AsciiOption = False,
    log_file: LogFileOption = None,
    quiet: QuietOption = False,
) -> None:
    """Turn an image into a lithophane heightfield.

    Example:
        signcraft lithophane portrait.jpg --width 120 --height 90 --frame
    """
    _require_file(image, "image")
    settings = SignCraftSettings(
        lithophane=LithophaneConfig(
            base_thickness=base,
            max_depth=depth,
            width=width,
            height=height,
            invert=invert,
            smoothing=smoothing,
            add_frame=frame,
            frame_thickness=frame_thickness,
            max_resolution=resolution,
        ),
        logging=_logging(log_file, quiet),
    )

    _generate(
        settings,
        step="Building heightfield",
        source=str(image),
        detail=f"{width:g} x {height:g} mm",
        build=lambda processor: processor.lithophane(image),
        output=output or image.with_suffix(".stl"),
        ascii_stl=ascii_stl,
        quiet=quiet,
    )


@app.command()
def trace(
    image: Annotated[Path, typer.Argument(help="Image file", show_default=False)],
    threshold: Annotated[
        int, typer.Option("--threshold", help="Gray level below which pixels are ink")
    ] = 128,
    pixel_size: Annotated[
        float, typer.Option("--pixel-size", help="Millimeters per pixel")
    ] = 0.5,
    depth: Annotated[float, typer.Option("--depth", "-d", help="Extrusion depth in mm")] = 5.0,
    min_length: Annotated[
        int, typer.Option("--min-length", help="Drop contours with this many points or fewer")
    ] = 10,
    output: OutputOption = None,
    ascii_stl: AsciiOption = False,
    log_file: LogFileOption = None,
    quiet: QuietOption = False,
) -> None:
    """Trace the shapes in an image and extrude them.

    Example:
        signcraft trace logo.png --pixel-size 0.25 --depth 4
    """
    _require_file(image, "image")
    settings = SignCraftSettings(
        tracing=TracingConfig(
            threshold=threshold, pixel_size=pixel_size, min_contour_length=min_length
        ),
        extrusion=ExtrusionConfig(depth=depth),
        logging=_logging(log_file, quiet),
    )

    _generate(
        settings,
        step="Tracing contours",
        source=str(image),
        build=lambda processor: processor.trace(image),
        output=output or image.with_suffix(".stl"),
        ascii_stl=ascii_stl,
        quiet=quiet,
    )


@app.command()
def skeleton(
    image: Annotated[Path, typer.Argument(help="Image file", show_default=False)],
    threshold: Annotated[
        int, typer.Option("--threshold", help="Gray level below which pixels are ink")
    ] = 128,
    pixel_size: Annotated[
        float, typer.Option("--pixel-size", help="Millimeters per pixel")
    ] = 0.5,
    radius: Annotated[float, typer.Option("--radius", "-r", help="Tube radius in mm")] = 3.0,
    max_gap: Annotated[
        float, typer.Option("--max-gap", help="Largest gap bridged between strokes in mm")
    ] = 50.0,
    output: OutputOption = None,
    ascii_stl: AsciiOption = False,
    log_file: LogFileOption = None,
    quiet: QuietOption = False,
) -> None:
    """Thin an image to centerlines and sweep neon-style tubes along them.

    Example:
        signcraft skeleton signature.png --radius 2
    """
    _require_file(image, "image")
    settings = SignCraftSettings(
        tracing=TracingConfig(threshold=threshold, pixel_size=pixel_size),
        connector=ConnectorConfig(max_gap_distance=max_gap),
        tube=TubeConfig(radius=radius),
        logging=_logging(log_file, quiet),
    )

    _generate(
        settings,
        step="Extracting centerlines",
        source=str(image),
        build=lambda processor: processor.skeleton(image),
        output=output or image.with_suffix(".stl"),
        ascii_stl=ascii_stl,
        quiet=quiet,
    )


@app.command()
def shape(
    path_data: Annotated[str, typer.Argument(help="SVG path data", show_default=False)],
    depth: Annotated[float, typer.Option("--depth", "-d", help="Extrusion depth in mm")] = 5.0,
    scale: Annotated[float, typer.Option("--scale", help="Millimeters per path unit")] = 1.0,
    resolution: Annotated[
        int, typer.Option("--resolution", help="Curve resolution")
    ] = 100,
    output: OutputOption = None,
    ascii_stl: AsciiOption = False,
    log_file: LogFileOption = None,
    quiet: QuietOption = False,
) -> None:
    """Sample SVG path data and extrude it.

    Example:
        signcraft shape "M 0 0 L 100 0 L 100 50 L 0 50 Z" --depth 3
    """
    settings = SignCraftSettings(
        sampling=SamplingConfig(resolution=resolution),
        extrusion=ExtrusionConfig(depth=depth, scale=scale),
        logging=_logging(log_file, quiet),
    )
    summary = path_data if len(path_data) <= 40 else path_data[:37] + "..."

    _generate(
        settings,
        step="Sampling path",
        source=summary,
        build=lambda processor: processor.shape(path_data),
        output=output or Path("shape.stl"),
        ascii_stl=ascii_stl,
        quiet=quiet,
    )


@app.command()
def text(
    font: Annotated[Path, typer.Argument(help="TTF or OTF font", show_default=False)],
    content: Annotated[str, typer.Argument(help="Text to render", show_default=False)],
    size: Annotated[float, typer.Option("--size", "-s", help="Em height in mm")] = 40.0,
    depth: Annotated[float, typer.Option("--depth", "-d", help="Extrusion depth in mm")] = 5.0,
    tubes: Annotated[
        bool, typer.Option("--tubes", help="Sweep neon-style tubes along the outlines")
    ] = False,
    centerline: Annotated[
        bool,
        typer.Option("--centerline", help="Sweep one tube along each glyph's centerline"),
    ] = False,
    radius: Annotated[float, typer.Option("--radius", "-r", help="Tube radius in mm")] = 3.0,
    output: OutputOption = None,
    ascii_stl: AsciiOption = False,
    log_file: LogFileOption = None,
    quiet: QuietOption = False,
) -> None:
    """Render text from a font as a solid sign or as tubes.

    Example:
        signcraft text Roboto-Bold.ttf "OPEN" --size 60 --depth 8
        signcraft text Roboto-Bold.ttf "BAR" --centerline --radius 2
    """
    _require_file(font, "font file")
    settings = SignCraftSettings(
        extrusion=ExtrusionConfig(depth=depth),
        tube=TubeConfig(radius=radius),
        logging=_logging(log_file, quiet),
    )

    _generate(
        settings,
        step="Drawing glyphs",
        source=str(font),
        detail=f'"{content}" {SYM_DOT} {size:g} mm',
        build=lambda processor: processor.text(
            font, content, size, tubes=tubes, centerline=centerline
        ),
        output=output or Path(f"{_slug(content)}.stl"),
        ascii_stl=ascii_stl,
        quiet=quiet,
    )


def cli() -> None:
    """Entry point for the CLI application."""
    app()


def main() -> None:
    """Entry point for the CLI application (alias for cli)."""
    cli()


if __name__ == "__main__":
    cli()
