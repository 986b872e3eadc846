"""Exception hierarchy for SignCraft."""


class SignCraftError(Exception):
    """Base exception for all SignCraft errors."""

    pass


class InputError(SignCraftError):
    """Errors related to loading or decoding caller input."""

    pass


class ImageLoadError(InputError):
    """Error decoding an image file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load image '{path}': {reason}")


class FontLoadError(InputError):
    """Error loading a font file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load font '{path}': {reason}")


class GlyphNotFoundError(InputError):
    """Requested character has no glyph in the font."""

    def __init__(self, char: str) -> None:
        self.char = char
        super().__init__(f"No glyph for character '{char}' in font")


class EmptyRequestError(SignCraftError):
    """The request produced no usable geometry at all."""

    def __init__(self, what: str) -> None:
        self.what = what
        super().__init__(f"Nothing to generate: {what}")


class GeometryError(SignCraftError):
    """Errors in geometric calculations."""

    pass


class TriangulationError(GeometryError):
    """Polygon could not be triangulated."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Triangulation failed: {reason}")


class ExportError(SignCraftError):
    """Errors related to mesh serialization."""

    pass


class STLFormatError(ExportError):
    """Unknown STL format or unreadable STL data."""

    def __init__(self, details: str) -> None:
        self.details = details
        super().__init__(f"Invalid STL: {details}")
