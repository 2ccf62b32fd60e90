"""Exception hierarchy for Atlasify."""


class AtlasifyError(Exception):
    """Base exception for all Atlasify errors."""

    pass


class DocumentError(AtlasifyError):
    """Errors related to reading the source drawing."""

    pass


class DocumentLoadError(DocumentError):
    """Error loading a drawing file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load drawing '{path}': {reason}")


class DocumentFormatError(DocumentError):
    """Drawing is readable but lacks the structure a map needs."""

    def __init__(self, path: str, details: str) -> None:
        self.path = path
        self.details = details
        super().__init__(f"Invalid map drawing '{path}': {details}")


class ShapeError(AtlasifyError):
    """Errors related to a single shape element."""

    pass


class PathDataError(ShapeError):
    """Malformed SVG path data."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Invalid path data: {reason}")


class UnsupportedCommandError(ShapeError):
    """Path operator outside of move/line/cubic/close."""

    def __init__(self, command: str) -> None:
        self.command = command
        super().__init__(f"Unsupported path command '{command}'")


class ShapeProcessingError(ShapeError):
    """Error processing a specific shape."""

    def __init__(self, shape_name: str, reason: str) -> None:
        self.shape_name = shape_name
        self.reason = reason
        super().__init__(f"Error processing shape '{shape_name}': {reason}")


class GeometryError(AtlasifyError):
    """Errors in geometric calculations."""

    pass


class EmptyEnvelopeError(GeometryError):
    """Envelope requested for an empty set of coordinates."""

    def __init__(self) -> None:
        super().__init__("Cannot build an envelope from zero coordinates")


class OutputError(AtlasifyError):
    """Errors related to writing results."""

    pass


class OutputWriteError(OutputError):
    """Error writing the output file."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to write '{path}': {reason}")


class PostProcessError(OutputError):
    """External post-processing tool failed."""

    def __init__(self, tool: str, reason: str) -> None:
        self.tool = tool
        self.reason = reason
        super().__init__(f"Post-processing with '{tool}' failed: {reason}")
