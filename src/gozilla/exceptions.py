class GozillaError(Exception):
    """Base class for every error gozilla raises on purpose."""


class NameValidationError(GozillaError, ValueError):
    """A module or project identifier was rejected before any work started."""


class ProjectLayoutError(GozillaError):
    """The working directory is not a recognised gozilla project."""


class ParseError(GozillaError):
    """Source text is not valid Go."""

    def __init__(self, message: str, *, path=None, line: int | None = None, column: int | None = None):
        self.path = path
        self.line = line
        self.column = column
        location = ""
        if path is not None:
            location = f"{path}:"
        if line is not None:
            location += f"{line}:{column}:"
        super().__init__(f"{location} {message}" if location else message)


class AnchorError(GozillaError):
    """A structural anchor could not be used."""

    def __init__(self, kind, name: str, message: str):
        self.kind = kind
        self.name = name
        super().__init__(message)


class AnchorNotFound(AnchorError):
    pass


class AnchorShapeMismatch(AnchorError):
    pass


class RenderError(GozillaError):
    """The edited source no longer parses; nothing was written."""


class LockTimeoutError(GozillaError):
    """Another process held the container lock for too long."""
