# errors.py


class ThemeError(Exception):
    """Base class for everything the theme pipeline raises."""


class ShapeError(ThemeError):
    def __init__(self, message: str, path: str = ""):
        self.path = path
        super().__init__(f"{path}: {message}" if path else message)


class DocumentShapeError(ShapeError):
    """The Figma file payload does not look like a file document."""


class ThemeShapeError(ShapeError):
    """The assembled theme broke its own output contract."""


class StyleCorrelationError(ThemeError):
    """A node referenced by a style lacks the data that style needs."""
