# schemas.py
from typing import Any, Dict, List, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr, ValidationError

from errors import DocumentShapeError, ShapeError, ThemeShapeError

Number = Union[StrictInt, StrictFloat]

TOKEN_STYLE_TYPES = ("FILL", "TEXT")


# Input: only the parts of GET /v1/files/:key the transform reads.

class DocumentRoot(BaseModel):
    model_config = ConfigDict(extra="allow")

    children: List[Dict[str, Any]] = Field(default_factory=list)


class StyleRecord(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[StrictStr] = None
    styleType: Optional[StrictStr] = None


class FigmaFile(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: Optional[StrictStr] = None
    lastModified: Optional[StrictStr] = None
    thumbnailUrl: Optional[StrictStr] = None
    document: DocumentRoot
    styles: Dict[str, StyleRecord] = Field(default_factory=dict)


# Output: every field is optional because filtering may strip any of them.

class TextStyleToken(BaseModel):
    model_config = ConfigDict(extra="forbid")

    fontFamily: StrictStr
    fontSize: Number
    fontWeight: Number
    lineHeight: Number


class Theme(BaseModel):
    model_config = ConfigDict(extra="forbid")

    colors: Optional[Dict[str, StrictStr]] = None
    textStyles: Optional[Dict[str, TextStyleToken]] = None
    fonts: Optional[List[Any]] = None
    fontSizes: Optional[List[Any]] = None
    fontWeights: Optional[List[Any]] = None
    lineHeights: Optional[List[Any]] = None
    metadata: Optional[Dict[str, Any]] = None


def _validate(model: Type[BaseModel], value: Any, error: Type[ShapeError]) -> BaseModel:
    try:
        return model.model_validate(value)
    except ValidationError as exc:
        first = exc.errors()[0]
        path = ".".join(str(part) for part in first["loc"])
        raise error(first["msg"], path=path) from exc


def validate_document(data: Any) -> None:
    """Reject payloads that are not shaped like a Figma file response.

    Styles of other types may be nameless; FILL and TEXT styles become
    theme keys, so they must carry a name.
    """
    figma_file = _validate(FigmaFile, data, DocumentShapeError)
    for style_id, style in figma_file.styles.items():
        if style.styleType in TOKEN_STYLE_TYPES and style.name is None:
            raise DocumentShapeError("Field required", path=f"styles.{style_id}.name")


def validate_theme(theme: Any) -> None:
    _validate(Theme, theme, ThemeShapeError)
