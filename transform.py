# transform.py
import json
import math
import re
from dataclasses import dataclass, fields
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from errors import StyleCorrelationError
from logger import get_logger
from schemas import validate_document, validate_theme

LOGGER = get_logger(__name__)

FILL = "FILL"
TEXT = "TEXT"


def snake_case(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", key).replace("-", "_").lower()


@dataclass(frozen=True)
class ThemeOptions:
    """Switches recognised by the transform. Anything else is ignored."""

    filter: Tuple[str, ...] = ()
    metadata: bool = False
    opacity_as_alpha: bool = False
    rgb: bool = False
    rgba: bool = False
    sort: bool = False

    @classmethod
    def from_mapping(cls, values: Optional[Mapping[str, Any]]) -> "ThemeOptions":
        """Build options from config or tool arguments.

        Keys may be camelCase (``opacityAsAlpha``), kebab-case or snake_case.
        ``filter`` may be a list of field names or a comma separated string.
        ``None`` values fall back to the defaults.
        """
        if not values:
            return cls()
        known = {f.name for f in fields(cls)}
        picked = {}
        for key, value in values.items():
            name = snake_case(key)
            if name in known and value is not None:
                picked[name] = value

        raw_filter = picked.pop("filter", ())
        if isinstance(raw_filter, str):
            raw_filter = raw_filter.split(",")
        names = tuple(name.strip() for name in raw_filter if name and name.strip())
        flags = {name: bool(value) for name, value in picked.items()}
        return cls(filter=names, **flags)


def flatten_nodes(nodes: Optional[Iterable[dict]]) -> List[dict]:
    """Pre-order walk of a node forest: each node comes before its descendants."""
    flat = []
    stack = list(reversed(list(nodes or [])))
    while stack:
        node = stack.pop()
        flat.append(node)
        stack.extend(reversed(node.get("children") or []))
    return flat


def build_style_index(styles: Mapping[str, dict]) -> List[dict]:
    """One record per registry entry, keyed by its registry id, in registry order."""
    return [
        {"id": style_id, **{k: v for k, v in meta.items() if k != "id"}}
        for style_id, meta in styles.items()
    ]


def partition_styles(records: List[dict]) -> Tuple[List[dict], List[dict]]:
    fills = [record for record in records if record.get("styleType") == FILL]
    texts = [record for record in records if record.get("styleType") == TEXT]
    return fills, texts


def index_style_owners(nodes: List[dict], category: str) -> Dict[str, dict]:
    """Map each style id to the first node in ``nodes`` that references it."""
    owners = {}
    for node in nodes:
        style_id = (node.get("styles") or {}).get(category)
        if style_id is not None:
            owners.setdefault(style_id, node)
    return owners


def _channel(value: float) -> int:
    # round half up, like CSS serializers do
    return max(0, min(255, math.floor(value * 255 + 0.5)))


def _format_alpha(alpha: float) -> str:
    alpha = float(alpha)
    if alpha.is_integer():
        return str(int(alpha))
    return repr(alpha)


def render_color(color: dict, alpha: float, options: ThemeOptions) -> str:
    r, g, b = (_channel(color[channel]) for channel in "rgb")
    if options.rgb or (options.rgba and alpha < 1):
        if alpha < 1:
            return f"rgba({r},{g},{b},{_format_alpha(alpha)})"
        return f"rgb({r},{g},{b})"
    # hex never carries alpha
    return f"#{r:02x}{g:02x}{b:02x}"


def paint_alpha(paint: dict, options: ThemeOptions) -> float:
    if options.opacity_as_alpha and paint.get("opacity") is not None:
        return paint["opacity"]
    return paint["color"].get("a", 1)


def extract_colors(fill_styles: List[dict], nodes: List[dict], options: ThemeOptions) -> Dict[str, str]:
    owners = index_style_owners(nodes, "fill")
    colors = {}
    for style in fill_styles:
        node = owners.get(style["id"])
        if node is None:
            LOGGER.debug("Fill style %r is not used by any node, skipping", style.get("name"))
            continue

        fills = node.get("fills") or []
        if not fills:
            raise StyleCorrelationError(
                f"Node {node.get('id')!r} uses fill style {style.get('name')!r} but has no fills"
            )
        paint = fills[0]
        if not isinstance(paint.get("color"), dict):
            raise StyleCorrelationError(
                f"Node {node.get('id')!r} uses fill style {style.get('name')!r} but its first fill has no color"
            )
        colors[style["name"]] = render_color(paint["color"], paint_alpha(paint, options), options)
    return colors


def read_text_attributes(node: dict, style: dict) -> dict:
    attrs = node.get("style")
    if not isinstance(attrs, dict):
        raise StyleCorrelationError(
            f"Node {node.get('id')!r} uses text style {style.get('name')!r} but has no text attributes"
        )
    if attrs.get("lineHeightPercent") is None:
        raise StyleCorrelationError(
            f"Node {node.get('id')!r} uses text style {style.get('name')!r} but has no lineHeightPercent"
        )
    return {
        "fontFamily": attrs.get("fontFamily"),
        "fontWeight": attrs.get("fontWeight"),
        "fontSize": attrs.get("fontSize"),
        "letterSpacing": attrs.get("letterSpacing"),
        "lineHeightPercent": attrs["lineHeightPercent"],
    }


def extract_text_styles(text_styles: List[dict], nodes: List[dict]) -> Dict[str, dict]:
    owners = index_style_owners(nodes, "text")
    tokens = {}
    for style in text_styles:
        node = owners.get(style["id"])
        if node is None:
            LOGGER.debug("Text style %r is not used by any node, skipping", style.get("name"))
            continue

        attrs = read_text_attributes(node, style)
        tokens[style["name"]] = {
            "fontFamily": attrs["fontFamily"],
            "fontWeight": attrs["fontWeight"],
            "fontSize": attrs["fontSize"],
            "lineHeight": attrs["lineHeightPercent"] / 100,
        }
    return tokens


def unique(values: Iterable[Any]) -> List[Any]:
    """Drop repeats, keeping first occurrences in order."""
    return list(dict.fromkeys(values))


def build_metadata(data: dict, nodes: List[dict], style_records: List[dict]) -> dict:
    return {
        "name": data.get("name"),
        "lastModified": data.get("lastModified"),
        "thumbnailUrl": data.get("thumbnailUrl"),
        "children": nodes,
        "styles": style_records,
    }


def assemble_theme(
    colors: Dict[str, str],
    text_styles: Dict[str, dict],
    options: ThemeOptions,
    metadata: Optional[dict] = None,
) -> dict:
    tokens = list(text_styles.values())
    scales = {
        "fonts": unique(token["fontFamily"] for token in tokens),
        "fontSizes": unique(token["fontSize"] for token in tokens),
        "fontWeights": unique(token["fontWeight"] for token in tokens),
        "lineHeights": unique(token["lineHeight"] for token in tokens),
    }
    if options.sort:
        scales = {name: sorted(values) for name, values in scales.items()}

    theme = {"colors": colors, "textStyles": text_styles, **scales}

    if options.filter:
        theme = {name: theme[name] for name in options.filter if name in theme}

    # attached after filtering so a filter can never drop it
    if options.metadata and metadata is not None:
        theme["metadata"] = metadata

    return theme


def transform_document(data: dict, options: Union[ThemeOptions, Mapping[str, Any], None] = None) -> dict:
    """Turn a Figma file response into a validated theme dictionary."""
    if not isinstance(options, ThemeOptions):
        options = ThemeOptions.from_mapping(options)

    validate_document(data)

    nodes = flatten_nodes(data["document"].get("children"))
    style_records = build_style_index(data.get("styles") or {})
    fill_styles, text_styles = partition_styles(style_records)
    LOGGER.debug(
        "Flattened %d nodes; %d fill styles, %d text styles",
        len(nodes), len(fill_styles), len(text_styles),
    )

    colors = extract_colors(fill_styles, nodes, options)
    text_tokens = extract_text_styles(text_styles, nodes)
    LOGGER.debug("Extracted %d colors and %d text styles", len(colors), len(text_tokens))
    # scales are derived (and possibly sorted) from the tokens, so check them first
    validate_theme({"colors": colors, "textStyles": text_tokens})

    metadata = build_metadata(data, nodes, style_records) if options.metadata else None
    theme = assemble_theme(colors, text_tokens, options, metadata)

    validate_theme(theme)
    return theme


def dumps_theme(theme: dict, sort_keys: bool = False) -> str:
    return json.dumps(theme, indent=2, sort_keys=sort_keys, ensure_ascii=False)
