import os
from pathlib import Path
from typing import List, Optional

import requests
from dotenv import load_dotenv

from logger import get_logger
from mcp_server import mcp
from transform import ThemeOptions, dumps_theme, transform_document

load_dotenv()
LOGGER = get_logger(__name__)

BASE_URL = "https://api.figma.com/v1"
REQUEST_TIMEOUT = 60


def get_api_key() -> str:
    token = os.getenv("FIGMA_API_KEY") or os.getenv("FIGMA_TOKEN")
    if not token:
        raise RuntimeError("Missing FIGMA_API_KEY (or FIGMA_TOKEN) in environment or .env")
    return token


def figma_api_get(path, params=None):
    headers = {"X-Figma-Token": get_api_key()}
    res = requests.get(f"{BASE_URL}{path}", headers=headers, params=params, timeout=REQUEST_TIMEOUT)
    res.raise_for_status()
    return res.json()


def fetch_file(file_key: str) -> dict:
    """Full file payload: document tree plus the style registry."""
    LOGGER.info("Fetching data for: %s", file_key)
    return figma_api_get(f"/files/{file_key}")


def build_theme(file_key: str, options: Optional[ThemeOptions] = None) -> dict:
    data = fetch_file(file_key)
    LOGGER.info("Parsing data...")
    return transform_document(data, options)


def _tool_options(filter, metadata, opacityAsAlpha, rgb, rgba, sort) -> ThemeOptions:
    return ThemeOptions.from_mapping({
        "filter": filter,
        "metadata": metadata,
        "opacityAsAlpha": opacityAsAlpha,
        "rgb": rgb,
        "rgba": rgba,
        "sort": sort,
    })


@mcp.tool(
    name="get_figma_theme",
    description="""
    Extracts design tokens (named colors and text styles plus font, size, weight and
    line-height scales) from a Figma file's published styles.

    Use this tool when you need a project's color palette or type scale for theming code.
    """
)
def get_figma_theme(
    fileKey: str,
    filter: Optional[List[str]] = None,
    metadata: bool = False,
    opacityAsAlpha: bool = False,
    rgb: bool = False,
    rgba: bool = False,
    sort: bool = False,
):
    try:
        options = _tool_options(filter, metadata, opacityAsAlpha, rgb, rgba, sort)
        return build_theme(fileKey, options)
    except Exception as e:
        return {"error": f"Failed to extract theme: {e}"}


@mcp.tool(
    name="download_figma_theme",
    description="""
    Extracts design tokens from a Figma file and writes them as a JSON theme file.
    Set sortKeys to emit every object key in sorted order.
    """
)
def download_figma_theme(
    fileKey: str,
    outPath: str = "theme.json",
    filter: Optional[List[str]] = None,
    metadata: bool = False,
    opacityAsAlpha: bool = False,
    rgb: bool = False,
    rgba: bool = False,
    sort: bool = False,
    sortKeys: bool = False,
):
    try:
        options = _tool_options(filter, metadata, opacityAsAlpha, rgb, rgba, sort)
        theme = build_theme(fileKey, options)

        out_file = Path(outPath)
        out_file.parent.mkdir(parents=True, exist_ok=True)
        out_file.write_text(dumps_theme(theme, sort_keys=sortKeys), encoding="utf-8")

        return {
            "message": f"Saved theme with {len(theme.get('colors') or {})} colors "
                       f"and {len(theme.get('textStyles') or {})} text styles",
            "path": str(out_file),
        }

    except Exception as e:
        return {"error": f"Failed to write theme: {e}"}
