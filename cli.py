"""Command line entry point: fetch a Figma file and write its theme as JSON."""
import argparse
import json
import re
import sys
import tomllib
from pathlib import Path
from typing import Any, Dict, List, Optional

import requests

from errors import ThemeError
from figma_tools import fetch_file, get_api_key
from logger import get_logger, set_debug
from transform import ThemeOptions, dumps_theme, snake_case, transform_document

LOGGER = get_logger("figma-theme")

CONFIG_TABLE = "figma-theme"
ALLOWED_TYPES = ("json",)
DEFAULTS = {
    "out_dir": "",
    "out_name": "theme",
    "out_type": "json",
}


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="figma-theme",
        description="Generate a JSON theme from the published styles of a Figma file",
    )
    parser.add_argument("file_id", nargs="?", help="Figma file key")
    parser.add_argument("-d", "--out-dir", help="Output directory (default cwd)")
    parser.add_argument("-n", "--out-name", help="Output filename without extension (default theme)")
    parser.add_argument("-t", "--out-type", help="Output type (default json)")
    parser.add_argument("-f", "--filter", help="Comma separated list for filtering outputs")
    parser.add_argument("--metadata", action="store_true", default=None, help="Include metadata from Figma API")
    parser.add_argument("--opacity-as-alpha", action="store_true", default=None,
                        help="Use fill opacity as alpha channel")
    parser.add_argument("--rgb", action="store_true", default=None, help="Use rgb(a) format in all color values")
    parser.add_argument("--rgba", action="store_true", default=None,
                        help="Use rgba format in color values with an alpha channel")
    parser.add_argument("--sort", action="store_true", default=None, help="Sort results")
    parser.add_argument("--debug", action="store_true", default=None,
                        help="Verbose logging; also dump the raw API response to data.json")
    return parser


def load_config(start: Path) -> Dict[str, Any]:
    """Return the nearest ``[tool.figma-theme]`` table above ``start``."""
    for directory in (start, *start.parents):
        candidate = directory / "pyproject.toml"
        if not candidate.is_file():
            continue
        with candidate.open("rb") as fh:
            table = tomllib.load(fh).get("tool", {}).get(CONFIG_TABLE)
        if table is not None:
            return table
    return {}


def resolve_settings(flags: Dict[str, Any], config: Dict[str, Any]) -> Dict[str, Any]:
    """Defaults, then project config, then explicit flags."""
    settings = dict(DEFAULTS)
    settings.update({snake_case(key): value for key, value in config.items()})
    settings.update({key: value for key, value in flags.items() if value is not None})
    return settings


def output_path(settings: Dict[str, Any]) -> Path:
    out_dir = Path(settings["out_dir"] or ".").resolve()
    out_name = re.sub(r"[^a-z0-9\-]", "-", str(settings["out_name"]).lower())
    out_type = settings["out_type"] if settings["out_type"] in ALLOWED_TYPES else "json"
    return out_dir / f"{out_name}.{out_type}"


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    settings = resolve_settings(vars(args), load_config(Path.cwd()))
    set_debug(bool(settings.get("debug")))

    try:
        get_api_key()
    except RuntimeError:
        LOGGER.error("FIGMA_TOKEN not found")
        return 1

    if not args.file_id:
        parser.print_help()
        return 0

    out_file = output_path(settings)
    out_file.parent.mkdir(parents=True, exist_ok=True)
    options = ThemeOptions.from_mapping(settings)

    try:
        data = fetch_file(args.file_id)
    except requests.HTTPError as exc:
        LOGGER.error("%s %s", exc.response.status_code, exc.response.reason)
        return 1
    except requests.RequestException as exc:
        LOGGER.error("Request failed: %s", exc)
        return 1

    LOGGER.info("Parsing data...")
    try:
        theme = transform_document(data, options)
    except ThemeError as exc:
        LOGGER.error("%s", exc)
        return 1

    try:
        out_file.write_text(dumps_theme(theme, sort_keys=options.sort), encoding="utf-8")
        LOGGER.info("File saved %s", out_file)
        if settings.get("debug"):
            (out_file.parent / "data.json").write_text(json.dumps(data, indent=2), encoding="utf-8")
    except OSError as exc:
        LOGGER.error("Could not write %s: %s", out_file, exc)
        return 1

    return 0


def run() -> None:
    sys.exit(main())


if __name__ == "__main__":  # pragma: no cover
    run()
