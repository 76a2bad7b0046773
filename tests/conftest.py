import copy

import pytest

FIGMA_FILE = {
    "name": "Design System",
    "lastModified": "2026-01-01T00:00:00Z",
    "thumbnailUrl": "https://example.com/thumb.png",
    "version": "1234567890",
    "schemaVersion": 0,
    "document": {
        "id": "0:0",
        "type": "DOCUMENT",
        "children": [
            {
                "id": "0:1",
                "type": "CANVAS",
                "children": [
                    {
                        "id": "1:1",
                        "type": "RECTANGLE",
                        "fills": [{"type": "SOLID", "color": {"r": 1, "g": 0, "b": 0, "a": 1}}],
                        "styles": {"fill": "S:primary"},
                    },
                    {
                        "id": "1:2",
                        "type": "TEXT",
                        "characters": "Hello",
                        "style": {
                            "fontFamily": "Arial",
                            "fontWeight": 400,
                            "fontSize": 16,
                            "letterSpacing": 0,
                            "lineHeightPercent": 150,
                        },
                        "styles": {"text": "S:body"},
                    },
                ],
            }
        ],
    },
    "styles": {
        "S:primary": {"key": "k1", "name": "Primary", "styleType": "FILL"},
        "S:body": {"key": "k2", "name": "Body", "styleType": "TEXT"},
    },
}


@pytest.fixture
def figma_file():
    return copy.deepcopy(FIGMA_FILE)


def text_node(node_id, style_id, font_size, font_family="Inter", font_weight=400, line_height_percent=120):
    return {
        "id": node_id,
        "type": "TEXT",
        "style": {
            "fontFamily": font_family,
            "fontWeight": font_weight,
            "fontSize": font_size,
            "letterSpacing": 0.5,
            "lineHeightPercent": line_height_percent,
        },
        "styles": {"text": style_id},
    }


def fill_node(node_id, style_id, color, opacity=None):
    paint = {"type": "SOLID", "color": color}
    if opacity is not None:
        paint["opacity"] = opacity
    return {"id": node_id, "type": "RECTANGLE", "fills": [paint], "styles": {"fill": style_id}}


def make_file(children, styles):
    return {"name": "Test", "document": {"id": "0:0", "children": children}, "styles": styles}
