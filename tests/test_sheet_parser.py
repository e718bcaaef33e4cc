import json
import os

import pytest

from asset_errors import ManifestParseError
from sheet_parser import (
    AnimationSheet,
    FillSheet,
    SimpleSheet,
    SliceSheet,
    load_sheet_manifest,
    parse_num,
)

MANIFEST = {
    "left": [
        {"type": "Animation", "file": "first.png", "frame_height": 2, "frame_width": 2,
         "frames": 4, "name": "first"},
        {"type": "Slice", "file": "second.png", "height": 4, "name": "second",
         "slices": [[15, 12, 7], [0, 4, 5]], "width": 4},
    ],
    "right": [
        {"type": "Simple", "file": "third.png", "height": 8, "name": "third", "width": 8},
        {"type": "Fill", "name": "blank", "value": 0, "count": "$10"},
    ],
}


def _write(tmp_path, data, name="sheets.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_parse_full_manifest(tmp_path):
    table = load_sheet_manifest(_write(tmp_path, MANIFEST))
    first, second = table.left
    third, blank = table.right
    assert isinstance(first, AnimationSheet)
    assert (first.sheet_width, first.sheet_height) == (8, 2)
    assert isinstance(second, SliceSheet)
    assert second.slices == [[15, 12, 7], [0, 4, 5]]
    assert isinstance(third, SimpleSheet)
    assert isinstance(blank, FillSheet)
    assert blank.count == 16


def test_image_paths_resolve_next_to_manifest(tmp_path):
    sub = tmp_path / "sprites"
    sub.mkdir()
    table = load_sheet_manifest(_write(sub, MANIFEST))
    assert table.left[0].file == os.path.join(str(sub), "first.png")


def test_yaml_manifest(tmp_path):
    path = tmp_path / "sheets.yaml"
    path.write_text(
        "left:\n"
        "  - type: Fill\n"
        "    name: blank\n"
        "    value: 0\n"
        "    count: 2\n"
        "right: []\n",
        encoding="utf-8",
    )
    table = load_sheet_manifest(str(path))
    assert table.left == [FillSheet(value=0, name="blank", count=2)]
    assert table.right == []


@pytest.mark.parametrize(
    "entry, message",
    [
        ({"type": "Sprite", "name": "x"}, "unknown sheet type"),
        ({"type": "Simple", "name": "x", "file": "a.png", "width": 1}, "missing 'height'"),
        ({"type": "Simple", "name": "x", "file": "a.png", "width": -1, "height": 1}, "negative"),
        ({"type": "Fill", "name": "x", "value": "lots", "count": 1}, "must be an integer"),
        ({"type": "Slice", "name": "x", "file": "a.png", "width": 1, "height": 1, "slices": [1, 2]},
         "list of index lists"),
        ({"type": "Fill", "value": 1, "count": 1}, "missing 'name'"),
    ],
)
def test_bad_entries(tmp_path, entry, message):
    with pytest.raises(ManifestParseError, match=message) as exc:
        load_sheet_manifest(_write(tmp_path, {"left": [entry]}))
    assert exc.value.path.endswith("sheets.json")


def test_unknown_top_level_key(tmp_path):
    with pytest.raises(ManifestParseError, match="middle"):
        load_sheet_manifest(_write(tmp_path, {"left": [], "middle": []}))


def test_invalid_json(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{", encoding="utf-8")
    with pytest.raises(ManifestParseError, match="invalid manifest syntax"):
        load_sheet_manifest(str(path))


def test_parse_num_forms():
    assert parse_num(12) == 12
    assert parse_num("0x1F") == 31
    assert parse_num("$1F") == 31
    assert parse_num("010") == 10
    with pytest.raises(ValueError):
        parse_num("1_0")
    with pytest.raises(ValueError):
        parse_num(True)
    with pytest.raises(ValueError):
        parse_num(1.5)
