#!/usr/bin/env python3
"""
sheet_parser.py - Sprite-sheet manifest loader shared by spritesheetc.py and stagec.py.

Manifest format (JSON for .json, YAML otherwise):
  {
    "left": [
      {"type": "Animation", "file": "hero.png", "name": "hero",
       "frame_width": 2, "frame_height": 2, "frames": 4},
      {"type": "Slice", "file": "boss.png", "name": "boss", "width": 4, "height": 4,
       "slices": [[15, 12, 7], [0, 4, 5]]}
    ],
    "right": [
      {"type": "Simple", "file": "font.png", "name": "font", "width": 16, "height": 4},
      {"type": "Fill", "name": "solid", "value": 3, "count": 2}
    ]
  }

Image paths are relative to the manifest's directory.
"""

from __future__ import annotations

import json
import os
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Union

import yaml

from asset_errors import ManifestParseError

SHEET_TYPES = ("Simple", "Animation", "Slice", "Fill")


@dataclass
class SimpleSheet:
    file: str
    name: str
    width: int                # in tiles
    height: int               # in tiles

    @property
    def sheet_width(self) -> int:
        return self.width

    @property
    def sheet_height(self) -> int:
        return self.height


@dataclass
class AnimationSheet:
    file: str
    name: str
    frame_width: int          # in tiles
    frame_height: int         # in tiles
    frames: int

    @property
    def sheet_width(self) -> int:
        return self.frame_width * self.frames

    @property
    def sheet_height(self) -> int:
        return self.frame_height


@dataclass
class SliceSheet:
    file: str
    name: str
    width: int
    height: int
    slices: List[List[int]] = field(default_factory=list)  # raster indices into the sheet

    @property
    def sheet_width(self) -> int:
        return self.width

    @property
    def sheet_height(self) -> int:
        return self.height


@dataclass
class FillSheet:
    value: int                # 2-bit pixel value, checked at extraction
    name: str
    count: int


Sheet = Union[SimpleSheet, AnimationSheet, SliceSheet, FillSheet]
ImageSheet = Union[SimpleSheet, AnimationSheet, SliceSheet]


@dataclass
class SheetPatternTable:
    left: List[Sheet] = field(default_factory=list)
    right: List[Sheet] = field(default_factory=list)


NUMBER_RE = re.compile(r"^(?:\$[0-9A-Fa-f]+|0[xX][0-9A-Fa-f]+|-?[0-9]+)$")


class ManifestLoader(yaml.SafeLoader):
    """SafeLoader with plain ints limited to decimal and 0x hex; 1_0_0 or 010 stay strings."""


ManifestLoader.yaml_implicit_resolvers = {
    first: [(tag, rx) for tag, rx in resolvers if tag != "tag:yaml.org,2002:int"]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
ManifestLoader.add_implicit_resolver(
    "tag:yaml.org,2002:int",
    re.compile(r"^(?:[-+]?(?:0|[1-9][0-9]*)|0x[0-9a-fA-F]+)$"),
    list("-+0123456789"),
)


def parse_num(v: Any) -> int:
    if isinstance(v, bool):
        raise ValueError(f"Expected a number, got {v!r}")
    if isinstance(v, int):
        return v
    if isinstance(v, str):
        s = v.strip()
        if not NUMBER_RE.match(s):
            raise ValueError(f"Expected a number, got {v!r}")
        if s.startswith("$"):
            return int(s[1:], 16)
        if s[:2].lower() == "0x":
            return int(s[2:], 16)
        return int(s, 10)
    raise ValueError(f"Expected a number, got {v!r}")


def load_manifest_data(path: str) -> Any:
    """Read a .json document with json, anything else as YAML."""
    try:
        with open(path, "r", encoding="utf-8") as f:
            if os.path.splitext(path)[1].lower() == ".json":
                return json.load(f)
            return yaml.load(f, Loader=ManifestLoader)
    except OSError as e:
        raise ManifestParseError(path, f"cannot read manifest: {e}") from e
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise ManifestParseError(path, f"invalid manifest syntax: {e}") from e


def _field(path: str, entry: Dict[str, Any], key: str, where: str) -> Any:
    if key not in entry:
        raise ManifestParseError(path, f"{where}: missing '{key}'")
    return entry[key]


def _count(path: str, entry: Dict[str, Any], key: str, where: str) -> int:
    raw = _field(path, entry, key, where)
    try:
        n = parse_num(raw)
    except ValueError:
        raise ManifestParseError(path, f"{where}: '{key}' must be an integer, got {raw!r}") from None
    if n < 0:
        raise ManifestParseError(path, f"{where}: '{key}' must not be negative, got {n}")
    return n


def _text(path: str, entry: Dict[str, Any], key: str, where: str) -> str:
    v = _field(path, entry, key, where)
    if not isinstance(v, str) or not v:
        raise ManifestParseError(path, f"{where}: '{key}' must be a non-empty string")
    return v


def _image_path(path: str, entry: Dict[str, Any], where: str) -> str:
    f = _text(path, entry, "file", where)
    if os.path.isabs(f):
        return f
    return os.path.join(os.path.dirname(os.path.abspath(path)), f)


def parse_sheet(path: str, entry: Any, where: str) -> Sheet:
    if not isinstance(entry, dict):
        raise ManifestParseError(path, f"{where}: sheet must be an object")
    kind = _field(path, entry, "type", where)
    if kind not in SHEET_TYPES:
        raise ManifestParseError(
            path, f"{where}: unknown sheet type {kind!r} (expected one of {', '.join(SHEET_TYPES)})"
        )
    name = _text(path, entry, "name", where)

    if kind == "Fill":
        return FillSheet(
            value=_count(path, entry, "value", where),
            name=name,
            count=_count(path, entry, "count", where),
        )

    file = _image_path(path, entry, where)
    if kind == "Simple":
        return SimpleSheet(
            file=file,
            name=name,
            width=_count(path, entry, "width", where),
            height=_count(path, entry, "height", where),
        )
    if kind == "Animation":
        return AnimationSheet(
            file=file,
            name=name,
            frame_width=_count(path, entry, "frame_width", where),
            frame_height=_count(path, entry, "frame_height", where),
            frames=_count(path, entry, "frames", where),
        )

    raw_slices = _field(path, entry, "slices", where)
    if not isinstance(raw_slices, list) or not all(isinstance(s, list) for s in raw_slices):
        raise ManifestParseError(path, f"{where}: 'slices' must be a list of index lists")
    slices: List[List[int]] = []
    for si, s in enumerate(raw_slices):
        try:
            slices.append([parse_num(v) for v in s])
        except ValueError as e:
            raise ManifestParseError(path, f"{where}: slice {si}: {e}") from None
    return SliceSheet(
        file=file,
        name=name,
        width=_count(path, entry, "width", where),
        height=_count(path, entry, "height", where),
        slices=slices,
    )


def parse_sheet_pattern_table(path: str, data: Any) -> SheetPatternTable:
    if not isinstance(data, dict):
        raise ManifestParseError(path, "manifest must be an object with 'left' and 'right'")
    table = SheetPatternTable()
    for page in ("left", "right"):
        entries = data.get(page, [])
        if entries is None:
            entries = []
        if not isinstance(entries, list):
            raise ManifestParseError(path, f"'{page}' must be a list of sheets")
        sheets = getattr(table, page)
        for i, entry in enumerate(entries):
            sheets.append(parse_sheet(path, entry, f"{page}[{i}]"))
    unknown = sorted(set(data) - {"left", "right"})
    if unknown:
        raise ManifestParseError(path, f"unknown top-level keys: {', '.join(unknown)}")
    return table


def load_sheet_manifest(path: str) -> SheetPatternTable:
    return parse_sheet_pattern_table(path, load_manifest_data(path))
