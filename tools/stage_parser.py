#!/usr/bin/env python3
"""
stage_parser.py - Stage manifest loader for stagec.py.

Manifest format (YAML, or JSON for .json files):
  name: stage1                 # optional, defaults to the file name
  orientation: Horizontal      # or Vertical
  background_palette: [0x0F, 0x00, 0x10, 0x30, ...]   # 16 entries
  sprite_palette: [...]                               # 16 entries
  metatiles:
    - symbol: "#"
      tiles: [1, 2, 17, 18]    # TL,TR,BL,BR: numbers or tile names
      palette: 1               # attribute palette 0..3
    - symbol: "."
      tiles: [0, 0, 0, 0]
      palette: 0
  data: |
    ########
    #......#
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Union

from asset_errors import ManifestParseError
from sheet_parser import load_manifest_data, parse_num

PALETTE_BYTES = 16
METATILE_TILES = 4

TileRef = Union[int, str]     # tile number, or a tile name still to be resolved


class Orientation(Enum):
    HORIZONTAL = "Horizontal"
    VERTICAL = "Vertical"


@dataclass
class Metatile:
    symbol: str
    tiles: List[TileRef]      # 4 values TL,TR,BL,BR
    palette: int


@dataclass
class Stage:
    name: str
    orientation: Orientation = Orientation.HORIZONTAL
    background_palette: List[int] = field(default_factory=lambda: [0] * PALETTE_BYTES)
    sprite_palette: List[int] = field(default_factory=lambda: [0] * PALETTE_BYTES)
    metatiles: List[Metatile] = field(default_factory=list)
    data: str = ""


def parse_orientation(path: str, raw: Any) -> Orientation:
    if raw is None:
        return Orientation.HORIZONTAL
    if isinstance(raw, str):
        for o in Orientation:
            if raw.strip().lower() == o.value.lower():
                return o
    raise ManifestParseError(path, f"orientation must be Horizontal or Vertical, got {raw!r}")


def parse_palette(path: str, raw: Any, key: str) -> List[int]:
    if not isinstance(raw, list) or len(raw) != PALETTE_BYTES:
        raise ManifestParseError(path, f"'{key}' must be a list of {PALETTE_BYTES} values")
    out: List[int] = []
    for i, v in enumerate(raw):
        try:
            n = parse_num(v)
        except ValueError:
            raise ManifestParseError(path, f"'{key}'[{i}] is not a number: {v!r}") from None
        if not 0 <= n <= 255:
            raise ManifestParseError(path, f"'{key}'[{i}] must be 0..255, got {n}")
        out.append(n)
    return out


def parse_tile_ref(path: str, raw: Any, where: str) -> TileRef:
    """Decimal, $hex and 0x hex strings are tile numbers; any other string is a tile name."""
    if isinstance(raw, str):
        try:
            n = parse_num(raw)
        except ValueError:
            if not raw.strip():
                raise ManifestParseError(path, f"{where}: empty tile name") from None
            return raw.strip()
    else:
        try:
            n = parse_num(raw)
        except ValueError:
            raise ManifestParseError(path, f"{where}: tile must be a number or a name, got {raw!r}") from None
    if not 0 <= n <= 255:
        raise ManifestParseError(path, f"{where}: tile index must be 0..255, got {n}")
    return n


def parse_metatile(path: str, raw: Any, where: str) -> Metatile:
    if not isinstance(raw, dict):
        raise ManifestParseError(path, f"{where}: metatile must be an object")
    symbol = raw.get("symbol")
    if not isinstance(symbol, str) or len(symbol) != 1:
        raise ManifestParseError(path, f"{where}: 'symbol' must be a single character, got {symbol!r}")
    tiles = raw.get("tiles")
    if not isinstance(tiles, list) or len(tiles) != METATILE_TILES:
        raise ManifestParseError(path, f"{where}: 'tiles' must list {METATILE_TILES} tiles")
    try:
        palette = parse_num(raw.get("palette", 0))
    except ValueError:
        raise ManifestParseError(path, f"{where}: 'palette' must be a number") from None
    if not 0 <= palette <= 3:
        raise ManifestParseError(path, f"{where}: 'palette' must be 0..3, got {palette}")
    return Metatile(
        symbol=symbol,
        tiles=[parse_tile_ref(path, t, f"{where}.tiles[{i}]") for i, t in enumerate(tiles)],
        palette=palette,
    )


def parse_stage(path: str, data: Any) -> Stage:
    if not isinstance(data, dict):
        raise ManifestParseError(path, "stage manifest must be an object")
    for key in ("background_palette", "sprite_palette", "metatiles", "data"):
        if key not in data:
            raise ManifestParseError(path, f"missing '{key}'")

    raw_metatiles = data["metatiles"]
    if not isinstance(raw_metatiles, list):
        raise ManifestParseError(path, "'metatiles' must be a list")
    metatiles: List[Metatile] = []
    seen: Dict[str, int] = {}
    for i, raw in enumerate(raw_metatiles):
        mt = parse_metatile(path, raw, f"metatiles[{i}]")
        if mt.symbol in seen:
            raise ManifestParseError(
                path, f"metatiles[{i}]: duplicate symbol {mt.symbol!r} (first at metatiles[{seen[mt.symbol]}])"
            )
        seen[mt.symbol] = i
        metatiles.append(mt)

    grid = data["data"]
    if not isinstance(grid, str):
        raise ManifestParseError(path, "'data' must be a multi-line string")

    name = data.get("name") or os.path.splitext(os.path.basename(path))[0]
    return Stage(
        name=str(name),
        orientation=parse_orientation(path, data.get("orientation")),
        background_palette=parse_palette(path, data["background_palette"], "background_palette"),
        sprite_palette=parse_palette(path, data["sprite_palette"], "sprite_palette"),
        metatiles=metatiles,
        data=grid,
    )


def load_stage(path: str) -> Stage:
    return parse_stage(path, load_manifest_data(path))
