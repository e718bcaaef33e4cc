#!/usr/bin/env python3
"""
spritesheetc.py - Compile a sprite-sheet manifest into an NES CHR pattern table.

Outputs:
  - .chr      8192 bytes: 256 left tiles then 256 right tiles, 16 bytes each
  - .h        C defines  {PREFIX}LEFT_{NAME} / {PREFIX}RIGHT_{NAME} -> tile index
  - .inc      ca65 symbols with the same names
  - .sym      Human-readable dump of both pages
  - .json     Optional debug

Usage:
  python tools/spritesheetc.py sprites/sheets.json -o gen/chr/sheets.chr \
      -c gen/include/sheets.h -a gen/include/sheets.inc -p SPR_

Sheet types (see sheet_parser.py for the manifest shape):
  Simple     whole sheet, raster order         NAME_X_Y
  Animation  equal frames laid out left->right NAME_FRAME_TILE
  Slice      hand-picked tile index lists      NAME_SLICE_TILE
  Fill       solid tiles of one value          NAME
"""

from __future__ import annotations

import argparse
import os
import sys
from dataclasses import dataclass, field
from typing import Dict, List

from asset_errors import AssetError, DimensionsError, error_path
from asset_io import write_bytes, write_json, write_text
from chr_tile import BLANK_TILE, Tile
from gen_paths import ANALYSIS_ROOT, CHR_DIR, GEN_ROOT
from sheet_extract import Decoder, decode_indexed_image, extract_tiles
from sheet_parser import SheetPatternTable, load_sheet_manifest

PAGE_TILES = 256
PAGES = ("left", "right")
CHR_SIZE = PAGE_TILES * len(PAGES) * 16


@dataclass
class PatternTable:
    left: List[Tile] = field(default_factory=list)
    right: List[Tile] = field(default_factory=list)

    def page(self, page: str) -> List[Tile]:
        if page not in PAGES:
            raise ValueError(f"Unknown page {page!r} (expected left or right)")
        return getattr(self, page)


def pad_page(page: str, tiles: List[Tile]) -> List[Tile]:
    if len(tiles) > PAGE_TILES:
        raise DimensionsError(
            f"Too many tiles in {page} pattern table: {len(tiles)} (max {PAGE_TILES})"
        )
    return tiles + [BLANK_TILE] * (PAGE_TILES - len(tiles))


def build_pattern_table(
    sheets: SheetPatternTable, decoder: Decoder = decode_indexed_image
) -> PatternTable:
    table = PatternTable()
    for page in PAGES:
        tiles: List[Tile] = []
        for sheet in getattr(sheets, page):
            tiles.extend(extract_tiles(sheet, decoder))
        setattr(table, page, pad_page(page, tiles))
    return table


def pattern_table_to_chr(table: PatternTable) -> bytes:
    blob = bytearray()
    for page in PAGES:
        tiles = table.page(page)
        assert len(tiles) == PAGE_TILES, f"{page} page has {len(tiles)} tiles"
        for t in tiles:
            blob += t.data
    assert len(blob) == CHR_SIZE
    return bytes(blob)


def tile_index_table(table: PatternTable, page: str) -> Dict[str, int]:
    """Name -> tile number on one page; Fill tiles share a name, the first wins."""
    out: Dict[str, int] = {}
    for idx, t in enumerate(table.page(page)):
        if t.name is not None and t.name not in out:
            out[t.name] = idx
    return out


def make_guard(filename: str) -> str:
    guard = filename.replace(".", "_").replace("/", "_").replace("\\", "_").upper()
    return "SPRITESHEETC_" + guard.strip("_")


def _named_tiles(table: PatternTable):
    for page in PAGES:
        for idx, t in enumerate(table.page(page)):
            if t.name is not None:
                yield page.upper(), t.name, idx


def make_c_header(table: PatternTable, prefix: str, guard: str) -> str:
    h: List[str] = []
    h.append(f"#ifndef {guard}\n")
    h.append(f"#define {guard}\n")
    for page, name, idx in _named_tiles(table):
        h.append(f"#define {prefix}{page}_{name} {idx}\n")
    h.append(f"#endif /* {guard} */\n")
    return "".join(h)


def make_asm_header(table: PatternTable, prefix: str, guard: str) -> str:
    a: List[str] = []
    a.append(f".ifndef {guard}\n")
    a.append(f"{guard} = 1\n")
    for page, name, idx in _named_tiles(table):
        a.append(f"{prefix}{page}_{name} = {idx}\n")
    a.append(f".endif ; {guard}\n")
    return "".join(a)


def make_sym(table: PatternTable, manifest: str) -> str:
    sym: List[str] = []
    sym.append(f'CHR manifest="{manifest}" size={CHR_SIZE}\n\n')
    for page in PAGES:
        tiles = table.page(page)
        used = sum(1 for t in tiles if t.name is not None)
        sym.append(f"{page.upper()} used={used} free={PAGE_TILES - used}\n")
        for idx, t in enumerate(tiles):
            if t.name is None:
                continue
            sym.append(f"  ${idx:02X} ofs={idx * 16:04X} {t.name} {t.data.hex().upper()}\n")
        sym.append("\n")
    return "".join(sym)


def make_debug(table: PatternTable, sheets: SheetPatternTable) -> dict:
    return {
        "chr_size": CHR_SIZE,
        "pages": {
            page: {
                "sheets": [
                    {"type": type(s).__name__, "name": s.name} for s in getattr(sheets, page)
                ],
                "tiles": [
                    {"index": idx, "name": t.name, "data": t.data.hex()}
                    for idx, t in enumerate(table.page(page))
                    if t.name is not None
                ],
            }
            for page in PAGES
        },
    }


def main():
    ap = argparse.ArgumentParser(description="Compile sprite sheets into an NES CHR file")
    ap.add_argument("input", help="Input sheet manifest (.json/.yaml)")
    ap.add_argument("-o", "--char", default="", help="Output CHR file")
    ap.add_argument("-c", "--header", default="", help="Output C header")
    ap.add_argument("-a", "--asm", default="", help="Output ca65 include")
    ap.add_argument("-p", "--prefix", default="", help="Prefix for generated symbol names")
    ap.add_argument("--sym", default="AUTO", help="Output .sym (empty to skip)")
    ap.add_argument("--json", default="", help="Output debug .json (AUTO for default path)")
    args = ap.parse_args()

    base = os.path.splitext(os.path.basename(args.input))[0]
    try:
        sheets = load_sheet_manifest(args.input)
        table = build_pattern_table(sheets)
        chr_blob = pattern_table_to_chr(table)
    except AssetError as e:
        path = os.path.abspath(error_path(e, args.input))
        print(f"{path}: error: {e}", file=sys.stderr)
        sys.exit(1)

    if not args.char:
        args.char = os.path.join(GEN_ROOT, CHR_DIR, f"{base}.chr")
    if args.sym == "AUTO":
        args.sym = os.path.join(ANALYSIS_ROOT, CHR_DIR, f"{base}.sym")
    if args.json == "AUTO":
        args.json = os.path.join(ANALYSIS_ROOT, CHR_DIR, f"{base}.json")

    try:
        write_bytes(args.char, chr_blob)
        if args.header:
            write_text(args.header, make_c_header(table, args.prefix, make_guard(args.header)))
        if args.asm:
            write_text(args.asm, make_asm_header(table, args.prefix, make_guard(args.asm)))
        if args.sym:
            write_text(args.sym, make_sym(table, args.input))
        if args.json:
            write_json(args.json, make_debug(table, sheets))
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
