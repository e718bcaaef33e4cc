#!/usr/bin/env python3
"""
stagec.py - Compile an ASCII stage layout into a run-length encoded NES stage blob.

Outputs:
  - .bin     Stage blob (layout below)
  - .sym     Human-readable dump (offsets, metatiles, runs)
  - .json    Optional debug

Usage:
  python tools/stagec.py stages/stage1.yaml -o gen/stages/stage1.bin
  python tools/stagec.py stages/stage1.yaml --sheets sprites/sheets.json --page left

Blob layout:
  bgPalette[16] spritePalette[16]
  metatileCount(1)
  metatileCount * { palette(1) tiles(4) }     ; TL,TR,BL,BR
  bodyLength(1)
  body[bodyLength]                            ; (runLength-1) << 4 | metatileIndex

The grid is read column by column for Horizontal stages (cut to the shortest
line) and line by line for Vertical stages. Runs are capped at 16 and the
catalog at 16 metatiles, both stored in a nibble.
"""

from __future__ import annotations

import argparse
import os
import re
import sys
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Tuple

from asset_errors import AssetError, DimensionsError, FormatError, error_path
from asset_io import write_bytes, write_json, write_text
from gen_paths import ANALYSIS_ROOT, GEN_ROOT, STAGE_DIR
from sheet_parser import load_sheet_manifest
from spritesheetc import build_pattern_table, tile_index_table
from stage_parser import PALETTE_BYTES, Metatile, Orientation, Stage, load_stage

MAX_RUN = 16
MAX_METATILES = 16
MAX_BODY = 255
METATILE_RECORD_SIZE = 5

Run = Tuple[str, int]


@dataclass
class CompiledStage:
    blob: bytes
    body: bytes
    runs: List[Run] = field(default_factory=list)
    header_size: int = 0


def split_grid(data: str) -> List[List[str]]:
    return [list(line) for line in data.splitlines()]


def linearize(lines: List[List[str]], orientation: Orientation) -> List[str]:
    if orientation == Orientation.VERTICAL:
        return [ch for line in lines for ch in line]
    if not lines:
        return []
    width = min(len(line) for line in lines)
    return [line[x] for x in range(width) for line in lines]


def run_length_encode(symbols: List[str], max_run: int = MAX_RUN) -> List[Run]:
    runs: List[Run] = []
    for ch in symbols:
        if runs and runs[-1][0] == ch and runs[-1][1] < max_run:
            runs[-1] = (ch, runs[-1][1] + 1)
        else:
            runs.append((ch, 1))
    return runs


def _locate(lines: List[List[str]], ch: str) -> Tuple[int, int]:
    for y, line in enumerate(lines, 1):
        if ch in line:
            return y, line.index(ch) + 1
    return 1, 1


def encode_runs(runs: List[Run], catalog: Dict[str, int], lines: Optional[List[List[str]]] = None) -> bytes:
    body = bytearray()
    for ch, length in runs:
        if ch not in catalog:
            line, col = _locate(lines or [], ch)
            raise FormatError(f"Unknown metatile symbol {ch!r} at line {line}, column {col}")
        assert 1 <= length <= MAX_RUN
        body.append(((length - 1) << 4) | (catalog[ch] & 0x0F))
    return bytes(body)


def resolve_tile_names(stage: Stage, names: Dict[str, int]) -> Stage:
    """Replace tile names in the metatile catalog with tile numbers."""
    metatiles: List[Metatile] = []
    for mt in stage.metatiles:
        tiles = []
        for t in mt.tiles:
            if isinstance(t, str):
                if t not in names:
                    raise FormatError(f"Metatile {mt.symbol!r}: unknown tile name {t!r}")
                t = names[t]
            tiles.append(t)
        metatiles.append(replace(mt, tiles=tiles))
    return replace(stage, metatiles=metatiles)


def _check_header(stage: Stage) -> None:
    if len(stage.metatiles) > MAX_METATILES:
        raise DimensionsError(
            f"Too many metatiles: {len(stage.metatiles)} (max {MAX_METATILES}, index stored in 4 bits)"
        )
    for key in ("background_palette", "sprite_palette"):
        palette = getattr(stage, key)
        if len(palette) != PALETTE_BYTES:
            raise DimensionsError(f"{key} must be {PALETTE_BYTES} bytes, got {len(palette)}")
        for i, v in enumerate(palette):
            if not 0 <= v <= 255:
                raise DimensionsError(f"{key}[{i}] must be 0..255, got {v}")
    for mt in stage.metatiles:
        if not 0 <= mt.palette <= 3:
            raise DimensionsError(f"Metatile {mt.symbol!r}: palette must be 0..3, got {mt.palette}")
        for t in mt.tiles:
            if isinstance(t, str):
                raise FormatError(f"Metatile {mt.symbol!r}: tile name {t!r} was not resolved (pass --sheets)")
            if not 0 <= t <= 255:
                raise DimensionsError(f"Metatile {mt.symbol!r}: tile index must be 0..255, got {t}")


def compile_stage(stage: Stage) -> CompiledStage:
    _check_header(stage)

    catalog = {mt.symbol: i for i, mt in enumerate(stage.metatiles)}
    lines = split_grid(stage.data)
    runs = run_length_encode(linearize(lines, stage.orientation))
    body = encode_runs(runs, catalog, lines)
    if len(body) > MAX_BODY:
        raise DimensionsError(f"Encoded stage body is {len(body)} bytes (max {MAX_BODY}, length stored as u8)")

    blob = bytearray()
    blob += bytes(stage.background_palette)
    blob += bytes(stage.sprite_palette)
    blob.append(len(stage.metatiles))
    for mt in stage.metatiles:
        blob.append(mt.palette)
        blob += bytes(mt.tiles)
    blob.append(len(body))
    header_size = len(blob)
    blob += body
    return CompiledStage(blob=bytes(blob), body=body, runs=runs, header_size=header_size)


def make_sym(stage: Stage, compiled: CompiledStage) -> str:
    ofs_metatiles = PALETTE_BYTES * 2 + 1
    sym: List[str] = []
    sym.append(f'STAGE name="{stage.name}" orientation={stage.orientation.value} blob_size={len(compiled.blob)}\n')
    sym.append(f"HDR bg_palette=0 sprite_palette={PALETTE_BYTES} metatiles={ofs_metatiles} "
               f"body_len={compiled.header_size - 1} body={compiled.header_size}\n\n")
    sym.append("METATILES\n")
    for i, mt in enumerate(stage.metatiles):
        sym.append(
            f"  [{i:2d}] '{mt.symbol}' ofs={ofs_metatiles + i * METATILE_RECORD_SIZE} "
            f"palette={mt.palette} tiles={','.join(f'{t:02X}' for t in mt.tiles)}\n"
        )
    sym.append(f"\nRUNS count={len(compiled.runs)}\n")
    for i, ((ch, length), byte) in enumerate(zip(compiled.runs, compiled.body)):
        sym.append(f"  {i:3d} '{ch}' x{length:<2d} ${byte:02X}\n")
    return "".join(sym)


def make_debug(stage: Stage, compiled: CompiledStage) -> dict:
    return {
        "name": stage.name,
        "orientation": stage.orientation.value,
        "background_palette": stage.background_palette,
        "sprite_palette": stage.sprite_palette,
        "metatiles": [
            {"symbol": mt.symbol, "index": i, "palette": mt.palette, "tiles": mt.tiles}
            for i, mt in enumerate(stage.metatiles)
        ],
        "runs": [{"symbol": ch, "length": n} for ch, n in compiled.runs],
        "header_size": compiled.header_size,
        "body_size": len(compiled.body),
        "blob_size": len(compiled.blob),
    }


def load_tile_names(manifest: str, page: str) -> Dict[str, int]:
    return tile_index_table(build_pattern_table(load_sheet_manifest(manifest)), page)


def sanitize_stage_name(name: str) -> str:
    base = re.sub(r"[^a-zA-Z0-9]+", "_", name.strip())
    base = base.strip("_").lower()
    return base if base else "stage"


def main():
    ap = argparse.ArgumentParser(description="Compile an ASCII stage into an RLE stage blob")
    ap.add_argument("input", help="Input stage manifest (.yaml/.json)")
    ap.add_argument("-o", "--output", default="", help="Output stage blob (.bin)")
    ap.add_argument("--sheets", default="", help="Sprite-sheet manifest used to resolve tile names")
    ap.add_argument("--page", default="left", choices=("left", "right"), help="Pattern table page for tile names")
    ap.add_argument("--sym", default="AUTO", help="Output .sym (empty to skip)")
    ap.add_argument("--json", default="", help="Output debug .json (AUTO for default path)")
    args = ap.parse_args()

    try:
        stage = load_stage(args.input)
        if args.sheets:
            stage = resolve_tile_names(stage, load_tile_names(args.sheets, args.page))
        compiled = compile_stage(stage)
    except AssetError as e:
        path = os.path.abspath(error_path(e, args.input))
        print(f"{path}: error: {e}", file=sys.stderr)
        sys.exit(1)

    base_name = sanitize_stage_name(stage.name)
    if not args.output:
        args.output = os.path.join(GEN_ROOT, STAGE_DIR, f"{base_name}.bin")
    if args.sym == "AUTO":
        args.sym = os.path.join(ANALYSIS_ROOT, STAGE_DIR, f"{base_name}.sym")
    if args.json == "AUTO":
        args.json = os.path.join(ANALYSIS_ROOT, STAGE_DIR, f"{base_name}.json")

    try:
        write_bytes(args.output, compiled.blob)
        if args.sym:
            write_text(args.sym, make_sym(stage, compiled))
        if args.json:
            write_json(args.json, make_debug(stage, compiled))
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
