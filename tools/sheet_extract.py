#!/usr/bin/env python3
"""
sheet_extract.py - Pull named 8x8 tiles out of palette-indexed sprite sheets.

The image decoder is passed in as a callable (path -> IndexedBitmap) so tests
and other tools can feed synthetic bitmaps instead of PNG files.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, List

import numpy as np
from PIL import Image, UnidentifiedImageError

from asset_errors import DimensionsError, FormatError, ImageDecodeError, PaletteError
from chr_tile import TILE_H, TILE_W, Tile, pack_tile, solid_tile
from sheet_parser import AnimationSheet, FillSheet, ImageSheet, Sheet, SimpleSheet, SliceSheet


@dataclass
class IndexedBitmap:
    width: int
    height: int
    pixels: np.ndarray        # (height, width) uint8 palette indices


Decoder = Callable[[str], IndexedBitmap]


def decode_indexed_image(path: str) -> IndexedBitmap:
    """Decode a palette-mode image into raw palette indices (no remapping)."""
    try:
        with Image.open(path) as image:
            image.load()
            if image.mode != "P":
                raise FormatError(f"{path}: image must be palette-indexed, got mode {image.mode}")
            pixels = np.asarray(image, dtype=np.uint8)
    except (OSError, UnidentifiedImageError) as e:
        raise ImageDecodeError(path, e) from e
    return IndexedBitmap(width=image.width, height=image.height, pixels=pixels)


def load_sheet_tiles(sheet: ImageSheet, decoder: Decoder) -> List[Tile]:
    """Decode the sheet image and return its tiles in raster order, unreordered."""
    width = sheet.sheet_width
    height = sheet.sheet_height
    bitmap = decoder(sheet.file)

    if bitmap.width < width * TILE_W:
        raise DimensionsError(f"Image too thin, need {width * TILE_W}, got {bitmap.width}.")
    if bitmap.height < height * TILE_H:
        raise DimensionsError(f"Image too short, need {height * TILE_H}, got {bitmap.height}.")
    pixels = np.asarray(bitmap.pixels)
    bad = pixels[pixels > 3]
    if bad.size:
        raise PaletteError(f"Image has a pixel out of bounds; needs to be under 4, got {int(bad[0])}.")

    tiles: List[Tile] = []
    for row in range(height):
        for column in range(width):
            y = row * TILE_H
            x = column * TILE_W
            tiles.append(pack_tile(pixels[y:y + TILE_H, x:x + TILE_W], sheet.name))
    return tiles


def _extract_simple(sheet: SimpleSheet, decoder: Decoder) -> List[Tile]:
    tiles = load_sheet_tiles(sheet, decoder)
    out: List[Tile] = []
    for y in range(sheet.height):
        for x in range(sheet.width):
            out.append(tiles[y * sheet.width + x].renamed(f"{sheet.name}_{x}_{y}"))
    return out


def _extract_animation(sheet: AnimationSheet, decoder: Decoder) -> List[Tile]:
    tiles = load_sheet_tiles(sheet, decoder)
    sheet_width = sheet.sheet_width
    out: List[Tile] = []
    for frame in range(sheet.frames):
        frame_x = frame * sheet.frame_width
        for y in range(sheet.frame_height):
            for x in range(sheet.frame_width):
                tile = tiles[y * sheet_width + frame_x + x]
                frame_tile = y * sheet.frame_width + x
                out.append(tile.renamed(f"{sheet.name}_{frame}_{frame_tile}"))
    return out


def _extract_slice(sheet: SliceSheet, decoder: Decoder) -> List[Tile]:
    tiles = load_sheet_tiles(sheet, decoder)
    out: List[Tile] = []
    for slice_no, indices in enumerate(sheet.slices):
        for pos, index in enumerate(indices):
            if not 0 <= index < len(tiles):
                raise DimensionsError(
                    f"Slice {slice_no} of '{sheet.name}' references tile {index}, "
                    f"sheet only has {len(tiles)} tiles."
                )
            out.append(tiles[index].renamed(f"{sheet.name}_{slice_no}_{pos}"))
    return out


def _extract_fill(sheet: FillSheet) -> List[Tile]:
    if not 0 <= sheet.value <= 3:
        raise PaletteError(f"Fill value must be between 0 and 3, but was {sheet.value}")
    tile = solid_tile(sheet.value, sheet.name)
    return [tile] * sheet.count


def extract_tiles(sheet: Sheet, decoder: Decoder = decode_indexed_image) -> List[Tile]:
    if isinstance(sheet, FillSheet):
        return _extract_fill(sheet)
    if isinstance(sheet, SimpleSheet):
        return _extract_simple(sheet, decoder)
    if isinstance(sheet, AnimationSheet):
        return _extract_animation(sheet, decoder)
    if isinstance(sheet, SliceSheet):
        return _extract_slice(sheet, decoder)
    raise TypeError(f"Unsupported sheet type: {type(sheet).__name__}")
