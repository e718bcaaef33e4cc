#!/usr/bin/env python3
"""
chr_tile.py - NES 2bpp planar tile codec.

A tile is 16 bytes: bytes 0-7 hold bit-plane 0 of rows 0-7, bytes 8-15 hold
bit-plane 1. Within a plane byte the MSB is the leftmost pixel. This is the
layout the PPU reads from CHR memory.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Sequence, Union

import numpy as np

from asset_errors import DimensionsError, PaletteError

TILE_W = 8
TILE_H = 8
TILE_PIXELS = TILE_W * TILE_H
TILE_BYTES = 16

PixelBlock = Union[bytes, bytearray, Sequence[int], np.ndarray]


@dataclass(frozen=True)
class Tile:
    data: bytes
    name: Optional[str] = None

    def __post_init__(self):
        if len(self.data) != TILE_BYTES:
            raise DimensionsError(f"Tile data must be {TILE_BYTES} bytes, got {len(self.data)}")
        object.__setattr__(self, "data", bytes(self.data))

    def renamed(self, name: Optional[str]) -> "Tile":
        return replace(self, name=name)


BLANK_TILE = Tile(bytes(TILE_BYTES))


def pack_tile(block: PixelBlock, name: Optional[str] = None) -> Tile:
    """Pack 64 row-major 2-bit pixels into a planar tile."""
    if isinstance(block, (bytes, bytearray)):
        px = np.frombuffer(bytes(block), dtype=np.uint8).astype(np.int64)
    else:
        px = np.asarray(block, dtype=np.int64).reshape(-1)
    if px.size != TILE_PIXELS:
        raise DimensionsError(f"Pixel block must be {TILE_PIXELS} values, got {px.size}")
    bad = px[(px < 0) | (px > 3)]
    if bad.size:
        raise PaletteError(f"Pixel value out of range; needs to be 0..3, got {int(bad[0])}")

    rows = px.astype(np.uint8).reshape(TILE_H, TILE_W)
    plane0 = np.packbits(rows & 1, axis=1)
    plane1 = np.packbits((rows >> 1) & 1, axis=1)
    return Tile(plane0.tobytes() + plane1.tobytes(), name)


def unpack_tile(tile: Tile) -> bytes:
    """Inverse of pack_tile: 64 bytes, one 0..3 value per pixel."""
    data = np.frombuffer(tile.data, dtype=np.uint8)
    plane0 = np.unpackbits(data[:TILE_H].reshape(TILE_H, 1), axis=1)
    plane1 = np.unpackbits(data[TILE_H:].reshape(TILE_H, 1), axis=1)
    return (plane0 | (plane1 << 1)).astype(np.uint8).tobytes()


def solid_tile(value: int, name: Optional[str] = None) -> Tile:
    return pack_tile([value] * TILE_PIXELS, name)
