import random

import numpy as np
import pytest

from asset_errors import DimensionsError, PaletteError
from chr_tile import BLANK_TILE, TILE_BYTES, Tile, pack_tile, solid_tile, unpack_tile

ARROW = [
    0, 1, 0, 0, 0, 0, 0, 3,
    1, 1, 0, 0, 0, 0, 3, 0,
    0, 1, 0, 0, 0, 3, 0, 0,
    0, 1, 0, 0, 3, 0, 0, 0,
    0, 0, 0, 3, 0, 2, 2, 0,
    0, 0, 3, 0, 0, 0, 0, 2,
    0, 3, 0, 0, 0, 0, 2, 0,
    3, 0, 0, 0, 0, 2, 2, 2,
]
ARROW_CHR = bytes([
    0x41, 0xC2, 0x44, 0x48, 0x10, 0x20, 0x40, 0x80,
    0x01, 0x02, 0x04, 0x08, 0x16, 0x21, 0x42, 0x87,
])


def test_pack_known_tile():
    tile = pack_tile(ARROW, "arrow")
    assert tile.data == ARROW_CHR
    assert tile.name == "arrow"


def test_unpack_known_tile():
    assert list(unpack_tile(Tile(ARROW_CHR))) == ARROW


def test_round_trip_random_blocks():
    rng = random.Random(1234)
    for _ in range(50):
        block = [rng.randrange(4) for _ in range(64)]
        assert list(unpack_tile(pack_tile(block))) == block


def test_pack_accepts_bytes_and_arrays():
    as_bytes = pack_tile(bytes(ARROW))
    as_array = pack_tile(np.array(ARROW, dtype=np.uint8).reshape(8, 8))
    assert as_bytes.data == ARROW_CHR
    assert as_array.data == ARROW_CHR


@pytest.mark.parametrize("size", [0, 63, 65, 128])
def test_pack_rejects_wrong_block_length(size):
    with pytest.raises(DimensionsError):
        pack_tile([0] * size)


@pytest.mark.parametrize("bad", [4, 255, -1])
def test_pack_rejects_out_of_range_pixels(bad):
    block = [0] * 64
    block[37] = bad
    with pytest.raises(PaletteError):
        pack_tile(block)


def test_tile_requires_sixteen_bytes():
    with pytest.raises(DimensionsError):
        Tile(bytes(15))
    assert len(Tile(bytes(TILE_BYTES)).data) == TILE_BYTES


def test_blank_and_solid_tiles():
    assert BLANK_TILE.data == bytes(TILE_BYTES)
    assert BLANK_TILE.name is None
    assert solid_tile(3).data == b"\xff" * 16
    assert solid_tile(1).data == b"\xff" * 8 + b"\x00" * 8
    assert solid_tile(2).data == b"\x00" * 8 + b"\xff" * 8


def test_renamed_clones_without_touching_original():
    tile = pack_tile(ARROW, "a")
    other = tile.renamed("b")
    assert other.name == "b"
    assert tile.name == "a"
    assert other.data == tile.data
