import numpy as np
import pytest
from PIL import Image

from chr_tile import unpack_tile
from sheet_extract import IndexedBitmap

GRAYS = [0, 0, 0, 85, 85, 85, 170, 170, 170, 255, 255, 255]


def _digits(i):
    return [(i >> (2 * k)) & 3 for k in range(8)]


def make_sheet_bitmap(width_tiles, height_tiles):
    """Bitmap whose tile n carries n as base-4 digits across its first row."""
    arr = np.zeros((height_tiles * 8, width_tiles * 8), dtype=np.uint8)
    for ty in range(height_tiles):
        for tx in range(width_tiles):
            arr[ty * 8, tx * 8:tx * 8 + 8] = _digits(ty * width_tiles + tx)
    return IndexedBitmap(width=arr.shape[1], height=arr.shape[0], pixels=arr)


def tile_number(tile):
    px = unpack_tile(tile)
    return sum(px[k] << (2 * k) for k in range(8))


@pytest.fixture
def sheet_bitmap():
    return make_sheet_bitmap


@pytest.fixture
def tile_id():
    return tile_number


@pytest.fixture
def write_png(tmp_path):
    def _write(name, bitmap):
        img = Image.new("P", (bitmap.width, bitmap.height))
        img.putpalette(GRAYS)
        img.putdata([int(v) for v in bitmap.pixels.reshape(-1)])
        path = tmp_path / name
        img.save(path)
        return path

    return _write
