import json

import pytest

from asset_errors import ManifestParseError
from stage_parser import Orientation, load_stage

PAL = list(range(16))


def _base(**overrides):
    data = {
        "background_palette": PAL,
        "sprite_palette": PAL,
        "metatiles": [{"symbol": "#", "tiles": [1, 2, 3, 4], "palette": 2}],
        "data": "##\n##\n",
    }
    data.update(overrides)
    return data


def _write(tmp_path, data, name="stage.json"):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def test_defaults(tmp_path):
    stage = load_stage(_write(tmp_path, _base()))
    assert stage.name == "stage"
    assert stage.orientation == Orientation.HORIZONTAL
    assert stage.metatiles[0].symbol == "#"
    assert stage.metatiles[0].tiles == [1, 2, 3, 4]
    assert stage.metatiles[0].palette == 2


def test_yaml_stage_with_tile_names(tmp_path):
    path = tmp_path / "cave.yml"
    path.write_text(
        "orientation: vertical\n"
        f"background_palette: {PAL}\n"
        f"sprite_palette: {PAL}\n"
        "metatiles:\n"
        "  - symbol: 'R'\n"
        "    tiles: [rock_0_0, '$11', '0x20', 33]\n"
        "data: |\n"
        "  RR\n",
        encoding="utf-8",
    )
    stage = load_stage(str(path))
    assert stage.name == "cave"
    assert stage.orientation == Orientation.VERTICAL
    assert stage.metatiles[0].tiles == ["rock_0_0", 17, 32, 33]
    assert stage.metatiles[0].palette == 0
    assert stage.data == "RR\n"


@pytest.mark.parametrize(
    "overrides, message",
    [
        ({"orientation": "Diagonal"}, "orientation"),
        ({"background_palette": PAL[:15]}, "background_palette"),
        ({"sprite_palette": PAL[:15] + [256]}, r"sprite_palette'\[15\] must be 0..255"),
        ({"metatiles": [{"symbol": "##", "tiles": [0, 0, 0, 0]}]}, "single character"),
        ({"metatiles": [{"symbol": "#", "tiles": [0, 0, 0]}]}, "4 tiles"),
        ({"metatiles": [{"symbol": "#", "tiles": [0, 0, 0, 300]}]}, "0..255"),
        ({"metatiles": [{"symbol": "#", "tiles": [0, 0, 0, 0], "palette": 4}]}, "0..3"),
        (
            {"metatiles": [{"symbol": "#", "tiles": [0, 0, 0, 0]}, {"symbol": "#", "tiles": [1, 1, 1, 1]}]},
            "duplicate symbol",
        ),
        ({"data": ["##", "##"]}, "multi-line string"),
    ],
)
def test_bad_stages(tmp_path, overrides, message):
    with pytest.raises(ManifestParseError, match=message):
        load_stage(_write(tmp_path, _base(**overrides)))


def test_missing_key(tmp_path):
    data = _base()
    del data["metatiles"]
    with pytest.raises(ManifestParseError, match="missing 'metatiles'"):
        load_stage(_write(tmp_path, data))


def test_digit_and_underscore_names_stay_names(tmp_path):
    path = tmp_path / "digits.yaml"
    path.write_text(
        f"background_palette: {PAL}\n"
        f"sprite_palette: {PAL}\n"
        "metatiles:\n"
        "  - symbol: 'a'\n"
        "    tiles: [1_0_0, 010, 0x1F, 7]\n"
        "data: a\n",
        encoding="utf-8",
    )
    assert load_stage(str(path)).metatiles[0].tiles == ["1_0_0", 10, 31, 7]

    data = _base(metatiles=[{"symbol": "#", "tiles": ["2_1_0", "12", "$0A", 3]}])
    assert load_stage(_write(tmp_path, data)).metatiles[0].tiles == ["2_1_0", 12, 10, 3]
