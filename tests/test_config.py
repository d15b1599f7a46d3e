from __future__ import annotations

import pytest

from shared.config import PrismConfig


def test_defaults() -> None:
    config = PrismConfig()
    assert config.dexmap.canvas_width == 256
    assert config.dexmap.output_extension == ".ppn"
    assert config.dexmap.strict_encoded_values is False
    assert config.global_settings.log_level == "INFO"


def test_load_ignores_unknown_keys(tmp_path) -> None:
    path = tmp_path / "config.toml"
    path.write_text(
        '[global]\nlog_level = "DEBUG"\ncolour = "always"\n'
        "[dexmap]\nstrict_encoded_values = true\nunknown = 1\n"
        "[other_tool]\nmax_file_size = 1\n"
    )
    config = PrismConfig.load(path)

    assert config.global_settings.log_level == "DEBUG"
    assert config.dexmap.strict_encoded_values is True
    assert config.dexmap.max_file_size == 52_428_800
    assert config.to_dict()["dexmap"]["canvas_width"] == 256


def test_explicit_missing_path_raises(tmp_path) -> None:
    with pytest.raises(FileNotFoundError):
        PrismConfig.load(tmp_path / "nope.toml")


@pytest.mark.parametrize("line", [
    "canvas_width = 0",
    'canvas_width = "wide"',
    "canvas_width = true",
    "max_file_size = -1",
    "output_extension = 3",
])
def test_out_of_range_dexmap_values_are_rejected(tmp_path, line: str) -> None:
    path = tmp_path / "config.toml"
    path.write_text(f"[dexmap]\n{line}\n")
    with pytest.raises(ValueError, match="dexmap"):
        PrismConfig.load(path)
