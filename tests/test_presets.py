import json

import pytest

from imagemage.api.exceptions import ConfigurationError
from imagemage.presets import ImageGenConfig, find_config, load_config_file


def test_load_json_with_camel_case_keys(tmp_path):
    path = tmp_path / "theme.json"
    path.write_text(json.dumps({
        "style": "flat vector",
        "colorScheme": "navy and orange",
        "additionalContext": "conference talk",
        "aspectRatio": "16:9",
        "resolution": "2K",
        "unknownKey": "ignored",
    }))
    config = load_config_file(path)

    assert config.style == "flat vector"
    assert config.color_scheme == "navy and orange"
    assert config.additional_context == "conference talk"
    assert config.aspect_ratio == "16:9"
    assert config.resolution == "2K"
    assert config.source == path


def test_load_yaml_with_snake_case_keys(tmp_path):
    path = tmp_path / "theme.yaml"
    path.write_text("style: watercolor\ncolor_scheme: pastel\n")
    config = load_config_file(path)
    assert config.style == "watercolor"
    assert config.color_scheme == "pastel"


def test_invalid_file_is_a_configuration_error(tmp_path):
    path = tmp_path / "broken.json"
    path.write_text("{not json")
    with pytest.raises(ConfigurationError):
        load_config_file(path)

    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n")
    with pytest.raises(ConfigurationError):
        load_config_file(path)


def test_explicit_missing_path_fails(tmp_path):
    with pytest.raises(ConfigurationError):
        find_config(tmp_path / "nope.json")


def test_find_config_searches_candidates_in_order(tmp_path):
    first = tmp_path / "a.json"
    second = tmp_path / "b.yaml"
    second.write_text("style: second\n")
    assert find_config(candidates=[first, second]).style == "second"

    first.write_text(json.dumps({"style": "first"}))
    assert find_config(candidates=[first, second]).style == "first"


def test_find_config_nothing_found(tmp_path):
    config = find_config(candidates=[tmp_path / "none.json"])
    assert config == ImageGenConfig()


def test_apply_to_prompt():
    config = ImageGenConfig(style="pixel art", color_scheme="", additional_context="retro game")
    assert config.apply_to_prompt("a castle") == "a castle. Style: pixel art. Context: retro game"
    assert ImageGenConfig().apply_to_prompt("a castle") == "a castle"


def test_explicit_values_beat_preset():
    config = ImageGenConfig(aspect_ratio="16:9", resolution="2K")
    assert config.resolve_aspect_ratio(None) == "16:9"
    assert config.resolve_aspect_ratio("1:1") == "1:1"
    assert config.resolve_resolution("4K") == "4K"
    assert ImageGenConfig().resolve_resolution(None) is None
