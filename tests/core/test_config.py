"""
Tests for loading configuration override files.
"""

import pytest
from core.config import DEFAULT_CONFIG, load_config
from core.error_handling import InputError


@pytest.fixture(autouse=True)
def quiet_console(mocker):
    return mocker.patch("core.config.cprint")


def test_override_file_replaces_given_fields(tmp_path):
    """
    Test that the fields present in the file override the defaults.
    """
    path = tmp_path / "resolver.json"
    path.write_text('{"basic_attack_gauge_gain": 20, "win_bonus_multiplier": 1.5}', encoding="utf-8")

    config = load_config(path)

    assert config.basic_attack_gauge_gain == 20
    assert config.win_bonus_multiplier == 1.5


def test_override_file_keeps_missing_defaults(tmp_path, quiet_console):
    """
    Test that the fields missing from the file keep their default values.
    """
    path = tmp_path / "resolver.json"
    path.write_text('{"basic_attack_gauge_gain": 20}', encoding="utf-8")

    config = load_config(path)

    assert config.hero_exp_base == DEFAULT_CONFIG.hero_exp_base
    assert config.win_bonus_multiplier == DEFAULT_CONFIG.win_bonus_multiplier
    assert [item.item_id for item in config.items] == [item.item_id for item in DEFAULT_CONFIG.items]
    quiet_console.assert_called_once()


@pytest.mark.parametrize(
    "content",
    ["{oops", "[]", '{"basic_attack_gauge_gain": -1}'],
    ids=["malformed", "not-an-object", "invalid-value"],
)
def test_bad_override_file_is_an_input_error(tmp_path, content):
    """
    Test that an unreadable or invalid override file is rejected.
    """
    path = tmp_path / "resolver.json"
    path.write_text(content, encoding="utf-8")

    with pytest.raises(InputError):
        load_config(path)


def test_missing_override_file_is_an_input_error(tmp_path):
    """
    Test that a missing override file is rejected.
    """
    with pytest.raises(InputError):
        load_config(tmp_path / "missing.json")
