from __future__ import annotations

import logging

import pytest

from legionkbl.core.errors import InvalidCharacterError, ValidationError
from legionkbl.core.model import LEGION_5_PRO_2021, Effect, LightingConfig, WaveDirection


def test_build_applies_defaults() -> None:
    config = LightingConfig.build("static", colors=["ff0000"])
    assert config.effect is Effect.STATIC
    assert config.speed == 1
    assert config.brightness == 1
    assert config.wave_direction is WaveDirection.NONE
    assert config.zone_colors == ((255, 0, 0),) * 4


def test_build_parses_effect_case_insensitively() -> None:
    assert LightingConfig.build("Breath").effect is Effect.BREATH
    assert LightingConfig.build("HUE").effect is Effect.HUE


def test_unknown_effect_rejected() -> None:
    with pytest.raises(ValidationError) as exc:
        LightingConfig.build("rainbow")
    assert "'static'" in str(exc.value)


@pytest.mark.parametrize("speed", [0, 5, -1])
def test_speed_out_of_range_rejected(speed: int) -> None:
    with pytest.raises(ValidationError):
        LightingConfig.build("wave", speed=speed)


@pytest.mark.parametrize("brightness", [0, 3])
def test_brightness_out_of_range_rejected(brightness: int) -> None:
    with pytest.raises(ValidationError):
        LightingConfig.build("static", brightness=brightness)


def test_direction_parsing() -> None:
    assert WaveDirection.parse("rtl").flags == (1, 0)
    assert WaveDirection.parse("ltr").flags == (0, 1)
    assert WaveDirection.parse(None).flags == (0, 0)
    with pytest.raises(ValidationError):
        WaveDirection.parse("up")


def test_direction_from_flags() -> None:
    assert WaveDirection.from_flags([1, 0]) is WaveDirection.RTL
    assert WaveDirection.from_flags((0, 1)) is WaveDirection.LTR
    assert WaveDirection.from_flags([0, 0]) is WaveDirection.NONE
    with pytest.raises(ValidationError):
        WaveDirection.from_flags([1, 1])


def test_bad_color_aborts_build() -> None:
    with pytest.raises(InvalidCharacterError):
        LightingConfig.build("static", colors=["ff0000", "gg0000"])


def test_more_than_four_colors_rejected() -> None:
    with pytest.raises(ValidationError):
        LightingConfig.build("static", colors=["000000"] * 5)


def test_no_colors_defaults_to_black_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.WARNING, logger="legionkbl.core.model"):
        config = LightingConfig.build("static")
    assert config.zone_colors == ((0, 0, 0),) * 4
    assert "no colors given" in caplog.text


def test_direct_construction_validates_zone_colors() -> None:
    with pytest.raises(ValidationError):
        LightingConfig(effect=Effect.STATIC, zone_colors=((0, 0, 0),) * 3)
    with pytest.raises(ValidationError):
        LightingConfig(effect=Effect.STATIC, zone_colors=((256, 0, 0),) * 4)


def test_config_is_immutable() -> None:
    config = LightingConfig.build("static", colors=["ffffff"])
    with pytest.raises(AttributeError):
        config.speed = 2  # type: ignore[misc]


def test_effect_codes() -> None:
    assert [e.code for e in Effect] == [1, 1, 3, 4, 6]


def test_device_constants() -> None:
    assert LEGION_5_PRO_2021.vendor_id == 0x048D
    assert LEGION_5_PRO_2021.product_id == 0xC965
    assert LEGION_5_PRO_2021.value == 0x03CC
