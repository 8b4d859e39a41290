"""Core data models used across encoder, monitor, service, and CLI."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from legionkbl.core.color import RGB, ZONE_COUNT, pad_to_four, parse_hex_triplet
from legionkbl.core.errors import ValidationError

LOGGER = logging.getLogger(__name__)

SPEED_RANGE = range(1, 5)
BRIGHTNESS_RANGE = range(1, 3)


class Effect(Enum):
    OFF = "Off"
    STATIC = "Static"
    BREATH = "Breath"
    WAVE = "Wave"
    HUE = "Hue"

    @property
    def code(self) -> int:
        return _EFFECT_CODES[self]

    @property
    def uses_zone_colors(self) -> bool:
        return self in (Effect.STATIC, Effect.BREATH)

    @classmethod
    def parse(cls, name: str) -> Effect:
        lowered = name.strip().lower()
        for effect in cls:
            if effect.value.lower() == lowered:
                return effect
        choices = ", ".join(f"'{e.value.lower()}'" for e in cls)
        raise ValidationError(f"invalid effect '{name}', choose one of {choices}")


_EFFECT_CODES = {
    Effect.OFF: 1,
    Effect.STATIC: 1,
    Effect.BREATH: 3,
    Effect.WAVE: 4,
    Effect.HUE: 6,
}


class WaveDirection(Enum):
    NONE = "none"
    LTR = "ltr"
    RTL = "rtl"

    @property
    def flags(self) -> tuple[int, int]:
        if self is WaveDirection.RTL:
            return (1, 0)
        if self is WaveDirection.LTR:
            return (0, 1)
        return (0, 0)

    @classmethod
    def parse(cls, value: str | None) -> WaveDirection:
        if value is None:
            return cls.NONE
        lowered = value.strip().lower()
        if lowered == "ltr":
            return cls.LTR
        if lowered == "rtl":
            return cls.RTL
        raise ValidationError(f"direction must be either 'ltr' or 'rtl', found '{value}'")

    @classmethod
    def from_flags(cls, flags: Sequence[int]) -> WaveDirection:
        pair = tuple(flags)
        for direction in cls:
            if direction.flags == pair:
                return direction
        raise ValidationError(f"wave direction must be one of [0, 0], [0, 1], [1, 0], found {list(pair)}")


@dataclass(frozen=True)
class LightingConfig:
    effect: Effect
    speed: int = 1
    brightness: int = 1
    wave_direction: WaveDirection = WaveDirection.NONE
    zone_colors: tuple[RGB, ...] = field(default_factory=lambda: tuple(pad_to_four(())))

    def __post_init__(self) -> None:
        if not isinstance(self.effect, Effect):
            raise ValidationError(f"effect must be an Effect, found {self.effect!r}")
        if not isinstance(self.wave_direction, WaveDirection):
            raise ValidationError(f"wave direction must be a WaveDirection, found {self.wave_direction!r}")
        if not _is_int(self.speed) or self.speed not in SPEED_RANGE:
            raise ValidationError(f"speed must be in range [1..4], found {self.speed}")
        if not _is_int(self.brightness) or self.brightness not in BRIGHTNESS_RANGE:
            raise ValidationError(f"brightness must be either 1 or 2, found {self.brightness}")

        colors = tuple(self.zone_colors)
        if len(colors) != ZONE_COUNT:
            raise ValidationError(f"exactly {ZONE_COUNT} zone colors are required, found {len(colors)}")
        for color in colors:
            if (
                not isinstance(color, (tuple, list))
                or len(color) != 3
                or not all(_is_int(c) and 0 <= c <= 255 for c in color)
            ):
                raise ValidationError(f"color channels must be integers in [0..255], found {color!r}")
        object.__setattr__(self, "zone_colors", tuple(tuple(color) for color in colors))

    @classmethod
    def build(
        cls,
        effect: Effect | str,
        *,
        speed: int | None = None,
        brightness: int | None = None,
        direction: WaveDirection | str | None = None,
        colors: Iterable[RGB | str] = (),
    ) -> LightingConfig:
        """Build a config from loosely typed user input, applying defaults.

        Colors may be ``RRGGBB`` strings or RGB triples. Fewer than four are
        padded by repeating the last one; none at all turns every zone black.
        """
        if not isinstance(effect, Effect):
            effect = Effect.parse(effect)
        if not isinstance(direction, WaveDirection):
            direction = WaveDirection.parse(direction)

        parsed = [parse_hex_triplet(c) if isinstance(c, str) else tuple(c) for c in colors]
        if len(parsed) > ZONE_COUNT:
            raise ValidationError(f"at most {ZONE_COUNT} colors can be given, found {len(parsed)}")
        if not parsed and effect.uses_zone_colors:
            LOGGER.warning("no colors given, zones default to black")

        return cls(
            effect=effect,
            speed=1 if speed is None else speed,
            brightness=1 if brightness is None else brightness,
            wave_direction=direction,
            zone_colors=tuple(pad_to_four(parsed)),
        )


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass(frozen=True)
class Matcher:
    substring: str
    config: LightingConfig


@dataclass(frozen=True)
class LedRule:
    domain: str
    key: str
    matchers: tuple[Matcher, ...]

    @property
    def label(self) -> str:
        return f"{self.domain} {self.key}"


@dataclass(frozen=True)
class UsbControlSpec:
    vendor_id: int = 0x048D
    product_id: int = 0xC965
    request_type: int = 0x21
    request: int = 0x09
    value: int = 0x03CC
    index: int = 0x0000
    interface: int = 0
    timeout_ms: int = 1000


LEGION_5_PRO_2021 = UsbControlSpec()


@dataclass(frozen=True)
class SendResult:
    config: LightingConfig
    frame_hex: str
