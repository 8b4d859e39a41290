"""Encode a lighting config into the 32-byte control frame.

Frame layout::

    0      0xcc        header
    1      0x16        header
    2      effect      01 static/off, 03 breath, 04 wave, 06 hue
    3      speed       01..04
    4      brightness  01..02
    5-16   colors      R, G, B for zones 1..4, left to right
    17     unused
    18     rtl         wave right to left
    19     ltr         wave left to right
    20-31  unused
"""

from __future__ import annotations

from legionkbl.core.model import Effect, LightingConfig

FRAME_LENGTH = 32
HEADER = bytes((0xCC, 0x16))

_COLORS_OFFSET = 5
_DIRECTION_OFFSET = 18


def encode(config: LightingConfig) -> bytes:
    frame = bytearray(FRAME_LENGTH)
    frame[0:2] = HEADER
    frame[2] = config.effect.code

    if config.effect is Effect.OFF:
        return bytes(frame)

    frame[3] = config.speed
    frame[4] = config.brightness

    if config.effect.uses_zone_colors:
        offset = _COLORS_OFFSET
        for red, green, blue in config.zone_colors:
            frame[offset : offset + 3] = bytes((red, green, blue))
            offset += 3

    frame[_DIRECTION_OFFSET : _DIRECTION_OFFSET + 2] = bytes(config.wave_direction.flags)
    return bytes(frame)
