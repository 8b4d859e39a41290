"""Hex color parsing and zone padding."""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from legionkbl.core.errors import ColorError, InvalidCharacterError, TooShortError

RGB = tuple[int, int, int]

BLACK: RGB = (0, 0, 0)
ZONE_COUNT = 4
_HEX_DIGITS = "0123456789abcdefABCDEF"


def _consume(chars: Iterator[str], text: str) -> int:
    try:
        char = next(chars)
    except StopIteration:
        raise TooShortError(f"color '{text}' is too short, expected 6 hex digits") from None
    if char not in _HEX_DIGITS:
        raise InvalidCharacterError(f"color '{text}' contains invalid character '{char}'")
    return int(char, 16)


def parse_hex_triplet(text: str) -> RGB:
    """Parse an RRGGBB string such as ``ff00ed`` into ``(255, 0, 237)``."""
    chars = iter(text)
    digits = [_consume(chars, text) for _ in range(6)]
    if next(chars, None) is not None:
        raise ColorError(f"color '{text}' is too long, expected 6 hex digits")
    return (
        digits[0] * 16 + digits[1],
        digits[2] * 16 + digits[3],
        digits[4] * 16 + digits[5],
    )


def pad_to_four(colors: Sequence[RGB]) -> list[RGB]:
    """Repeat the last color until there is one per zone.

    An empty input yields four black zones. Longer input is returned as-is.
    """
    padded = list(colors)
    if not padded:
        return [BLACK] * ZONE_COUNT
    while len(padded) < ZONE_COUNT:
        padded.append(padded[-1])
    return padded
