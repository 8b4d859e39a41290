"""Stable public API for building tooling on top of legionkbl.

This module is the supported integration surface for third-party callers.
Avoid importing from private/internal modules unless intentionally depending on
non-stable internals.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path

from legionkbl.core.color import pad_to_four, parse_hex_triplet
from legionkbl.core.errors import (
    ColorError,
    DeviceNotFoundError,
    DriverDetachError,
    DriverQueryError,
    InvalidCharacterError,
    LegionKblError,
    RuleLoadError,
    RuleParseError,
    SpawnError,
    TooShortError,
    TransportError,
    ValidationError,
    WriteError,
)
from legionkbl.core.frame import encode
from legionkbl.core.model import (
    LEGION_5_PRO_2021,
    Effect,
    LedRule,
    LightingConfig,
    Matcher,
    SendResult,
    UsbControlSpec,
    WaveDirection,
)
from legionkbl.core.monitor import (
    CommandFactory,
    MonitorEngine,
    MonitorSession,
    SessionState,
    gsettings_command,
)
from legionkbl.core.rule_loader import parse_rules
from legionkbl.core.service import KeyboardService
from legionkbl.transports.base import Transport
from legionkbl.transports.usb_hid import UsbHidTransport

__all__ = [
    "LegionKblError",
    "ValidationError",
    "ColorError",
    "InvalidCharacterError",
    "TooShortError",
    "TransportError",
    "DeviceNotFoundError",
    "DriverQueryError",
    "DriverDetachError",
    "WriteError",
    "SpawnError",
    "RuleParseError",
    "RuleLoadError",
    "Effect",
    "WaveDirection",
    "LightingConfig",
    "LedRule",
    "Matcher",
    "SendResult",
    "UsbControlSpec",
    "LEGION_5_PRO_2021",
    "MonitorEngine",
    "MonitorSession",
    "SessionState",
    "UsbHidTransport",
    "encode",
    "parse_hex_triplet",
    "pad_to_four",
    "parse_rules",
    "Client",
]


class Client:
    """Public client for interacting with legionkbl core capabilities.

    A `Client` instance wraps config building, frame encoding, USB delivery
    and rule-driven monitoring behind a stable API intended for third-party
    tools (GUI/TUI/services/scripts).
    """

    def __init__(
        self,
        *,
        transport: Transport | None = None,
        command_factory: CommandFactory = gsettings_command,
    ) -> None:
        self._service = KeyboardService(transport=transport, command_factory=command_factory)

    def build_config(
        self,
        effect: Effect | str,
        colors: Sequence[str | tuple[int, int, int]] = (),
        *,
        speed: int | None = None,
        brightness: int | None = None,
        direction: WaveDirection | str | None = None,
    ) -> LightingConfig:
        return LightingConfig.build(
            effect,
            speed=speed,
            brightness=brightness,
            direction=direction,
            colors=colors,
        )

    def frame_hex(self, config: LightingConfig) -> str:
        return self._service.preview(config)

    def set_lighting(self, config: LightingConfig) -> SendResult:
        return self._service.set_lighting(config)

    def load_rules(self, path: Path | str | None = None) -> list[LedRule]:
        return self._service.load_rules(path)

    def monitor(self, rules: Iterable[LedRule]) -> MonitorEngine:
        """Start one monitor session per rule; the caller owns the returned engine."""
        return self._service.start_monitor(rules)
