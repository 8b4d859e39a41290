"""Service layer used by CLI and future UI frontends."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from legionkbl.core.frame import encode
from legionkbl.core.model import LedRule, LightingConfig, SendResult
from legionkbl.core.monitor import CommandFactory, MonitorEngine, gsettings_command
from legionkbl.core.rule_loader import load_rules
from legionkbl.transports.base import SerializedTransport, Transport
from legionkbl.transports.usb_hid import UsbHidTransport

LOGGER = logging.getLogger(__name__)


class KeyboardService:
    def __init__(
        self,
        *,
        transport: Transport | None = None,
        command_factory: CommandFactory = gsettings_command,
    ) -> None:
        self.transport = SerializedTransport(transport or UsbHidTransport())
        self.command_factory = command_factory

    def preview(self, config: LightingConfig) -> str:
        return encode(config).hex()

    def set_lighting(self, config: LightingConfig) -> SendResult:
        frame = encode(config)
        LOGGER.debug("Sending %s frame %s", config.effect.value, frame.hex())
        self.transport.send(frame)
        return SendResult(config=config, frame_hex=frame.hex())

    def load_rules(self, path: Path | str | None = None) -> list[LedRule]:
        return load_rules(path)

    def start_monitor(self, rules: Iterable[LedRule]) -> MonitorEngine:
        engine = MonitorEngine(self.set_lighting, command_factory=self.command_factory)
        engine.start(rules)
        return engine
