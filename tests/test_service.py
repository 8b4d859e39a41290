from __future__ import annotations

import sys
import threading
import time

import pytest

from legionkbl.core.errors import DeviceNotFoundError
from legionkbl.core.model import LedRule, LightingConfig, Matcher
from legionkbl.core.service import KeyboardService
from legionkbl.transports.base import SerializedTransport


class FakeTransport:
    def __init__(self) -> None:
        self.frames: list[bytes] = []

    def send(self, frame: bytes) -> None:
        self.frames.append(frame)


class MissingDeviceTransport:
    def send(self, frame: bytes) -> None:
        raise DeviceNotFoundError("Lighting device 048d:c965 not found")


def test_set_lighting_happy_path() -> None:
    transport = FakeTransport()
    service = KeyboardService(transport=transport)
    config = LightingConfig.build("static", colors=["ff00ed"], brightness=2)

    result = service.set_lighting(config)

    assert result.config is config
    assert result.frame_hex.startswith("cc16010102ff00ed")
    assert transport.frames == [bytes.fromhex(result.frame_hex)]


def test_set_lighting_propagates_transport_errors() -> None:
    service = KeyboardService(transport=MissingDeviceTransport())
    with pytest.raises(DeviceNotFoundError):
        service.set_lighting(LightingConfig.build("off"))


def test_preview_does_not_send() -> None:
    transport = FakeTransport()
    service = KeyboardService(transport=transport)
    assert service.preview(LightingConfig.build("off")) == "cc1601" + "00" * 29
    assert transport.frames == []


def test_start_monitor_sends_through_transport() -> None:
    transport = FakeTransport()
    service = KeyboardService(
        transport=transport,
        command_factory=lambda domain, key: [sys.executable, "-c", "print(\"'prefer-dark'\")"],
    )
    rule = LedRule(
        domain="org.gnome.desktop.interface",
        key="color-scheme",
        matchers=(Matcher("prefer-dark", LightingConfig.build("off")),),
    )

    with service.start_monitor([rule]) as engine:
        engine.wait_all()

    assert transport.frames == [bytes.fromhex("cc1601" + "00" * 29)]


def test_serialized_transport_never_overlaps_sends() -> None:
    class SlowTransport:
        def __init__(self) -> None:
            self.active = 0
            self.max_active = 0

        def send(self, frame: bytes) -> None:
            self.active += 1
            self.max_active = max(self.max_active, self.active)
            time.sleep(0.01)
            self.active -= 1

    inner = SlowTransport()
    transport = SerializedTransport(inner)
    threads = [threading.Thread(target=transport.send, args=(bytes(32),)) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert inner.max_active == 1
