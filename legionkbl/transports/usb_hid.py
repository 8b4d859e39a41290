"""USB HID control-transfer transport implemented with PyUSB."""

from __future__ import annotations

import logging

import usb.core

from legionkbl.core.errors import (
    DeviceNotFoundError,
    DriverDetachError,
    DriverQueryError,
    WriteError,
)
from legionkbl.core.frame import FRAME_LENGTH
from legionkbl.core.model import LEGION_5_PRO_2021, UsbControlSpec

LOGGER = logging.getLogger(__name__)


class UsbHidTransport:
    def __init__(self, spec: UsbControlSpec = LEGION_5_PRO_2021) -> None:
        self.spec = spec

    @property
    def device_id(self) -> str:
        return f"{self.spec.vendor_id:04x}:{self.spec.product_id:04x}"

    def send(self, frame: bytes) -> None:
        if len(frame) != FRAME_LENGTH:
            raise WriteError(f"frame must be {FRAME_LENGTH} bytes, got {len(frame)}")

        device = self._find_device()
        interface = self.spec.interface

        # An attached kernel driver makes the control transfer fail with an I/O error.
        try:
            driver_active = device.is_kernel_driver_active(interface)
        except (usb.core.USBError, NotImplementedError) as exc:
            raise DriverQueryError(
                f"Could not query kernel driver state of interface {interface}: {exc}"
            ) from exc

        if driver_active:
            LOGGER.debug("Detaching kernel driver from interface %d of %s", interface, self.device_id)
            try:
                device.detach_kernel_driver(interface)
            except (usb.core.USBError, NotImplementedError) as exc:
                raise DriverDetachError(
                    f"Could not detach kernel driver from interface {interface}: {exc}"
                ) from exc

        try:
            written = device.ctrl_transfer(
                self.spec.request_type,
                self.spec.request,
                self.spec.value,
                self.spec.index,
                frame,
                timeout=self.spec.timeout_ms,
            )
        except usb.core.USBTimeoutError as exc:
            raise WriteError(f"Control transfer to {self.device_id} timed out") from exc
        except usb.core.USBError as exc:
            raise WriteError(f"Control transfer to {self.device_id} failed: {exc}") from exc

        if written != len(frame):
            raise WriteError(f"Short control transfer to {self.device_id}: wrote {written} of {len(frame)} bytes")

    def _find_device(self) -> usb.core.Device:
        try:
            device = usb.core.find(idVendor=self.spec.vendor_id, idProduct=self.spec.product_id)
        except usb.core.NoBackendError as exc:
            raise DeviceNotFoundError(
                "No USB backend available. Install libusb and retry."
            ) from exc
        except usb.core.USBError as exc:
            raise DeviceNotFoundError(f"Could not enumerate USB devices: {exc}") from exc
        if device is None:
            raise DeviceNotFoundError(f"Lighting device {self.device_id} not found")
        return device
