"""Typer CLI entrypoint."""

from __future__ import annotations

import logging
from pathlib import Path

import typer

from legionkbl.core.errors import LegionKblError
from legionkbl.core.model import LightingConfig
from legionkbl.core.service import KeyboardService

app = typer.Typer(help="Lenovo Legion 5 Pro 2021 keyboard light controller")

EFFECT_HELP = "off | static | breath | wave | hue"
COLORS_HELP = (
    "Up to four RRGGBB colors, one per zone from left to right. "
    "The last color is repeated for the remaining zones."
)
SPEED_HELP = "Animation speed 1 (slower) to 4 (faster); breath, wave and hue only."
BRIGHTNESS_HELP = "Brightness 1 (dimmer) or 2 (brighter)."
DIRECTION_HELP = "Wave direction: 'ltr' or 'rtl'; wave only."


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging"),
) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )


def _build_config(
    effect: str,
    colors: list[str] | None,
    speed: int | None,
    brightness: int | None,
    direction: str | None,
) -> LightingConfig:
    return LightingConfig.build(
        effect,
        speed=speed,
        brightness=brightness,
        direction=direction,
        colors=colors or (),
    )


@app.command("set")
def set_lighting(
    effect: str = typer.Argument(..., help=EFFECT_HELP),
    colors: list[str] | None = typer.Argument(None, help=COLORS_HELP),
    speed: int | None = typer.Option(None, "--speed", "-s", help=SPEED_HELP),
    brightness: int | None = typer.Option(None, "--brightness", "-b", help=BRIGHTNESS_HELP),
    direction: str | None = typer.Option(None, "--dir", "-d", help=DIRECTION_HELP),
    dry_run: bool = typer.Option(False, "--dry-run", help="Print the frame without sending it"),
) -> None:
    """Directly set the LED effect and its attributes."""
    try:
        config = _build_config(effect, colors, speed, brightness, direction)
        service = KeyboardService()
        if dry_run:
            typer.echo(f"Would send {config.effect.value} frame={service.preview(config)}")
            return
        result = service.set_lighting(config)
        typer.echo(f"Sent {result.config.effect.value} frame={result.frame_hex}")
    except LegionKblError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("frame")
def show_frame(
    effect: str = typer.Argument(..., help=EFFECT_HELP),
    colors: list[str] | None = typer.Argument(None, help=COLORS_HELP),
    speed: int | None = typer.Option(None, "--speed", "-s", help=SPEED_HELP),
    brightness: int | None = typer.Option(None, "--brightness", "-b", help=BRIGHTNESS_HELP),
    direction: str | None = typer.Option(None, "--dir", "-d", help=DIRECTION_HELP),
) -> None:
    """Print the 32-byte control frame for the given settings as hex."""
    try:
        config = _build_config(effect, colors, speed, brightness, direction)
        typer.echo(KeyboardService().preview(config))
    except LegionKblError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None


@app.command("monitor")
def monitor(
    file: Path | None = typer.Option(
        None,
        "--file",
        "-f",
        help="JSON or YAML rule file mapping setting changes to LED configs",
    ),
) -> None:
    """Map keyboard LED settings to changes in system settings."""
    try:
        service = KeyboardService()
        rules = service.load_rules(file)
        if not rules:
            typer.echo("No rules loaded", err=True)
            raise typer.Exit(code=1)

        with service.start_monitor(rules) as engine:
            for rule, error in engine.failures:
                typer.echo(f"Warning: monitor for {rule.label} not started: {error}", err=True)
            if not engine.sessions:
                typer.echo("Error: no monitor could be started", err=True)
                raise typer.Exit(code=1)
            try:
                engine.wait_all()
            except KeyboardInterrupt:
                typer.echo("Interrupted, stopping monitors", err=True)
            failed = bool(engine.failures)
    except LegionKblError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from None

    if failed:
        raise typer.Exit(code=1)


def run() -> None:
    app()


if __name__ == "__main__":
    run()
