"""Rule-driven monitoring of line-emitting processes.

Each :class:`MonitorSession` spawns one external process for a rule's
``(domain, key)`` pair, by default ``gsettings monitor <domain> <key>``, and
reads its standard output on a background thread. Every line is matched
against the rule's matchers in declaration order and the first hit is
applied to the keyboard. A failed apply is logged and watching continues.
"""

from __future__ import annotations

import logging
import subprocess
import threading
from collections.abc import Callable, Iterable, Sequence
from enum import Enum
from typing import IO

from legionkbl.core.errors import LegionKblError, SpawnError
from legionkbl.core.model import LedRule, LightingConfig, Matcher

LOGGER = logging.getLogger(__name__)

CommandFactory = Callable[[str, str], Sequence[str]]
ApplyConfig = Callable[[LightingConfig], object]


class SessionState(Enum):
    STARTING = "starting"
    RUNNING = "running"
    EXITED = "exited"
    TERMINATED = "terminated"


def gsettings_command(domain: str, key: str) -> list[str]:
    return ["gsettings", "monitor", domain, key]


def select_config(matchers: Iterable[Matcher], line: str) -> LightingConfig | None:
    """Return the config of the first matcher whose substring occurs in ``line``."""
    for matcher in matchers:
        if matcher.substring in line:
            return matcher.config
    return None


class SessionHandle:
    """Handle returned by :meth:`MonitorSession.close` to force a session down."""

    def __init__(self, session: MonitorSession) -> None:
        self._session = session

    def terminate(self) -> None:
        self._session._terminate()


class MonitorSession:
    def __init__(
        self,
        rule: LedRule,
        apply: ApplyConfig,
        *,
        command_factory: CommandFactory = gsettings_command,
    ) -> None:
        self.rule = rule
        self._apply = apply
        self._command_factory = command_factory
        self._process: subprocess.Popen[bytes] | None = None
        self._reader: threading.Thread | None = None
        self._state = SessionState.STARTING
        self._lock = threading.Lock()

    @property
    def argv(self) -> list[str]:
        return list(self._command_factory(self.rule.domain, self.rule.key))

    @property
    def pid(self) -> int | None:
        return self._process.pid if self._process is not None else None

    @property
    def state(self) -> SessionState:
        with self._lock:
            if (
                self._state is SessionState.RUNNING
                and self._reader is not None
                and not self._reader.is_alive()
                and self._process is not None
                and self._process.poll() is not None
            ):
                self._state = SessionState.EXITED
            return self._state

    def start(self) -> MonitorSession:
        if self._state is not SessionState.STARTING:
            raise RuntimeError(f"monitor for {self.rule.label} was already started")

        argv = self.argv
        try:
            process = subprocess.Popen(argv, stdout=subprocess.PIPE)
        except OSError as exc:
            raise SpawnError(f"Could not launch '{' '.join(argv)}': {exc}") from exc

        LOGGER.info("Monitoring %s (pid %d)", self.rule.label, process.pid)
        self._process = process
        self._reader = threading.Thread(
            target=self._consume,
            args=(process.stdout,),
            name=f"monitor:{self.rule.label}",
            daemon=True,
        )
        self._state = SessionState.RUNNING
        self._reader.start()
        return self

    def handle_line(self, line: str) -> LightingConfig | None:
        config = select_config(self.rule.matchers, line)
        if config is None:
            return None

        LOGGER.info("%s: %r matched, applying %s", self.rule.label, line, config.effect.value)
        try:
            self._apply(config)
        except LegionKblError as exc:
            LOGGER.error("%s: could not apply lighting: %s", self.rule.label, exc)
        return config

    def wait(self) -> int | None:
        """Block until the process exits on its own and return its exit code."""
        if self._process is None:
            return None
        code = self._process.wait()
        if self._reader is not None:
            self._reader.join()
        with self._lock:
            if self._state is SessionState.RUNNING:
                self._state = SessionState.EXITED
        return code

    def close(self) -> SessionHandle:
        return SessionHandle(self)

    def terminate(self) -> None:
        self.close().terminate()

    def _terminate(self) -> None:
        process = self._process
        if process is None:
            return

        if process.poll() is None:
            LOGGER.debug("Killing monitor process %d for %s", process.pid, self.rule.label)
            process.kill()
            process.wait()
            with self._lock:
                if self._state is SessionState.RUNNING:
                    self._state = SessionState.TERMINATED

        if self._reader is not None and self._reader is not threading.current_thread():
            self._reader.join()
        with self._lock:
            if self._state is SessionState.RUNNING:
                self._state = SessionState.EXITED

    def _consume(self, stream: IO[bytes]) -> None:
        with stream:
            for raw in stream:
                try:
                    line = raw.decode("utf-8")
                except UnicodeDecodeError:
                    LOGGER.debug("%s: skipping undecodable line %r", self.rule.label, raw)
                    continue
                self.handle_line(line.rstrip("\r\n"))
        LOGGER.info("Monitor for %s terminated", self.rule.label)


class MonitorEngine:
    """Owns the monitor sessions started for a set of rules."""

    def __init__(
        self,
        apply: ApplyConfig,
        *,
        command_factory: CommandFactory = gsettings_command,
    ) -> None:
        self._apply = apply
        self._command_factory = command_factory
        self._sessions: list[MonitorSession] = []
        self._failures: list[tuple[LedRule, SpawnError]] = []

    @property
    def sessions(self) -> tuple[MonitorSession, ...]:
        return tuple(self._sessions)

    @property
    def failures(self) -> tuple[tuple[LedRule, SpawnError], ...]:
        return tuple(self._failures)

    def start(self, rules: Iterable[LedRule]) -> list[MonitorSession]:
        started: list[MonitorSession] = []
        for rule in rules:
            session = MonitorSession(rule, self._apply, command_factory=self._command_factory)
            try:
                session.start()
            except SpawnError as exc:
                LOGGER.error("Could not start monitor for %s: %s", rule.label, exc)
                self._failures.append((rule, exc))
                continue
            self._sessions.append(session)
            started.append(session)
        return started

    def wait_all(self) -> None:
        for session in list(self._sessions):
            try:
                session.wait()
            finally:
                session.close().terminate()

    def terminate_all(self) -> None:
        for session in list(self._sessions):
            session.close().terminate()

    def __enter__(self) -> MonitorEngine:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.terminate_all()
