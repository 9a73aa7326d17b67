"""Tests for the session state machine."""

import asyncio
import threading

import pytest

from termdesk.errors import SpawnError, ValidationError
from termdesk.events import (
    SESSION_STATE,
    TERMINAL_EXITED,
    TERMINAL_INPUT_NEEDED,
    TERMINAL_OUTPUT,
)
from termdesk.session.controller import SESSION_ENDED_MARKER, SessionController, SessionState
from tests.conftest import EventRecorder


@pytest.fixture
def controller(host, hub, recent_store):
    return SessionController(host, hub, recent_store, command="claude", cols=80, rows=24)


class TestStart:
    @pytest.mark.asyncio
    async def test_start_goes_live_and_issues_geometry(self, controller, host):
        assert controller.state is SessionState.IDLE
        await controller.start_session("/proj", cols=120, rows=40)
        assert controller.state is SessionState.LIVE
        assert host.spawn_calls[0]["cwd"] == "/proj"
        assert host.last.resizes == [(120, 40)]

    @pytest.mark.asyncio
    async def test_start_without_workdir_changes_nothing(self, controller, host, recent_store):
        with pytest.raises(ValidationError):
            await controller.start_session("")
        assert controller.state is SessionState.IDLE
        assert host.spawn_calls == []
        assert recent_store.load() == []

    @pytest.mark.asyncio
    async def test_start_records_recent_directory(self, controller, recent_store):
        await controller.start_session("/proj")
        assert [e.path for e in recent_store.load()] == ["/proj"]

    @pytest.mark.asyncio
    async def test_restart_kills_old_handle_before_new_spawn(self, controller, host):
        await controller.start_session("/proj")
        first = host.last
        await controller.start_session("/proj")
        assert first.killed
        assert host.log == [("spawn", 1), ("kill", 1), ("spawn", 2)]
        assert controller.state is SessionState.LIVE
        assert controller.session.handle is host.last

    @pytest.mark.asyncio
    async def test_output_from_replaced_session_is_dropped(self, controller, host, hub):
        recorder = EventRecorder(hub, TERMINAL_OUTPUT)
        await controller.start_session("/proj")
        old = host.last
        await controller.start_session("/proj")
        old.emit("stale")
        host.last.emit("fresh")
        controller.pump()
        assert [e.text for e in recorder.of(TERMINAL_OUTPUT)] == ["fresh"]

    @pytest.mark.asyncio
    async def test_spawn_failure_surfaces_as_exit_without_code(self, controller, host, hub):
        recorder = EventRecorder(hub, TERMINAL_EXITED)
        host.fail_with = "Command not found: claude"
        with pytest.raises(SpawnError):
            await controller.start_session("/proj")
        assert controller.state is SessionState.EXITED
        assert controller.exit_code is None
        [event] = recorder.of(TERMINAL_EXITED)
        assert event.code is None
        assert "not found" in event.error

    @pytest.mark.asyncio
    async def test_start_allowed_after_exit_and_stop(self, controller, host):
        await controller.start_session("/proj")
        host.last.exit(0)
        controller.pump()
        assert controller.state is SessionState.EXITED
        await controller.start_session("/proj")
        assert controller.state is SessionState.LIVE
        controller.stop()
        await controller.start_session("/proj")
        assert controller.state is SessionState.LIVE

    @pytest.mark.asyncio
    async def test_stop_while_starting_discards_late_handle(self, controller, host):
        host.gate = threading.Event()
        task = asyncio.create_task(controller.start_session("/proj"))
        while controller.state is not SessionState.STARTING:
            await asyncio.sleep(0.01)
        assert controller.stop() is True
        assert controller.state is SessionState.STOPPED
        host.gate.set()
        await task
        assert host.last.killed
        assert controller.state is SessionState.STOPPED
        assert controller.session.handle is None


class TestForwarding:
    @pytest.mark.asyncio
    async def test_output_delivered_in_order(self, controller, host, hub):
        recorder = EventRecorder(hub, TERMINAL_OUTPUT)
        await controller.start_session("/proj")
        for chunk in ["a", "b", "c", "d"]:
            host.last.emit(chunk)
        controller.pump()
        assert "".join(e.text for e in recorder.of(TERMINAL_OUTPUT)) == "abcd"

    @pytest.mark.asyncio
    async def test_keystrokes_forwarded_verbatim(self, controller, host):
        await controller.start_session("/proj")
        assert controller.send_keys("hello\r")
        assert host.last.writes == ["hello\r"]

    def test_keystrokes_dropped_when_idle(self, controller):
        assert controller.send_keys("x") is False

    def test_resize_swallowed_without_session(self, controller, host):
        assert controller.resize(100, 30) is False
        assert host.handles == []

    @pytest.mark.asyncio
    async def test_resize_forwarded_while_live(self, controller, host):
        await controller.start_session("/proj")
        controller.resize(100, 30)
        assert host.last.resizes[-1] == (100, 30)

    @pytest.mark.asyncio
    async def test_resize_after_stop_is_swallowed(self, controller, host):
        await controller.start_session("/proj")
        handle = host.last
        controller.stop()
        assert controller.resize(100, 30) is False
        assert handle.resizes == [(80, 24)]


class TestExitAndStop:
    @pytest.mark.asyncio
    async def test_process_exit_records_code_and_marker(self, controller, host, hub):
        recorder = EventRecorder(hub, TERMINAL_OUTPUT, TERMINAL_EXITED)
        await controller.start_session("/proj")
        host.last.emit("bye")
        host.last.exit(3)
        controller.pump()
        assert controller.state is SessionState.EXITED
        assert controller.exit_code == 3
        assert [e.text for e in recorder.of(TERMINAL_OUTPUT)] == ["bye", SESSION_ENDED_MARKER]
        assert recorder.of(TERMINAL_EXITED)[0].code == 3

    @pytest.mark.asyncio
    async def test_stop_kills_immediately(self, controller, host, hub):
        recorder = EventRecorder(hub, TERMINAL_EXITED)
        await controller.start_session("/proj")
        handle = host.last
        assert controller.stop() is True
        assert handle.killed
        assert controller.state is SessionState.STOPPED
        handle.exit(-15)
        controller.pump()
        assert controller.state is SessionState.STOPPED
        assert recorder.of(TERMINAL_EXITED) == []

    def test_stop_without_session(self, controller):
        assert controller.stop() is False
        assert controller.state is SessionState.IDLE


class TestInputNeeded:
    @pytest.mark.asyncio
    async def test_needs_input_round_trip(self, controller, host, hub):
        recorder = EventRecorder(hub, TERMINAL_INPUT_NEEDED, SESSION_STATE)
        await controller.start_session("/proj")
        assert controller.notify_input_needed()
        assert controller.state is SessionState.AWAITING_INPUT
        assert len(recorder.of(TERMINAL_INPUT_NEEDED)) == 1
        controller.send_keys("y")
        assert controller.state is SessionState.LIVE
        states = [e.state for e in recorder.of(SESSION_STATE)]
        assert states[-3:] == ["live", "awaiting_input", "live"]

    def test_needs_input_ignored_without_session(self, controller):
        assert controller.notify_input_needed() is False
        assert controller.state is SessionState.IDLE

    @pytest.mark.asyncio
    async def test_exit_while_awaiting_input(self, controller, host):
        await controller.start_session("/proj")
        controller.notify_input_needed()
        host.last.exit(0)
        controller.pump()
        assert controller.state is SessionState.EXITED


@pytest.mark.asyncio
async def test_run_pumps_until_closed(controller, host, hub):
    recorder = EventRecorder(hub, TERMINAL_OUTPUT)
    await controller.start_session("/proj")
    runner = asyncio.create_task(controller.run(poll_interval_s=0.001))
    host.last.emit("tick")
    for _ in range(100):
        if recorder.of(TERMINAL_OUTPUT):
            break
        await asyncio.sleep(0.005)
    controller.close()
    await asyncio.wait_for(runner, timeout=1)
    assert recorder.of(TERMINAL_OUTPUT)[0].text == "tick"
    assert controller.state is SessionState.STOPPED
