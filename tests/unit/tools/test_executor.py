"""Tests for execute_command"""
import asyncio
import json

import pytest

from studiobridge.broker import CommandBroker, CommandResult, ManualClock
from studiobridge.tools import COMMAND_TYPES, READ_COMMANDS, WRITE_COMMANDS, execute_command, is_write_command


@pytest.fixture
def broker():
    broker = CommandBroker(command_timeout=30.0, heartbeat_timeout=10.0, clock=ManualClock())
    broker.heartbeat()
    return broker


async def answer_next(broker: CommandBroker, **result) -> dict:
    """Let the pending tool call enqueue, then answer it like the plugin would"""
    await asyncio.sleep(0)
    command = broker.dequeue()
    broker.resolve(CommandResult(id=command.id, **result))
    return command.to_dict()


@pytest.mark.asyncio
async def test_success_is_rendered_as_json(broker):
    task = asyncio.create_task(execute_command(broker, "get_services", {}))
    await answer_next(broker, success=True, data=["Workspace", "Lighting"])

    text = await task
    assert json.loads(text) == ["Workspace", "Lighting"]


@pytest.mark.asyncio
async def test_plugin_error_is_reported(broker):
    task = asyncio.create_task(execute_command(broker, "delete_instance", {"path": "game.Missing"}))
    await answer_next(broker, success=False, error="Instance not found: game.Missing")

    assert await task == "Error from Studio plugin: Instance not found: game.Missing"


@pytest.mark.asyncio
async def test_unset_params_are_dropped(broker):
    task = asyncio.create_task(
        execute_command(broker, "get_descendants", {"path": "game.Workspace", "maxDepth": None})
    )
    command = await answer_next(broker, success=True, data=[])
    await task

    assert command["params"] == {"path": "game.Workspace"}


@pytest.mark.asyncio
async def test_disconnected_plugin_is_reported():
    broker = CommandBroker(command_timeout=30.0, heartbeat_timeout=10.0, clock=ManualClock())

    text = await execute_command(broker, "get_selection", {})

    assert text.startswith("Bridge error: ")
    assert "not connected" in text


@pytest.mark.asyncio
async def test_timeout_is_reported(broker):
    task = asyncio.create_task(execute_command(broker, "get_selection", {}))
    await asyncio.sleep(0)
    broker._clock.advance(30.0)
    broker.sweep()

    text = await task
    assert text.startswith("Bridge error: Command 'get_selection' timed out")


def test_command_catalog():
    assert len(COMMAND_TYPES) == 14
    assert len(READ_COMMANDS) == 6
    assert len(WRITE_COMMANDS) == 8
    assert is_write_command("execute_luau")
    assert not is_write_command("get_children")
