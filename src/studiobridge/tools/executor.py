"""Run a broker command on behalf of a tool call and format the outcome."""
import json
import logging
from typing import Any

from studiobridge.broker.errors import BridgeError
from studiobridge.broker.queue import CommandBroker
from studiobridge.tools.catalog import is_write_command

logger = logging.getLogger(__name__)


def _drop_unset(params: dict[str, Any]) -> dict[str, Any]:
    """Omit optional parameters the caller did not supply"""
    return {key: value for key, value in params.items() if value is not None}


async def execute_command(broker: CommandBroker, command_type: str, params: dict[str, Any]) -> str:
    """Enqueue a command, wait for the plugin and render the result as text.

    Bridge failures such as a disconnected plugin or a timeout are reported
    in the returned text rather than raised, so the tool call itself succeeds.
    """
    if is_write_command(command_type):
        logger.info("Issuing write command %s", command_type)

    try:
        result = await broker.enqueue(command_type, _drop_unset(params))
    except BridgeError as e:
        logger.info("Command %s failed: %s", command_type, e)
        return f"Bridge error: {e}"

    if result.success:
        return json.dumps(result.data, indent=2, ensure_ascii=False)
    return f"Error from Studio plugin: {result.error}"
