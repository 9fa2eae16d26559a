"""
Bot registry.

Maps each bot's name to its entry point. An entry point takes the JSON
payload of the triggering request and returns a JSON-serializable result.
"""

from collections.abc import Awaitable, Callable
from typing import Any

from repobots.bots import auto_merge, node_release

Handler = Callable[[Any], Awaitable[Any]]

BOTS: dict[str, Handler] = {
    "auto-merge": auto_merge.handler,
    "node-release": node_release.handler,
}


def get_bot(name: str) -> Handler:
    """
    Look up a bot entry point by name.

    Raises:
        KeyError: If no bot is registered under that name
    """
    try:
        return BOTS[name]
    except KeyError:
        raise KeyError(f"Unknown bot: {name}") from None


async def run_bot(name: str, payload: Any = None) -> Any:
    """Invoke the named bot with a request payload."""
    return await get_bot(name)(payload)


__all__ = ["BOTS", "Handler", "get_bot", "run_bot"]
