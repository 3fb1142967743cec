"""MCP server entry point for the RD-03D radar.

Exposes the radar's target and status queries as tools and resources
via the Model Context Protocol using the official Python MCP SDK with
stdio transport.
"""

from __future__ import annotations

import json
import logging
import time
from typing import Any

from mcp.server.fastmcp import FastMCP

from .protocol.framing import MAX_TARGETS
from .radar import RD03D
from .transport.serial_connection import BAUD_RATE, SerialConnection

logger = logging.getLogger(__name__)

mcp = FastMCP(
    "rd03d",
    instructions="MCP server for the Ai-Thinker RD-03D multi-target mmWave radar",
)

# Global radar state
_radar: RD03D | None = None

POLL_INTERVAL_S = 0.005


def _get_radar() -> RD03D:
    """Get the active radar, raising if no port is connected."""
    if (
        _radar is None
        or _radar.connection is None
        or not _radar.connection.connected
    ):
        raise RuntimeError(
            "Not connected to a radar. Use the 'connect' tool first."
        )
    return _radar


def _status(radar: RD03D) -> dict[str, Any]:
    return {
        "connected": radar.is_connected(),
        "state": radar.state.value,
        "timeout_ms": radar.timeout_ms,
        "target_count": radar.get_target_count(),
        **radar.stats.to_dict(),
    }


# ─── CONNECTION TOOLS ─────────────────────────────────────────────────

@mcp.tool()
def connect(port: str, baudrate: int = BAUD_RATE) -> dict[str, Any]:
    """Open the serial port and switch the radar to multi-target mode.

    Args:
        port: Serial device, e.g. "/dev/ttyUSB0" or "COM3".
        baudrate: Link speed (the RD-03D is fixed at 256000).
    """
    global _radar
    if _radar is not None and _radar.connection is not None:
        if _radar.connection.connected:
            return {
                "connected": True,
                "message": "Already connected",
                "port": _radar.connection.port_info.port,
            }
        _radar.end()

    radar = RD03D()
    radar.begin(SerialConnection(port, baudrate=baudrate))
    _radar = radar
    return {"connected": True, "port": port, "baudrate": baudrate}


@mcp.tool()
def disconnect() -> dict[str, bool]:
    """Close the serial port."""
    global _radar
    if _radar is None:
        return {"disconnected": True}
    _radar.end()
    _radar = None
    return {"disconnected": True}


@mcp.tool()
def enable_multi_target() -> dict[str, bool]:
    """Resend the multi-target tracking command."""
    _get_radar().enable_multi_target()
    return {"sent": True}


# ─── DATA TOOLS ───────────────────────────────────────────────────────

@mcp.tool()
def poll(duration_ms: int = 200) -> dict[str, Any]:
    """Read from the radar for a short window and return the latest targets.

    Args:
        duration_ms: How long to keep reading (0-5000 ms). The radar
                     reports roughly ten frames per second.
    """
    if not 0 <= duration_ms <= 5000:
        return {"error": "duration_ms must be 0-5000"}

    radar = _get_radar()
    frames = radar.update()
    deadline = time.monotonic() + duration_ms / 1000.0
    while time.monotonic() < deadline:
        time.sleep(POLL_INTERVAL_S)
        frames += radar.update()

    return {
        "frames": frames,
        "count": radar.get_target_count(),
        "targets": [t.to_dict() for t in radar.get_targets()],
    }


@mcp.tool()
def get_targets() -> dict[str, Any]:
    """Return all three target slots from the most recent frame."""
    radar = _get_radar()
    return {
        "count": radar.get_target_count(),
        "targets": [t.to_dict() for t in radar.get_targets()],
    }


@mcp.tool()
def get_target(index: int) -> dict[str, Any]:
    """Return a single target slot.

    Args:
        index: Target slot (0-2).
    """
    target = _get_radar().get_target(index)
    if target is None:
        return {"error": f"Index must be 0-{MAX_TARGETS - 1}"}
    result = target.to_dict()
    result["index"] = index
    return result


@mcp.tool()
def get_status() -> dict[str, Any]:
    """Return frame and error counters plus the liveness flag."""
    return _status(_get_radar())


@mcp.tool()
def set_timeout(timeout_ms: int) -> dict[str, Any]:
    """Set the partial-frame timeout.

    Args:
        timeout_ms: Milliseconds of silence before a partial frame is dropped.
    """
    if timeout_ms <= 0:
        return {"error": "timeout_ms must be positive"}
    radar = _get_radar()
    radar.set_timeout(timeout_ms)
    return {"timeout_ms": radar.timeout_ms}


# ─── MCP RESOURCES ───────────────────────────────────────────────────

@mcp.resource("rd03d://targets")
def resource_targets() -> str:
    """Latest decoded targets."""
    if _radar is None:
        return json.dumps({"targets": []})
    return json.dumps({
        "count": _radar.get_target_count(),
        "targets": [t.to_dict() for t in _radar.get_targets()],
    })


@mcp.resource("rd03d://status")
def resource_status() -> str:
    """Connection state and frame counters."""
    if _radar is None:
        return json.dumps({"connected": False})
    return json.dumps(_status(_radar))


# ─── ENTRY POINT ─────────────────────────────────────────────────────

def main():
    """Run the MCP server with stdio transport."""
    logging.basicConfig(level=logging.INFO)
    mcp.run(transport="stdio")


if __name__ == "__main__":
    main()
