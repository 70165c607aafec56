"""Scan state codec: ScanState to bytes and back.

The host grammar engine stores these bytes next to the syntax tree and hands
them back when it re-scans an edited region, so the scanner resumes with the
indentation context of that position instead of starting over.

Raw layout (compatible with existing hosts):

    byte 0        pending dedents, clamped to 255
    byte 1        depth, clamped to 255
    bytes 2..     one little-endian uint16 per level, bottom to top

Level entries are written only while they fit in ``ScanConfig.buffer_size``.
With ``ScanConfig.versioned_state`` the raw layout is prefixed with a magic
byte and a version byte.

Decoding never raises. Empty, truncated or oversized input is clamped to the
nearest valid state: the stack starts at 0 and strictly increases, and
pending dedents stay below the restored depth. A one-byte buffer is the
exception and restores pending dedents alone, over the fresh stack.

Thread Safety:
    All functions are pure. Safe to call from any thread.

"""

from __future__ import annotations

from rellano.config import DEPTH_FIELD_LIMIT, ScanConfig, get_scan_config
from rellano.stack import IndentStack
from rellano.state import ScanState
from rellano.utils.logger import get_logger

logger = get_logger(__name__)

STATE_MAGIC = 0xA5
STATE_VERSION = 1

_BYTE_MAX = 0xFF
_WIDTH_MAX = 0xFFFF


def encode_state(state: ScanState, config: ScanConfig | None = None) -> bytes:
    """Serialize a scan state.

    Args:
        state: State to serialize.
        config: Layout settings; defaults to the active ScanConfig.

    Returns:
        Bytes no longer than ``config.buffer_size``.

    """
    config = config or get_scan_config()
    if config.versioned_state:
        payload = _encode_raw(state, config.buffer_size - 2)
        return bytes((STATE_MAGIC, STATE_VERSION)) + payload
    return _encode_raw(state, config.buffer_size)


def decode_state(data: bytes, config: ScanConfig | None = None) -> ScanState:
    """Restore a scan state.

    Args:
        data: Bytes produced by encode_state (possibly truncated or foreign).
        config: Layout settings; defaults to the active ScanConfig.

    Returns:
        A valid ScanState. Unreadable input yields the fresh state.

    """
    config = config or get_scan_config()
    if config.versioned_state:
        if len(data) < 2 or data[0] != STATE_MAGIC or data[1] != STATE_VERSION:
            if data:
                logger.debug("Unrecognized state envelope %r, using fresh state", data[:2])
            return ScanState.fresh(config.max_depth)
        data = data[2:]
    return _decode_raw(bytes(data), config.max_depth)


def _encode_raw(state: ScanState, budget: int) -> bytes:
    buffer = bytearray()
    buffer.append(min(state.pending_dedents, _BYTE_MAX))
    buffer.append(min(state.depth, DEPTH_FIELD_LIMIT))

    written = 0
    for width in state.stack:
        if len(buffer) + 2 > budget:
            logger.debug(
                "State buffer full, dropped %d of %d levels",
                state.depth - written,
                state.depth,
            )
            break
        buffer += min(width, _WIDTH_MAX).to_bytes(2, "little")
        written += 1

    return bytes(buffer)


def _decode_raw(data: bytes, max_depth: int) -> ScanState:
    state = ScanState.fresh(max_depth)
    if not data:
        return state

    state.pending_dedents = data[0]
    if len(data) == 1:
        return state

    declared = data[1]
    if declared > max_depth:
        logger.debug("Declared depth %d clamped to %d", declared, max_depth)
        declared = max_depth

    widths: list[int] = []
    pos = 2
    while len(widths) < declared and pos + 1 < len(data):
        widths.append(data[pos] | (data[pos + 1] << 8))
        pos += 2

    normalized = _normalize_widths(widths)
    if len(normalized) != declared:
        logger.debug("Restored %d of %d declared levels", len(normalized), declared)
    state.stack = IndentStack(max_depth, normalized)

    if state.pending_dedents >= state.depth:
        logger.debug(
            "Pending dedents %d clamped to depth %d", state.pending_dedents, state.depth
        )
        state.pending_dedents = state.depth - 1
    return state


def _normalize_widths(widths: list[int]) -> list[int]:
    """Force a valid stack shape: base 0, strictly increasing."""
    normalized = [0]
    for width in widths[1:]:
        if width > normalized[-1]:
            normalized.append(width)
    return normalized


__all__ = [
    "STATE_MAGIC",
    "STATE_VERSION",
    "decode_state",
    "encode_state",
]
