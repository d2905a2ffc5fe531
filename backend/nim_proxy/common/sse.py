"""
Event Stream Line Processing

Pure functions that turn backend SSE bytes into caller-shaped SSE lines.

- ``split_lines`` assembles complete lines out of arbitrary chunks
- ``transition`` rewrites one line, merging or dropping ``reasoning_content``

Neither function performs I/O, so the whole state machine can be driven with
literal line sequences.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, replace
from typing import Any, Optional

logger = logging.getLogger(__name__)

DATA_PREFIX = "data:"
DONE_SENTINEL = "[DONE]"
HEARTBEAT = b": heartbeat\n\n"

THINK_OPEN = "<think>\n"
THINK_CLOSE = "</think>\n\n"


@dataclass(frozen=True)
class StreamState:
    """Per-request transcoding state"""

    # Choice indexes whose <think> block has been opened and not yet closed
    open_choices: frozenset[int] = frozenset()
    # Bytes received after the last newline
    carryover: bytes = b""


def split_lines(state: StreamState, chunk: bytes) -> tuple[StreamState, list[str]]:
    """
    Append a chunk to the carryover and extract the complete lines.

    Splitting happens on bytes so that a multi-byte UTF-8 sequence cut by a
    chunk boundary is decoded only once it is whole.

    Returns:
        tuple: (new state, complete lines without their trailing newline)
    """
    if not chunk:
        return state, []
    parts = (state.carryover + chunk).split(b"\n")
    carryover = parts.pop()
    lines = [part.decode("utf-8", errors="replace") for part in parts]
    return replace(state, carryover=carryover), lines


def flush(state: StreamState) -> tuple[StreamState, list[str]]:
    """Release the carryover as a final line once the backend stream has ended"""
    if not state.carryover:
        return state, []
    line = state.carryover.decode("utf-8", errors="replace")
    return replace(state, carryover=b""), [line]


def merge_delta(
    reasoning_open: bool,
    reasoning: Optional[str],
    content: Optional[str],
) -> tuple[bool, str]:
    """
    Combine reasoning and visible fragments into one visible fragment.

    Returns:
        tuple: (new reasoning_open flag, combined text, possibly empty)
    """
    combined = ""
    if reasoning:
        if not reasoning_open:
            combined = THINK_OPEN
            reasoning_open = True
        combined += reasoning
    if content:
        if reasoning_open:
            combined += THINK_CLOSE
            reasoning_open = False
        combined += content
    return reasoning_open, combined


def _rewrite_choices(
    state: StreamState, data: dict[str, Any], merge_reasoning: bool
) -> StreamState:
    choices = data.get("choices")
    if not isinstance(choices, list):
        return state
    for position, choice in enumerate(choices):
        delta = choice.get("delta") if isinstance(choice, dict) else None
        if not isinstance(delta, dict):
            continue
        reasoning = delta.pop("reasoning_content", None)
        content = delta.get("content")
        if merge_reasoning:
            index = choice.get("index", position)
            was_open = index in state.open_choices
            is_open, combined = merge_delta(was_open, reasoning, content)
            if is_open != was_open:
                open_choices = state.open_choices ^ {index}
                state = replace(state, open_choices=open_choices)
            if combined:
                delta["content"] = combined
        else:
            delta["content"] = content or ""
    return state


def transition(
    state: StreamState, line: str, merge_reasoning: bool = False
) -> tuple[StreamState, Optional[str]]:
    """
    Process one backend line.

    Args:
        state: Current state
        line: One complete backend line (no trailing newline)
        merge_reasoning: Merge mode when True, pass-through mode otherwise

    Returns:
        tuple: (new state, serialized caller line or None when nothing is emitted)
    """
    if not line.startswith(DATA_PREFIX):
        return state, None

    payload = line[len(DATA_PREFIX):]
    if payload.strip() == DONE_SENTINEL:
        return state, line + "\n\n"

    try:
        data = json.loads(payload)
    except ValueError as e:
        logger.warning("Parse error: %s", e)
        return state, line + "\n"

    if isinstance(data, dict):
        state = _rewrite_choices(state, data, merge_reasoning)
    return state, f"data: {json.dumps(data, ensure_ascii=False, separators=(',', ':'))}\n\n"
