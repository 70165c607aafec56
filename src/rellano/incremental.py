"""Incremental re-scanning of edited text.

When a user edits one line, only the tokens from the enclosing statement
onward can change, and usually only until the indentation context settles
again. This module accepts a previous TokenStream plus the new source text
and an edit range, then:

1. Finds the last checkpoint before the edit.
2. Restores the scanner state saved there and scans forward.
3. At each new checkpoint past the edited text, compares the scanner state
   with the old checkpoint at the shifted offset. When they match, every
   later token is the same as before, so the old tail (tokens, checkpoints
   and indentation diagnostics) is spliced in with shifted offsets and line
   numbers.

The result is identical to a full re-scan but computed in O(change) when
the edit does not alter the block structure that follows it.

Fallback:
    Invalid edit bounds or a stream without usable checkpoints fall back
    to a full scan.

Thread Safety:
    ``rescan`` is a pure function. Safe to call from any thread.

"""

from bisect import bisect_left
from collections.abc import Sequence
from dataclasses import replace

from rellano.config import ScanConfig
from rellano.diagnostics import IndentViolation
from rellano.lexer import Checkpoint, Lexer, TokenStream, scan_document
from rellano.tokens import Token
from rellano.utils.logger import get_logger

logger = get_logger(__name__)


def rescan(
    new_source: str,
    previous: TokenStream,
    edit_start: int,
    edit_end: int,
    new_length: int,
    *,
    config: ScanConfig | None = None,
    source_file: str | None = None,
) -> TokenStream:
    """Re-scan only what an edit can affect.

    Args:
        new_source: The complete new source text (after the edit).
        previous: The TokenStream from before the edit.
        edit_start: Offset in the OLD source where the edit begins.
        edit_end: Offset in the OLD source where the edit ends
            (the old text edit_start..edit_end was replaced).
        new_length: Length of the replacement text in the new source.
        config: Scan settings; must match the ones used for ``previous``.
        source_file: Optional source file path for token locations.

    Returns:
        A TokenStream for new_source. Unaffected tokens before the edit are
        reused as-is.

    """
    offset_delta = new_length - (edit_end - edit_start)
    if (
        edit_start < 0
        or edit_end < edit_start
        or new_length < 0
        or edit_end > len(previous.source)
        or len(new_source) != len(previous.source) + offset_delta
    ):
        logger.debug(
            "Edit (%d, %d, +%d) out of bounds, full re-scan", edit_start, edit_end, new_length
        )
        return scan_document(new_source, config, source_file=source_file)

    resume = _find_resume_checkpoint(previous.checkpoints, edit_start)
    if resume is None:
        logger.debug("No checkpoint before offset %d, full re-scan", edit_start)
        return scan_document(new_source, config, source_file=source_file)

    tokens: list[Token] = [t for t in previous.tokens if t.start < resume.offset]
    checkpoints: list[Checkpoint] = [c for c in previous.checkpoints if c.offset < resume.offset]
    diagnostics = [d for d in previous.diagnostics if d.location.offset < resume.offset]
    old_index = {cp.offset: i for i, cp in enumerate(previous.checkpoints)}
    edited_until = edit_start + new_length

    lexer = Lexer(
        new_source,
        config,
        source_file=source_file,
        offset=resume.offset,
        lineno=resume.lineno,
        state=resume.state,
    )
    seen = 0

    def converged_at() -> tuple[int, Checkpoint] | None:
        """Old checkpoint index and new checkpoint where the scans agree, if any."""
        nonlocal seen
        recorded = lexer.checkpoints
        for cp in recorded[seen:]:
            seen += 1
            if cp.offset >= edited_until:
                i = old_index.get(cp.offset - offset_delta)
                if i is not None and previous.checkpoints[i].state == cp.state:
                    return i, cp
            checkpoints.append(cp)
        return None

    for token in lexer.tokenize():
        match = converged_at()
        if match is not None:
            break
        tokens.append(token)
    else:
        match = converged_at()

    diagnostics.extend(lexer.diagnostics)
    if match is not None:
        return _splice(new_source, previous, tokens, checkpoints, diagnostics, match, offset_delta)
    return TokenStream(
        source=new_source,
        tokens=tuple(tokens),
        checkpoints=tuple(checkpoints),
        diagnostics=tuple(diagnostics),
    )


def _find_resume_checkpoint(
    checkpoints: Sequence[Checkpoint], edit_start: int
) -> Checkpoint | None:
    """Last checkpoint strictly before edit_start (checkpoints are in offset order).

    A checkpoint at edit_start itself is not used: text inserted there can
    join the preceding line terminator (``\\r`` + ``\\n``) and move the line start.
    """
    i = bisect_left([cp.offset for cp in checkpoints], edit_start)
    if i == 0:
        return None
    return checkpoints[i - 1]


def _splice(
    new_source: str,
    previous: TokenStream,
    tokens: list[Token],
    checkpoints: list[Checkpoint],
    diagnostics: list[IndentViolation],
    match: tuple[int, Checkpoint],
    offset_delta: int,
) -> TokenStream:
    """Append the old tail from the matched checkpoint, shifted into place."""
    old_index, current = match
    anchor = previous.checkpoints[old_index]
    line_delta = current.lineno - anchor.lineno

    tail = [t for t in previous.tokens if t.start >= anchor.offset]
    tokens.extend(_shift_token(t, offset_delta, line_delta) for t in tail)
    checkpoints.extend(
        replace(cp, offset=cp.offset + offset_delta, lineno=cp.lineno + line_delta)
        for cp in previous.checkpoints[old_index:]
    )
    kept = [d for d in diagnostics if d.location.offset < current.offset]
    kept.extend(
        _shift_violation(d, offset_delta, line_delta)
        for d in previous.diagnostics
        if d.location.offset >= anchor.offset
    )
    return TokenStream(
        source=new_source,
        tokens=tuple(tokens),
        checkpoints=tuple(checkpoints),
        diagnostics=tuple(kept),
    )


def _shift_token(token: Token, offset_delta: int, line_delta: int) -> Token:
    if offset_delta == 0 and line_delta == 0:
        return token
    return replace(
        token,
        _lineno=token.lineno + line_delta,
        _start_offset=token.start + offset_delta,
        _end_offset=token.end + offset_delta,
        _location_cache=None,
    )


def _shift_violation(
    violation: IndentViolation, offset_delta: int, line_delta: int
) -> IndentViolation:
    location = violation.location
    return replace(
        violation,
        location=replace(
            location,
            lineno=location.lineno + line_delta,
            offset=location.offset + offset_delta,
            end_offset=location.end_offset + offset_delta,
        ),
    )
