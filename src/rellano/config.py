"""ContextVar-based scan configuration for rellano.

Provides thread-local configuration using Python's ContextVars (PEP 567).
A Scanner captures the active config when it is created and keeps it for
its whole lifetime, so changing the context later never affects a scan that
is already running.

Thread Safety:
    ContextVars are thread-local by design. Each thread has independent storage,
    so no locks are needed.

Usage:
    from rellano.config import ScanConfig, scan_config_context
    from rellano.lexer import Lexer

    with scan_config_context(ScanConfig(tab_width=8)):
        tokens = list(Lexer(source).tokenize())

"""

from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from enum import Enum

from rellano.errors import ConfigError

# Highest depth the one-byte depth field of the state layout can carry.
DEPTH_FIELD_LIMIT = 255

# Size of the host's serialization buffer for external scanner state.
DEFAULT_BUFFER_SIZE = 1024


class OverflowPolicy(Enum):
    """What the scanner does when an INDENT would exceed max_depth.

    CAP keeps emitting INDENT without recording the level, so later dedent
    counts drift. DECLINE refuses the INDENT and leaves state untouched,
    letting the host grammar report the problem.
    """

    CAP = "cap"
    DECLINE = "decline"


@dataclass(frozen=True, slots=True)
class ScanConfig:
    """Immutable scan configuration.

    Attributes:
        tab_width: Columns a horizontal tab contributes to a line's width.
            Tabs are summed, not aligned to tab stops.
        max_depth: Maximum number of open indentation levels, base included.
        buffer_size: Maximum size in bytes of a serialized scan state.
        overflow_policy: Behavior when an INDENT would exceed max_depth
        fold_lf_cr: Treat ``\\n\\r`` as a single line terminator
        versioned_state: Serialize state inside a versioned envelope instead
            of the bare host layout
        comment_prefix: Character that starts a comment-only line
        strict_indent: Record indentation style violations while tokenizing
            (see rellano.diagnostics); tokens are unaffected
        indent_size: Width of one level under strict_indent

    """

    tab_width: int = 4
    max_depth: int = 100
    buffer_size: int = DEFAULT_BUFFER_SIZE
    overflow_policy: OverflowPolicy = OverflowPolicy.CAP
    fold_lf_cr: bool = True
    versioned_state: bool = False
    comment_prefix: str = "#"
    strict_indent: bool = False
    indent_size: int = 4

    def __post_init__(self) -> None:
        if self.tab_width < 1:
            raise ConfigError("tab_width", f"must be at least 1, got {self.tab_width}")
        if not 1 <= self.max_depth <= DEPTH_FIELD_LIMIT:
            raise ConfigError(
                "max_depth",
                f"must be between 1 and {DEPTH_FIELD_LIMIT}, got {self.max_depth}",
            )
        if self.buffer_size < 2:
            raise ConfigError(
                "buffer_size", f"must hold the 2-byte header, got {self.buffer_size}"
            )
        if self.versioned_state and self.buffer_size < 4:
            raise ConfigError(
                "buffer_size",
                f"must hold the envelope and the 2-byte header, got {self.buffer_size}",
            )
        if self.indent_size < 1:
            raise ConfigError("indent_size", f"must be at least 1, got {self.indent_size}")
        if len(self.comment_prefix) != 1:
            raise ConfigError(
                "comment_prefix", f"must be a single character, got {self.comment_prefix!r}"
            )

    @classmethod
    def from_dict(cls, config_dict: dict) -> "ScanConfig":
        """Create ScanConfig from dictionary.

        Useful when settings come from an editor or build configuration file.
        Unknown keys are silently ignored. ``overflow_policy`` may be given
        as an OverflowPolicy member or by value (``"cap"``, ``"decline"``).

        Args:
            config_dict: Dictionary with config values. Keys should match
                ScanConfig attribute names.

        Returns:
            New ScanConfig instance with values from dict.

        Raises:
            ConfigError: If a value is out of range or the policy is unknown.

        Example:
            >>> config = ScanConfig.from_dict({"tab_width": 8, "unknown": 1})
            >>> config.tab_width
            8

        """
        valid_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered = {k: v for k, v in config_dict.items() if k in valid_fields}
        policy = filtered.get("overflow_policy")
        if policy is not None and not isinstance(policy, OverflowPolicy):
            try:
                filtered["overflow_policy"] = OverflowPolicy(str(policy).lower())
            except ValueError:
                raise ConfigError("overflow_policy", f"unknown policy {policy!r}") from None
        return cls(**filtered)


# Module-level default config (reused, never recreated)
_DEFAULT_CONFIG: ScanConfig = ScanConfig()

_scan_config: ContextVar[ScanConfig] = ContextVar(
    "scan_config",
    default=_DEFAULT_CONFIG,
)


def get_scan_config() -> ScanConfig:
    """Get current scan configuration (thread-local)."""
    return _scan_config.get()


def set_scan_config(config: ScanConfig) -> None:
    """Set scan configuration for current context.

    Args:
        config: ScanConfig instance to use for this context.

    """
    _scan_config.set(config)


def reset_scan_config() -> None:
    """Reset to the default configuration."""
    _scan_config.set(_DEFAULT_CONFIG)


@contextmanager
def scan_config_context(config: ScanConfig) -> Iterator[None]:
    """Context manager for temporary config changes.

    Args:
        config: ScanConfig to use within the context.

    Yields:
        None

    Example:
        >>> with scan_config_context(ScanConfig(tab_width=2)):
        ...     scanner = Scanner()
        ...     # scanner.config.tab_width is 2
        >>> # Automatically reset to previous config

    """
    previous = _scan_config.get()
    _scan_config.set(config)
    try:
        yield
    finally:
        _scan_config.set(previous)


__all__ = [
    "DEFAULT_BUFFER_SIZE",
    "DEPTH_FIELD_LIMIT",
    "OverflowPolicy",
    "ScanConfig",
    "get_scan_config",
    "reset_scan_config",
    "scan_config_context",
    "set_scan_config",
]
