"""Exception types raised by the glow portrait renderer."""

from __future__ import annotations


class InvalidParameter(ValueError):
    """A style parameter has a value that cannot be clamped into range."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(f"{field}: {message}")
        self.field = field


class InvalidInput(ValueError):
    """The source image cannot be used (degenerate geometry or undecodable data)."""


class RenderFailed(RuntimeError):
    """A render stage or the surface encoder failed."""

    def __init__(self, stage: str, message: str) -> None:
        super().__init__(f"{stage} stage failed: {message}")
        self.stage = stage


__all__ = ["InvalidInput", "InvalidParameter", "RenderFailed"]
