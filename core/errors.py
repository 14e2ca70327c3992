from __future__ import annotations


class InvalidInputError(ValueError):
    """Raised when a frame, outline or baseline cannot be processed safely."""
