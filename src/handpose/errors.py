"""Exception types raised by the handpose pipeline."""


class HandPoseError(Exception):
    """Base class for handpose errors."""


class InferenceError(HandPoseError):
    """Model evaluation failed or returned tensors of an unexpected shape.

    Fatal for the current frame. The pipeline never retries; the caller
    decides whether to feed the next frame.
    """


class ConfigError(HandPoseError, ValueError):
    """Configuration value out of range."""


class DegenerateRegionError(HandPoseError):
    """Crop region has zero area, or it or the mesh result holds non-finite values."""


__all__ = ["HandPoseError", "InferenceError", "ConfigError", "DegenerateRegionError"]
