"""Backend protocol for model evaluation."""

from typing import Dict, Protocol

import numpy as np

from handpose.errors import InferenceError

ModelOutputs = Dict[str, np.ndarray]


class ModelBackend(Protocol):
    """Protocol for model evaluation backends.

    A backend wraps one pretrained model with fixed input/output shapes.
    Inputs are NHWC float32 batches; outputs are keyed by tensor name in
    the model's declared output order.
    Examples: ONNX Runtime.
    """

    def initialize(self, device: str = "cpu") -> None:
        """Initialize the backend and load the model."""
        ...

    def predict(self, inputs: np.ndarray) -> ModelOutputs:
        """Evaluate the model on one input batch."""
        ...

    def cleanup(self) -> None:
        """Release resources and unload the model."""
        ...


def evaluate(model: ModelBackend, inputs: np.ndarray) -> ModelOutputs:
    """Run ``model`` on ``inputs``, reporting any failure as InferenceError."""
    try:
        outputs = model.predict(inputs)
    except InferenceError:
        raise
    except Exception as e:
        raise InferenceError(f"Model evaluation failed: {e}") from e

    if not outputs:
        raise InferenceError("Model evaluation returned no outputs")
    return {name: np.asarray(value) for name, value in outputs.items()}


__all__ = ["ModelBackend", "ModelOutputs", "evaluate"]
