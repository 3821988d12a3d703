"""ONNX Runtime backend for the palm detector and hand mesh models."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Union

import numpy as np

from handpose.backends.base import ModelOutputs
from handpose.errors import InferenceError

logger = logging.getLogger(__name__)


class OnnxModelBackend:
    """Evaluate an ONNX model with onnxruntime.

    Inputs arrive as NHWC float32 batches. When the graph declares a
    channels-first input (``[N, 3, H, W]``) the batch is transposed before
    the run.

    Args:
        model_path: Path to the ``.onnx`` file.

    Example:
        >>> backend = OnnxModelBackend("handdetector.onnx")
        >>> backend.initialize("cpu")
        >>> outputs = backend.predict(batch)
        >>> backend.cleanup()
    """

    def __init__(self, model_path: Union[str, Path]):
        self._model_path = Path(model_path)
        self._session = None
        self._input_name: Optional[str] = None
        self._output_names: List[str] = []
        self._channels_first = False
        self._initialized = False
        self._actual_provider = "unknown"

    @property
    def model_path(self) -> Path:
        return self._model_path

    def initialize(self, device: str = "cpu") -> None:
        """Create the inference session on ``device`` ("cpu" or "cuda[:N]")."""
        if self._initialized:
            return

        import onnxruntime as ort

        if not self._model_path.exists():
            raise FileNotFoundError(f"ONNX model not found at {self._model_path}")

        available = ort.get_available_providers()
        providers = ["CPUExecutionProvider"]
        if device.startswith("cuda"):
            if "CUDAExecutionProvider" in available:
                providers = ["CUDAExecutionProvider", "CPUExecutionProvider"]
            else:
                logger.warning("CUDAExecutionProvider not available, falling back to CPU")

        sess_options = ort.SessionOptions()
        sess_options.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        sess_options.log_severity_level = 3

        self._session = ort.InferenceSession(
            str(self._model_path), sess_options, providers=providers,
        )
        model_input = self._session.get_inputs()[0]
        self._input_name = model_input.name
        self._output_names = [o.name for o in self._session.get_outputs()]

        shape = model_input.shape
        self._channels_first = len(shape) == 4 and shape[1] == 3 and shape[3] != 3

        self._actual_provider = self._session.get_providers()[0]
        self._initialized = True
        logger.info(
            "ONNX backend initialized from %s (provider=%s)",
            self._model_path, self._actual_provider,
        )

    def predict(self, inputs: np.ndarray) -> ModelOutputs:
        if not self._initialized or self._session is None:
            raise RuntimeError("Backend not initialized. Call initialize() first.")

        batch = np.asarray(inputs, dtype=np.float32)
        if batch.ndim != 4:
            raise InferenceError(f"Expected a 4-D NHWC batch, got shape {batch.shape}")
        if self._channels_first:
            batch = np.ascontiguousarray(batch.transpose(0, 3, 1, 2))

        outputs = self._session.run(self._output_names, {self._input_name: batch})
        return dict(zip(self._output_names, outputs))

    def cleanup(self) -> None:
        self._session = None
        self._initialized = False
        logger.info("ONNX backend cleaned up (%s)", self._model_path.name)

    def get_provider_info(self) -> str:
        """Get actual provider being used."""
        return self._actual_provider


__all__ = ["OnnxModelBackend"]
