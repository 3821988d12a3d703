from handpose.backends.base import ModelBackend, ModelOutputs, evaluate
from handpose.backends.onnx import OnnxModelBackend

__all__ = ["ModelBackend", "ModelOutputs", "evaluate", "OnnxModelBackend"]
