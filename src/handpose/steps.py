"""Processing step registry and per-step timing."""

import time
from dataclasses import dataclass, field
from functools import wraps
from typing import List, Optional


@dataclass
class ProcessingStep:
    """Describes a single processing step of the hand pipeline.

    Attributes:
        name: Short identifier (e.g., "palm_detection").
        description: Human-readable description of the step.
        backend: Model or library used by the step.
        depends_on: Names of steps that run before this one.
        method_name: Name of the method implementing the step.
    """

    name: str
    description: str
    backend: Optional[str] = None
    depends_on: List[str] = field(default_factory=list)
    method_name: Optional[str] = None

    def __str__(self) -> str:
        backend_str = f" ({self.backend})" if self.backend else ""
        return f"{self.name}: {self.description}{backend_str}"


def processing_step(
    name: str,
    description: str = "",
    backend: Optional[str] = None,
    depends_on: Optional[List[str]] = None,
):
    """Register a method as a processing step and time each call.

    When the instance has a ``_step_timings`` dict, the elapsed wall time
    of every call is stored there in milliseconds under ``name``.

    Example:
        class HandPose:
            @processing_step("palm_detection", backend="ONNX Runtime")
            def _detect(self, image):
                return self._detector.detect(image)
    """

    def decorator(func):
        step_info = ProcessingStep(
            name=name,
            description=description or func.__doc__ or "",
            backend=backend,
            depends_on=depends_on or [],
            method_name=func.__name__,
        )

        @wraps(func)
        def wrapper(self, *args, **kwargs):
            timings = getattr(self, "_step_timings", None)
            if timings is None:
                return func(self, *args, **kwargs)
            start = time.perf_counter_ns()
            try:
                return func(self, *args, **kwargs)
            finally:
                timings[name] = (time.perf_counter_ns() - start) / 1_000_000

        wrapper._step_info = step_info
        return wrapper

    return decorator


def get_processing_steps(cls_or_instance) -> List[ProcessingStep]:
    """Registered steps of a class or instance, in dependency order."""
    cls = cls_or_instance if isinstance(cls_or_instance, type) else type(cls_or_instance)
    # dir() includes steps inherited from base classes
    steps = []
    for attr_name in dir(cls):
        attr = getattr(cls, attr_name, None)
        if callable(attr) and hasattr(attr, "_step_info"):
            steps.append(attr._step_info)

    by_name = {s.name: s for s in steps}
    ordered: List[ProcessingStep] = []
    visited = set()
    visiting = set()

    def visit(step: ProcessingStep) -> None:
        if step.name in visiting:
            raise ValueError(f"Circular dependency detected involving {step.name}")
        if step.name in visited:
            return
        visiting.add(step.name)
        for dep_name in step.depends_on:
            if dep_name in by_name:
                visit(by_name[dep_name])
        visiting.remove(step.name)
        visited.add(step.name)
        ordered.append(step)

    for step in steps:
        visit(step)
    return ordered


__all__ = ["ProcessingStep", "processing_step", "get_processing_steps"]
