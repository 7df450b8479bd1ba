"""Architecture analysis: path-based layers and dependency rules."""

from .layers import classify_layer, default_policy, detect_layer_violations
from .models import LayerPolicy, LayerViolation

__all__ = [
    "LayerPolicy",
    "LayerViolation",
    "classify_layer",
    "default_policy",
    "detect_layer_violations",
]
