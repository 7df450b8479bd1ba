"""Layer classification and allow-list checks on import edges.

Layers come from path patterns (e.g. ``components/`` is ui, ``models/`` is
domain). Each layer declares which layers it may import; any edge outside
that list is a violation. Files matching no layer are never reported.
"""

from typing import Iterable, Optional

from ..config import AnalysisConfig
from ..logging_config import get_logger
from .models import LayerPolicy, LayerViolation

logger = get_logger(__name__)


def default_policy(config: Optional[AnalysisConfig] = None) -> LayerPolicy:
    config = config or AnalysisConfig()
    return LayerPolicy.from_config(config.layer_patterns, config.allowed_layer_dependencies)


def classify_layer(path: str, policy: LayerPolicy) -> Optional[str]:
    """Name of the first layer whose patterns match ``path``, or None."""
    return policy.layer_of(path)


def detect_layer_violations(
    edges: Iterable[tuple[str, str]], policy: LayerPolicy
) -> list[LayerViolation]:
    """Check every ``(importer, imported)`` edge against the policy.

    Violations keep edge order.
    """
    layer_cache: dict[str, Optional[str]] = {}

    def layer(path: str) -> Optional[str]:
        if path not in layer_cache:
            layer_cache[path] = policy.layer_of(path)
        return layer_cache[path]

    violations = []
    for source, target in edges:
        from_layer = layer(source)
        if from_layer is None:
            continue
        to_layer = layer(target)
        if to_layer is None:
            continue
        if not policy.permits(from_layer, to_layer):
            violations.append(
                LayerViolation(
                    from_file=source,
                    to_file=target,
                    from_layer=from_layer,
                    to_layer=to_layer,
                )
            )

    logger.debug("Layer check: %d violations", len(violations))
    return violations
