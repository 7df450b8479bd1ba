"""Architecture models: path-based layers and forbidden edges between them."""

import re
from dataclasses import dataclass, field
from typing import Mapping, Optional, Sequence


@dataclass
class LayerViolation:
    """An import edge whose source layer may not depend on the target layer."""

    from_file: str
    to_file: str
    from_layer: str
    to_layer: str
    suggestion: str = "Move the dependency or restructure the code"

    @property
    def violation(self) -> str:
        return f"{self.from_layer} should not depend on {self.to_layer}"


@dataclass
class LayerPolicy:
    """Ordered layer patterns plus the allow-list of layer dependencies.

    Layers are tried in declaration order; the first layer with a pattern
    that matches anywhere in the path wins. A layer absent from
    ``allowed`` may depend on nothing, not even itself.
    """

    patterns: dict[str, list[re.Pattern]] = field(default_factory=dict)
    allowed: dict[str, frozenset] = field(default_factory=dict)

    @classmethod
    def from_config(
        cls,
        layer_patterns: Mapping[str, Sequence[str]],
        allowed_dependencies: Mapping[str, Sequence[str]],
    ) -> "LayerPolicy":
        return cls(
            patterns={
                name: [re.compile(p) for p in regexes] for name, regexes in layer_patterns.items()
            },
            allowed={name: frozenset(targets) for name, targets in allowed_dependencies.items()},
        )

    def layer_of(self, path: str) -> Optional[str]:
        for name, regexes in self.patterns.items():
            if any(r.search(path) for r in regexes):
                return name
        return None

    def permits(self, from_layer: str, to_layer: str) -> bool:
        return to_layer in self.allowed.get(from_layer, frozenset())
