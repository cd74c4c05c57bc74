"""Composition strategies for multi-step methodologies.

- SequentialCompositionStrategy: ordered stages, one active at a time
- HierarchicalCompositionStrategy: level first, priority within a level
- LayeredCompositionStrategy: layer dependency policy and progression
- ProgressiveCompositionStrategy: numbered stages with guarded skipping
"""

from tether.composition.hierarchical import (
    HierarchicalCompositionStrategy,
    HierarchicalConfiguration,
    HierarchyDefinition,
    order_by_hierarchy,
)
from tether.composition.layered import LayerDefinition, LayerHierarchy, LayeredCompositionStrategy
from tether.composition.progressive import (
    ProgressionDefinition,
    ProgressiveCompositionStrategy,
    StageDefinition,
)
from tether.composition.protocols import CompositionStrategy
from tether.composition.sequential import SequenceDefinition, SequentialCompositionStrategy

__all__ = [
    "CompositionStrategy",
    "HierarchicalCompositionStrategy",
    "HierarchicalConfiguration",
    "HierarchyDefinition",
    "LayerDefinition",
    "LayerHierarchy",
    "LayeredCompositionStrategy",
    "ProgressionDefinition",
    "ProgressiveCompositionStrategy",
    "SequenceDefinition",
    "SequentialCompositionStrategy",
    "StageDefinition",
    "order_by_hierarchy",
]
