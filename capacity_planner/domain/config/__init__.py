"""Static domain configuration: layer catalogue and calibration constants."""

from .layers import (
    DEFAULT_REGISTRY,
    DependencyNodeType,
    EdgeCheck,
    EdgeTypeDefinition,
    FieldDefinition,
    FormSchema,
    FormSection,
    LayerDefinition,
    LayerRegistry,
    NodeIoRules,
    get_layer_definition,
    list_layers,
)
from .calibration import Calibration, DEFAULT_CALIBRATION

__all__ = [
    "DEFAULT_REGISTRY", "LayerRegistry", "LayerDefinition", "DependencyNodeType",
    "EdgeTypeDefinition", "EdgeCheck", "NodeIoRules",
    "FieldDefinition", "FormSection", "FormSchema",
    "get_layer_definition", "list_layers",
    "Calibration", "DEFAULT_CALIBRATION",
]
