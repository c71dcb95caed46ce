"""Structural augmentation of the generated dependency container."""

from gozilla.wiring.anchors import AnchorKind
from gozilla.wiring.container import AugmentationReport, ContainerUpdater
from gozilla.wiring.mutations import AnchorResult, Outcome
from gozilla.wiring.names import ModuleNames, validate_module_name
from gozilla.wiring.source import SourceDocument, load_document, parse_source

__all__ = [
    "AnchorKind",
    "AnchorResult",
    "AugmentationReport",
    "ContainerUpdater",
    "ModuleNames",
    "Outcome",
    "SourceDocument",
    "load_document",
    "parse_source",
    "validate_module_name",
]
