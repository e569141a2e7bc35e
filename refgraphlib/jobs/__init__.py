"""Job base classes and the jobs built on them."""

from .model_visitor import ModelVisitorJob, CallbackModelVisitorJob
from .root_module_version import RootModuleVersionJob
from .change_reference import ChangeReferenceToModuleVersion, parse_version_mapping, parse_mapping_entry
from .reference_graph import ReferenceGraph, Referrer, BuildReferenceGraph

__all__ = [
    "ModelVisitorJob",
    "CallbackModelVisitorJob",
    "RootModuleVersionJob",
    "ChangeReferenceToModuleVersion",
    "parse_version_mapping",
    "parse_mapping_entry",
    "ReferenceGraph",
    "Referrer",
    "BuildReferenceGraph",
]
