"""Job retargeting references to new versions.

For every matched dynamic module-version, references to a module-version
present in the mapping are changed to the mapped version and the change
is committed.
"""

import logging
from typing import Dict, Optional, Sequence

from ..config import ReferenceTraversalConfig
from ..context import ExecContext
from ..core.control import VisitControl
from ..core.identity import ModuleVersion, Version
from ..core.matcher import ReferencePathMatcher
from ..core.reference import ReferencePath
from ..errors import SynchronizationError, UserError
from ..plugins import COMMIT_ATTR_REFERENCE_VERSION_CHANGE, SyncScope
from ..properties import PropertiesStore
from .root_module_version import RootModuleVersionJob

logger = logging.getLogger(__name__)

MAP_MODULE_VERSION_PREFIX = "MAP_MODULE_VERSION."
MAPPING_SEPARATOR = "->"

# Confirmation context, IND_NO_CONFIRM.UPDATE_REFERENCE bypasses the prompt
CONFIRM_CONTEXT_UPDATE_REFERENCE = "UPDATE_REFERENCE"


def parse_mapping_entry(text: str):
    """Parse "<module-version> -> <version>".

    Raises:
        UserError: text is not a valid mapping entry
    """
    source, sep, target = text.partition(MAPPING_SEPARATOR)
    if not sep:
        raise UserError(f"Invalid module-version mapping {text!r}, expected '<module-version> -> <version>'")
    try:
        return ModuleVersion.parse(source.strip()), Version.parse(target.strip())
    except ValueError as e:
        raise UserError(f"Invalid module-version mapping {text!r}: {e}") from e


def parse_version_mapping(properties: PropertiesStore) -> Dict[ModuleVersion, Version]:
    """Read MAP_MODULE_VERSION.1, MAP_MODULE_VERSION.2, ... up to the first gap."""
    mapping: Dict[ModuleVersion, Version] = {}
    index = 1
    while True:
        value = properties.get(f"{MAP_MODULE_VERSION_PREFIX}{index}")
        if value is None:
            break
        module_version, version = parse_mapping_entry(value)
        mapping[module_version] = version
        index += 1
    return mapping


class ChangeReferenceToModuleVersion(RootModuleVersionJob):
    """Retarget references according to a module-version -> version mapping.

    Example:
        mapping = {ModuleVersion.parse("Lib/core:D/develop"): Version.parse("D/feature-x")}
        ChangeReferenceToModuleVersion(context, [app], mapping).perform_job()
    """

    def __init__(self,
                 context: ExecContext,
                 root_module_versions: Optional[Sequence[ModuleVersion]] = None,
                 mapping: Optional[Dict[ModuleVersion, Version]] = None,
                 config: Optional[ReferenceTraversalConfig] = None,
                 matcher: Optional[ReferencePathMatcher] = None):
        super().__init__(context, root_module_versions, config, matcher)
        if mapping is None:
            mapping = parse_version_mapping(context.properties)
        self.mapping: Dict[ModuleVersion, Version] = dict(mapping)

    def should_skip_subtree(self, reference_path: ReferencePath) -> bool:
        # A module already at a mapped target version was vouched for by
        # the caller: its subtree is not revisited.
        module_version = reference_path.leaf_module_version
        for source, target in self.mapping.items():
            if source.node_path == module_version.node_path and target == module_version.version:
                return True
        return False

    def visit_matched_module_version(self, reference_path: ReferencePath) -> Optional[VisitControl]:
        module_version = reference_path.leaf_module_version
        if module_version.is_static:
            # Static versions are immutable
            return VisitControl.SKIP_CHILDREN

        model = self.context.model
        module = model.get_module(module_version.node_path)
        scm = model.get_scm_plugin(module)
        workspace = scm.checkout_workspace(module_version.version)
        if not scm.is_synchronized(workspace, SyncScope.ALL):
            raise SynchronizationError(
                f"The directory {workspace} is not synchronized with the SCM. "
                f"Please synchronize all directories before using this job.", workspace)

        reference_manager = model.get_reference_manager(module)
        references = reference_manager.list_references(workspace) if reference_manager is not None else []

        ui = self.user_interaction
        for reference in references:
            if not reference.is_resolved:
                logger.info("Reference %s within reference path %s does not resolve to a known module. "
                            "It cannot be processed.", reference, reference_path)
                continue

            new_version = self.mapping.get(reference.module_version)
            if new_version is None:
                continue

            ui.provide_info(f"Reference {reference} within reference path {reference_path} "
                            f"will be changed to version {new_version}.")
            if not self.context.confirm(CONFIRM_CONTEXT_UPDATE_REFERENCE, "Do you want to continue?"):
                return VisitControl.ABORT

            if reference_manager.update_reference_version(workspace, reference, new_version):
                message = (f"Reference {reference} within reference path {reference_path} "
                           f"changed to version {new_version}.")
                scm.commit(workspace, message, {COMMIT_ATTR_REFERENCE_VERSION_CHANGE: "true"})
                ui.provide_info(message)
                self.actions_performed.append(message)
                logger.info("The previous change was performed in %s and was committed to the SCM", workspace)
            else:
                message = (f"Reference {reference} within reference path {reference_path} already "
                           f"resolves to version {new_version}. No change performed.")
                ui.provide_info(message)
                self.notices.append(message)

        return VisitControl.CONTINUE
