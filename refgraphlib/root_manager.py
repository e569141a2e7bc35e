"""Persistent set of root module-versions and the global matcher.

Root module-versions are the starting points of reference-graph jobs.
They are stored in the runtime properties as
ROOT_MODULE_VERSIONS.001, ROOT_MODULE_VERSIONS.002, ... in order, and the
global matcher as REFERENCE_PATH_MATCHER.001, ... selector strings.
Loading stops at the first missing index.
"""

import logging
from typing import List, Optional

from .context import ExecContext
from .core.identity import ModuleVersion, NodePath
from .core.matcher import ByElementMatcher, OrMatcher
from .errors import UserError

logger = logging.getLogger(__name__)

ROOT_MODULE_VERSIONS_PREFIX = "ROOT_MODULE_VERSIONS."
REFERENCE_PATH_MATCHER_PREFIX = "REFERENCE_PATH_MATCHER."

_TRANSIENT_MODULE_VERSIONS = __name__ + ".module_versions"
_TRANSIENT_GLOBAL_MATCHER = __name__ + ".global_matcher"


def _indexed_key(prefix: str, index: int) -> str:
    return f"{prefix}{index:03d}"


class RootManager:
    """Ordered root module-versions of an ExecContext.

    The list is loaded lazily and cached in the context's transient data,
    so every RootManager over the same context sees the same list. Every
    mutation is computed on a copy and persisted in full before the cached
    list is replaced: after a failure the list is left unchanged.

    Example:
        roots = RootManager(context)
        roots.add(ModuleVersion.parse("Domain/app:D/develop"))
        for module_version in roots.list_module_versions():
            ...
    """

    def __init__(self, context: ExecContext):
        self.context = context

    # Root module-versions

    def _load_module_versions(self) -> List[ModuleVersion]:
        properties = self.context.properties
        module_versions = []
        index = 1
        while True:
            value = properties.get(_indexed_key(ROOT_MODULE_VERSIONS_PREFIX, index))
            if value is None:
                break
            module_versions.append(ModuleVersion.parse(value))
            index += 1
        logger.debug("Loaded %d root module-versions", len(module_versions))
        return module_versions

    def _cached_module_versions(self) -> List[ModuleVersion]:
        module_versions = self.context.transient.get(_TRANSIENT_MODULE_VERSIONS)
        if module_versions is None:
            module_versions = self._load_module_versions()
            self.context.transient[_TRANSIENT_MODULE_VERSIONS] = module_versions
        return module_versions

    def _persist_module_versions(self, module_versions: List[ModuleVersion]) -> None:
        self.context.properties.replace_prefix(ROOT_MODULE_VERSIONS_PREFIX, {
            _indexed_key(ROOT_MODULE_VERSIONS_PREFIX, index): str(module_version)
            for index, module_version in enumerate(module_versions, start=1)
        })

    def _commit(self, module_versions: List[ModuleVersion]) -> None:
        self._persist_module_versions(module_versions)
        self.context.transient[_TRANSIENT_MODULE_VERSIONS] = module_versions

    def list_module_versions(self) -> List[ModuleVersion]:
        """Return a copy of the root module-versions, in order."""
        return list(self._cached_module_versions())

    def contains(self, module_version: ModuleVersion) -> bool:
        return module_version in self._cached_module_versions()

    def find(self, node_path: NodePath) -> Optional[ModuleVersion]:
        """Return the first root for the module at node_path, if any."""
        for module_version in self._cached_module_versions():
            if module_version.node_path == node_path:
                return module_version
        return None

    def add(self, module_version: ModuleVersion, allow_duplicate_module: bool = False) -> bool:
        """Append module_version.

        Args:
            module_version: Root to add
            allow_duplicate_module: Accept another version of a module
                already present

        Returns:
            False if module_version is already a root, or if its module is
            and duplicates are not allowed
        """
        current = self._cached_module_versions()
        if module_version in current:
            return False
        if not allow_duplicate_module and any(mv.node_path == module_version.node_path for mv in current):
            return False
        self._commit(current + [module_version])
        return True

    def remove(self, module_version: ModuleVersion) -> bool:
        current = self._cached_module_versions()
        if module_version not in current:
            return False
        self._commit([mv for mv in current if mv != module_version])
        return True

    def remove_all(self) -> bool:
        if not self._cached_module_versions():
            return False
        self._commit([])
        return True

    def replace(self, old: ModuleVersion, new: ModuleVersion) -> bool:
        """Replace old by new at the same position."""
        current = self._cached_module_versions()
        if old not in current:
            return False
        updated = list(current)
        updated[updated.index(old)] = new
        self._commit(updated)
        return True

    def move_first(self, module_version: ModuleVersion) -> bool:
        current = self._cached_module_versions()
        if module_version not in current:
            return False
        self._commit([module_version] + [mv for mv in current if mv != module_version])
        return True

    def move_last(self, module_version: ModuleVersion) -> bool:
        current = self._cached_module_versions()
        if module_version not in current:
            return False
        self._commit([mv for mv in current if mv != module_version] + [module_version])
        return True

    def save(self) -> None:
        """Rewrite the persisted root list from the cached one."""
        self._persist_module_versions(self._cached_module_versions())

    def validate(self, module_version: ModuleVersion, check_version_exists: bool = True) -> None:
        """Check that module_version can be used as a root.

        Raises:
            UserError: The module does not exist, or its version does not
                exist in the module's SCM
        """
        model = self.context.model
        module = model.get_module(module_version.node_path)
        if module is None:
            raise UserError(f"Module {module_version.node_path} does not exist")
        if check_version_exists and module_version.version is not None:
            scm = model.get_scm_plugin(module)
            if not scm.version_exists(module_version.version):
                raise UserError(f"Version {module_version.version} of module {module_version.node_path} does not exist")

    # Global matcher

    def get_global_matcher(self) -> OrMatcher:
        """Return the global matcher, an OR of ByElementMatchers.

        The returned object is the cached instance: changes made through
        add()/remove() are persisted by save_global_matcher().
        """
        matcher = self.context.transient.get(_TRANSIENT_GLOBAL_MATCHER)
        if matcher is None:
            matcher = OrMatcher()
            index = 1
            while True:
                selector = self.context.properties.get(_indexed_key(REFERENCE_PATH_MATCHER_PREFIX, index))
                if selector is None:
                    break
                matcher.add(ByElementMatcher(selector))
                index += 1
            self.context.transient[_TRANSIENT_GLOBAL_MATCHER] = matcher
        return matcher

    def save_global_matcher(self) -> None:
        """Persist the global matcher.

        Raises:
            TypeError: A child is not a ByElementMatcher and has no
                persisted form
        """
        children = self.get_global_matcher().children
        for child in children:
            if not isinstance(child, ByElementMatcher):
                raise TypeError(f"Global matcher children must be ByElementMatcher, got {type(child).__name__}")
        self.context.properties.replace_prefix(REFERENCE_PATH_MATCHER_PREFIX, {
            _indexed_key(REFERENCE_PATH_MATCHER_PREFIX, index): str(child)
            for index, child in enumerate(children, start=1)
        })
