"""Test fixtures for RefGraphLib consumers.

In-memory stand-ins for the model, the SCM and the reference manager, so
that jobs can be exercised without repositories or build files. The
reference graph is declared per module-version and the fakes record
every checkout, update and commit for later assertions.

Example:
    model = InMemoryModel({"Domain": {"app": None, "lib": None}})
    model.add_references("Domain/app:D/develop", "Domain/lib:D/develop")
    context = make_context(model)
"""

from dataclasses import dataclass, field
from pathlib import PurePosixPath
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple, Union

from ..context import ExecContext
from ..core.adapter import ModelAdapter
from ..core.identity import ModuleVersion, NodePath, Version
from ..core.node import ClassificationNode, ModuleNode, Node
from ..core.reference import Reference
from ..error_policies import ErrorPolicy
from ..interaction import UserInteraction
from ..plugins import ReferenceManagerPlugin, ScmPlugin, SyncScope
from ..properties import InMemoryPropertiesStore, PropertiesStore

DEFAULT_VERSION = Version.dynamic("master")
WORKSPACE_ROOT = PurePosixPath("/workspace")

ModuleVersionLike = Union[str, ModuleVersion]


def _mv(value: ModuleVersionLike) -> ModuleVersion:
    return value if isinstance(value, ModuleVersion) else ModuleVersion.parse(value)


@dataclass
class CommitRecord:
    module_version: ModuleVersion
    message: str
    attributes: Dict[str, str] = field(default_factory=dict)


@dataclass
class UpdateRecord:
    referrer: ModuleVersion
    reference: Reference
    new_version: Version
    changed: bool


class InMemoryModel(ModelAdapter):
    """Model adapter over a nested dict.

    Dict values are classification nodes, any other value (usually None)
    declares a module. Declaration order is preserved.

    Reference graph, version attributes and failure injection are
    configured through the add_*/set_* helpers.
    """

    def __init__(self, tree: Optional[Dict[str, Any]] = None):
        self._nodes: Dict[NodePath, Node] = {}
        root = ClassificationNode(NodePath.ROOT)
        self._nodes[NodePath.ROOT] = root
        self._build(root, tree or {})

        self.references: Dict[ModuleVersion, List[Reference]] = {}
        self.version_attributes: Dict[ModuleVersion, Dict[str, str]] = {}
        self.existing_versions: Dict[NodePath, Set[Version]] = {}
        self.without_reference_manager: Set[NodePath] = set()
        self.unsynchronized: Set[ModuleVersion] = set()
        self.failing_checkouts: Set[ModuleVersion] = set()
        self.no_artifact_change: Set[Tuple[ModuleVersion, ModuleVersion]] = set()

        self.workspaces: Dict[PurePosixPath, ModuleVersion] = {}
        self.checkouts: List[ModuleVersion] = []
        self.updates: List[UpdateRecord] = []
        self.commits: List[CommitRecord] = []
        self.get_node_calls = 0

        self._scm_plugins: Dict[NodePath, FakeScmPlugin] = {}
        self._reference_managers: Dict[NodePath, FakeReferenceManager] = {}

    def _build(self, parent: ClassificationNode, tree: Dict[str, Any]) -> None:
        for name, subtree in tree.items():
            if isinstance(subtree, dict):
                child = ClassificationNode(parent.node_path.child(name, partial=True))
                parent.add_child(child)
                self._nodes[child.node_path] = child
                self._build(child, subtree)
            else:
                module = ModuleNode(parent.node_path.child(name))
                parent.add_child(module)
                self._nodes[module.node_path] = module

    # Declaration helpers

    def add_references(self, referrer: ModuleVersionLike, *targets: Optional[ModuleVersionLike]) -> None:
        """Declare references of referrer, in order.

        A target given as "ext:<text>" declares a reference that does not
        resolve to a known module.
        """
        referrer = _mv(referrer)
        declared = self.references.setdefault(referrer, [])
        for target in targets:
            if isinstance(target, str) and target.startswith("ext:"):
                declared.append(Reference(None, referrer, target[len("ext:"):]))
            else:
                declared.append(Reference(_mv(target), referrer))

    def set_version_attributes(self, module_version: ModuleVersionLike, attributes: Dict[str, str]) -> None:
        self.version_attributes[_mv(module_version)] = dict(attributes)

    def add_versions(self, node_path: Union[str, NodePath], *versions: Union[str, Version]) -> None:
        node_path = NodePath.parse(node_path) if isinstance(node_path, str) else node_path
        known = self.existing_versions.setdefault(node_path, set())
        for version in versions:
            known.add(Version.parse(version) if isinstance(version, str) else version)

    def references_of(self, module_version: ModuleVersionLike) -> List[ModuleVersion]:
        """Current resolved targets of module_version, after updates."""
        return [ref.module_version for ref in self.references.get(_mv(module_version), []) if ref.is_resolved]

    # ModelAdapter

    def get_node(self, node_path: NodePath) -> Optional[Node]:
        self.get_node_calls += 1
        return self._nodes.get(node_path)

    def get_children(self, node: ClassificationNode) -> Iterator[Node]:
        return iter(node.children)

    def get_version_attributes(self, module_version: ModuleVersion) -> Dict[str, str]:
        return dict(self.version_attributes.get(module_version, {}))

    def get_scm_plugin(self, module: ModuleNode) -> 'FakeScmPlugin':
        plugin = self._scm_plugins.get(module.node_path)
        if plugin is None:
            plugin = FakeScmPlugin(self, module.node_path)
            self._scm_plugins[module.node_path] = plugin
        return plugin

    def get_reference_manager(self, module: ModuleNode) -> Optional['FakeReferenceManager']:
        if module.node_path in self.without_reference_manager:
            return None
        manager = self._reference_managers.get(module.node_path)
        if manager is None:
            manager = FakeReferenceManager(self)
            self._reference_managers[module.node_path] = manager
        return manager


class FakeScmPlugin(ScmPlugin):
    """SCM of one module of an InMemoryModel.

    Workspaces are synthetic paths mapped back to their module-version by
    the model.
    """

    def __init__(self, model: InMemoryModel, node_path: NodePath):
        self._model = model
        self.node_path = node_path

    def checkout_workspace(self, version: Optional[Version]) -> PurePosixPath:
        module_version = ModuleVersion(self.node_path, version)
        if module_version in self._model.failing_checkouts:
            raise RuntimeError(f"Checkout of {module_version} failed")
        effective = version if version is not None else self.default_version()
        path = WORKSPACE_ROOT.joinpath(*self.node_path.segments, str(effective))
        self._model.workspaces[path] = module_version
        self._model.checkouts.append(module_version)
        return path

    def is_synchronized(self, path, scope: SyncScope = SyncScope.ALL) -> bool:
        return self._model.workspaces[path] not in self._model.unsynchronized

    def commit(self, path, message: str, attributes: Optional[Dict[str, str]] = None) -> None:
        self._model.commits.append(CommitRecord(self._model.workspaces[path], message, dict(attributes or {})))

    def version_exists(self, version: Version) -> bool:
        return version in self._model.existing_versions.get(self.node_path, set())

    def default_version(self) -> Optional[Version]:
        return DEFAULT_VERSION


class FakeReferenceManager(ReferenceManagerPlugin):
    """Reference manager reading the references declared on an InMemoryModel."""

    def __init__(self, model: InMemoryModel):
        self._model = model

    def list_references(self, path) -> List[Reference]:
        return list(self._model.references.get(self._model.workspaces[path], []))

    def update_reference_version(self, path, reference: Reference, new_version: Version,
                                 options: Optional[Dict[str, Any]] = None) -> bool:
        referrer = self._model.workspaces[path]
        new_target = reference.module_version.with_version(new_version)
        declared = self._model.references.get(referrer, [])

        changed = (referrer, new_target) not in self._model.no_artifact_change
        if changed:
            self._model.references[referrer] = [
                Reference(new_target, ref.referrer, ref.implementation_data) if ref == reference else ref
                for ref in declared
            ]
        self._model.updates.append(UpdateRecord(referrer, reference, new_version, changed))
        return changed


class ScriptedUserInteraction(UserInteraction):
    """Records messages and answers prompts from a script.

    Answers are consumed in order; once exhausted default_answer is used.
    """

    def __init__(self, answers: Optional[Iterable[bool]] = None, default_answer: bool = True):
        super().__init__()
        self.answers: List[bool] = list(answers or [])
        self.default_answer = default_answer
        self.messages: List[str] = []
        self.prompts: List[str] = []

    def _emit(self, line: str) -> None:
        self.messages.append(line)

    def ask_yes_no(self, prompt: str) -> bool:
        self.prompts.append(prompt)
        if self.answers:
            return self.answers.pop(0)
        return self.default_answer

    def text(self) -> str:
        return "\n".join(self.messages)


def make_context(model: Optional[ModelAdapter] = None,
                 properties: Union[None, PropertiesStore, Dict[str, str]] = None,
                 answers: Optional[Iterable[bool]] = None,
                 error_policy: Optional[ErrorPolicy] = None) -> ExecContext:
    """Build an ExecContext wired to in-memory collaborators."""
    if model is None:
        model = InMemoryModel()
    if properties is None or isinstance(properties, dict):
        properties = InMemoryPropertiesStore(properties)
    return ExecContext(
        model,
        properties=properties,
        user_interaction=ScriptedUserInteraction(answers),
        error_policy=error_policy,
    )
