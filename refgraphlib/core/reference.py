"""References and reference paths.

A Reference is a dependency edge discovered inside a module's sources. A
ReferencePath is the chain of References followed from a root
ModuleVersion down to the module currently being visited.

ReferencePath is immutable: extending it returns a new path, so each
recursion level of a traversal owns its own value and nothing needs to be
restored when the recursion unwinds.
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Tuple

from .identity import ModuleVersion


@dataclass(frozen=True)
class Reference:
    """A discovered dependency edge.

    Attributes:
        module_version: Referenced ModuleVersion, None when the dependency
            cannot be mapped to a known module (external or unrecognized)
        referrer: ModuleVersion whose sources declare the reference, None
            for the synthetic reference wrapping a root
        implementation_data: Free-form text describing the reference as
            declared (for example artifact coordinates), used in messages
    """

    module_version: Optional[ModuleVersion]
    referrer: Optional[ModuleVersion] = None
    implementation_data: Optional[str] = None

    @classmethod
    def root(cls, module_version: ModuleVersion) -> 'Reference':
        """Wrap a root ModuleVersion as a top-level Reference."""
        return cls(module_version)

    @property
    def is_resolved(self) -> bool:
        return self.module_version is not None

    @property
    def is_root(self) -> bool:
        return self.referrer is None

    def __str__(self) -> str:
        target = str(self.module_version) if self.module_version is not None else "<unknown module>"
        if self.implementation_data:
            return f"{target} ({self.implementation_data})"
        return target


class ReferencePath:
    """Ordered sequence of References from a root to the current node."""

    __slots__ = ("_references",)

    def __init__(self, references: Tuple[Reference, ...] = ()):
        self._references = tuple(references)

    @classmethod
    def from_root(cls, module_version: ModuleVersion) -> 'ReferencePath':
        """Start a path at a root ModuleVersion."""
        return cls((Reference.root(module_version),))

    def append(self, reference: Reference) -> 'ReferencePath':
        """Return a new path extended with reference."""
        return ReferencePath(self._references + (reference,))

    @property
    def leaf(self) -> Optional[Reference]:
        return self._references[-1] if self._references else None

    @property
    def leaf_module_version(self) -> Optional[ModuleVersion]:
        leaf = self.leaf
        return leaf.module_version if leaf is not None else None

    @property
    def root_module_version(self) -> Optional[ModuleVersion]:
        return self._references[0].module_version if self._references else None

    @property
    def references(self) -> Tuple[Reference, ...]:
        return self._references

    def contains_module_version(self, module_version: ModuleVersion) -> bool:
        """Check if module_version appears anywhere in the path."""
        return any(ref.module_version == module_version for ref in self._references)

    def is_cyclic(self) -> bool:
        """Check if the leaf ModuleVersion already appears earlier in the path.

        Returns:
            True if following the leaf reference closed a cycle
        """
        leaf_mv = self.leaf_module_version
        if leaf_mv is None:
            return False
        return any(ref.module_version == leaf_mv for ref in self._references[:-1])

    def __len__(self) -> int:
        return len(self._references)

    def __iter__(self) -> Iterator[Reference]:
        return iter(self._references)

    def __getitem__(self, index):
        return self._references[index]

    def __bool__(self) -> bool:
        return bool(self._references)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReferencePath):
            return NotImplemented
        return self._references == other._references

    def __hash__(self) -> int:
        return hash(self._references)

    def __str__(self) -> str:
        return " -> ".join(str(ref) for ref in self._references)

    def __repr__(self) -> str:
        return f"ReferencePath({str(self)!r})"
