"""Identity value types for RefGraphLib.

These are the small immutable values everything else is keyed on: where a
node sits in the classification tree (NodePath), which revision of a module
is meant (Version) and the pairing of both (ModuleVersion). They carry no
behavior beyond parsing, formatting and equality.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple


class VersionType(Enum):
    """Kind of a Version.

    STATIC versions are tag-like and immutable. DYNAMIC versions are
    branch-like and may be moved or retargeted.
    """
    STATIC = "S"
    DYNAMIC = "D"


@dataclass(frozen=True)
class NodePath:
    """Location of a node in the classification tree.

    A partial path points to a classification node, a complete path points
    to a module. The string form joins segments with '/' and partial paths
    end with a trailing '/' (the root is the empty string).

    Examples:
        NodePath.parse("Domain/Sub/")        -> partial, 2 segments
        NodePath.parse("Domain/Sub/module")  -> complete, 3 segments
    """

    segments: Tuple[str, ...] = ()
    partial: bool = True

    def __post_init__(self):
        for segment in self.segments:
            if not segment or "/" in segment or ":" in segment:
                raise ValueError(f"Invalid NodePath segment: {segment!r}")
        if not self.segments and not self.partial:
            raise ValueError("The root NodePath must be partial")

    @classmethod
    def parse(cls, text: str) -> 'NodePath':
        """Parse the string form of a NodePath.

        Args:
            text: Path such as "Domain/Sub/" or "Domain/module"

        Returns:
            The corresponding NodePath

        Raises:
            ValueError: If the text contains empty segments
        """
        if text in ("", "/"):
            return cls.ROOT
        partial = text.endswith("/")
        body = text[:-1] if partial else text
        return cls(tuple(body.split("/")), partial)

    @property
    def name(self) -> Optional[str]:
        """Last segment, None for the root."""
        return self.segments[-1] if self.segments else None

    @property
    def parent(self) -> Optional['NodePath']:
        """Partial path of the parent node, None for the root."""
        if not self.segments:
            return None
        return NodePath(self.segments[:-1], True)

    @property
    def is_root(self) -> bool:
        return not self.segments

    @property
    def is_partial(self) -> bool:
        return self.partial

    @property
    def is_complete(self) -> bool:
        return not self.partial

    def child(self, name: str, partial: bool = False) -> 'NodePath':
        """Build the path of a child of this (partial) path.

        Args:
            name: Child segment
            partial: True if the child is a classification node

        Raises:
            ValueError: If this path is complete (modules have no children)
        """
        if not self.partial:
            raise ValueError(f"Complete NodePath {self} cannot have children")
        return NodePath(self.segments + (name,), partial)

    def __str__(self) -> str:
        text = "/".join(self.segments)
        if self.partial and self.segments:
            text += "/"
        return text


NodePath.ROOT = NodePath((), True)


@dataclass(frozen=True)
class Version:
    """A revision of a module, e.g. "D/develop" or "S/v-1.2"."""

    version_type: VersionType
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Version value must not be empty")

    @classmethod
    def parse(cls, text: str) -> 'Version':
        """Parse "<type>/<value>" where type is S or D.

        Raises:
            ValueError: If the type prefix is missing or unknown
        """
        prefix, sep, value = text.strip().partition("/")
        if not sep:
            raise ValueError(f"Version {text!r} must be of the form S/<value> or D/<value>")
        try:
            version_type = VersionType(prefix)
        except ValueError:
            raise ValueError(f"Unknown version type {prefix!r} in {text!r}") from None
        return cls(version_type, value)

    @classmethod
    def static(cls, value: str) -> 'Version':
        return cls(VersionType.STATIC, value)

    @classmethod
    def dynamic(cls, value: str) -> 'Version':
        return cls(VersionType.DYNAMIC, value)

    @property
    def is_static(self) -> bool:
        return self.version_type is VersionType.STATIC

    @property
    def is_dynamic(self) -> bool:
        return self.version_type is VersionType.DYNAMIC

    def __str__(self) -> str:
        return f"{self.version_type.value}/{self.value}"


@dataclass(frozen=True)
class ModuleVersion:
    """A module pinned to a Version.

    A missing version stands for the module's default version. Two
    ModuleVersions with the same NodePath and different versions are
    distinct.
    """

    node_path: NodePath
    version: Optional[Version] = None

    def __post_init__(self):
        if self.node_path.is_partial:
            raise ValueError(f"ModuleVersion requires a complete NodePath, got {self.node_path}")

    @classmethod
    def parse(cls, text: str) -> 'ModuleVersion':
        """Parse "<node-path>[:<version>]".

        Examples:
            ModuleVersion.parse("Domain/module:D/develop")
            ModuleVersion.parse("Domain/module")
        """
        path_text, sep, version_text = text.strip().partition(":")
        node_path = NodePath.parse(path_text)
        version = Version.parse(version_text) if sep else None
        return cls(node_path, version)

    def with_version(self, version: Optional[Version]) -> 'ModuleVersion':
        """Return the same module at another version."""
        return ModuleVersion(self.node_path, version)

    @property
    def is_static(self) -> bool:
        return self.version is not None and self.version.is_static

    @property
    def is_dynamic(self) -> bool:
        return self.version is not None and self.version.is_dynamic

    def __str__(self) -> str:
        if self.version is None:
            return str(self.node_path)
        return f"{self.node_path}:{self.version}"
