"""Composable predicates over ReferencePaths.

A ReferencePathMatcher decides whether a job acts on the module at the end
of a ReferencePath. Matchers are side-effect free and can be evaluated any
number of times; the only external access they perform is a read-only
model query for version attributes.

Combinators follow the usual identities: AND of nothing matches everything,
OR of nothing matches nothing.
"""

import fnmatch
import logging
import re
from abc import ABC, abstractmethod
from typing import Iterable, List, Optional, Pattern

from .adapter import ModelAdapter
from .identity import ModuleVersion
from .reference import ReferencePath

logger = logging.getLogger(__name__)


class ReferencePathMatcher(ABC):
    """Abstract predicate over a ReferencePath."""

    @abstractmethod
    def matches(self, reference_path: ReferencePath) -> bool:
        """Check whether the job should act on the leaf of reference_path."""
        pass

    def can_match_children(self, reference_path: ReferencePath) -> bool:
        """Check whether some extension of reference_path could still match.

        Traversals use this to avoid descending into subtrees that cannot
        produce a match. The default is the safe answer: True.
        """
        return True


class MatchAllMatcher(ReferencePathMatcher):
    """Matches every path."""

    def matches(self, reference_path: ReferencePath) -> bool:
        return True

    def __str__(self) -> str:
        return "*"

    def __repr__(self) -> str:
        return "MatchAllMatcher()"


_REGEX_VERSION_SUFFIX = re.compile(r":((?:S|D)/[^:]*|\*[^:]*)\Z")


def _glob_to_regex(pattern: str) -> Pattern:
    """Translate a node-path glob where '*' stays within a segment and '**'
    spans segments."""
    parts = []
    i = 0
    while i < len(pattern):
        char = pattern[i]
        if pattern.startswith("**", i):
            parts.append(".*")
            i += 2
            continue
        if char == "*":
            parts.append("[^/]*")
        elif char == "?":
            parts.append("[^/]")
        else:
            parts.append(re.escape(char))
        i += 1
    return re.compile("".join(parts) + r"\Z")


class ByElementMatcher(ReferencePathMatcher):
    """Matches paths whose leaf ModuleVersion satisfies an element selector.

    Selector syntax: "<node-path-pattern>[:<version-pattern>]".

    The node-path pattern is a glob over the module's NodePath string where
    '*' does not cross '/' and '**' does. Prefixing it with "re:" makes it a
    regular expression matched against the whole NodePath string. The
    optional version pattern is an fnmatch glob over the version string
    ("D/*", "S/v-1.*").

    Examples:
        ByElementMatcher("Domain/**")
        ByElementMatcher("Domain/*/core:D/develop")
        ByElementMatcher("re:.*/(api|core):S/*")
    """

    REGEX_PREFIX = "re:"

    def __init__(self, selector: str):
        selector = selector.strip()
        if not selector:
            raise ValueError("Element selector must not be empty")
        self._selector = selector

        path_pattern, sep, version_pattern = self._split(selector)
        if not path_pattern:
            raise ValueError(f"Element selector {selector!r} has no node path pattern")
        if sep and not version_pattern:
            raise ValueError(f"Element selector {selector!r} has an empty version pattern")

        if path_pattern.startswith(self.REGEX_PREFIX):
            try:
                self._path_regex = re.compile(path_pattern[len(self.REGEX_PREFIX):] + r"\Z")
            except re.error as e:
                raise ValueError(f"Invalid regular expression in selector {selector!r}: {e}") from e
        else:
            self._path_regex = _glob_to_regex(path_pattern)
        self._version_pattern = version_pattern if sep else None

    @classmethod
    def _split(cls, selector: str):
        # A regex may itself contain ':', so for regex selectors only a
        # trailing ":S/...", ":D/..." or ":*..." is taken as the version part.
        if selector.startswith(cls.REGEX_PREFIX):
            match = _REGEX_VERSION_SUFFIX.search(selector, len(cls.REGEX_PREFIX))
            if match:
                return selector[:match.start()], ":", match.group(1)
            return selector, "", ""
        return selector.partition(":")

    @property
    def selector(self) -> str:
        return self._selector

    def matches_module_version(self, module_version: Optional[ModuleVersion]) -> bool:
        """Check the selector against a single ModuleVersion."""
        if module_version is None:
            return False
        if not self._path_regex.match(str(module_version.node_path)):
            return False
        if self._version_pattern is None:
            return True
        version_text = str(module_version.version) if module_version.version is not None else ""
        return fnmatch.fnmatchcase(version_text, self._version_pattern)

    def matches(self, reference_path: ReferencePath) -> bool:
        return self.matches_module_version(reference_path.leaf_module_version)

    def __str__(self) -> str:
        return self._selector

    def __repr__(self) -> str:
        return f"ByElementMatcher({self._selector!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ByElementMatcher):
            return NotImplemented
        return self._selector == other._selector

    def __hash__(self) -> int:
        return hash(self._selector)


class VersionAttributeMatcher(ReferencePathMatcher):
    """Matches when the leaf version carries attribute_name == value."""

    def __init__(self, attribute_name: str, value: str, model: ModelAdapter):
        self.attribute_name = attribute_name
        self.value = value
        self._model = model

    def matches(self, reference_path: ReferencePath) -> bool:
        module_version = reference_path.leaf_module_version
        if module_version is None or module_version.version is None:
            return False
        attributes = self._model.get_version_attributes(module_version)
        return attributes.get(self.attribute_name) == self.value

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.attribute_name!r}={self.value!r})"


class ProjectCodeMatcher(VersionAttributeMatcher):
    """Restricts a job to versions tagged with the current project code."""

    def __init__(self, project_code: str, model: ModelAdapter, attribute_name: str = "project-code"):
        super().__init__(attribute_name, project_code, model)

    @property
    def project_code(self) -> str:
        return self.value


class _CompositeMatcher(ReferencePathMatcher):

    def __init__(self, children: Optional[Iterable[ReferencePathMatcher]] = None):
        self._children: List[ReferencePathMatcher] = list(children or [])

    @property
    def children(self) -> List[ReferencePathMatcher]:
        return list(self._children)

    def add(self, matcher: ReferencePathMatcher) -> None:
        self._children.append(matcher)

    def remove(self, matcher: ReferencePathMatcher) -> bool:
        """Remove the first child equal to matcher.

        Returns:
            True if a child was removed
        """
        try:
            self._children.remove(matcher)
        except ValueError:
            return False
        return True

    def clear(self) -> None:
        self._children.clear()

    def __len__(self) -> int:
        return len(self._children)

    def __iter__(self):
        return iter(list(self._children))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._children!r})"


class AndMatcher(_CompositeMatcher):
    """Matches when every child matches. No children matches everything."""

    def matches(self, reference_path: ReferencePath) -> bool:
        return all(child.matches(reference_path) for child in self._children)

    def can_match_children(self, reference_path: ReferencePath) -> bool:
        return all(child.can_match_children(reference_path) for child in self._children)


class OrMatcher(_CompositeMatcher):
    """Matches when any child matches. No children matches nothing."""

    def matches(self, reference_path: ReferencePath) -> bool:
        return any(child.matches(reference_path) for child in self._children)

    def can_match_children(self, reference_path: ReferencePath) -> bool:
        return any(child.can_match_children(reference_path) for child in self._children)

    def __str__(self) -> str:
        return " | ".join(str(child) for child in self._children)


def combine_matchers(*matchers: Optional[ReferencePathMatcher]) -> ReferencePathMatcher:
    """Combine optional matchers with AND semantics.

    None entries are ignored. With nothing left the result is a
    MatchAllMatcher, so that "no restriction specified" never silently
    matches nothing. A single remaining matcher is returned as is.

    Args:
        *matchers: Matchers to combine, None for "not supplied"

    Returns:
        The combined matcher
    """
    present = [matcher for matcher in matchers if matcher is not None]
    if not present:
        logger.debug("No ReferencePathMatcher supplied, matching everything")
        return MatchAllMatcher()
    if len(present) == 1:
        return present[0]
    return AndMatcher(present)
