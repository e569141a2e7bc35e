"""
Tests for NodePath, Version, ModuleVersion, Reference and ReferencePath.
"""

import pytest

from refgraphlib import (
    ModuleVersion,
    NodePath,
    Reference,
    ReferencePath,
    Version,
    VersionType,
)


class TestNodePath:

    def test_parse_partial_path(self):
        path = NodePath.parse("Domain/Sub/")
        assert path.segments == ("Domain", "Sub")
        assert path.is_partial
        assert str(path) == "Domain/Sub/"

    def test_parse_complete_path(self):
        path = NodePath.parse("Domain/Sub/module")
        assert path.is_complete
        assert path.name == "module"
        assert path.parent == NodePath.parse("Domain/Sub/")

    def test_root(self):
        assert NodePath.parse("") is NodePath.ROOT
        assert NodePath.parse("/") is NodePath.ROOT
        assert NodePath.ROOT.is_root
        assert NodePath.ROOT.parent is None
        assert NodePath.ROOT.name is None
        assert str(NodePath.ROOT) == ""

    def test_child(self):
        domain = NodePath.ROOT.child("Domain", partial=True)
        module = domain.child("app")
        assert str(module) == "Domain/app"
        with pytest.raises(ValueError):
            module.child("nested")

    @pytest.mark.parametrize("text", ["Domain//app", "Domain/a:b"])
    def test_invalid_segments(self, text):
        with pytest.raises(ValueError):
            NodePath.parse(text)

    def test_complete_root_rejected(self):
        with pytest.raises(ValueError):
            NodePath((), partial=False)


class TestVersion:

    def test_parse(self):
        assert Version.parse("D/develop") == Version(VersionType.DYNAMIC, "develop")
        assert Version.parse("S/v-1.2").is_static
        assert str(Version.dynamic("feature/x")) == "D/feature/x"

    def test_value_may_contain_slashes(self):
        version = Version.parse("D/feature/login")
        assert version.value == "feature/login"

    @pytest.mark.parametrize("text", ["develop", "X/1.0", "D/"])
    def test_parse_invalid(self, text):
        with pytest.raises(ValueError):
            Version.parse(text)


class TestModuleVersion:

    def test_parse_with_version(self):
        module_version = ModuleVersion.parse("Domain/app:D/develop")
        assert module_version.node_path == NodePath.parse("Domain/app")
        assert module_version.version == Version.dynamic("develop")
        assert module_version.is_dynamic
        assert not module_version.is_static
        assert str(module_version) == "Domain/app:D/develop"

    def test_default_version(self):
        module_version = ModuleVersion.parse("Domain/app")
        assert module_version.version is None
        assert not module_version.is_static
        assert not module_version.is_dynamic
        assert str(module_version) == "Domain/app"

    def test_requires_complete_path(self):
        with pytest.raises(ValueError):
            ModuleVersion.parse("Domain/")

    def test_versions_of_same_module_are_distinct(self):
        develop = ModuleVersion.parse("Domain/app:D/develop")
        release = develop.with_version(Version.static("1.0"))
        assert develop != release
        assert develop.node_path == release.node_path
        assert len({develop, release, ModuleVersion.parse("Domain/app:D/develop")}) == 2


class TestReferencePath:

    def setup_method(self):
        self.a = ModuleVersion.parse("Domain/a:D/develop")
        self.b = ModuleVersion.parse("Domain/b:D/develop")

    def test_append_returns_new_path(self):
        root = ReferencePath.from_root(self.a)
        extended = root.append(Reference(self.b, self.a))
        assert len(root) == 1
        assert len(extended) == 2
        assert extended.root_module_version == self.a
        assert extended.leaf_module_version == self.b
        assert extended.leaf.referrer == self.a
        assert root.leaf.is_root

    def test_str(self):
        path = ReferencePath.from_root(self.a).append(Reference(self.b, self.a))
        assert str(path) == "Domain/a:D/develop -> Domain/b:D/develop"

    def test_cycle_detection(self):
        path = ReferencePath.from_root(self.a).append(Reference(self.b, self.a))
        assert not path.is_cyclic()
        cyclic = path.append(Reference(self.a, self.b))
        assert cyclic.is_cyclic()
        assert cyclic.contains_module_version(self.b)

    def test_equality(self):
        first = ReferencePath.from_root(self.a).append(Reference(self.b, self.a))
        second = ReferencePath.from_root(self.a).append(Reference(self.b, self.a))
        assert first == second
        assert hash(first) == hash(second)

    def test_empty_path(self):
        path = ReferencePath()
        assert not path
        assert path.leaf is None
        assert path.leaf_module_version is None
        assert not path.is_cyclic()


def test_unresolved_reference_str():
    reference = Reference(None, ModuleVersion.parse("Domain/a:D/develop"), "org.acme:widget:1.0")
    assert not reference.is_resolved
    assert str(reference) == "<unknown module> (org.acme:widget:1.0)"
