"""
Tests for ReferenceGraph and the BuildReferenceGraph job.
"""

import pytest

from refgraphlib import ByElementMatcher, ModuleVersion, NodePath, Reference, ReferencePath, ReferenceTraversalConfig
from refgraphlib.jobs import BuildReferenceGraph, ReferenceGraph, Referrer

A = ModuleVersion.parse("Domain/a:D/develop")
B = ModuleVersion.parse("Domain/b:D/develop")
C = ModuleVersion.parse("Domain/c:D/develop")
D = ModuleVersion.parse("Domain/d:D/develop")


class TestReferenceGraph:

    def test_add_matched_reference_path(self):
        graph = ReferenceGraph()
        path = ReferencePath.from_root(A).append(Reference(B, A)).append(Reference(C, B))
        graph.add_matched_reference_path(path)

        assert graph.root_module_versions() == [A]
        assert graph.matched_module_versions() == [C]
        assert graph.module_versions() == [A, B, C]
        assert graph.references(A) == [Reference(B, A)]
        assert graph.referrers(C) == [Referrer(B, Reference(C, B))]
        assert graph.is_root(A)
        assert not graph.is_matched(B)

    def test_edges_are_recorded_once(self):
        graph = ReferenceGraph()
        graph.add_reference(A, Reference(B, A))
        graph.add_reference(A, Reference(B, A))
        assert graph.references(A) == [Reference(B, A)]
        assert len(graph.referrers(B)) == 1
        assert len(graph) == 2

    def test_module_versions_by_node_path(self):
        graph = ReferenceGraph()
        other_b = ModuleVersion.parse("Domain/b:S/1.0")
        graph.add_reference(A, Reference(B, A))
        graph.add_reference(A, Reference(other_b, A))
        assert graph.module_versions(NodePath.parse("Domain/b")) == [B, other_b]

    def test_unknown_module_version(self):
        graph = ReferenceGraph()
        assert not graph.module_version_exists(A)
        assert A not in graph
        with pytest.raises(KeyError):
            graph.referrers(A)
        with pytest.raises(KeyError):
            graph.references(A)


class TestBuildReferenceGraph:

    def test_cycle_edges_are_all_recorded(self, model, context):
        model.add_references(A, B, C)
        model.add_references(B, A)
        job = BuildReferenceGraph(context, [A])
        outcome = job.perform_job()
        graph = job.reference_graph

        assert outcome.is_continue
        assert graph.root_module_versions() == [A]
        assert graph.matched_module_versions() == [A, B, C]
        assert graph.references(A) == [Reference(B, A), Reference(C, A)]
        assert graph.references(B) == [Reference(A, B)]
        assert graph.referrers(A) == [Referrer(B, Reference(A, B))]

    def test_diamond(self, model, context):
        model.add_references(A, B, C)
        model.add_references(B, D)
        model.add_references(C, D)
        job = BuildReferenceGraph(context, [A])
        job.perform_job()
        graph = job.reference_graph
        assert [referrer.module_version for referrer in graph.referrers(D)] == [B, C]
        # D is expanded only once
        assert model.checkouts.count(D) == 2
        assert graph.references(D) == []

    def test_reentry_avoidance_is_forced_off(self, context):
        config = ReferenceTraversalConfig()
        job = BuildReferenceGraph(context, [A], config=config)
        assert not job.config.avoid_reentry
        assert config.avoid_reentry

    def test_matcher_restricts_matched_module_versions(self, model, context):
        model.add_references(A, B)
        model.add_references(B, C)
        job = BuildReferenceGraph(context, [A], matcher=ByElementMatcher("Domain/c"))
        job.perform_job()
        graph = job.reference_graph
        assert graph.matched_module_versions() == [C]
        assert graph.module_versions() == [A, B, C]
        assert graph.root_module_versions() == [A]

    def test_shared_graph(self, model, context):
        model.add_references(A, B)
        graph = ReferenceGraph()
        BuildReferenceGraph(context, [A], reference_graph=graph).perform_job()
        BuildReferenceGraph(context, [C], reference_graph=graph).perform_job()
        assert graph.root_module_versions() == [A, C]
        assert len(graph) == 3
