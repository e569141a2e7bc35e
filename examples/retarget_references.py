#!/usr/bin/env python3
"""
Retargeting references across a small reference graph.

This example demonstrates:
- Declaring a model and its reference graph in memory
- Listing every matched reference path from the root module-versions
- Building the reference graph and querying referrers
- Changing every reference to a module-version to a new version
"""

import logging
import sys
from pathlib import Path

# Add parent directory to path for development
sys.path.insert(0, str(Path(__file__).parent.parent))

from refgraphlib import (
    ModuleVersion,
    RootManager,
    Version,
    build_reference_graph,
    collect_matched_paths,
)
from refgraphlib.jobs import ChangeReferenceToModuleVersion
from refgraphlib.testing import InMemoryModel, make_context


def main():
    logging.basicConfig(level=logging.WARNING)

    model = InMemoryModel({
        "App": {"web": None, "batch": None},
        "Lib": {"core": None, "util": None},
    })
    web = ModuleVersion.parse("App/web:D/develop")
    batch = ModuleVersion.parse("App/batch:D/develop")
    core = ModuleVersion.parse("Lib/core:D/develop")
    util = ModuleVersion.parse("Lib/util:D/develop")

    model.add_references(web, core, util)
    model.add_references(batch, core)
    model.add_references(core, util)

    context = make_context(model, {"IND_NO_CONFIRM": "true"})
    roots = RootManager(context)
    roots.add(web)
    roots.add(batch)

    print("Matched reference paths:")
    print("-" * 50)
    for path in collect_matched_paths(context):
        print(f"  {path}")

    graph = build_reference_graph(context)
    print(f"\nReferrers of {util}:")
    for referrer in graph.referrers(util):
        print(f"  {referrer.module_version}")

    mapping = {util: Version.parse("D/feature-login")}
    job = ChangeReferenceToModuleVersion(context, mapping=mapping)
    outcome = job.perform_job()

    print(f"\nJob outcome: {outcome}")
    print("Job messages:")
    print(context.user_interaction.text())
    print(f"\nCommits: {len(model.commits)}")
    for commit in model.commits:
        print(f"  {commit.module_version}: {commit.message}")


if __name__ == "__main__":
    main()
