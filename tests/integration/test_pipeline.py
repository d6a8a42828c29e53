"""Integration tests for the concurrent mapping pipeline.

Tests cover: pagination order, fail-fast error propagation with bounded
shutdown, backpressure, the worker cap, namespace scoping, conversion
errors and cancellation.
"""

from __future__ import annotations

import asyncio
from collections.abc import Mapping
from typing import Any

import pytest
from prometheus_client import REGISTRY

from kraph.api import Object, Resource
from kraph.errors import ListingError, MappingError, UpstreamError
from kraph.models.config import ScraperConfig
from kraph.query import Query
from kraph.scraper import Scraper

from fakes import EVENTS, NODES, PODS, SERVICES, FakeLister, item, leaked_tasks, make_api, raw_factory

# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


class TestPagination:
    async def test_three_pages_in_order(self) -> None:
        seen: list[str] = []

        def factory(resource: Resource, raw: Mapping[str, Any]) -> list[Object]:
            seen.append(raw["uid"])
            return raw_factory(resource, raw)

        lister = FakeLister({"pods": [[item("a"), item("b")], [item("c")], [item("d")]]})
        top = await Scraper(lister, factory, ScraperConfig(page_size=2)).map(make_api(PODS))

        assert len(top) == 4
        assert seen == ["a", "b", "c", "d"]
        assert [c[2] for c in lister.calls] == ["", "1", "2"]

    async def test_pages_and_objects_counted(self) -> None:
        def sample(name: str, labels: dict[str, str] | None = None) -> float:
            return REGISTRY.get_sample_value(name, labels or {}) or 0.0

        pages_before = sample("kraph_pages_listed_total", {"resource": "metered"})
        objects_before = sample("kraph_objects_mapped_total")
        metered = Resource(name="metered", kind="M", version="v1", namespaced=True)
        lister = FakeLister({"metered": [[item("m1"), item("m2")], [item("m3")]]})

        await Scraper(lister, raw_factory).map(make_api(metered))

        assert sample("kraph_pages_listed_total", {"resource": "metered"}) - pages_before == 2
        assert sample("kraph_objects_mapped_total") - objects_before == 3

    async def test_empty_api(self) -> None:
        top = await Scraper(FakeLister({}), raw_factory).map(make_api())
        assert len(top) == 0

    async def test_links_across_resources(self) -> None:
        lister = FakeLister(
            {
                "pods": [[item("p1", to="s1")], [item("p2", to="s1")]],
                "services": [[item("s1")]],
            }
        )
        top = await Scraper(lister, raw_factory).map(make_api(PODS, SERVICES))
        assert sorted(lk.to_uid.value for lk in top.object("s1").links()) == ["p1", "p2"]
        assert top.pending() == []

    async def test_explicit_resource_subset(self) -> None:
        lister = FakeLister({"pods": [[item("p1")]], "services": [[item("s1")]]})
        top = await Scraper(lister, raw_factory).map(make_api(PODS, SERVICES), [SERVICES])
        assert [o.uid.value for o in top.get(Query())] == ["s1"]


# ---------------------------------------------------------------------------
# Resource selection
# ---------------------------------------------------------------------------


class TestSelection:
    async def test_resources_without_list_verb_skipped(self) -> None:
        lister = FakeLister({"pods": [[item("p1")]]})
        await Scraper(lister, raw_factory).map(make_api(PODS, EVENTS))
        assert {c[0] for c in lister.calls} == {"pods"}

    async def test_namespace_skips_cluster_scoped(self) -> None:
        lister = FakeLister({"pods": [[item("p1")]], "nodes": [[item("n1")]]})
        top = await Scraper(lister, raw_factory, ScraperConfig(namespace="default")).map(make_api(PODS, NODES))
        assert lister.calls == [("pods", "default", "")]
        assert "n1" not in top

    async def test_all_namespaces_lists_everything(self) -> None:
        lister = FakeLister({"pods": [[item("p1")]], "nodes": [[item("n1")]]})
        top = await Scraper(lister, raw_factory).map(make_api(PODS, NODES))
        assert len(top) == 2
        assert top.object("n1").namespace == "global"


# ---------------------------------------------------------------------------
# Concurrency bounds
# ---------------------------------------------------------------------------


class TestConcurrency:
    async def test_worker_cap(self) -> None:
        resources = [Resource(name=f"r{i}", kind="R", version="v1", namespaced=True) for i in range(6)]
        lister = FakeLister({r.name: [[item(f"{r.name}-{p}")] for p in range(3)] for r in resources}, delay=0.01)
        top = await Scraper(lister, raw_factory, ScraperConfig(workers=2)).map(make_api(*resources))
        assert len(top) == 18
        assert lister.max_active <= 2

    async def test_unbounded_workers_run_concurrently(self) -> None:
        resources = [Resource(name=f"r{i}", kind="R", version="v1", namespaced=True) for i in range(4)]
        lister = FakeLister({r.name: [[item(r.name)]] for r in resources}, delay=0.05)
        await Scraper(lister, raw_factory).map(make_api(*resources))
        assert lister.max_active == 4

    async def test_backpressure_with_tiny_queue(self) -> None:
        resources = [Resource(name=f"r{i}", kind="R", version="v1", namespaced=True) for i in range(5)]
        pages = {r.name: [[item(f"{r.name}-{p}")] for p in range(20)] for r in resources}
        scraper = Scraper(FakeLister(pages), raw_factory, ScraperConfig(queue_size=1))
        top = await asyncio.wait_for(scraper.map(make_api(*resources)), timeout=5.0)
        assert len(top) == 100
        assert leaked_tasks() == []


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------


class TestFailures:
    async def test_listing_failure_stops_everything(self) -> None:
        bad = Resource(name="bad", kind="Bad", version="v1", namespaced=True)
        slow = Resource(name="slow", kind="Slow", version="v1", namespaced=True)
        lister = FakeLister(
            {"slow": [[item(f"s{i}")] for i in range(1000)]},
            failures={"bad": RuntimeError("boom")},
            delay=0.005,
        )
        scraper = Scraper(lister, raw_factory, ScraperConfig(queue_size=1))

        with pytest.raises(ListingError) as exc_info:
            await asyncio.wait_for(scraper.map(make_api(bad, slow)), timeout=5.0)

        assert exc_info.value.resource == "bad"
        assert isinstance(exc_info.value.cause, RuntimeError)
        assert len([c for c in lister.calls if c[0] == "slow"]) < 1000
        assert leaked_tasks() == []

    async def test_upstream_error_passes_through(self) -> None:
        err = UpstreamError("rate limited")
        lister = FakeLister({}, failures={"pods": err})
        with pytest.raises(UpstreamError) as exc_info:
            await Scraper(lister, raw_factory).map(make_api(PODS))
        assert exc_info.value is err

    async def test_failure_while_producers_blocked(self) -> None:
        resources = [Resource(name=f"r{i}", kind="R", version="v1", namespaced=True) for i in range(4)]
        pages = {r.name: [[item(f"{r.name}-{p}")] for p in range(500)] for r in resources}
        lister = FakeLister(pages, failures={"late": RuntimeError("late")})
        late = Resource(name="late", kind="Late", version="v1", namespaced=True)
        scraper = Scraper(lister, raw_factory, ScraperConfig(queue_size=1))

        with pytest.raises(ListingError):
            await asyncio.wait_for(scraper.map(make_api(*resources, late)), timeout=5.0)
        assert leaked_tasks() == []

    async def test_conversion_error(self) -> None:
        def factory(resource: Resource, raw: Mapping[str, Any]) -> list[Object]:
            if raw["uid"] == "broken":
                raise KeyError("name")
            return raw_factory(resource, raw)

        lister = FakeLister({"pods": [[item("a")], [item("broken")], [item("c")]]})
        with pytest.raises(MappingError) as exc_info:
            await Scraper(lister, factory).map(make_api(PODS))
        assert exc_info.value.resource == "pods"
        assert isinstance(exc_info.value.cause, KeyError)
        assert leaked_tasks() == []

    async def test_cancelling_map_cancels_tasks(self) -> None:
        lister = FakeLister({"pods": [[item(f"p{i}")] for i in range(100)]}, delay=1.0)
        task = asyncio.create_task(Scraper(lister, raw_factory).map(make_api(PODS)))
        await asyncio.sleep(0.05)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task
        assert leaked_tasks() == []
