"""Concurrent listing pipeline that maps API resources into a Topology.

One listing task per resource pages through its objects and sends every
page onto a bounded queue. A single aggregator task drains the queue,
converts items into objects and adds them to the Topology, so only the
aggregator ever mutates it.

The first error sets a one-shot ``asyncio.Event``. Listing tasks check it
before every call and while blocked on a full queue, so no task outlives
:meth:`Scraper.map` and the first error is the one raised.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from kraph.api import API, AddOptions, Resource, Topology
from kraph.errors import ListingError, MappingError, UpstreamError
from kraph.models.config import ScraperConfig
from kraph.observability.logging import get_logger
from kraph.observability.metrics import (
    map_duration_seconds,
    mapping_errors_total,
    objects_mapped_total,
    pages_listed_total,
)
from kraph.scraper.base import Lister, ObjectFactory

_log = get_logger("scraper.pipeline")

# Marks the end of the page stream once every listing task has exited.
_CLOSED = object()


@dataclass
class _Result:
    resource: Resource
    items: list[Any] = field(default_factory=list)
    error: BaseException | None = None


async def _send(queue: asyncio.Queue[Any], item: Any, done: asyncio.Event) -> bool:
    """Put *item* on *queue* unless *done* is set first.

    Returns True if the item was enqueued.
    """
    if done.is_set():
        return False
    try:
        queue.put_nowait(item)
        return True
    except asyncio.QueueFull:
        pass

    put = asyncio.ensure_future(queue.put(item))
    stop = asyncio.ensure_future(done.wait())
    try:
        await asyncio.wait({put, stop}, return_when=asyncio.FIRST_COMPLETED)
        return put.done() and not put.cancelled()
    finally:
        pending = [t for t in (put, stop) if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)


class Scraper:
    """Maps the resources of an :class:`API` into a :class:`Topology`.

    Args:
        lister:      issues paged listing calls against the remote API.
        factory:     turns one raw item into the objects it describes.
        config:      paging, namespace, worker and queue settings.
        add_options: options used for every ``Topology.add``.
    """

    def __init__(
        self,
        lister: Lister,
        factory: ObjectFactory,
        config: ScraperConfig | None = None,
        add_options: AddOptions | None = None,
    ) -> None:
        self._lister = lister
        self._factory = factory
        self._config = config or ScraperConfig()
        self._add_options = add_options or AddOptions()

    def listable(self, resource: Resource) -> bool:
        """Return True if *resource* is listed under the current configuration."""
        if not resource.provides("list"):
            return False
        # a namespace-scoped scrape cannot list cluster-scoped resources
        return not (self._config.namespace and not resource.namespaced)

    async def map(self, api: API, resources: Iterable[Resource] | None = None) -> Topology:
        """List every listable resource of *api* and return the resulting Topology.

        *resources* restricts the listing to a subset of the API.

        Raises:
            UpstreamError: the first listing failure; no partial topology is returned.
            MappingError:  a listed item could not be converted or added.
        """
        targets = [r for r in (api.resources() if resources is None else resources) if self.listable(r)]
        queue: asyncio.Queue[Any] = asyncio.Queue(maxsize=self._config.queue_size)
        done = asyncio.Event()
        limit = asyncio.Semaphore(self._config.workers) if self._config.workers else None

        _log.info(
            "mapping_started",
            source=api.source,
            resources=len(targets),
            namespace=self._config.namespace or "*",
            workers=self._config.workers or len(targets),
        )
        started = time.monotonic()

        aggregator = asyncio.create_task(self._aggregate(api, queue, done), name="kraph-aggregator")
        listers = [
            asyncio.create_task(self._list(r, queue, done, limit), name=f"kraph-list-{r.name}")
            for r in targets
        ]
        producers = asyncio.gather(*listers)
        try:
            await asyncio.wait({producers, aggregator}, return_when=asyncio.FIRST_COMPLETED)
            if not aggregator.done():
                await producers
                await _send(queue, _CLOSED, done)
            top, err = await aggregator
        finally:
            for task in (*listers, aggregator):
                if not task.done():
                    task.cancel()
            await asyncio.gather(producers, aggregator, return_exceptions=True)

        elapsed = time.monotonic() - started
        map_duration_seconds.observe(elapsed)

        if err is not None:
            _log.error("mapping_failed", source=api.source, error=str(err), duration_s=round(elapsed, 3))
            raise err

        _log.info("mapping_finished", source=api.source, objects=len(top), duration_s=round(elapsed, 3))
        return top

    async def _list(
        self,
        resource: Resource,
        queue: asyncio.Queue[Any],
        done: asyncio.Event,
        limit: asyncio.Semaphore | None,
    ) -> None:
        if limit is None:
            await self._paginate(resource, queue, done)
            return
        async with limit:
            await self._paginate(resource, queue, done)

    async def _paginate(self, resource: Resource, queue: asyncio.Queue[Any], done: asyncio.Event) -> None:
        """Page through *resource* in order until the last page, an error or cancellation."""
        token = ""
        pages = 0
        while not done.is_set():
            try:
                page = await self._lister.list(resource, self._config.namespace, self._config.page_size, token)
            except Exception as exc:
                err = exc if isinstance(exc, UpstreamError) else ListingError(resource.name, exc)
                _log.warning("listing_failed", resource=resource.name, page=pages + 1, error=str(exc))
                await _send(queue, _Result(resource, error=err), done)
                return

            pages += 1
            pages_listed_total.labels(resource=resource.name).inc()
            if not await _send(queue, _Result(resource, list(page.items)), done):
                return

            token = page.continue_token
            if not token:
                break

        _log.debug("listing_finished", resource=resource.name, pages=pages)

    async def _aggregate(
        self,
        api: API,
        queue: asyncio.Queue[Any],
        done: asyncio.Event,
    ) -> tuple[Topology, BaseException | None]:
        top = Topology(api)
        while True:
            result = await queue.get()
            if result is _CLOSED:
                return top, None

            if result.error is not None:
                mapping_errors_total.labels(stage="list").inc()
                done.set()
                return top, result.error

            for raw in result.items:
                try:
                    for obj in self._factory(result.resource, raw):
                        top.add(obj, self._add_options)
                        objects_mapped_total.inc()
                except Exception as exc:
                    mapping_errors_total.labels(stage="convert").inc()
                    done.set()
                    return top, MappingError(result.resource.name, exc)
