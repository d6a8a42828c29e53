"""Kubernetes API source.

Discovery walks ``/api`` and the preferred version of every group under
``/apis``. Listing goes through the generic ``ApiClient.call_api`` so any
discovered resource, custom resources included, can be paged with
``limit``/``continue`` without a typed client per group.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from kraph.api import API, NS_GLOBAL, LinkOptions, Object, Resource, Topology
from kraph.errors import DiscoveryError, ListingError
from kraph.models.config import ScraperConfig
from kraph.observability.logging import get_logger
from kraph.scraper.base import Page
from kraph.scraper.pipeline import Scraper
from kraph.uid import UID

_log = get_logger("scraper.kubernetes")

SOURCE = "kubernetes"
OWNER_RELATION = "own"


def resources_from_list(group: str, version: str, payload: Mapping[str, Any]) -> list[Resource]:
    """Convert an APIResourceList into listable resources.

    Subresources (``pods/log``) and resources that cannot be listed are skipped.
    """
    out: list[Resource] = []
    for item in payload.get("resources") or []:
        name = item.get("name", "")
        if not name or "/" in name:
            continue
        res = Resource(
            name=name,
            kind=item.get("kind", ""),
            group=group,
            version=version,
            namespaced=bool(item.get("namespaced", False)),
            short_names=tuple(item.get("shortNames") or ()),
            singular_name=item.get("singularName", ""),
            verbs=tuple(item.get("verbs") or ()),
        )
        if res.provides("list"):
            out.append(res)
    return out


def resource_path(resource: Resource, namespace: str = "") -> str:
    """Return the collection URL path of *resource*, scoped to *namespace* if given."""
    base = f"/apis/{resource.group}/{resource.version}" if resource.group else f"/api/{resource.version}"
    if namespace and resource.namespaced:
        return f"{base}/namespaces/{namespace}/{resource.name}"
    return f"{base}/{resource.name}"


def object_from_unstructured(resource: Resource, raw: Mapping[str, Any]) -> list[Object]:
    """Convert one listed item into an :class:`Object`.

    Owner references become ``own`` links from the owned object to its owner.
    """
    meta = raw.get("metadata") or {}
    name = str(meta.get("name", "")).lower()
    namespace = str(meta.get("namespace") or "").lower() if resource.namespaced else NS_GLOBAL
    uid = meta.get("uid") or f"{resource.kind.lower()}-{name}"

    metadata: dict[str, Any] = {}
    if meta.get("creationTimestamp"):
        metadata["created_at"] = str(meta["creationTimestamp"])
    if meta.get("labels"):
        metadata["labels"] = dict(meta["labels"])
    if meta.get("annotations"):
        metadata["annotations"] = dict(meta["annotations"])

    obj = Object(uid=UID(uid), name=name, namespace=namespace or NS_GLOBAL, resource=resource, metadata=metadata)
    for ref in meta.get("ownerReferences") or []:
        owner = ref.get("uid")
        if not owner:
            continue
        obj.link(
            UID(owner),
            LinkOptions(metadata={"relation": OWNER_RELATION, "controller": bool(ref.get("controller", False))}),
        )
    return [obj]


class KubernetesClient:
    """Discovers and maps a Kubernetes cluster.

    Args:
        api_client: a configured ``kubernetes_asyncio.client.ApiClient``.
        config:     scraper settings; ``namespace`` scopes the listing.
    """

    def __init__(self, api_client: Any, config: ScraperConfig | None = None) -> None:
        self._api = api_client
        self._config = config or ScraperConfig()

    @classmethod
    async def from_environment(cls, config: ScraperConfig | None = None) -> KubernetesClient:
        """Build a client from the in-cluster service account or the local kubeconfig."""
        import kubernetes_asyncio.config as k8s_config  # type: ignore[import-untyped]
        from kubernetes_asyncio import client as k8s_client  # type: ignore[import-untyped]

        try:
            # load_incluster_config() is synchronous in kubernetes-asyncio
            k8s_config.load_incluster_config()
            _log.info("k8s_client_configured", source="incluster")
        except k8s_config.ConfigException:
            try:
                await k8s_config.load_kube_config()
            except (k8s_config.ConfigException, OSError) as exc:
                raise DiscoveryError("no kubernetes configuration found", exc) from exc
            _log.info("k8s_client_configured", source="kubeconfig")
        return cls(k8s_client.ApiClient(), config)

    async def close(self) -> None:
        await self._api.close()

    async def _get(self, path: str, query: list[tuple[str, Any]] | None = None) -> dict[str, Any]:
        return await self._api.call_api(
            path,
            "GET",
            query_params=query or [],
            header_params={"Accept": "application/json"},
            response_type="object",
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
        )

    async def discover(self) -> API:
        """Return every listable resource of the preferred API versions.

        Raises:
            DiscoveryError: if any discovery call fails.
        """
        api = API(SOURCE)
        try:
            core = await self._get("/api")
            for version in core.get("versions") or []:
                payload = await self._get(f"/api/{version}")
                for res in resources_from_list("", version, payload):
                    api.add(res)

            groups = await self._get("/apis")
            for group in groups.get("groups") or []:
                preferred = group.get("preferredVersion") or {}
                version = preferred.get("version", "")
                if not version:
                    continue
                payload = await self._get(f"/apis/{group['name']}/{version}")
                for res in resources_from_list(group["name"], version, payload):
                    api.add(res)
        except Exception as exc:
            raise DiscoveryError("kubernetes discovery failed", exc) from exc

        _log.info("discovery_finished", source=SOURCE, resources=len(api))
        return api

    async def list(self, resource: Resource, namespace: str, limit: int, continue_token: str) -> Page:
        query: list[tuple[str, Any]] = [("limit", limit)]
        if continue_token:
            query.append(("continue", continue_token))
        try:
            payload = await self._get(resource_path(resource, namespace), query)
        except Exception as exc:
            raise ListingError(resource.name, exc) from exc
        token = (payload.get("metadata") or {}).get("continue") or ""
        return Page(items=list(payload.get("items") or []), continue_token=token)

    async def map(self, api: API) -> Topology:
        return await Scraper(self, object_from_unstructured, self._config).map(api)
