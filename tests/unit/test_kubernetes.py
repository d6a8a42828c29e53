"""Unit tests for the Kubernetes source: discovery, listing and object conversion."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from kraph.api import API, NS_GLOBAL, Resource
from kraph.errors import DiscoveryError, ListingError
from kraph.models.config import ScraperConfig
from kraph.scraper.kubernetes import (
    KubernetesClient,
    object_from_unstructured,
    resource_path,
    resources_from_list,
)

PODS = Resource(name="pods", kind="Pod", version="v1", namespaced=True, verbs=("list",))
NODES = Resource(name="nodes", kind="Node", version="v1", verbs=("list",))
DEPLOYMENTS = Resource(name="deployments", kind="Deployment", group="apps", version="v1", namespaced=True)

CORE_V1 = {
    "groupVersion": "v1",
    "resources": [
        {
            "name": "pods",
            "singularName": "pod",
            "namespaced": True,
            "kind": "Pod",
            "verbs": ["get", "list"],
            "shortNames": ["po"],
        },
        {"name": "pods/log", "singularName": "", "namespaced": True, "kind": "Pod", "verbs": ["get"]},
        {"name": "nodes", "singularName": "node", "namespaced": False, "kind": "Node", "verbs": ["get", "list"]},
    ],
}

APPS_V1 = {
    "groupVersion": "apps/v1",
    "resources": [
        {
            "name": "deployments",
            "singularName": "deployment",
            "namespaced": True,
            "kind": "Deployment",
            "verbs": ["list"],
        },
        {"name": "bindings", "namespaced": True, "kind": "Binding", "verbs": ["create"]},
        {"name": "deployments/scale", "namespaced": True, "kind": "Scale", "verbs": ["get"]},
    ],
}

DISCOVERY: dict[str, Any] = {
    "/api": {"versions": ["v1"]},
    "/api/v1": CORE_V1,
    "/apis": {
        "groups": [
            {"name": "apps", "preferredVersion": {"groupVersion": "apps/v1", "version": "v1"}},
            {"name": "broken"},
        ]
    },
    "/apis/apps/v1": APPS_V1,
}


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


class TestResources:
    def test_subresources_skipped(self) -> None:
        names = [r.name for r in resources_from_list("", "v1", CORE_V1)]
        assert names == ["pods", "nodes"]

    def test_fields_mapped(self) -> None:
        pods = resources_from_list("", "v1", CORE_V1)[0]
        assert pods.kind == "Pod"
        assert pods.namespaced is True
        assert pods.short_names == ("po",)
        assert pods.singular_name == "pod"
        assert pods.provides("list")

    @pytest.mark.parametrize(
        ("resource", "namespace", "path"),
        [
            (PODS, "", "/api/v1/pods"),
            (PODS, "default", "/api/v1/namespaces/default/pods"),
            (NODES, "default", "/api/v1/nodes"),
            (DEPLOYMENTS, "prod", "/apis/apps/v1/namespaces/prod/deployments"),
        ],
    )
    def test_resource_path(self, resource: Resource, namespace: str, path: str) -> None:
        assert resource_path(resource, namespace) == path


class TestObjectFromUnstructured:
    def test_namespaced_object(self) -> None:
        raw = {
            "metadata": {
                "name": "Web-0",
                "namespace": "Default",
                "uid": "u-pod",
                "creationTimestamp": "2024-01-15T10:30:00Z",
                "labels": {"app": "web"},
            }
        }
        [obj] = object_from_unstructured(PODS, raw)
        assert obj.uid.value == "u-pod"
        assert obj.name == "web-0"
        assert obj.namespace == "default"
        assert obj.kind == "Pod"
        assert obj.metadata == {"created_at": "2024-01-15T10:30:00Z", "labels": {"app": "web"}}

    def test_cluster_scoped_object_is_global(self) -> None:
        [obj] = object_from_unstructured(NODES, {"metadata": {"name": "worker-1", "uid": "u-node"}})
        assert obj.namespace == NS_GLOBAL

    def test_uid_fallback(self) -> None:
        [obj] = object_from_unstructured(NODES, {"metadata": {"name": "worker-1"}})
        assert obj.uid.value == "node-worker-1"

    def test_owner_references_become_links(self) -> None:
        raw = {
            "metadata": {
                "name": "web-0",
                "namespace": "default",
                "uid": "u-pod",
                "ownerReferences": [
                    {"kind": "ReplicaSet", "name": "web", "uid": "u-rs", "controller": True},
                    {"kind": "Thing", "name": "no-uid"},
                ],
            }
        }
        [obj] = object_from_unstructured(PODS, raw)
        [link] = obj.links()
        assert link.to_uid.value == "u-rs"
        assert link.metadata == {"relation": "own", "controller": True}


# ---------------------------------------------------------------------------
# Client
# ---------------------------------------------------------------------------


def _client(responses: dict[str, Any] | None = None, **config: Any) -> tuple[KubernetesClient, MagicMock]:
    api_client = MagicMock()

    async def call_api(path: str, method: str, **kwargs: Any) -> Any:
        return (responses or {})[path]

    api_client.call_api = AsyncMock(side_effect=call_api)
    return KubernetesClient(api_client), api_client


class TestDiscover:
    async def test_discovers_preferred_versions(self) -> None:
        client, _ = _client(DISCOVERY)
        api = await client.discover()
        assert api.source == "kubernetes"
        assert [(r.group, r.name) for r in api.resources()] == [("", "pods"), ("", "nodes"), ("apps", "deployments")]
        assert api.lookup("po")[0].name == "pods"

    async def test_failure_raises_discovery_error(self) -> None:
        client, _ = _client({"/api": {"versions": ["v1"]}})
        with pytest.raises(DiscoveryError) as exc_info:
            await client.discover()
        assert isinstance(exc_info.value.cause, KeyError)


class TestList:
    async def test_first_page(self) -> None:
        listing = {"items": [{"metadata": {"name": "a"}}], "metadata": {"continue": "tok"}}
        client, api_client = _client({"/api/v1/namespaces/default/pods": listing})
        page = await client.list(PODS, "default", 10, "")
        assert page.items == [{"metadata": {"name": "a"}}]
        assert page.continue_token == "tok"
        kwargs = api_client.call_api.call_args.kwargs
        assert kwargs["query_params"] == [("limit", 10)]
        assert kwargs["response_type"] == "object"

    async def test_continuation(self) -> None:
        client, api_client = _client({"/api/v1/pods": {"items": [], "metadata": {}}})
        page = await client.list(PODS, "", 5, "tok")
        assert page.continue_token == ""
        assert api_client.call_api.call_args.kwargs["query_params"] == [("limit", 5), ("continue", "tok")]

    async def test_failure_raises_listing_error(self) -> None:
        client, _ = _client({})
        with pytest.raises(ListingError) as exc_info:
            await client.list(PODS, "", 5, "")
        assert exc_info.value.resource == "pods"


class TestMap:
    async def test_maps_owner_links_symmetrically(self) -> None:
        owner = [{"uid": "u-node"}]
        pod = {"metadata": {"name": "web-0", "namespace": "default", "uid": "u-pod", "ownerReferences": owner}}
        client, _ = _client(
            {
                "/api/v1/pods": {"items": [pod], "metadata": {}},
                "/api/v1/nodes": {"items": [{"metadata": {"name": "worker-1", "uid": "u-node"}}], "metadata": {}},
            }
        )
        api = API("kubernetes")
        api.add(PODS)
        api.add(NODES)

        top = await client.map(api)

        assert len(top) == 2
        assert [lk.to_uid.value for lk in top.object("u-node").links()] == ["u-pod"]

    async def test_namespace_skips_cluster_resources(self) -> None:
        api_client = MagicMock()
        api_client.call_api = AsyncMock(return_value={"items": [], "metadata": {}})
        client = KubernetesClient(api_client, ScraperConfig(namespace="default"))
        api = API("kubernetes")
        api.add(PODS)
        api.add(NODES)

        await client.map(api)

        paths = [c.args[0] for c in api_client.call_api.call_args_list]
        assert paths == ["/api/v1/namespaces/default/pods"]


class TestFromEnvironment:
    async def test_no_configuration_raises_discovery_error(self, monkeypatch: pytest.MonkeyPatch) -> None:
        import kubernetes_asyncio.config as k8s_config

        monkeypatch.setattr(
            k8s_config, "load_incluster_config", MagicMock(side_effect=k8s_config.ConfigException("no sa"))
        )
        monkeypatch.setattr(k8s_config, "load_kube_config", AsyncMock(side_effect=k8s_config.ConfigException("none")))

        with pytest.raises(DiscoveryError, match="no kubernetes configuration found"):
            await KubernetesClient.from_environment()
