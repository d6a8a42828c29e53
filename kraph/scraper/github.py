"""GitHub starred-repository source.

Every starred repository becomes an object linked to one object per
topic and one for its primary language, so repositories sharing a topic
or a language end up connected through it.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

import httpx

from kraph.api import API, NS_GLOBAL, AddOptions, LinkOptions, Object, Resource, Topology
from kraph.errors import ListingError, ResourceNotFoundError
from kraph.models.config import GitHubConfig, ScraperConfig
from kraph.observability.logging import get_logger
from kraph.query import Query
from kraph.scraper.base import Page
from kraph.scraper.pipeline import Scraper
from kraph.uid import UID

_log = get_logger("scraper.github")

SOURCE = "github"
STAR_MEDIA_TYPE = "application/vnd.github.v3.star+json"

REPO = Resource(name="repos", kind="Repo", group="starred", version="v3", namespaced=True, singular_name="repo")
TOPIC = Resource(name="topics", kind="Topic", group="starred", version="v3", singular_name="topic")
LANG = Resource(name="langs", kind="Lang", group="starred", version="v3", singular_name="lang")


def objects_from_star(repo_res: Resource, raw: Mapping[str, Any]) -> list[Object]:
    """Convert one starred-repository item into its repo, topic and language objects.

    Accepts both the ``star+json`` envelope (``{"starred_at", "repo"}``)
    and a bare repository.
    """
    repo = raw.get("repo", raw)
    owner = (repo.get("owner") or {}).get("login", "")
    name = repo.get("name", "")
    uid = repo.get("node_id") or f"repo/{owner}/{name}"

    metadata: dict[str, Any] = {}
    if raw.get("starred_at"):
        metadata["starred_at"] = str(raw["starred_at"])
    for key in ("git_url", "html_url", "description"):
        if repo.get(key):
            metadata[key] = str(repo[key])

    obj = Object(uid=UID(uid), name=name, namespace=owner.lower() or NS_GLOBAL, resource=repo_res, metadata=metadata)
    related: list[Object] = []

    for topic in repo.get("topics") or []:
        related.append(_related(TOPIC, f"topic/{topic}", topic, obj, "topic"))
    if repo.get("language"):
        related.append(_related(LANG, f"lang/{repo['language']}", repo["language"], obj, "lang"))

    return [*related, obj]


def _related(resource: Resource, uid: str, name: str, repo: Object, relation: str) -> Object:
    obj = Object(uid=UID(uid), name=name, namespace=NS_GLOBAL, resource=resource)
    link = repo.link(obj.uid, LinkOptions(metadata={"relation": relation}))
    obj.link(repo.uid, LinkOptions(uid=link.uid, metadata={"relation": relation}))
    return obj


class GitHubStarsClient:
    """Maps the repositories starred by a GitHub user.

    An empty ``user`` lists the starred repositories of the token owner.
    """

    def __init__(self, http: httpx.AsyncClient, config: GitHubConfig | None = None) -> None:
        self._http = http
        self._config = config or GitHubConfig()

    @classmethod
    def from_config(cls, config: GitHubConfig, timeout: float = 10.0) -> GitHubStarsClient:
        headers = {"Accept": STAR_MEDIA_TYPE}
        if config.token:
            headers["Authorization"] = f"Bearer {config.token}"
        http = httpx.AsyncClient(base_url=config.base_url, headers=headers, timeout=timeout)
        return cls(http, config)

    async def close(self) -> None:
        await self._http.aclose()

    async def discover(self) -> API:
        api = API(SOURCE)
        for res in (REPO, TOPIC, LANG):
            api.add(res)
        _log.info("discovery_finished", source=SOURCE, resources=len(api))
        return api

    async def list(self, resource: Resource, namespace: str, limit: int, continue_token: str) -> Page:
        if continue_token:
            url, params = continue_token, None
        else:
            url = f"/users/{self._config.user}/starred" if self._config.user else "/user/starred"
            params = {"per_page": limit}

        try:
            response = await self._http.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPError as exc:
            raise ListingError(resource.name, exc) from exc

        items = response.json()
        token = response.links.get("next", {}).get("url", "")
        return Page(items=list(items), continue_token=token)

    async def map(self, api: API) -> Topology:
        """List the starred repositories; topics and languages are derived from them."""
        found = api.get(Query().name(REPO.name).group(REPO.group).version(REPO.version))
        if not found:
            raise ResourceNotFoundError(f"{REPO.name}/{REPO.group}/{REPO.version}")

        scraper = Scraper(
            self,
            objects_from_star,
            ScraperConfig(page_size=self._config.paging, workers=1),
            AddOptions(merge_links=True),
        )
        return await scraper.map(api, found[:1])
