"""API sources and the concurrent mapping pipeline."""

from kraph.scraper.base import Client, Lister, ObjectFactory, Page
from kraph.scraper.pipeline import Scraper

__all__ = ["Client", "Lister", "ObjectFactory", "Page", "Scraper"]
