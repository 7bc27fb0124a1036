"""Crawler package: fetch, extract, resolve links, orchestrate imports."""

from docindex.crawler.errors import (
    CrawlError,
    FetchFailure,
    ImportCancelled,
    InvalidSeed,
    ParsingError,
    RunInProgress,
    SitemapNotFound,
)
from docindex.crawler.extractor import extract
from docindex.crawler.links import links, parse_sitemap
from docindex.crawler.frontier import Frontier
from docindex.crawler.fetcher import FetchResponse, Fetcher, HttpxFetcher
from docindex.crawler.models import ImportConfig, ImportMode, Page, RunReport, RunStatus
from docindex.crawler.orchestrator import ImportOrchestrator

__all__ = [
    "CrawlError",
    "FetchFailure",
    "ImportCancelled",
    "InvalidSeed",
    "ParsingError",
    "RunInProgress",
    "SitemapNotFound",
    "extract",
    "links",
    "parse_sitemap",
    "Frontier",
    "FetchResponse",
    "Fetcher",
    "HttpxFetcher",
    "ImportConfig",
    "ImportMode",
    "Page",
    "RunReport",
    "RunStatus",
    "ImportOrchestrator",
]
