"""Scraper Module - Scrape provider interface and the Apify implementation."""
from core.scraper.interfaces import ScrapeBatch, ScrapeError, ScrapeProvider, ScraperConfigurationError
from core.scraper.apify_client import ApifyClient

__all__ = ['ScrapeBatch', 'ScrapeError', 'ScrapeProvider', 'ScraperConfigurationError', 'ApifyClient']
