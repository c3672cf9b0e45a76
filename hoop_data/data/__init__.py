"""Upstream scraping and local storage."""
