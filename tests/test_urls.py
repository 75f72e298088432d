"""Tests for URL construction."""

from listings_mcp.api.urls import LISTINGS_PATH, listing_path, resolve_url
from listings_mcp.config import ListingsConfig


class TestResolveUrl:
    def test_production_uses_base_url(self):
        config = ListingsConfig(base_url="https://app.example.com/")
        assert resolve_url("/api/listings", config) == "https://app.example.com/api/listings"

    def test_development_uses_dev_api(self):
        config = ListingsConfig(environment="development", dev_api_url="https://dev.example.com")
        assert resolve_url("/api/login", config) == "https://dev.example.com/api/login"

    def test_dev_alias(self):
        config = ListingsConfig(environment="dev", dev_api_url="https://dev.example.com")
        assert resolve_url("/logout", config) == "https://dev.example.com/logout"

    def test_absolute_url_passthrough(self):
        config = ListingsConfig(environment="development")
        url = "https://elsewhere.example.com/api/listings"
        assert resolve_url(url, config) == url

    def test_missing_leading_slash(self):
        config = ListingsConfig(base_url="http://host")
        assert resolve_url("api/listings", config) == "http://host/api/listings"


def test_listing_path():
    assert listing_path("42") == f"{LISTINGS_PATH}/42"
