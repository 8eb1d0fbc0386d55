"""Shared test fixtures and configuration."""

import os

import pytest


# Complete test environment that overrides every configurable value
TEST_ENV = {
    "HANAMI_SEARCH_DEFAULT_LIMIT": "10",
    "HANAMI_SEARCH_MAX_TRANSLITERATION_LENGTH": "50",
    "HANAMI_SEARCH_LOG_LEVEL": "info",
    "HANAMI_SEARCH_LOG_JSON": "true",
}


# Set environment variables immediately when conftest.py is loaded
for key, value in TEST_ENV.items():
    os.environ[key] = value

# Now we can safely import config-dependent modules
from hanami_search import Index
from hanami_search.config import get_settings


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Pin test settings and drop the cached Settings instance around each test."""
    for key, value in TEST_ENV.items():
        monkeypatch.setenv(key, value)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def index():
    """Empty index built from the pinned test settings."""
    return Index()


@pytest.fixture
def emoji_documents():
    """Small document set mixing English names, kanji names and kana aliases."""
    return [
        {"name": "smile", "aliases": ["happy", "joy"]},
        {"name": "笑顔", "aliases": ["えがお", "スマイル"]},
        {"name": "cat", "aliases": ["ねこ", "kitty"]},
        {"name": "sushi", "aliases": ["すし", "寿司"]},
    ]


@pytest.fixture
def emoji_index(index, emoji_documents):
    index.add_documents(emoji_documents)
    return index
