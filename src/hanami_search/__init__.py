"""hanami-search: embeddable name/alias search with cross-script matching."""

from hanami_search.config import Settings, get_settings
from hanami_search.errors import CorruptDataError, HanamiSearchError, MalformedInputError, UnsupportedVersionError
from hanami_search.index import Index
from hanami_search.search.models import Document, MatchTier


__all__ = [
    "CorruptDataError",
    "Document",
    "HanamiSearchError",
    "Index",
    "MalformedInputError",
    "MatchTier",
    "Settings",
    "UnsupportedVersionError",
    "get_settings",
]
