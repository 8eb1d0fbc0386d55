"""
Tiered name/alias search package.

This package provides the building blocks behind ``hanami_search.Index``:
- string_pool: Reference-counted string interning
- romaji / normalizer: Case, katakana and romaji normalization with caches
- analyzers: Keyword and bigram tokenizers
- document_store / reverse_index: Document storage and exact-form lookup
- query_engine: Six-tier matching and AND search
- codec: Versioned binary format and legacy migration
"""
