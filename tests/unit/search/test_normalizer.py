"""Unit tests for the memoizing normalizer."""

import pytest

from hanami_search.search.normalizer import Normalizer
from hanami_search.search.romaji import DEFAULT_ROMAJI_TABLE
from hanami_search.search.string_pool import StringPool


@pytest.mark.unit
class TestTransforms:
    """Each transform is correct and memoized per source string."""

    def test_lowercase_and_hiragana(self):
        normalizer = Normalizer()

        assert normalizer.lowercase("SMILE") == "smile"
        assert normalizer.hiragana("エガオ") == "えがお"
        assert normalizer.hiragana("スマイル") == "すまいる"
        assert normalizer.hiragana("漢字abc") == "漢字abc"

    def test_romaji_to_hiragana(self):
        assert Normalizer().romaji_to_hiragana("egao") == "えがお"

    def test_cache_reuse_counts_hits(self):
        normalizer = Normalizer()

        first = normalizer.lowercase("Egao")
        second = normalizer.lowercase("Egao")
        info = normalizer.cache_info()

        assert first is second
        assert info.lowercase == 1
        assert info.hits == 1
        assert info.misses == 1

    def test_cached_values_live_in_pool(self):
        pool = StringPool()
        normalizer = Normalizer(pool)

        value = normalizer.lowercase("JOY")

        assert pool.intern("joy") is value
        assert pool.refcount("joy") == 2

    def test_instances_do_not_share_caches(self):
        first = Normalizer()
        second = Normalizer()

        first.query_forms("egao")

        assert first.cache_info().size > 0
        assert second.cache_info().size == 0

    def test_custom_table_is_used(self):
        normalizer = Normalizer(table=DEFAULT_ROMAJI_TABLE.extended({"wo": "お"}))

        assert normalizer.romaji_to_hiragana("wo") == "お"


@pytest.mark.unit
class TestCandidateForms:
    """Query and document form sets."""

    def test_query_forms_order_and_dedup(self):
        normalizer = Normalizer()

        assert normalizer.query_forms("Egao") == ("Egao", "egao", "えがお")
        assert normalizer.query_forms("えがお") == ("えがお",)
        assert normalizer.query_forms("エガオ") == ("エガオ", "えがお")

    def test_empty_query_has_no_forms(self):
        assert Normalizer().query_forms("") == ()

    def test_long_query_skips_transliteration(self):
        normalizer = Normalizer(max_transliteration_length=3)

        assert normalizer.query_forms("egao") == ("egao",)
        assert normalizer.query_forms("ego") == ("ego", "えご")

    def test_document_forms_skip_transliteration(self):
        normalizer = Normalizer()

        assert normalizer.document_forms("Neko") == ("neko",)
        assert normalizer.document_forms("スマイル") == ("スマイル", "すまいる")
        assert normalizer.document_forms("笑顔") == ("笑顔",)

    def test_transliterated_forms_ascii_only(self):
        normalizer = Normalizer()

        assert normalizer.transliterated_forms("Neko") == ("ねこ",)
        assert normalizer.transliterated_forms("スマイル") == ()
        assert normalizer.transliterated_forms("笑顔") == ()
        assert normalizer.transliterated_forms("") == ()


@pytest.mark.unit
class TestForget:
    """Dropping cached transforms returns their pool references."""

    def test_forget_releases_chain(self):
        pool = StringPool()
        normalizer = Normalizer(pool)
        normalizer.document_forms("Neko")
        normalizer.transliterated_forms("Neko")

        normalizer.forget("Neko")

        assert normalizer.cache_info().size == 0
        assert len(pool) == 0

    def test_forget_unknown_is_noop(self):
        normalizer = Normalizer()
        normalizer.forget("never-seen")

        assert normalizer.cache_info().size == 0

    def test_clear_resets_counters(self):
        pool = StringPool()
        normalizer = Normalizer(pool)
        normalizer.query_forms("sushi")
        normalizer.query_forms("sushi")

        normalizer.clear()
        info = normalizer.cache_info()

        assert info.size == 0
        assert info.hits == 0
        assert info.misses == 0
        assert len(pool) == 0
