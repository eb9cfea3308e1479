"""Tests for the BM25 + PageRank ranker (pagesearch/ranker/)."""
from urllib.parse import quote_plus

import pytest

from pagesearch.fetcher import decode_field
from pagesearch.ranker.engine import Ranker, longest_run, make_preview


@pytest.mark.unit
class TestMakePreview:

    def test_starts_at_first_phrase_found(self):
        content = "Intro text. The quick lion jumps over the fence."
        assert make_preview(content, ["lion"], length=10) == "lion jumps"

    def test_match_is_case_insensitive_but_keeps_original_case(self):
        assert make_preview("About LIONS here", ["lions"], length=5) == "LIONS"

    def test_earlier_phrases_take_priority(self):
        content = "lion first, then the big cat"
        assert make_preview(content, ["big cat", "lion"], length=7) == "big cat"

    def test_falls_back_to_start(self):
        assert make_preview("Nothing relevant here", ["zebra"], length=7) == "Nothing"

    def test_empty_content(self):
        assert make_preview("", ["cat"]) == ""


@pytest.mark.unit
class TestLongestRun:

    def test_whole_query_in_order(self):
        assert longest_run(["red", "fox"], ["quick", "red", "fox", "ran"]) == 2

    def test_scattered_words_count_once(self):
        assert longest_run(["red", "fox"], ["red", "apples", "red", "sky", "fox"]) == 1

    def test_reversed_order_is_not_a_run(self):
        assert longest_run(["red", "fox"], ["fox", "red"]) == 1

    def test_best_inner_stretch(self):
        assert longest_run(["big", "red", "fox", "den"], ["the", "red", "fox", "den"]) == 3

    def test_no_overlap(self):
        assert longest_run(["red"], ["blue", "sky"]) == 0
        assert longest_run(["red"], []) == 0


@pytest.mark.unit
class TestRanker:

    def test_missing_index_is_not_ready(self, tmp_path):
        ranker = Ranker(index_path=str(tmp_path / "missing.pkl"))
        assert not ranker.ready
        assert ranker.total_docs == 0

    def test_loads_index(self, make_ranker, corpus_records):
        ranker = make_ranker(corpus_records)
        assert ranker.ready
        assert ranker.total_docs == 3

    def test_returns_only_matching_documents(self, make_ranker, corpus_records):
        results = make_ranker(corpus_records).search("birds", k=10)
        assert [r["url"] for r in results] == ["https://pets.example/birds"]

    def test_title_and_preview_are_percent_encoded(self, make_ranker, corpus_records):
        result = make_ranker(corpus_records).search("birds", k=10)[0]
        assert result["title"] == quote_plus("Bird Watching")
        assert decode_field(result["title"]) == "Bird Watching"
        assert decode_field(result["preview"]) == "Birds are everywhere in spring."

    def test_unknown_and_stopword_only_queries_match_nothing(self, make_ranker, corpus_records):
        ranker = make_ranker(corpus_records)
        assert ranker.search("zebra", k=10) == []
        assert ranker.search("the and of", k=10) == []
        assert ranker.search("   ", k=10) == []

    def test_title_match_ranks_first(self, make_ranker):
        ranker = make_ranker([
            {"url": "u/pets", "title": "Pets", "content": "cat cat cat cat"},
            {"url": "u/care", "title": "Cat Care", "content": "A long page about many animals, one being a cat."},
        ], pagerank_weight=0.0)
        assert [r["url"] for r in ranker.search("cat", k=10)] == ["u/care", "u/pets"]

    def test_higher_term_frequency_ranks_higher(self, make_ranker):
        ranker = make_ranker([
            {"url": "u/once", "title": "Alpha", "content": "lion and some other words here"},
            {"url": "u/many", "title": "Beta", "content": "lion lion lion roars"},
        ], pagerank_weight=0.0)
        assert [r["url"] for r in ranker.search("lion", k=10)] == ["u/many", "u/once"]

    def test_pagerank_breaks_ties(self, make_ranker):
        docs = [
            {"url": "u/alpha", "title": "Alpha", "content": "lions roam", "pagerank": 0.1},
            {"url": "u/beta", "title": "Beta", "content": "lions roam", "pagerank": 0.9},
        ]
        assert [r["url"] for r in make_ranker(docs).search("lions", k=10)] == ["u/beta", "u/alpha"]
        # Without the PageRank boost, index order is kept among equal scores
        assert [r["url"] for r in make_ranker(docs, pagerank_weight=0.0).search("lions", k=10)] == ["u/alpha", "u/beta"]

    def test_repeated_urls_and_titles_are_skipped(self, make_ranker):
        ranker = make_ranker([
            {"url": "u/1", "title": "Lion One", "content": "lion"},
            {"url": "u/1", "title": "Lion Two", "content": "lion lion"},
            {"url": "u/2", "title": "Lion One", "content": "lion"},
            {"url": "u/3", "title": "Lion One", "content": "lion"},
        ], pagerank_weight=0.0)
        results = ranker.search("lion", k=10)
        assert [r["url"] for r in results] == ["u/1", "u/2"]
        assert [decode_field(r["title"]) for r in results] == ["Lion Two", "Lion One"]

    def test_k_limits_results(self, make_ranker):
        docs = [{"url": f"u/{i}", "title": f"Doc {i}", "content": "tiger"} for i in range(8)]
        assert len(make_ranker(docs).search("tiger", k=3)) == 3

    def test_preview_starts_at_query_and_respects_length(self, make_ranker):
        ranker = make_ranker([
            {"url": "u/x", "title": "Savanna", "content": "Long introduction first. Then the lion appears at dusk."},
        ], preview_length=16)
        preview = decode_field(ranker.search("lion", k=1)[0]["preview"])
        assert preview == "lion appears at "

    def test_is_deterministic(self, make_ranker, corpus_records):
        ranker = make_ranker(corpus_records)
        assert ranker.search("cat", k=10) == ranker.search("cat", k=10)

    def test_uninterrupted_phrase_ranks_first(self, make_ranker):
        ranker = make_ranker([
            {"url": "u/scattered", "title": "Colors",
             "content": "red apples and red sky. red roses. the fox slept."},
            {"url": "u/phrase", "title": "Woods", "content": "a red fox ran home"},
        ], pagerank_weight=0.0)
        assert [r["url"] for r in ranker.search("red fox", k=10)] == ["u/phrase", "u/scattered"]

    def test_title_match_respects_word_boundaries(self, make_ranker):
        ranker = make_ranker([
            {"url": "u/catalog", "title": "Catalog", "content": "a cat mention among several other words here"},
            {"url": "u/pets", "title": "Pets", "content": "cat cat cat"},
        ], pagerank_weight=0.0)
        assert [r["url"] for r in ranker.search("cat", k=10)] == ["u/pets", "u/catalog"]
