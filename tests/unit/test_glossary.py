"""Unit tests for keyword glossary lookup, substitution and storage."""

import json
import pytest
from pathlib import Path

from hanasu.glossary import (
    KeywordGlossary,
    InMemoryKeywordStore,
    JsonKeywordStore,
    apply_entries,
    lookup_entries,
)
from hanasu.models.glossary import GlossaryEntry, WILDCARD


def entry(term, replacement, source=WILDCARD, target=WILDCARD, entry_id="k"):
    return GlossaryEntry(id=entry_id, term=term, replacement=replacement,
                         source_lang=source, target_lang=target)


@pytest.mark.unit
class TestApplyEntries:

    def test_whole_word_case_insensitive(self):
        entries = [entry("Acme", "アクメ")]
        assert apply_entries("acme and ACME Acme.", entries) == "アクメ and アクメ アクメ."

    def test_substring_inside_word_is_not_replaced(self):
        entries = [entry("AI", "エーアイ")]
        assert apply_entries("AI is not PAID or AIM", entries) == "エーアイ is not PAID or AIM"

    def test_longest_term_applied_first(self):
        entries = [
            entry("Tokyo", "TK", entry_id="1"),
            entry("Tokyo Tower", "東京タワー", entry_id="2"),
        ]
        assert apply_entries("Visit Tokyo Tower in Tokyo", entries) == "Visit 東京タワー in TK"

    def test_regex_metacharacters_are_literal(self):
        entries = [entry("C++", "シープラスプラス")]
        assert apply_entries("I write C++ daily", entries) == "I write シープラスプラス daily"

    def test_replacement_backslashes_are_literal(self):
        entries = [entry("path", r"C:\new")]
        assert apply_entries("the path", entries) == r"the C:\new"

    def test_empty_term_is_skipped(self):
        assert apply_entries("hello", [entry("", "x")]) == "hello"

    def test_no_entries_returns_text_unchanged(self):
        assert apply_entries("hello world", []) == "hello world"

    def test_reapplying_is_stable_without_overlap(self):
        entries = [
            entry("AI", "エーアイ", entry_id="1"),
            entry("Tokyo", "東京", entry_id="2"),
        ]
        once = apply_entries("AI labs in Tokyo", entries)

        assert once == "エーアイ labs in 東京"
        assert apply_entries(once, entries) == once

    def test_replacement_matching_another_term_changes_on_reapply(self):
        # Known hazard: "ML" expands to another entry's term
        entries = [
            entry("ML", "Machine Learning", entry_id="1"),
            entry("Machine Learning", "機械学習", entry_id="2"),
        ]
        once = apply_entries("I love ML", entries)
        twice = apply_entries(once, entries)

        assert once == "I love Machine Learning"
        assert twice == "I love 機械学習"
        assert apply_entries(twice, entries) == twice


@pytest.mark.unit
class TestLookup:

    def test_exact_pair_and_universal_entries(self):
        entries = [
            entry("a", "A", "en", "ja", entry_id="1"),
            entry("b", "B", entry_id="2"),
            entry("c", "C", "en", "fr", entry_id="3"),
            entry("d", "D", "ja", "en", entry_id="4"),
        ]
        ids = [e.id for e in lookup_entries(entries, "en", "ja")]
        assert ids == ["1", "2"]

    def test_partial_wildcard_is_not_universal(self):
        entries = [entry("a", "A", "en", WILDCARD)]
        assert lookup_entries(entries, "en", "ja") == []


@pytest.mark.unit
class TestKeywordGlossary:

    def test_add_assigns_unique_ids(self, glossary):
        first = glossary.add("Acme", "アクメ")
        second = glossary.add("Widget", "ウィジェット", "en", "ja")

        assert first.id != second.id
        assert first.id.startswith("keyword-")
        assert [e.term for e in glossary.list()] == ["Acme", "Widget"]

    def test_add_rejects_blank_term(self, glossary):
        with pytest.raises(ValueError):
            glossary.add("   ", "x")

    def test_update_and_remove(self, glossary):
        added = glossary.add("Acme", "アクメ")

        updated = glossary.update(added.id, replacement="ACME社")
        assert updated.replacement == "ACME社"
        assert glossary.list()[0].replacement == "ACME社"

        assert glossary.remove(added.id) is True
        assert glossary.remove(added.id) is False
        assert glossary.list() == []

    def test_update_unknown_field_raises(self, glossary):
        added = glossary.add("Acme", "アクメ")
        with pytest.raises(ValueError):
            glossary.update(added.id, color="red")

    def test_update_unknown_id_returns_none(self, glossary):
        assert glossary.update("missing", term="x") is None

    def test_import_entries_assigns_fresh_ids(self, glossary):
        drafts = [entry("Acme", "アクメ", entry_id=""), entry(" ", "skip", entry_id="")]
        added = glossary.import_entries(drafts)

        assert len(added) == 1
        assert added[0].id
        assert glossary.list()[0].term == "Acme"

    def test_lookup_and_apply(self, glossary):
        glossary.add("Acme", "アクメ", "en", "ja")
        glossary.add("Globex", "グロベックス", "en", "fr")

        entries = glossary.lookup("en", "ja")
        assert glossary.apply("Acme meets Globex", entries) == "アクメ meets Globex"

    def test_in_memory_store_returns_copies(self):
        store = InMemoryKeywordStore([entry("Acme", "アクメ")])
        store.load()[0].term = "changed"
        assert store.load()[0].term == "Acme"


@pytest.mark.unit
class TestJsonKeywordStore:

    def test_round_trip(self, temp_data_dir):
        path = Path(temp_data_dir) / "nested" / "keywords.json"
        store = JsonKeywordStore(str(path))
        store.save([entry("東京", "Tokyo", "ja", "en", entry_id="1")])

        loaded = JsonKeywordStore(str(path)).load()
        assert loaded == [entry("東京", "Tokyo", "ja", "en", entry_id="1")]
        assert "東京" in path.read_text(encoding="utf-8")

    def test_missing_file_is_empty(self, temp_data_dir):
        assert JsonKeywordStore(str(Path(temp_data_dir) / "none.json")).load() == []

    def test_corrupt_file_is_empty(self, temp_data_dir):
        path = Path(temp_data_dir) / "keywords.json"
        path.write_text("{not json", encoding="utf-8")
        assert JsonKeywordStore(str(path)).load() == []

    def test_legacy_records_and_invalid_items(self, temp_data_dir):
        path = Path(temp_data_dir) / "keywords.json"
        path.write_text(json.dumps([
            {"id": "1", "term": "Acme", "translation": "アクメ", "sourceLang": "en", "targetLang": "ja"},
            {"term": "no id"},
            "garbage",
        ]), encoding="utf-8")

        loaded = JsonKeywordStore(str(path)).load()
        assert loaded == [entry("Acme", "アクメ", "en", "ja", entry_id="1")]
