"""
Tests for composing and publishing journal entries.
"""
from datetime import datetime, timezone
from unittest.mock import Mock

import pytest

from bua.core.config import Settings
from bua.models.evidence import SingleUrl, UrlList
from bua.models.schemas import CaseStub, JournalEntryCreate
from bua.services import journal_service
from bua.services.journal_service import (
    DuplicateJournalContent,
    GenerationErrorKind,
    NoEligibleCases,
    NoNewCandidates,
    compose_journal_entry,
    generate_journal_entry,
    journal_title,
)


def _summarizer(text="Fresh summary about lockers and fountains."):
    return Mock(return_value=text)


# ── compose_journal_entry ────────────────────────────────────

class TestCompose:

    def test_first_entry(self, pool):
        summarize = _summarizer()
        entry = compose_journal_entry(pool, [], summarize, now=datetime(2026, 10, 19, tzinfo=timezone.utc))
        assert entry.related_case_ids == ["C5", "C4"]
        assert entry.content == "Fresh summary about lockers and fountains."
        assert entry.title == "News Update - 19 Oct 2026"
        summarize.assert_called_once()

    def test_related_ids_match_summarized_cases(self, pool, make_entry):
        summarize = _summarizer()
        entry = compose_journal_entry(pool, [make_entry(["C5", "C4"])], summarize)
        stubs = summarize.call_args.args[0]
        assert [s.id for s in stubs] == entry.related_case_ids == ["C3", "C2"]

    def test_summarizer_receives_only_anonymised_fields(self, make_case):
        case = make_case("C1", evidence=[SingleUrl(url="https://x/evidence/uid/photo.jpg")])
        summarize = _summarizer()
        compose_journal_entry([case], [], summarize)
        stubs = summarize.call_args.args[0]
        assert all(isinstance(s, CaseStub) for s in stubs)
        assert set(stubs[0].model_dump()) == {"id", "category", "redacted_description"}
        assert "photo.jpg" not in repr(stubs)

    def test_empty_pool_never_calls_summarizer(self):
        summarize = _summarizer()
        with pytest.raises(NoEligibleCases) as exc:
            compose_journal_entry([], [], summarize)
        assert exc.value.kind == GenerationErrorKind.no_eligible_cases
        summarize.assert_not_called()

    def test_empty_selection_raises_no_new_candidates(self, pool, monkeypatch):
        monkeypatch.setattr(journal_service, "select_candidates", lambda *a: [])
        summarize = _summarizer()
        with pytest.raises(NoNewCandidates):
            compose_journal_entry(pool, [], summarize)
        summarize.assert_not_called()

    def test_duplicate_text_for_same_cases_rejected(self, make_case, make_entry):
        previous = "Lockers in the west wing keep breaking."
        summarize = _summarizer("lockers in the WEST wing keep breaking!")
        with pytest.raises(DuplicateJournalContent) as exc:
            compose_journal_entry([make_case("C1")], [make_entry(["C1"], content=previous)], summarize)
        assert exc.value.similarity == 1.0
        assert exc.value.kind == GenerationErrorKind.duplicate_journal_content
        summarize.assert_called_once()

    def test_reworded_text_for_same_cases_accepted(self, make_case, make_entry):
        previous = "Lockers in the west wing keep breaking."
        summarize = _summarizer("Maintenance requests about storage remain open this week.")
        entry = compose_journal_entry([make_case("C1")], [make_entry(["C1"], content=previous)], summarize)
        assert entry.related_case_ids == ["C1"]

    def test_identical_text_for_different_cases_accepted(self, pool, make_entry):
        text = "Lockers in the west wing keep breaking."
        entry = compose_journal_entry(pool, [make_entry(["C5", "C4"], content=text)], _summarizer(text))
        assert entry.related_case_ids == ["C3", "C2"]
        assert entry.content == text

    def test_guard_compares_against_newest_entry_only(self, make_case, make_entry):
        text = "Same words again."
        recent = [
            make_entry(["C9"], content="Other text", entry_id="J2"),
            make_entry(["C1"], content=text, entry_id="J1"),
        ]
        entry = compose_journal_entry([make_case("C1")], recent, _summarizer(text))
        assert entry.related_case_ids == ["C1"]

    def test_threshold_is_configurable(self, make_case, make_entry):
        recent = [make_entry(["C1"], content="a b c")]
        with pytest.raises(DuplicateJournalContent):
            compose_journal_entry([make_case("C1")], recent, _summarizer("b c d"), similarity_threshold=0.5)

    def test_evidence_summary_has_no_urls(self, make_case):
        cases = [
            make_case("C2", evidence=[UrlList(urls=["a.pdf", "b.pdf"])]),
            make_case("C1", age=1, evidence=[SingleUrl(url="https://x/y/photo.heic")]),
        ]
        entry = compose_journal_entry(cases, [], _summarizer())
        summary = {e.case_id: (e.evidence_count, e.evidence_types) for e in entry.evidence_summary}
        assert summary == {"C2": (2, ["pdf"]), "C1": (1, ["image"])}
        assert "heic" not in entry.model_dump_json()

    def test_summarizer_errors_propagate(self, pool):
        summarize = Mock(side_effect=RuntimeError("model down"))
        with pytest.raises(RuntimeError, match="model down"):
            compose_journal_entry(pool, [], summarize)


def test_journal_title_is_date_stamped():
    assert journal_title(datetime(2026, 1, 5, tzinfo=timezone.utc)) == "News Update - 05 Jan 2026"


# ── generate_journal_entry ───────────────────────────────────

class TestGenerate:

    @pytest.fixture
    def repos(self, monkeypatch, pool):
        cases = Mock()
        cases.list_resolved_cases.return_value = pool
        journal = Mock()
        journal.list_recent_entries.return_value = []
        journal.add_entry.return_value = "new-entry"
        monkeypatch.setattr(journal_service, "cases_repo", cases)
        monkeypatch.setattr(journal_service, "journal_repo", journal)
        return cases, journal

    def test_publishes_exactly_one_entry(self, repos):
        cases, journal = repos
        cfg = Settings(SECRET_KEY="x", JOURNAL_RECENT_WINDOW=3, JOURNAL_CASE_FETCH_LIMIT=10)
        entry_id, entry = generate_journal_entry(_summarizer(), cfg)

        assert entry_id == "new-entry"
        journal.list_recent_entries.assert_called_once_with(3)
        cases.list_resolved_cases.assert_called_once_with(10)
        journal.add_entry.assert_called_once()
        saved = journal.add_entry.call_args.args[0]
        assert isinstance(saved, JournalEntryCreate)
        assert saved.related_case_ids == ["C5", "C4"]

    def test_max_cases_from_settings(self, repos):
        cfg = Settings(SECRET_KEY="x", JOURNAL_MAX_CASES=3)
        _, entry = generate_journal_entry(_summarizer(), cfg)
        assert entry.related_case_ids == ["C5", "C4", "C3"]

    def test_no_cases_writes_nothing(self, repos):
        cases, journal = repos
        cases.list_resolved_cases.return_value = []
        with pytest.raises(NoEligibleCases):
            generate_journal_entry(_summarizer(), Settings(SECRET_KEY="x"))
        journal.add_entry.assert_not_called()

    def test_duplicate_writes_nothing(self, repos, make_case, make_entry):
        cases, journal = repos
        cases.list_resolved_cases.return_value = [make_case("C1")]
        journal.list_recent_entries.return_value = [make_entry(["C1"], content="Same text.")]
        with pytest.raises(DuplicateJournalContent):
            generate_journal_entry(_summarizer("same TEXT"), Settings(SECRET_KEY="x"))
        journal.add_entry.assert_not_called()

    def test_summarizer_failure_writes_nothing(self, repos):
        _, journal = repos
        with pytest.raises(RuntimeError):
            generate_journal_entry(Mock(side_effect=RuntimeError("boom")), Settings(SECRET_KEY="x"))
        journal.add_entry.assert_not_called()
