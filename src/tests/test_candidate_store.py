from __future__ import annotations

import pytest

from src.candidates.store import CandidateStore
from src.candidates.types import CandidateProfile, NotFoundError, QARecord
from src.rag.index_cache import content_hash


def test_lookup_unknown_candidate_raises(store: CandidateStore) -> None:
    with pytest.raises(NotFoundError):
        store.lookup("nobody")


def test_upsert_profile_updates_existing_entry(store: CandidateStore) -> None:
    store.upsert_profile(CandidateProfile(candidate_id="c1", name="Alice", email="a@example.com"))
    store.upsert_profile(CandidateProfile(candidate_id="c1", name="Alice B", email="ab@example.com"))
    assert store.lookup("c1") == CandidateProfile(candidate_id="c1", name="Alice B", email="ab@example.com")


def test_save_resume_returns_previous_hash(store: CandidateStore) -> None:
    assert store.save_resume("c1", text="first", data=b"first", content_type="text/plain", filename="a.txt") is None
    previous = store.save_resume("c1", text="second", data=b"second", content_type=None, filename=None)
    assert previous == content_hash("first")

    stored = store.get_resume("c1")
    assert stored.text == "second"
    assert stored.data == b"second"
    assert stored.content_hash == content_hash("second")


def test_save_resume_recovers_when_another_upload_inserts_first(tmp_path) -> None:
    uri = f"sqlite:///{tmp_path / 'race.db'}"
    store = CandidateStore(uri)
    other = CandidateStore(uri)
    read_hash = store._current_resume_hash
    calls: list[str] = []

    def stale_read(conn, candidate_id: str):
        calls.append(candidate_id)
        if len(calls) == 1:
            other.save_resume(candidate_id, text="other", data=b"other", content_type=None, filename=None)
            return None
        return read_hash(conn, candidate_id)

    store._current_resume_hash = stale_read

    previous = store.save_resume("c1", text="mine", data=b"mine", content_type=None, filename=None)

    assert previous == content_hash("other")
    assert len(calls) == 2
    assert store.get_resume_text("c1") == "mine"


def test_missing_resume_raises(store: CandidateStore) -> None:
    with pytest.raises(NotFoundError):
        store.get_resume_text("c1")


def test_history_preserves_append_order(store: CandidateStore) -> None:
    for idx in range(3):
        store.append("c1", QARecord(question=f"q{idx}", answer=f"a{idx}"))

    history = store.get_history("c1")
    assert [record.question for record in history.records] == ["q0", "q1", "q2"]
    assert all(record.created_at is not None for record in history.records)


def test_history_is_empty_for_unknown_candidate(store: CandidateStore) -> None:
    assert store.get_history("c9").records == ()


def test_list_all_groups_by_first_record(store: CandidateStore) -> None:
    store.append("c2", QARecord(question="q", answer="a"))
    store.append("c1", QARecord(question="q", answer="a"))
    store.append("c2", QARecord(question="q2", answer="a2"))

    histories = store.list_all()
    assert [history.candidate_id for history in histories] == ["c2", "c1"]
    assert len(histories[0].records) == 2


def test_seed_cli_registers_profile(tmp_path, monkeypatch: pytest.MonkeyPatch) -> None:
    from tools.seed_candidates import main

    uri = f"sqlite:///{tmp_path / 'seed.db'}"
    monkeypatch.setattr(
        "sys.argv",
        ["seed_candidates", "c7", "--name", "Grace", "--email", "grace@example.com", "--database-uri", uri],
    )
    main()

    assert CandidateStore(uri).lookup("c7").name == "Grace"
