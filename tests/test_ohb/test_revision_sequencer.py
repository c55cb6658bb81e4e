"""
Tests for RevisionSequencer.
"""

import pytest

from ohb.application.services import DESCRIPTION_TEMPLATE, RevisionSequencer
from ohb.domain.models import (
    AddAxiomChange,
    CommitChangeRecord,
    ElementChange,
    RemoveAxiomChange,
)

from tests.test_ohb.fakes import ONTOLOGY_O, ONTOLOGY_P, make_axiom, make_metadata


def _records():
    """Newest first, as the walker emits them."""
    return [
        CommitChangeRecord(
            [ElementChange.remove(make_axiom("a"), ONTOLOGY_O), ElementChange.add(make_axiom("p"), ONTOLOGY_P)],
            make_metadata("c3", "carol", "Add P", offset_minutes=20),
        ),
        CommitChangeRecord(
            [ElementChange.add(make_axiom("b"), ONTOLOGY_O)],
            make_metadata("c2", "bob", "Add b", offset_minutes=10),
        ),
        CommitChangeRecord(
            [ElementChange.add(make_axiom("a"), ONTOLOGY_O)],
            make_metadata("c1", "alice", "Initial", offset_minutes=0),
        ),
    ]


class TestSequencing:
    """Ordering and numbering."""

    def test_oldest_first_numbered_from_one(self):
        revisions = RevisionSequencer().sequence(_records())

        assert [r.revision_number for r in revisions] == [1, 2, 3]
        assert [r.author_id for r in revisions] == ["alice", "bob", "carol"]

    def test_ordering_law(self):
        """revision k corresponds to input[n - k]."""
        records = _records()
        revisions = RevisionSequencer().sequence(records)
        n = len(records)

        for revision in revisions:
            record = records[n - revision.revision_number]
            assert revision.timestamp_ms == record.commit_metadata.timestamp_ms
            assert len(revision.changes) == len(record.element_changes)

    def test_change_types_and_order(self):
        latest = RevisionSequencer().sequence(_records())[-1]

        assert latest.changes == (
            RemoveAxiomChange(ontology=ONTOLOGY_O, axiom=make_axiom("a")),
            AddAxiomChange(ontology=ONTOLOGY_P, axiom=make_axiom("p")),
        )

    def test_timestamps_ascending(self):
        revisions = RevisionSequencer().sequence(_records())
        stamps = [r.timestamp_ms for r in revisions]
        assert stamps == sorted(stamps)
        assert stamps[1] - stamps[0] == 10 * 60 * 1000

    def test_input_not_modified(self):
        records = _records()
        snapshot = list(records)

        RevisionSequencer().sequence(records)

        assert records == snapshot

    def test_counter_is_local_to_each_call(self):
        sequencer = RevisionSequencer()
        first = sequencer.sequence(_records())
        second = sequencer.sequence(_records()[:1])

        assert [r.revision_number for r in first] == [1, 2, 3]
        assert [r.revision_number for r in second] == [1]

    def test_empty_input(self):
        assert RevisionSequencer().sequence([]) == []

    def test_none_rejected(self):
        with pytest.raises(ValueError):
            RevisionSequencer().sequence(None)


class TestDescription:
    """Commit description markdown."""

    def test_description_with_repository_url(self):
        revisions = RevisionSequencer().sequence(
            _records(), repository_url="https://github.com/example/pizza.git"
        )

        assert revisions[0].description == (
            "**Commit** [c1](https://github.com/example/pizza/commit/c1):\nInitial\n"
        )

    def test_trailing_slash_stripped(self):
        revisions = RevisionSequencer().sequence(_records(), repository_url="https://github.com/example/pizza/")
        assert "(https://github.com/example/pizza/commit/c3)" in revisions[-1].description

    def test_description_without_url_uses_hash(self):
        revisions = RevisionSequencer().sequence(_records())

        assert revisions[1].description == DESCRIPTION_TEMPLATE.format(
            commit_hash="c2", commit_link="c2", commit_message="Add b"
        )

    def test_multiline_message_preserved(self):
        record = CommitChangeRecord([], make_metadata("c9", message="Subject\n\nBody line"))
        revision = RevisionSequencer().sequence([record])[0]

        assert revision.description.endswith(":\nSubject\n\nBody line\n")
