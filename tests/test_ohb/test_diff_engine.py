"""
Tests for AxiomSetDiffer and SnapshotMatcher.

Covers diff symmetry, idempotence, genesis diffs and matcher completeness.
"""

import pytest

from ohb.application.services import AxiomSetDiffer, SnapshotMatcher
from ohb.domain.models import ChangeOperation, DocumentIdentity, DocumentSnapshot

from tests.test_ohb.fakes import ONTOLOGY_O, ONTOLOGY_P, make_axiom, make_snapshot


def _ops(changes):
    return [(c.operation, c.axiom, c.owner) for c in changes]


class TestAxiomSetDiffer:
    """Set difference between two axiom sets of one ontology."""

    def test_added_and_removed(self):
        a, b, c = make_axiom("A"), make_axiom("B"), make_axiom("C")
        changes = AxiomSetDiffer().diff({a, b}, {b, c}, ONTOLOGY_O)

        assert _ops(changes) == [
            (ChangeOperation.ADD, a, ONTOLOGY_O),
            (ChangeOperation.REMOVE, c, ONTOLOGY_O),
        ]

    def test_additions_precede_removals(self):
        newer = {make_axiom("Z1"), make_axiom("Z2")}
        older = {make_axiom("A1"), make_axiom("A2")}
        changes = AxiomSetDiffer().diff(newer, older, ONTOLOGY_O)

        operations = [c.operation for c in changes]
        assert operations == [ChangeOperation.ADD] * 2 + [ChangeOperation.REMOVE] * 2

    def test_identical_sets_yield_nothing(self):
        axioms = {make_axiom("A"), make_axiom("B")}
        assert AxiomSetDiffer().diff(axioms, set(axioms), ONTOLOGY_O) == []

    def test_genesis_diff_adds_everything(self):
        axioms = {make_axiom("A"), make_axiom("B")}
        changes = AxiomSetDiffer().diff(axioms, set(), ONTOLOGY_O)

        assert len(changes) == 2
        assert all(c.is_addition for c in changes)
        assert {c.axiom for c in changes} == axioms

    def test_symmetry(self):
        """Swapping arguments swaps ADD and REMOVE."""
        newer = {make_axiom("A"), make_axiom("B")}
        older = {make_axiom("B"), make_axiom("C")}
        differ = AxiomSetDiffer()

        forward = differ.diff(newer, older, ONTOLOGY_O)
        backward = differ.diff(older, newer, ONTOLOGY_O)

        forward_adds = {c.axiom for c in forward if c.is_addition}
        forward_removes = {c.axiom for c in forward if not c.is_addition}
        assert forward_adds == {c.axiom for c in backward if not c.is_addition}
        assert forward_removes == {c.axiom for c in backward if c.is_addition}

    def test_owner_recorded_on_every_change(self):
        changes = AxiomSetDiffer().diff({make_axiom("A")}, {make_axiom("B")}, ONTOLOGY_P)
        assert all(c.owner == ONTOLOGY_P for c in changes)

    @pytest.mark.parametrize("newer,older,owner", [
        (None, set(), ONTOLOGY_O),
        (set(), None, ONTOLOGY_O),
        (set(), set(), None),
    ])
    def test_none_arguments_rejected(self, newer, older, owner):
        with pytest.raises(ValueError):
            AxiomSetDiffer().diff(newer, older, owner)


class TestSnapshotMatcher:
    """Pairing snapshots by identity across two commits."""

    def test_idempotent_for_identical_lists(self):
        snapshots = [make_snapshot(ONTOLOGY_O, "a", "b"), make_snapshot(ONTOLOGY_P, "p")]
        assert SnapshotMatcher().match(snapshots, list(snapshots)) == []

    def test_both_empty(self):
        assert SnapshotMatcher().match([], []) == []

    def test_matched_ontologies_are_diffed(self):
        changes = SnapshotMatcher().match(
            [make_snapshot(ONTOLOGY_O, "a", "b")],
            [make_snapshot(ONTOLOGY_O, "a")],
        )
        assert _ops(changes) == [(ChangeOperation.ADD, make_axiom("b"), ONTOLOGY_O)]

    def test_completeness(self):
        """Newer [O{a}, P{p}] vs older [O{a}, Q{q}]: ADD p in P, REMOVE q in Q."""
        ontology_q = DocumentIdentity("http://example.org/Q")
        changes = SnapshotMatcher().match(
            [make_snapshot(ONTOLOGY_O, "a"), make_snapshot(ONTOLOGY_P, "p")],
            [make_snapshot(ONTOLOGY_O, "a"), make_snapshot(ontology_q, "q")],
        )

        assert _ops(changes) == [
            (ChangeOperation.ADD, make_axiom("p"), ONTOLOGY_P),
            (ChangeOperation.REMOVE, make_axiom("q"), ontology_q),
        ]

    def test_genesis_against_empty_list(self):
        changes = SnapshotMatcher().match(
            [make_snapshot(ONTOLOGY_O, "a"), make_snapshot(ONTOLOGY_P, "p")], []
        )
        assert {(c.axiom, c.owner) for c in changes} == {
            (make_axiom("a"), ONTOLOGY_O),
            (make_axiom("p"), ONTOLOGY_P),
        }
        assert all(c.is_addition for c in changes)

    def test_removed_ontology_only_removes(self):
        changes = SnapshotMatcher().match([], [make_snapshot(ONTOLOGY_P, "p", "q")])
        assert len(changes) == 2
        assert all(not c.is_addition and c.owner == ONTOLOGY_P for c in changes)

    def test_version_iri_is_part_of_identity(self):
        """A version bump is a removed ontology plus an added one."""
        v1 = DocumentIdentity("http://example.org/O", "http://example.org/O/1.0")
        v2 = DocumentIdentity("http://example.org/O", "http://example.org/O/2.0")
        changes = SnapshotMatcher().match([make_snapshot(v2, "a")], [make_snapshot(v1, "a")])

        assert _ops(changes) == [
            (ChangeOperation.ADD, make_axiom("a"), v2),
            (ChangeOperation.REMOVE, make_axiom("a"), v1),
        ]

    def test_anonymous_ontologies_match_each_other(self):
        changes = SnapshotMatcher().match(
            [make_snapshot(DocumentIdentity(), "a", "b")],
            [make_snapshot(DocumentIdentity(), "a")],
        )
        assert _ops(changes) == [(ChangeOperation.ADD, make_axiom("b"), DocumentIdentity())]

    def test_owner_always_from_inputs(self):
        newer = [make_snapshot(ONTOLOGY_O, "a"), make_snapshot(ONTOLOGY_P, "p")]
        older = [make_snapshot(ONTOLOGY_O, "b")]
        identities = {s.identity for s in newer + older}
        assert all(c.owner in identities for c in SnapshotMatcher().match(newer, older))

    def test_empty_snapshot_matches_by_identity(self):
        """An ontology that lost all its axioms is diffed, not treated as removed twice."""
        changes = SnapshotMatcher().match(
            [DocumentSnapshot(ONTOLOGY_O)],
            [make_snapshot(ONTOLOGY_O, "a")],
        )
        assert _ops(changes) == [(ChangeOperation.REMOVE, make_axiom("a"), ONTOLOGY_O)]

    def test_none_lists_rejected(self):
        with pytest.raises(ValueError):
            SnapshotMatcher().match(None, [])
