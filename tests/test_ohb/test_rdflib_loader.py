"""
Tests for RdflibDocumentLoader.

Ontologies are written as small Turtle / RDF/XML files under tmp_path.
"""

import pytest

from ohb.application.services import SnapshotMatcher
from ohb.domain.exceptions import DocumentLoadError
from ohb.domain.models import ChangeOperation, DocumentIdentity
from ohb.infrastructure.ontology import RdflibDocumentLoader


PREFIXES = """\
@prefix owl: <http://www.w3.org/2002/07/owl#> .
@prefix rdf: <http://www.w3.org/1999/02/22-rdf-syntax-ns#> .
@prefix rdfs: <http://www.w3.org/2000/01/rdf-schema#> .
@prefix ex: <http://example.org/pizza#> .
"""

PIZZA = PREFIXES + """
<http://example.org/pizza> a owl:Ontology ;
    rdfs:label "Pizza ontology" ;
    owl:versionIRI <http://example.org/pizza/1.0> .

ex:Pizza a owl:Class .
ex:Margherita a owl:Class ;
    rdfs:subClassOf ex:Pizza .
"""

BASE = PREFIXES + """
<http://example.org/base> a owl:Ontology .
ex:Food a owl:Class .
"""


def _write(directory, name, content):
    path = directory / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path


def _importing(*iris):
    imports = "".join(f" ;\n    owl:imports <{iri}>" for iri in iris)
    return PREFIXES + f"\n<http://example.org/pizza> a owl:Ontology{imports} .\nex:Pizza a owl:Class .\n"


class TestRootDocument:
    """Parsing a single ontology document."""

    def test_identity(self, tmp_path):
        snapshot = RdflibDocumentLoader().load_without_imports(_write(tmp_path, "pizza.ttl", PIZZA))[0]

        assert snapshot.identity == DocumentIdentity(
            "http://example.org/pizza", "http://example.org/pizza/1.0"
        )

    def test_header_triples_excluded(self, tmp_path):
        snapshot = RdflibDocumentLoader().load_without_imports(_write(tmp_path, "pizza.ttl", PIZZA))[0]

        assert len(snapshot.axioms) == 3
        assert all("<http://example.org/pizza>" != a.subject for a in snapshot.axioms)

    def test_axioms_in_ntriples_form(self, tmp_path):
        snapshot = RdflibDocumentLoader().load_without_imports(_write(tmp_path, "pizza.ttl", PIZZA))[0]

        subclass = [a for a in snapshot.axioms if a.predicate.endswith("#subClassOf>")]
        assert len(subclass) == 1
        assert subclass[0].subject == "<http://example.org/pizza#Margherita>"
        assert subclass[0].object == "<http://example.org/pizza#Pizza>"

    def test_anonymous_ontology(self, tmp_path):
        path = _write(tmp_path, "anon.ttl", PREFIXES + "ex:Pizza a owl:Class .\n")

        snapshot = RdflibDocumentLoader().load_without_imports(path)[0]

        assert snapshot.identity.is_anonymous
        assert len(snapshot.axioms) == 1

    def test_rdf_xml(self, tmp_path):
        path = _write(tmp_path, "pizza.owl", """<?xml version="1.0"?>
<rdf:RDF xmlns:rdf="http://www.w3.org/1999/02/22-rdf-syntax-ns#"
         xmlns:owl="http://www.w3.org/2002/07/owl#">
  <owl:Ontology rdf:about="http://example.org/pizza"/>
  <owl:Class rdf:about="http://example.org/pizza#Pizza"/>
</rdf:RDF>
""")

        snapshot = RdflibDocumentLoader().load_without_imports(path)[0]

        assert snapshot.identity.ontology_iri == "http://example.org/pizza"
        assert len(snapshot.axioms) == 1

    def test_blank_node_labels_do_not_matter(self, tmp_path):
        """Same structure with different blank node labels yields equal axioms."""
        template = PREFIXES + """
ex:Margherita rdfs:subClassOf _:{label} .
_:{label} a owl:Restriction ;
    owl:onProperty ex:hasTopping ;
    owl:someValuesFrom ex:Mozzarella .
"""
        first = _write(tmp_path, "one.ttl", template.format(label="r1"))
        second = _write(tmp_path, "two.ttl", template.format(label="xyz"))
        loader = RdflibDocumentLoader()

        assert loader.load_without_imports(first)[0].axioms == loader.load_without_imports(second)[0].axioms

    def test_missing_file(self, tmp_path):
        with pytest.raises(DocumentLoadError):
            RdflibDocumentLoader().load_with_imports(tmp_path / "missing.ttl")

    def test_unparsable_file(self, tmp_path):
        path = _write(tmp_path, "broken.ttl", "this is not turtle {{{")

        with pytest.raises(DocumentLoadError):
            RdflibDocumentLoader().load_with_imports(path)

    def test_empty_snapshot(self):
        snapshot = RdflibDocumentLoader().create_empty_snapshot()

        assert snapshot.identity.is_anonymous
        assert len(snapshot) == 0


RESTRICTIONS = PREFIXES + """
ex:Margherita rdfs:subClassOf [ a owl:Restriction ;
    owl:onProperty ex:hasTopping ;
    owl:someValuesFrom ex:Mozzarella ] .
ex:Napoletana rdfs:subClassOf [ a owl:Restriction ;
    owl:onProperty ex:hasTopping ;
    owl:someValuesFrom ex:Anchovy ] .
"""

RESTRICTIONS_EXTENDED = RESTRICTIONS + """
ex:Funghi rdfs:subClassOf [ a owl:Restriction ;
    owl:onProperty ex:hasTopping ;
    owl:someValuesFrom ex:Mushroom ] .
"""


class TestAnonymousStructures:
    """Blank nodes are rendered inside the statement that owns them."""

    def test_restriction_inlined_into_owning_axiom(self, tmp_path):
        path = _write(tmp_path, "pizza.ttl", PREFIXES + """
ex:Margherita rdfs:subClassOf [ a owl:Restriction ;
    owl:onProperty ex:hasTopping ;
    owl:someValuesFrom ex:Mozzarella ] .
""")

        snapshot = RdflibDocumentLoader().load_without_imports(path)[0]

        assert len(snapshot.axioms) == 1
        axiom = next(iter(snapshot.axioms))
        assert axiom.subject == "<http://example.org/pizza#Margherita>"
        assert axiom.object == (
            "[ <http://www.w3.org/1999/02/22-rdf-syntax-ns#type> <http://www.w3.org/2002/07/owl#Restriction>"
            " ; <http://www.w3.org/2002/07/owl#onProperty> <http://example.org/pizza#hasTopping>"
            " ; <http://www.w3.org/2002/07/owl#someValuesFrom> <http://example.org/pizza#Mozzarella> ]"
        )

    def test_unrelated_edit_leaves_existing_restrictions_unchanged(self, tmp_path):
        loader = RdflibDocumentLoader()
        older = loader.load_without_imports(_write(tmp_path, "v1.ttl", RESTRICTIONS))
        newer = loader.load_without_imports(_write(tmp_path, "v2.ttl", RESTRICTIONS_EXTENDED))

        changes = SnapshotMatcher().match(newer, older)

        assert len(changes) == 1
        assert changes[0].operation == ChangeOperation.ADD
        assert changes[0].axiom.subject == "<http://example.org/pizza#Funghi>"
        assert "<http://example.org/pizza#Mushroom>" in changes[0].axiom.object

    def test_changed_restriction_is_one_remove_and_one_add(self, tmp_path):
        loader = RdflibDocumentLoader()
        older = loader.load_without_imports(_write(tmp_path, "v1.ttl", RESTRICTIONS))
        newer = loader.load_without_imports(
            _write(tmp_path, "v2.ttl", RESTRICTIONS.replace("ex:Anchovy", "ex:Caper"))
        )

        changes = SnapshotMatcher().match(newer, older)

        assert [c.operation for c in changes] == [ChangeOperation.ADD, ChangeOperation.REMOVE]
        assert all(c.axiom.subject == "<http://example.org/pizza#Napoletana>" for c in changes)

    def test_collection_members_kept_in_order(self, tmp_path):
        path = _write(tmp_path, "pizza.ttl", PREFIXES + """
ex:Topping owl:equivalentClass [ a owl:Class ;
    owl:unionOf ( ex:Cheese ex:Vegetable ex:Meat ) ] .
""")

        axiom = next(iter(RdflibDocumentLoader().load_without_imports(path)[0].axioms))

        assert (
            "( <http://example.org/pizza#Cheese> <http://example.org/pizza#Vegetable>"
            " <http://example.org/pizza#Meat> )"
        ) in axiom.object

    def test_unreferenced_blank_node_is_its_own_subject(self, tmp_path):
        path = _write(tmp_path, "pizza.ttl", PREFIXES + """
[] a owl:AllDisjointClasses ;
    owl:members ( ex:Margherita ex:Napoletana ) .
ex:Pizza a owl:Class .
""")

        snapshot = RdflibDocumentLoader().load_without_imports(path)[0]

        anonymous = [a for a in snapshot.axioms if a.subject.startswith("[ ")]
        assert len(snapshot.axioms) == 3
        assert len(anonymous) == 2
        assert all("( <http://example.org/pizza#Margherita> <http://example.org/pizza#Napoletana> )" in a.subject
                   for a in anonymous)

    def test_blank_node_cycle_terminates(self, tmp_path):
        path = _write(tmp_path, "cycle.ttl", PREFIXES + """
ex:Pizza ex:linked _:a .
_:a ex:next _:b .
_:b ex:next _:a .
""")

        snapshot = RdflibDocumentLoader().load_without_imports(path)[0]

        assert len(snapshot.axioms) == 1
        assert next(iter(snapshot.axioms)).object == (
            "[ <http://example.org/pizza#next> [ <http://example.org/pizza#next> [] ] ]"
        )


class TestImportResolution:
    """owl:imports closure."""

    def test_sibling_directory_scan(self, tmp_path):
        root = _write(tmp_path, "pizza.ttl", _importing("http://example.org/base"))
        _write(tmp_path, "imports/base.ttl", BASE)

        snapshots = RdflibDocumentLoader().load_with_imports(root)

        assert [s.identity.ontology_iri for s in snapshots] == [
            "http://example.org/pizza",
            "http://example.org/base",
        ]
        assert len(snapshots[1].axioms) == 1

    def test_hidden_directories_ignored(self, tmp_path):
        root = _write(tmp_path, "pizza.ttl", _importing("http://example.org/base"))
        _write(tmp_path, ".git/base.ttl", BASE)

        snapshots = RdflibDocumentLoader().load_with_imports(root)

        assert len(snapshots) == 1

    def test_catalog(self, tmp_path):
        root = _write(tmp_path, "pizza.ttl", _importing("http://example.org/base"))
        _write(tmp_path, "vendor/food.ttl", BASE)
        _write(tmp_path, "catalog-v001.xml", """<?xml version="1.0" encoding="UTF-8"?>
<catalog prefer="public" xmlns="urn:oasis:names:tc:entity:xmlns:xml:catalog">
    <uri name="http://example.org/base" uri="vendor/food.ttl"/>
</catalog>
""")

        snapshots = RdflibDocumentLoader().load_with_imports(root)

        assert [s.identity.ontology_iri for s in snapshots] == [
            "http://example.org/pizza",
            "http://example.org/base",
        ]

    def test_catalog_disables_directory_scan(self, tmp_path):
        root = _write(tmp_path, "pizza.ttl", _importing("http://example.org/base"))
        _write(tmp_path, "base.ttl", BASE)
        _write(tmp_path, "catalog-v001.xml", """<?xml version="1.0"?>
<catalog xmlns="urn:oasis:names:tc:entity:xmlns:xml:catalog"/>
""")

        assert len(RdflibDocumentLoader().load_with_imports(root)) == 1

    def test_invalid_catalog(self, tmp_path):
        root = _write(tmp_path, "pizza.ttl", PIZZA)
        _write(tmp_path, "catalog-v001.xml", "<catalog><unclosed></catalog>")

        with pytest.raises(DocumentLoadError):
            RdflibDocumentLoader().load_with_imports(root)

    def test_transitive_imports(self, tmp_path):
        root = _write(tmp_path, "pizza.ttl", _importing("http://example.org/middle"))
        _write(tmp_path, "middle.ttl", PREFIXES + """
<http://example.org/middle> a owl:Ontology ; owl:imports <http://example.org/base> .
ex:Dish a owl:Class .
""")
        _write(tmp_path, "base.ttl", BASE)

        snapshots = RdflibDocumentLoader().load_with_imports(root)

        assert [s.identity.ontology_iri for s in snapshots] == [
            "http://example.org/pizza",
            "http://example.org/middle",
            "http://example.org/base",
        ]

    def test_import_cycle_terminates(self, tmp_path):
        root = _write(tmp_path, "pizza.ttl", _importing("http://example.org/base"))
        _write(tmp_path, "base.ttl", PREFIXES + """
<http://example.org/base> a owl:Ontology ; owl:imports <http://example.org/pizza> .
ex:Food a owl:Class .
""")

        assert len(RdflibDocumentLoader().load_with_imports(root)) == 2

    def test_unresolvable_import_skipped(self, tmp_path):
        root = _write(tmp_path, "pizza.ttl", _importing("http://example.org/nowhere"))

        snapshots = RdflibDocumentLoader().load_with_imports(root)

        assert [s.identity.ontology_iri for s in snapshots] == ["http://example.org/pizza"]

    def test_file_iri_import(self, tmp_path):
        elsewhere = tmp_path / "elsewhere"
        base = _write(elsewhere, "base.ttl", BASE)
        root = _write(tmp_path / "project", "pizza.ttl", _importing(base.as_uri()))

        snapshots = RdflibDocumentLoader().load_with_imports(root)

        assert [s.identity.ontology_iri for s in snapshots] == [
            "http://example.org/pizza",
            "http://example.org/base",
        ]

    def test_load_without_imports_ignores_imports(self, tmp_path):
        root = _write(tmp_path, "pizza.ttl", _importing("http://example.org/base"))
        _write(tmp_path, "base.ttl", BASE)

        assert len(RdflibDocumentLoader().load_without_imports(root)) == 1
