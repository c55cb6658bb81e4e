"""
rdflib Document Loader.

IDocumentLoader that parses RDF serializations of OWL ontologies with rdflib.

Axioms are the document's triples in N-Triples form, excluding the ontology
header (triples whose subject is the ontology node itself: type, imports,
version IRI, ontology annotations). A blank node is never an axiom of its own:
it is rendered inline, with everything below it, inside each statement that
references it (e.g. ``ex:A rdfs:subClassOf [ owl:onProperty ex:p ; ... ]``).
Blank nodes that nothing references (anonymous axioms such as
owl:AllDisjointClasses) are rendered the same way as the subject of their own
statements. An anonymous structure therefore yields identical axioms at every
commit, whatever else in the document changed.

Import resolution order for each owl:imports IRI:
1. XML catalog (catalog-v001.xml or catalog-*.xml next to the root file)
2. Ontology files under the root file's directory declaring that IRI
   (only when no catalog is present)
3. file: IRIs pointing at an existing local file
Anything else is skipped silently.
"""

import logging
import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, FrozenSet, Iterable, List, Optional, Set, Tuple
from urllib.parse import urlparse
from urllib.request import url2pathname

from rdflib import BNode, Graph, URIRef
from rdflib.namespace import OWL, RDF
from rdflib.util import guess_format

from ohb.domain.exceptions import DocumentLoadError
from ohb.domain.interfaces.document_loader import IDocumentLoader
from ohb.domain.models.ontology import Axiom, DocumentIdentity, DocumentSnapshot

logger = logging.getLogger(__name__)

ONTOLOGY_FILE_SUFFIXES = (".owl", ".rdf", ".ttl", ".nt", ".n3", ".jsonld", ".trig", ".nq")
_FALLBACK_FORMATS = ("xml", "turtle")
_CATALOG_DEFAULT = "catalog-v001.xml"


class RdflibDocumentLoader(IDocumentLoader):
    """
    Loads an ontology file and its transitive imports.

    Stateless between calls; safe to share across pipelines.
    """

    def load_with_imports(self, path: Path) -> List[DocumentSnapshot]:
        path = Path(path)
        root_graph = self._parse_root(path)

        catalog = self._read_catalog(path.parent)
        sibling_index: Optional[Dict[str, Path]] = None

        root = self._to_snapshot(root_graph)
        snapshots = [root]
        seen_identities = {root.identity}
        visited_iris: Set[str] = set(self._declared_iris(root_graph))

        pending = list(self._imports_of(root_graph))
        while pending:
            iri = pending.pop(0)
            if iri in visited_iris:
                continue
            visited_iris.add(iri)

            location = catalog.get(iri) if catalog is not None else None
            if location is None and catalog is None:
                if sibling_index is None:
                    sibling_index = self._index_directory(path.parent, exclude=path)
                location = sibling_index.get(iri)
            if location is None:
                location = self._file_iri_to_path(iri)
            if location is None or not location.is_file():
                logger.debug(f"Skipping unresolvable import {iri}")
                continue

            graph = self._try_parse(location)
            if graph is None:
                logger.debug(f"Skipping unparsable import {iri} at {location}")
                continue

            snapshot = self._to_snapshot(graph)
            visited_iris.update(self._declared_iris(graph))
            if snapshot.identity in seen_identities:
                continue
            seen_identities.add(snapshot.identity)
            snapshots.append(snapshot)
            pending.extend(self._imports_of(graph))

        logger.info(f"Loaded ontology {root.identity} with {len(snapshots) - 1} imports from {path}")
        return snapshots

    def load_without_imports(self, path: Path) -> List[DocumentSnapshot]:
        """Load only the root ontology; owl:imports are ignored."""
        return [self._to_snapshot(self._parse_root(Path(path)))]

    def create_empty_snapshot(self) -> DocumentSnapshot:
        return DocumentSnapshot.empty()

    # ═══════════════════════════════════════════════════════════════
    # Parsing
    # ═══════════════════════════════════════════════════════════════

    def _parse_root(self, path: Path) -> Graph:
        if not path.is_file():
            raise DocumentLoadError(f"Ontology file does not exist: {path}")
        try:
            return self._parse(path)
        except Exception as e:
            raise DocumentLoadError(f"Failed to load ontology from: {path}") from e

    def _try_parse(self, path: Path) -> Optional[Graph]:
        try:
            return self._parse(path)
        except Exception as e:
            logger.debug(f"Could not parse {path}: {e}")
            return None

    @staticmethod
    def _parse(path: Path) -> Graph:
        guessed = guess_format(str(path))
        formats = (guessed,) if guessed else _FALLBACK_FORMATS
        last_error: Optional[Exception] = None
        for fmt in formats:
            graph = Graph()
            try:
                graph.parse(str(path), format=fmt)
                return graph
            except Exception as e:
                last_error = e
        raise last_error

    # ═══════════════════════════════════════════════════════════════
    # Snapshot Construction
    # ═══════════════════════════════════════════════════════════════

    def _to_snapshot(self, graph: Graph) -> DocumentSnapshot:
        header_nodes = set(graph.subjects(RDF.type, OWL.Ontology))
        identity = self._identity_of(graph, header_nodes)

        # Blank nodes used as an object anywhere belong to the statement that
        # references them and are rendered inline there.
        owned = {o for o in graph.objects() if isinstance(o, BNode)}
        renderer = _StructureRenderer(graph)

        axioms = set()
        for s, p, o in graph.triples((None, None, None)):
            if s in header_nodes or s in owned:
                continue
            axioms.add(Axiom(
                subject=renderer.render(s),
                predicate=p.n3(),
                object=renderer.render(o),
            ))
        return DocumentSnapshot(identity=identity, axioms=frozenset(axioms))

    @staticmethod
    def _identity_of(graph: Graph, header_nodes: Iterable) -> DocumentIdentity:
        named = sorted(node for node in header_nodes if isinstance(node, URIRef))
        if not named:
            return DocumentIdentity()
        ontology = named[0]
        version = graph.value(ontology, OWL.versionIRI)
        return DocumentIdentity(
            ontology_iri=str(ontology),
            version_iri=str(version) if isinstance(version, URIRef) else None,
        )

    @staticmethod
    def _declared_iris(graph: Graph) -> List[str]:
        """Ontology and version IRIs a document declares for itself."""
        iris = []
        for node in graph.subjects(RDF.type, OWL.Ontology):
            if isinstance(node, BNode):
                continue
            iris.append(str(node))
            version = graph.value(node, OWL.versionIRI)
            if isinstance(version, URIRef):
                iris.append(str(version))
        return iris

    @staticmethod
    def _imports_of(graph: Graph) -> List[str]:
        imports = []
        for node in graph.subjects(RDF.type, OWL.Ontology):
            for target in graph.objects(node, OWL.imports):
                if isinstance(target, URIRef):
                    imports.append(str(target))
        return imports

    # ═══════════════════════════════════════════════════════════════
    # Import Resolution
    # ═══════════════════════════════════════════════════════════════

    @staticmethod
    def _find_catalog(directory: Path) -> Optional[Path]:
        default = directory / _CATALOG_DEFAULT
        if default.is_file():
            return default
        candidates = sorted(directory.glob("catalog-*.xml"))
        return candidates[0] if candidates else None

    def _read_catalog(self, directory: Path) -> Optional[Dict[str, Path]]:
        """Map of import IRI to local file from an OASIS XML catalog, None without a catalog."""
        catalog_file = self._find_catalog(directory)
        if catalog_file is None:
            return None
        try:
            root = ET.parse(str(catalog_file)).getroot()
        except (ET.ParseError, OSError) as e:
            raise DocumentLoadError(f"Invalid catalog file: {catalog_file}") from e

        mapping: Dict[str, Path] = {}
        for element in root.iter():
            if not isinstance(element.tag, str) or not element.tag.endswith("uri"):
                continue
            name, uri = element.get("name"), element.get("uri")
            if not name or not uri:
                continue
            local = self._file_iri_to_path(uri) if uri.startswith("file:") else directory / uri
            mapping[name] = local
        logger.debug(f"Using catalog {catalog_file} with {len(mapping)} entries")
        return mapping

    def _index_directory(self, directory: Path, exclude: Path) -> Dict[str, Path]:
        """Declared ontology IRIs of every ontology file below ``directory``."""
        index: Dict[str, Path] = {}
        for candidate, graph in self._iter_ontology_files(directory, exclude):
            for iri in self._declared_iris(graph):
                index.setdefault(iri, candidate)
        logger.debug(f"Indexed {len(index)} ontology IRIs under {directory}")
        return index

    def _iter_ontology_files(self, directory: Path, exclude: Path) -> Iterable[Tuple[Path, Graph]]:
        for candidate in sorted(directory.rglob("*")):
            relative_parts = candidate.relative_to(directory).parts
            if any(part.startswith(".") for part in relative_parts):
                continue
            if not candidate.is_file() or candidate.suffix.lower() not in ONTOLOGY_FILE_SUFFIXES:
                continue
            if candidate.resolve() == exclude.resolve():
                continue
            graph = self._try_parse(candidate)
            if graph is not None:
                yield candidate, graph

    @staticmethod
    def _file_iri_to_path(iri: str) -> Optional[Path]:
        parsed = urlparse(iri)
        if parsed.scheme != "file":
            return None
        return Path(url2pathname(parsed.path))


class _StructureRenderer:
    """
    Renders RDF terms with blank nodes expanded in place.

    A blank node becomes ``[ p1 o1 ; p2 o2 ]`` with its predicate/object pairs
    sorted, and a well-formed RDF list becomes ``( a b c )``. The result depends
    only on the structure below the node, never on blank node labels or on the
    rest of the document.
    """

    def __init__(self, graph: Graph):
        self._graph = graph

    def render(self, node, path: FrozenSet[BNode] = frozenset()) -> str:
        if not isinstance(node, BNode):
            return node.n3()
        if node in path:
            # Blank node cycle
            return "[]"
        path = path | {node}

        members = self._collection_members(node)
        if members is not None:
            return "( " + " ".join(self.render(m, path) for m in members) + " )"

        pairs = sorted(
            f"{p.n3()} {self.render(o, path)}"
            for p, o in self._graph.predicate_objects(node)
        )
        return "[ " + " ; ".join(pairs) + " ]" if pairs else "[]"

    def _collection_members(self, node: BNode) -> Optional[List]:
        """Members of the RDF list headed by ``node``, None if it is not a well-formed list."""
        members = []
        seen: Set[BNode] = set()
        while node != RDF.nil:
            if not isinstance(node, BNode) or node in seen:
                return None
            seen.add(node)
            pairs = list(self._graph.predicate_objects(node))
            first = self._graph.value(node, RDF.first)
            rest = self._graph.value(node, RDF.rest)
            if len(pairs) != 2 or first is None or rest is None:
                return None
            members.append(first)
            node = rest
        return members
