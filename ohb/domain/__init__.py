"""Domain Layer - Models, events, exceptions and ports for ontology history."""
