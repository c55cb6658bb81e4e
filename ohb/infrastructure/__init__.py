"""Infrastructure Layer - Git, ontology parsing, storage, events and workers."""
