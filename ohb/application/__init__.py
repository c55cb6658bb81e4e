"""Application Layer - Services orchestrating the history pipeline."""
