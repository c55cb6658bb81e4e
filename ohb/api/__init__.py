"""API Layer - External interfaces."""
