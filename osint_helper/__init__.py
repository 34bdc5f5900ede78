"""OSINT Helper: case-based OSINT collection and lookalike synthesis service."""
