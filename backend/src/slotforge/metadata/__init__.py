"""YAML metadata for structures and slot attributes."""
