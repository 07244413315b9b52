"""Reference, query and request helpers."""
