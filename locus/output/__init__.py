"""Locus output renderers."""
