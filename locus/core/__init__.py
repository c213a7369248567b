"""Locus core: data models, relocation and lookup."""
