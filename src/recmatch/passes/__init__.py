"""Semantic passes: record collection, synthesis and match resolution."""
