"""HTTP surface for the dispatch engine and agent registry."""
