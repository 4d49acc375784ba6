"""Completion providers that turn a document position into candidates."""
