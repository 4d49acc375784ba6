"""Diagnostic analyzers that turn document text into issues."""
