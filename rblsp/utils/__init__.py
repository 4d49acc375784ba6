"""Utilities for the Ruby Language Server."""
