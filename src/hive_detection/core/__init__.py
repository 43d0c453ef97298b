"""Immutable data types shared by every pipeline stage."""
