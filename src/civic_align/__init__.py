"""Civic Align: voter/candidate alignment and ranking engine."""

__version__ = "0.1.0"
