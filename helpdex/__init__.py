"""Indexing and search of installed help documentation, with search handlers, tables of contents and search scopes."""

__version__ = "0.1.0"