"""Test package for the Document Scanner.

This package contains tests for all system components:
- Document model parsing
- Paragraph classification, tree walking and comment annotation
- Scan sessions and document sources
- Sync database, tag index and dashboard aggregation
- Settings and the command line interface
"""
