"""
Book and author inventory backed by MongoDB.

This package provides:
- Identifier conversion between ObjectId and transport strings
- Store access for the authors and books collections
- Reference resolution between books and the authors they cite
"""
