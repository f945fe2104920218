"""
FastAPI RESTful API for the Inventario library.

This module provides a REST API for:
- Creating authors
- Creating, reading, updating and deleting books
- Expanding book author references into author data
"""
