"""
Shared, cross-cutting code for the catalog API.

`core/` holds building blocks used by more than one feature: settings,
error kinds, the SQLite handle and FastAPI dependencies. Item SQL and
JSON-document handling stay in `items/`; image hashing and lookup in
`images/`.
"""
