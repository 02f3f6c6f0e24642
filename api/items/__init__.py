"""
Catalog items: persistence backends, service layer and HTTP endpoints.
"""
