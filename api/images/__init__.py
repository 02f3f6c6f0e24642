"""
Image identity: content-addressed ingestion and safe lookup by filename.
"""
