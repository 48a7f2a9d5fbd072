"""
Retrieval-and-caching engine for the on-device RAG demo.
Embeds text, retrieves nearest documents and caches recent answers by meaning.
"""

VERSION = "1.0.0"
