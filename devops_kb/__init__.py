"""
DevOps knowledge base - BM25 search over CI/CD knowledge snippets and patterns.
"""

__version__ = "0.1.0"
