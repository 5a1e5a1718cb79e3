"""
Garden Search Service
Relevance pipeline and primary/fallback search for garden articles and recipes
"""
__version__ = "1.0.0"
