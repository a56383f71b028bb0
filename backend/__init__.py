"""
backend/ - FastAPI service for the Crisis Resource Navigator.
"""
