"""
Models package for the API layer.
"""
