"""
Core: logging, paths, key-value storage and the collection layer
"""
