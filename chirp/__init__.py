"""
Chirp backend

Input sanitization and credential hashing for the Chirp social API.
"""
__version__ = "1.0.0"
