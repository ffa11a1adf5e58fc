"""
Book Review API

A REST API for sharing books and reviews, with JWT authentication.
"""

__version__ = "1.0.0"
