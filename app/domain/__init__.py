"""
Domain layer for the store subdomain system.

This layer contains business entities and domain logic
following Domain-Driven Design principles.
"""
