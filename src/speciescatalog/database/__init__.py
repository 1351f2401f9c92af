"""Database package for the species catalog.

Database components should be imported directly from their modules:
from speciescatalog.database.core import DatabaseService
"""
