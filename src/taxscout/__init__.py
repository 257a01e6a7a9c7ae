"""
Texas Tax Sale Scout - Core Package

Fetches Texas tax sale listings, classifies vacant land and enriches the
results with county clerk lien records.
"""

__version__ = "0.1.0"
