"""
Portfolio site: public pages plus an admin JSON API over a database
with a JSON file fallback.
"""

__version__ = "0.1.0"
