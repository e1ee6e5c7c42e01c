"""
Scripts Package.

This package contains operational scripts for the HRDD tool.

Scripts:
- import_countries: Load the country snapshot into the datastore
"""

# Scripts are meant to be run directly, not imported
