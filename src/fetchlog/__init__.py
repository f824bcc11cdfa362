"""
FetchLog - Core Package

Finds files across directory roots by extension, file name pattern and
content, looks inside zip archives, and exports the matches into a staging
directory.
"""

__version__ = "0.1.0"
__author__ = "FetchLog Team"
