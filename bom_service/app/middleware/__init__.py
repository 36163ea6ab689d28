"""
BOM service middleware package.
Contains organized middleware components by functional categories.
"""
