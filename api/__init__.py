"""
Household Overlap API package.
"""
