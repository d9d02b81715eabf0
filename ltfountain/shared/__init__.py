"""
Shared helpers: configuration, errors, metrics and block utilities.
"""
