"""
HTTP retrieval of remote stylesheets.
"""
