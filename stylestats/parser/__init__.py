"""
Parsers: CSS rule extraction, HTML discovery and syntax normalization.
"""
