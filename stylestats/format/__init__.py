"""
Rendering of metric records.
"""
