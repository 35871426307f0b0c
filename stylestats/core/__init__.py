"""
Core pipeline: source resolution, analysis and the StyleStats engine.
"""
