"""
Presentation layer - Discord entry points.
"""
