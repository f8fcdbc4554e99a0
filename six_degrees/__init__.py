"""
Six Degrees Connection Finder

This package finds the shortest co-star path between two actors using
bidirectional BFS over a graph discovered lazily from TMDb filmographies.
"""

__version__ = "1.0.0"
