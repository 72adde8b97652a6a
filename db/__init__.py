"""
db package marker.
"""
