"""
pricewatch/api package marker.
"""
