"""
pricewatch: competitor price discovery and tracking.
"""
