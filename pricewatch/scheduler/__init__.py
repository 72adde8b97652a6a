"""
pricewatch/scheduler package marker.
"""
