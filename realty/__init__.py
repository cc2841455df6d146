"""
Realty Portal: property listings with owner-managed publishing and buyer inquiries.
"""

__version__ = "1.0.0"
