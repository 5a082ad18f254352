"""
Version information for the payclient package
"""

__version__ = "0.1.0"
