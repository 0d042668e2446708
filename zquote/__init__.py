"""
zquote: local quoting for zCurve bonding-curve sales and constant-product pools.
"""

__version__ = "0.1.0"
