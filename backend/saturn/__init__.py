"""
Saturn: routes a query across text-generation providers and re-asks until
the answer passes a quality gate.
"""
__version__ = "1.0.0"
