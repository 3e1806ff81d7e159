"""
physioslots - appointment availability and booking for a physiotherapy practice.
"""

__version__ = "0.1.0"
