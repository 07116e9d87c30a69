"""
FOM Certificates
Certificate and card issuing service
"""

__version__ = "1.0.0"
