"""
PKI Toolkit: motor Triple-DES (DESede) y estructuras PKCS#8, #10 y #12.
"""

__version__ = "1.0.0"
