"""
Stream Cipher Package

This package implements the RC4 keystream generator used alongside the
block cipher.
"""

from .rc4 import RC4, rc4_crypt

__all__ = ['RC4', 'rc4_crypt']
