"""
SPN64 - 64-bit Substitution-Permutation Network Block Cipher Library

This library implements a small symmetric block cipher that encrypts one
8-byte block at a time under a passphrase-derived key. It is intended for
study and does not claim cryptographic security.

Key Features:
- 64-bit block size
- SPN structure with 16 rounds
- Eight position-specific substitution tables (Fisher-Yates shuffled)
- Block-wide one-bit rotation for diffusion
- XOR-folding passphrase key derivation, with an Argon2id variant
- Substitution table quality metrics
- RC4 keystream generator

"""

__version__ = '0.1.0'
__author__ = 'SPN64 Team'
