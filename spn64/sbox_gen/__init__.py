"""
S-box Generation Package

This package builds the invertible, position-specific substitution tables
used by the block cipher and measures their cryptographic properties.
"""

from .table_factory import (
    SubstitutionTablePair, TableSet, generate_tables, identity_tables,
    shuffle_table, create_decrypt_table, NUM_TABLES, TABLE_SIZE,
)
from .table_metrics import evaluate_table, evaluate_table_set, count_bit_differences

__all__ = [
    'SubstitutionTablePair', 'TableSet', 'generate_tables', 'identity_tables',
    'shuffle_table', 'create_decrypt_table', 'NUM_TABLES', 'TABLE_SIZE',
    'evaluate_table', 'evaluate_table_set', 'count_bit_differences',
]
