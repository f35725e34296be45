"""
Substitution Table Generation

This module builds the eight position-specific substitution tables used by
the block cipher. Table 0 is the identity permutation; tables 1-7 are
independent Fisher-Yates shuffles of the byte alphabet. Every encryption
table is paired with its exact inverse for decryption.
"""

import os
import random
import time
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

# Number of entries in a substitution table (one per byte value)
TABLE_SIZE = 256

# One table pair per byte position of the block
NUM_TABLES = 8

# Environment variable that fixes the default table seed
SEED_ENV_VAR = 'SPN64_TABLE_SEED'

SubstitutionTable = Tuple[int, ...]


def _check_permutation(table: Sequence[int], name: str) -> SubstitutionTable:
    if len(table) != TABLE_SIZE:
        raise ValueError(f"{name} table must have exactly {TABLE_SIZE} entries, got {len(table)}")
    if sorted(table) != list(range(TABLE_SIZE)):
        raise ValueError(f"{name} table is not a permutation of 0..{TABLE_SIZE - 1}")
    return tuple(table)


@dataclass(frozen=True)
class SubstitutionTablePair:
    """An encryption table together with its inverse."""
    encrypt: SubstitutionTable
    decrypt: SubstitutionTable

    def __post_init__(self):
        encrypt = _check_permutation(self.encrypt, "Encryption")
        decrypt = _check_permutation(self.decrypt, "Decryption")
        for x in range(TABLE_SIZE):
            if decrypt[encrypt[x]] != x:
                raise ValueError(f"Decryption table does not invert encryption table at {x}")
        # Store tuples so the pair cannot be mutated through the caller's lists
        object.__setattr__(self, 'encrypt', encrypt)
        object.__setattr__(self, 'decrypt', decrypt)

    @classmethod
    def from_encrypt_table(cls, table: Sequence[int]) -> 'SubstitutionTablePair':
        encrypt = _check_permutation(table, "Encryption")
        return cls(encrypt, tuple(create_decrypt_table(encrypt)))


@dataclass(frozen=True)
class TableSet:
    """
    The eight substitution table pairs of a session, indexed by byte position.
    """
    pairs: Tuple[SubstitutionTablePair, ...]

    def __post_init__(self):
        pairs = tuple(self.pairs)
        if len(pairs) != NUM_TABLES:
            raise ValueError(f"Table set must contain exactly {NUM_TABLES} pairs, got {len(pairs)}")
        for position, pair in enumerate(pairs):
            if not isinstance(pair, SubstitutionTablePair):
                raise ValueError(f"Table set entry {position} is not a SubstitutionTablePair")
        if pairs[0].encrypt != tuple(range(TABLE_SIZE)):
            raise ValueError("Table set position 0 must use the identity table")
        object.__setattr__(self, 'pairs', pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def __getitem__(self, position: int) -> SubstitutionTablePair:
        return self.pairs[position]

    def __iter__(self):
        return iter(self.pairs)

    @property
    def encryption_tables(self) -> List[SubstitutionTable]:
        return [pair.encrypt for pair in self.pairs]

    @property
    def decryption_tables(self) -> List[SubstitutionTable]:
        return [pair.decrypt for pair in self.pairs]


def identity_table() -> List[int]:
    """Return the identity permutation of the byte alphabet."""
    return list(range(TABLE_SIZE))


def shuffle_table(table: List[int], rng: random.Random) -> List[int]:
    """
    Shuffle a table in place using the Fisher-Yates algorithm.

    Walks i from 255 down to 1, draws j uniformly from [0, i] and swaps
    positions i and j.

    Args:
        table: The table to shuffle
        rng: Random source providing randint

    Returns:
        The same table, shuffled
    """
    for i in range(len(table) - 1, 0, -1):
        j = rng.randint(0, i)
        table[i], table[j] = table[j], table[i]
    return table


def create_decrypt_table(encrypt_table: Sequence[int]) -> List[int]:
    """
    Create the decryption table that maps each encrypted byte back to its
    original value.

    Args:
        encrypt_table: The encryption table

    Returns:
        List containing the inverse table
    """
    decrypt_table = [0] * TABLE_SIZE
    for i, encrypted_value in enumerate(encrypt_table):
        decrypt_table[encrypted_value] = i
    return decrypt_table


def default_rng() -> random.Random:
    """
    Build a fresh random source for table generation.

    The seed is taken from SPN64_TABLE_SEED when set, otherwise from the
    wall clock.
    """
    env_seed = os.environ.get(SEED_ENV_VAR)
    if env_seed:
        try:
            seed = int(env_seed)
        except ValueError:
            raise ValueError(f"{SEED_ENV_VAR} must be an integer, got {env_seed!r}")
        logger.debug(f"Seeding substitution tables from {SEED_ENV_VAR}={seed}")
    else:
        seed = time.time_ns()
        logger.debug("Seeding substitution tables from wall-clock time")
    return random.Random(seed)


def generate_tables(rng: Optional[random.Random] = None) -> TableSet:
    """
    Generate the eight substitution table pairs for a session.

    Args:
        rng: Random source to draw shuffles from. Threads generating
            tables concurrently should each pass their own instance.

    Returns:
        A TableSet whose pair 0 is the identity
    """
    if rng is None:
        rng = default_rng()

    identity = identity_table()
    pairs = [SubstitutionTablePair(tuple(identity), tuple(identity))]

    for _ in range(1, NUM_TABLES):
        shuffled = shuffle_table(identity_table(), rng)
        pairs.append(SubstitutionTablePair.from_encrypt_table(shuffled))

    logger.info(f"Generated {NUM_TABLES} substitution table pairs")
    return TableSet(tuple(pairs))


def identity_tables() -> TableSet:
    """
    Build a table set in which every position uses the identity table.

    With these tables the substitution layer is a no-op, which leaves only
    key mixing and rotation.
    """
    identity = tuple(identity_table())
    return TableSet(tuple(SubstitutionTablePair(identity, identity) for _ in range(NUM_TABLES)))
