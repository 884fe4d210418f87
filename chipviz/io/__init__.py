"""I/O utilities for ChIPViz"""

from .readers import BedReader, TokenReader, read_bed, read_tokens, read_collection
from .writers import GroupWriter, write_groups

__all__ = [
    'BedReader', 'read_bed',
    'TokenReader', 'read_tokens',
    'read_collection',
    'GroupWriter', 'write_groups']
