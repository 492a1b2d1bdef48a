"""Chunk size selection by file size."""

_KIB = 1024
_MIB = 1024 * _KIB
_GIB = 1024 * _MIB

_TIERS = (
    (128 * _KIB, 0),
    (256 * _MIB, 128 * _KIB),
    (1 * _GIB, 1 * _MIB),
    (16 * _GIB, 4 * _MIB),
)
_LARGEST_CHUNK = 16 * _MIB


def compute_chunk_size(file_size: int) -> int:
    """Return the chunk size for a file; 0 means the file is sent whole."""
    for limit, chunk_size in _TIERS:
        if file_size <= limit:
            return chunk_size
    return _LARGEST_CHUNK