"""
Utility functions for padding, splitting and merging source blocks.
"""

from __future__ import annotations

from typing import Sequence, Union

import numpy as np

from .errors import InvalidArgument


def pad_message(data: bytes, size: int) -> bytes:
    """Right-pad ``data`` with zero bytes, or truncate it, to exactly ``size`` bytes."""
    data = bytes(data)
    if len(data) >= size:
        return data[:size]
    return data + b"\x00" * (size - len(data))


def split_blocks(padded: bytes, k: int, block_size: int) -> np.ndarray:
    """Split a padded buffer into a ``(k, block_size)`` uint8 matrix, rows in order."""
    buf = np.frombuffer(pad_message(padded, k * block_size), dtype=np.uint8)
    return buf.reshape(k, block_size).copy()


def as_block_matrix(
    blocks: Union[np.ndarray, Sequence[bytes]], k: int, block_size: int
) -> np.ndarray:
    """
    Coerce rows of bytes (or an existing array) into a fresh ``(k, block_size)``
    uint8 matrix.

    Raises ``InvalidArgument`` when the shape does not match.
    """
    if isinstance(blocks, np.ndarray):
        matrix = blocks.astype(np.uint8, copy=True)
    else:
        rows = [np.frombuffer(bytes(row), dtype=np.uint8) for row in blocks]
        if len(rows) != k or any(len(row) != block_size for row in rows):
            raise InvalidArgument(
                f"expected {k} blocks of {block_size} bytes, got {len(rows)} rows"
            )
        matrix = np.stack(rows)
    if matrix.shape != (k, block_size):
        raise InvalidArgument(
            f"expected a ({k}, {block_size}) block matrix, got {matrix.shape}"
        )
    return matrix


def merge_blocks(blocks: np.ndarray) -> bytes:
    """Concatenate the rows of a block matrix back into one buffer."""
    return blocks.tobytes()


def xor_into(target: np.ndarray, block: np.ndarray) -> None:
    """XOR ``block`` into ``target`` in place."""
    np.bitwise_xor(target, block, out=target)


__all__ = ["pad_message", "split_blocks", "as_block_matrix", "merge_blocks", "xor_into"]
