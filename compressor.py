"""
Compressor / Decompressor

compress:   bytes -> frequency table -> tree -> code table -> header + packed payload
decompress: header -> frequency table -> tree -> walk payload bits -> bytes

Every call builds its own table and tree and releases the tree before
returning, on success and on error.
"""

import os
from pathlib import Path
from typing import Tuple

from bitstream import BitReader, BitWriter
from huffman import (
    build_huffman_tree,
    freq_table,
    generate_huffman_codes,
    huffman_decode,
    huffman_encode,
    release_tree,
)
from huffman_header import read_header, write_header
from logger import logger


def read_source(source) -> bytes:
    """Reduce a byte source (buffer, binary file object or path) to bytes."""
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    if hasattr(source, "read"):
        data = source.read()
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError("file source must be opened in binary mode")
        return bytes(data)
    if isinstance(source, os.PathLike):
        return Path(source).read_bytes()
    raise TypeError(f"unsupported byte source: {type(source).__name__}")

def compress(source) -> Tuple[bytes, int]:
    """Return (artifact, bits_written); bits_written counts payload bits only."""
    data = read_source(source)
    ft = freq_table(data)
    root = build_huffman_tree(ft)
    try:
        code_map = generate_huffman_codes(root)
        writer = BitWriter()
        bits_written = huffman_encode(data, code_map, writer)
        artifact = write_header(ft) + writer.getvalue()
    finally:
        release_tree(root)
    return artifact, bits_written

def decompress(artifact) -> bytes:
    artifact = read_source(artifact)
    ft, header_len = read_header(artifact)
    root = build_huffman_tree(ft)
    try:
        return huffman_decode(BitReader(artifact, offset=header_len), root)
    finally:
        release_tree(root)


# File wrappers, callers choose both paths

def compress_file(in_path, out_path) -> int:
    with open(in_path, "rb") as f:
        artifact, bits_written = compress(f)
    Path(out_path).write_bytes(artifact)
    logger.log(f"compressed {in_path} -> {out_path}: {bits_written} payload bits, {len(artifact)} bytes")
    return bits_written

def decompress_file(in_path, out_path) -> int:
    with open(in_path, "rb") as f:
        data = decompress(f)
    Path(out_path).write_bytes(data)
    logger.log(f"decompressed {in_path} -> {out_path}: {len(data)} bytes")
    return len(data)
