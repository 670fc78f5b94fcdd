import io
import random

import pytest

import compressor
import huffman as huff
from compressor import compress, compress_file, decompress, decompress_file
from huffman import PSEUDO_EOF
from huffman_header import header_size, read_header, write_header


@pytest.mark.parametrize("data", [
    b"",
    b"a",
    b"aaaa",
    b"A" * 10 * 1024,
    bytes(range(256)),
    bytes(range(256)) * 4,
    b"\x00\xff" * 100,
])
def test_roundtrip(data):
    artifact, _ = compress(data)
    assert decompress(artifact) == data

def test_roundtrip_random(random_bytes):
    artifact, _ = compress(random_bytes)
    assert decompress(artifact) == random_bytes

def test_roundtrip_small_random_inputs():
    rng = random.Random(99)
    for n in (1, 2, 3, 17):
        data = bytes(rng.getrandbits(8) for _ in range(n))
        assert decompress(compress(data)[0]) == data

def test_compress_is_deterministic(sample_text):
    assert compress(sample_text) == compress(sample_text)

def test_aaaa_artifact_bytes():
    artifact, bits = compress(b"aaaa")
    assert bits == 5
    assert artifact == write_header({ord('a'): 4, PSEUDO_EOF: 1}) + bytes([0b11110000])

def test_empty_source_artifact():
    artifact, bits = compress(b"")
    assert bits == 1
    assert artifact == write_header({PSEUDO_EOF: 1}) + b"\x00"
    assert decompress(artifact) == b""

def test_header_matches_source_table(sample_text):
    artifact, _ = compress(sample_text)
    table, _ = read_header(artifact)
    assert table == huff.freq_table(sample_text)

def test_bit_count_accounting(sample_text):
    ft = huff.freq_table(sample_text)
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(ft))
    artifact, bits = compress(sample_text)

    expected = sum(len(codes[b]) for b in sample_text) + len(codes[PSEUDO_EOF])
    assert bits == expected
    assert len(artifact) == header_size(len(ft)) + (bits + 7) // 8

def test_single_symbol_source():
    n = 37
    data = b"z" * n
    ft = huff.freq_table(data)
    codes = huff.generate_huffman_codes(huff.build_huffman_tree(ft))
    assert len(codes[ord('z')]) == 1

    artifact, bits = compress(data)
    assert bits == n + len(codes[PSEUDO_EOF])
    assert decompress(artifact) == data


def test_compress_accepts_file_objects_and_paths(tmp_path, sample_text):
    expected = compress(sample_text)
    assert compress(bytearray(sample_text)) == expected
    assert compress(io.BytesIO(sample_text)) == expected

    p = tmp_path / "sample.txt"
    p.write_bytes(sample_text)
    assert compress(p) == expected

def test_compress_rejects_text():
    with pytest.raises(TypeError):
        compress("not bytes")
    with pytest.raises(TypeError):
        compress(io.StringIO("not bytes"))


def test_truncated_payload(sample_text):
    artifact, _ = compress(sample_text)
    with pytest.raises(huff.TruncatedPayloadError):
        decompress(artifact[:-3])

def test_header_only_artifact_is_truncated(sample_text):
    artifact, _ = compress(sample_text)
    _, header_len = read_header(artifact)
    with pytest.raises(huff.TruncatedPayloadError):
        decompress(artifact[:header_len])

def test_truncated_header(sample_text):
    artifact, _ = compress(sample_text)
    with pytest.raises(huff.MalformedHeaderError):
        decompress(artifact[:7])

def test_corrupted_header(sample_text):
    artifact = bytearray(compress(sample_text)[0])
    artifact[0] ^= 0xFF
    with pytest.raises(huff.HuffmanError):
        decompress(bytes(artifact))


def test_tree_released_on_success_and_failure(monkeypatch, sample_text):
    released = []
    real_release = compressor.release_tree

    def tracking_release(root):
        released.append(root)
        return real_release(root)

    monkeypatch.setattr(compressor, "release_tree", tracking_release)

    artifact, _ = compress(sample_text)
    decompress(artifact)
    assert len(released) == 2

    with pytest.raises(huff.TruncatedPayloadError):
        decompress(artifact[:-3])
    assert len(released) == 3
    assert all(root.left is None and root.right is None for root in released)


def test_file_roundtrip(tmp_path, sample_text):
    src = tmp_path / "notes.txt"
    packed = tmp_path / "notes.txt.huf"
    unpacked = tmp_path / "notes_unc.txt"
    src.write_bytes(sample_text)

    bits = compress_file(src, packed)
    assert bits == compress(sample_text)[1]
    assert decompress_file(packed, unpacked) == len(sample_text)
    assert unpacked.read_bytes() == sample_text

def test_failed_decompress_writes_nothing(tmp_path):
    packed = tmp_path / "broken.huf"
    out = tmp_path / "out.txt"
    packed.write_bytes(b"\x00")
    with pytest.raises(huff.MalformedHeaderError):
        decompress_file(packed, out)
    assert not out.exists()
