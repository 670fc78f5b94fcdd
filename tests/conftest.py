import random

import matplotlib
import pytest

matplotlib.use("Agg")


@pytest.fixture
def sample_text():
    """Small repetitive text sample with a handful of distinct bytes."""
    return b"This is a test of the Huffman codec.\nIt should round trip exactly.\n" * 20

@pytest.fixture
def random_bytes():
    """20 KiB of seeded random bytes, covering every byte value."""
    rng = random.Random(456)
    return bytes(rng.getrandbits(8) for _ in range(20 * 1024))
