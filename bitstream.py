from typing import Optional


class BitWriter:
    """Packs single bits MSB-first into bytes; the last byte is zero-padded."""

    def __init__(self):
        self.out = bytearray()
        self.acc = 0
        self.acc_bits = 0
        self.bits_written = 0

    def write_bit(self, bit: int) -> None:
        self.acc = (self.acc << 1) | (1 if bit else 0)
        self.acc_bits += 1
        self.bits_written += 1
        if self.acc_bits == 8:
            self.out.append(self.acc & 0xFF)
            self.acc = 0
            self.acc_bits = 0

    def write_code(self, code: str) -> None:
        for ch in code:
            self.write_bit(ch == '1')

    @property
    def pad_bits(self) -> int:
        return (8 - self.acc_bits) % 8

    def getvalue(self) -> bytes:
        if self.acc_bits == 0:
            return bytes(self.out)
        return bytes(self.out) + bytes([(self.acc << self.pad_bits) & 0xFF])

    def to_bitstring(self) -> str:
        # Only the bits actually written, no padding
        bits = ''.join(f"{byte:08b}" for byte in self.out)
        if self.acc_bits:
            bits += f"{self.acc:0{self.acc_bits}b}"
        return bits


class BitReader:
    """Reads single bits MSB-first; `read_bit` returns None at end of input."""

    def __init__(self, data: bytes, offset: int = 0):
        self.data = data
        self.i = offset * 8
        self.end = len(data) * 8

    def read_bit(self) -> Optional[int]:
        i = self.i
        if i >= self.end:
            return None
        self.i = i + 1
        return (self.data[i >> 3] >> (7 - (i & 7))) & 1

    @property
    def bits_remaining(self) -> int:
        return max(0, self.end - self.i)
