import heapq
from pathlib import Path
from typing import Dict, List, Optional, Union

PSEUDO_EOF = 256 # synthetic end-of-stream symbol, encoded after the last byte
MAX_SYMBOL = PSEUDO_EOF

FrequencyTable = Dict[int, int] # symbol -> count, iteration order is insertion order
CodeTable = Dict[int, str] # symbol -> bitstring of '0'/'1'


class HuffmanError(Exception):
    """Base class for every failure raised by the codec."""


class MalformedHeaderError(HuffmanError, ValueError):
    pass


class TruncatedPayloadError(HuffmanError, EOFError):
    pass


class MissingCodeError(HuffmanError, KeyError):
    """The encoder met a symbol that has no code; the table did not cover the source."""

    def __init__(self, symbol):
        super().__init__(symbol)
        self.symbol = symbol

    def __str__(self):
        return f"no code for symbol {self.symbol}"


class Leaf: # node for a single symbol
    __slots__ = ("symbol", "weight")

    def __init__(self, symbol: int, weight: int):
        if not 0 <= symbol <= MAX_SYMBOL:
            raise ValueError(f"symbol out of range: {symbol}")
        self.symbol = symbol
        self.weight = weight

    def __repr__(self):
        return f"Leaf(symbol={self.symbol}, weight={self.weight})"


class Internal: # merge of two subtrees, owns both children
    __slots__ = ("weight", "left", "right")

    def __init__(self, left, right):
        self.weight = left.weight + right.weight
        self.left = left # bit 0
        self.right = right # bit 1

    def __repr__(self):
        return f"Internal(weight={self.weight})"


Node = Union[Leaf, Internal]


# FrequencyCounter

def freq_table(data: bytes) -> FrequencyTable:
    ft: FrequencyTable = {}
    for b in data:
        ft[b] = ft.get(b, 0) + 1
    ft[PSEUDO_EOF] = 1
    return ft

def freq_table_from_file(path) -> FrequencyTable:
    return freq_table(Path(path).read_bytes())


# TreeBuilder

def build_huffman_tree(frequency_table: FrequencyTable) -> Node:
    """
    Greedy minimum-weight merging over the table entries.

    Tie-break: leaves are pushed in ascending symbol order and every node gets
    a sequence number when it enters the heap (merged nodes take the next one).
    Equal weights pop in sequence order, so leaves come before merged nodes and
    lower symbols before higher ones. The first node popped is the left child.
    The resulting tree depends only on the table's contents, not its order.
    """
    if not frequency_table:
        raise HuffmanError("cannot build a tree from an empty frequency table")

    priority_queue = []
    sequence = 0
    for symbol in sorted(frequency_table):
        priority_queue.append((frequency_table[symbol], sequence, Leaf(symbol, frequency_table[symbol])))
        sequence += 1
    heapq.heapify(priority_queue)

    while len(priority_queue) > 1:
        _, _, left = heapq.heappop(priority_queue)
        _, _, right = heapq.heappop(priority_queue)
        merged_node = Internal(left, right)
        heapq.heappush(priority_queue, (merged_node.weight, sequence, merged_node))
        sequence += 1

    return priority_queue[0][2] # root of the tree, a lone Leaf for a one-entry table

def release_tree(root: Optional[Node]) -> int:
    # Detach children with an explicit stack so skewed trees cannot exhaust recursion.
    released = 0
    stack: List[Node] = [root] if root is not None else []
    while stack:
        node = stack.pop()
        if isinstance(node, Internal):
            stack.append(node.left)
            stack.append(node.right)
            node.left = None
            node.right = None
        released += 1
    return released


# CodeTableBuilder

def generate_huffman_codes(root: Node) -> CodeTable:
    codes: CodeTable = {}
    if isinstance(root, Leaf):
        # No path from the root to itself, give it a one-bit code
        codes[root.symbol] = "0"
        return codes

    path: List[str] = []
    def generate_codes_helper(node): # depth-first, path is pushed on the way down and popped on the way up
        if isinstance(node, Leaf):
            codes[node.symbol] = "".join(path)
            return

        path.append("0")
        generate_codes_helper(node.left)
        path[-1] = "1"
        generate_codes_helper(node.right)
        path.pop()

    generate_codes_helper(root)
    return codes


# BitEncoder / BitDecoder

def huffman_encode(data: bytes, code_map: CodeTable, writer) -> int:
    """
    Append the code of every byte in `data`, then the PSEUDO_EOF code, to `writer`.

    `writer` is anything with a `write_code(str)` method and a `bits_written`
    counter (see bitstream.BitWriter). Returns the number of bits appended.
    """
    start = writer.bits_written
    for byte in data:
        code = code_map.get(byte)
        if code is None:
            raise MissingCodeError(byte)
        writer.write_code(code)

    eof_code = code_map.get(PSEUDO_EOF)
    if eof_code is None:
        raise MissingCodeError(PSEUDO_EOF)
    writer.write_code(eof_code)
    return writer.bits_written - start

def huffman_decode(reader, root: Node) -> bytes:
    """
    Walk the tree one bit at a time until the PSEUDO_EOF leaf is reached.

    `reader.read_bit()` returns 0, 1 or None once the input is exhausted.
    Running out of bits before PSEUDO_EOF raises TruncatedPayloadError.
    """
    decoded_bytes = bytearray()
    current_node = root
    while True:
        bit = reader.read_bit()
        if bit is None:
            raise TruncatedPayloadError(
                f"bit stream ended before end-of-stream marker after {len(decoded_bytes)} bytes"
            )

        if isinstance(current_node, Internal):
            current_node = current_node.right if bit else current_node.left

        if isinstance(current_node, Leaf): # reached a leaf
            if current_node.symbol == PSEUDO_EOF:
                break
            decoded_bytes.append(current_node.symbol)
            current_node = root # reset to the root for the next symbol

    return bytes(decoded_bytes)
