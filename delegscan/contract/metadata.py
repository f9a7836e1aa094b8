"""
元数据剥离

solc 会在字节码末尾追加 CBOR 编码的元数据（以 a2646970667358 开头，
即 {"ipfs": ...}）。这部分永远不会被执行，但其中的字节可能恰好是 0xf4，
被反汇编为 DELEGATECALL，从而产生误报。

这里的"可达"仅指"位于元数据标记之前"，不做控制流分析。
"""

from typing import Optional

from eth_utils import decode_hex, remove_0x_prefix

from delegscan.errors import BytecodeDecodeError


# CBOR 元数据头: a2 64 'i' 'p' 'f' 's' 58
METADATA_MARKER = "a2646970667358"


def normalize_hex(hex_text: Optional[str]) -> str:
    """去掉首尾引号、空白和 0x 前缀"""
    if not hex_text:
        return ""
    text = hex_text.strip()
    if text.startswith('"'):
        text = text[1:]
    if text.endswith('"'):
        text = text[:-1]
    return remove_0x_prefix(text.strip())


def find_metadata_marker(hex_text: str) -> int:
    """返回元数据标记的偏移（0起），不存在时返回 -1

    大小写不敏感；只接受落在字节边界（偶数偏移）上的匹配，
    跨字节的伪匹配会被跳过。
    """
    text = hex_text.lower()
    pos = text.find(METADATA_MARKER)
    while pos >= 0 and pos % 2:
        pos = text.find(METADATA_MARKER, pos + 1)
    return pos


def strip_metadata(hex_text: Optional[str]) -> str:
    """剥离元数据尾部

    Args:
        hex_text: 十六进制字节码（可带引号和 0x 前缀）

    Returns:
        标记之前的部分（保留原始大小写）；没有标记时返回规范化后的原串
    """
    normalized = normalize_hex(hex_text)
    pos = find_metadata_marker(normalized)
    if pos < 0:
        return normalized
    return normalized[:pos]


class Bytecode:
    """十六进制字节码值对象"""

    def __init__(self, hex_text: Optional[str]):
        self.hex = normalize_hex(hex_text)

    @property
    def is_empty(self) -> bool:
        return not self.hex

    def metadata_offset(self) -> int:
        """元数据标记在十六进制串中的偏移，不存在时为 -1"""
        return find_metadata_marker(self.hex)

    def stripped(self) -> "Bytecode":
        pos = self.metadata_offset()
        return Bytecode(self.hex if pos < 0 else self.hex[:pos])

    def to_bytes(self) -> bytes:
        """解码为原始字节

        Raises:
            BytecodeDecodeError: 奇数长度或包含非十六进制字符（如未链接的库占位符）
        """
        try:
            return decode_hex(self.hex)
        except ValueError as e:
            raise BytecodeDecodeError(f"invalid hex bytecode ({len(self.hex)} chars): {e}") from e

    def __len__(self) -> int:
        return len(self.hex) // 2

    def __repr__(self) -> str:
        preview = self.hex[:16] + ("..." if len(self.hex) > 16 else "")
        return f"Bytecode(0x{preview}, {len(self)} bytes)"
