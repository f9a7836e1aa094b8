"""
字节码证据提取

对每个产物的 creation / runtime 字节码分别做两次反汇编：
- 剥离元数据后的字节码（可达部分）
- 完整字节码（包含元数据尾部）

若 DELEGATECALL 只出现在完整字节码中，则判定为"仅元数据"命中。
"""

from typing import List, Optional, Tuple
import logging
import re

from delegscan.contract.contract_model import Artifact, BytecodeEvidence
from delegscan.contract.disassembler import Disassembler
from delegscan.contract.metadata import Bytecode
from delegscan.errors import BytecodeDecodeError, DisassemblyError

logger = logging.getLogger(__name__)


DELEGATECALL_TOKEN = re.compile(r"\bDELEGATECALL\b", re.IGNORECASE)


def delegatecall_line_numbers(lines: List[str]) -> List[int]:
    """返回包含 DELEGATECALL 的行号（1起）"""
    return [i for i, line in enumerate(lines, start=1) if DELEGATECALL_TOKEN.search(line)]


def count_delegatecall_lines(lines: List[str]) -> int:
    return len(delegatecall_line_numbers(lines))


def has_delegatecall(lines: List[str]) -> bool:
    return any(DELEGATECALL_TOKEN.search(line) for line in lines)


class BytecodeEvidenceExtractor:
    """字节码证据提取器"""

    def __init__(self, disassembler: Disassembler):
        self.disassembler = disassembler

    def disassemble(self, bytecode: Bytecode, label: str = "") -> List[str]:
        """反汇编；失败时返回空列表（视为无证据）"""
        if bytecode.is_empty:
            return []
        try:
            return self.disassembler.disassemble(bytecode.to_bytes())
        except (BytecodeDecodeError, DisassemblyError) as e:
            logger.debug(f"disassembly failed{' for ' + label if label else ''}: {e}")
            return []

    def check_side(self, hex_text: Optional[str], label: str = "") -> Tuple[bool, bool]:
        """检查单侧字节码

        Returns:
            (剥离后是否含 DELEGATECALL, 完整字节码是否含 DELEGATECALL)
        """
        raw = Bytecode(hex_text)
        if raw.is_empty:
            return False, False

        stripped_lines = self.disassemble(raw.stripped(), f"{label} (stripped)")
        full_lines = self.disassemble(raw, f"{label} (full)")

        return has_delegatecall(stripped_lines), has_delegatecall(full_lines)

    def evaluate(self, artifact: Artifact) -> BytecodeEvidence:
        """提取产物的字节码证据"""
        runtime_stripped, runtime_full = self.check_side(
            artifact.runtime_bytecode, f"{artifact.artifact_path} runtime"
        )
        creation_stripped, creation_full = self.check_side(
            artifact.creation_bytecode, f"{artifact.artifact_path} creation"
        )

        evidence = BytecodeEvidence(
            runtime_has_delegate_stripped=runtime_stripped,
            creation_has_delegate_stripped=creation_stripped,
            runtime_has_delegate_full=runtime_full,
            creation_has_delegate_full=creation_full,
        )

        if evidence.metadata_only:
            logger.debug(f"DELEGATECALL only in metadata tail: {artifact.artifact_path}")

        return evidence
