"""
DELEGATECALL 风险识别

模块：
- contract_model: 产物与风险数据模型
- artifact_reader: 构建产物定位与读取
- metadata: 元数据尾部剥离
- disassembler: 反汇编适配器
- bytecode_evidence: 字节码证据提取
- abi_surface: ABI 表面分析
- source_patterns: 源码模式匹配
- risk_correlator: 风险关联判定
"""

from delegscan.contract.contract_model import (
    Artifact,
    BytecodeEvidence,
    AbiSurfaceMarks,
    RiskRecord,
    RiskTier,
    ScanMode,
    ScanSummary,
    ScanResult,
)
from delegscan.contract.artifact_reader import find_artifacts, read_artifact
from delegscan.contract.metadata import Bytecode, strip_metadata, METADATA_MARKER
from delegscan.contract.disassembler import Disassembler, CastDisassembler
from delegscan.contract.bytecode_evidence import BytecodeEvidenceExtractor
from delegscan.contract.abi_surface import AbiSurfaceAnalyzer
from delegscan.contract.source_patterns import SourcePatternMatcher
from delegscan.contract.risk_correlator import classify

__all__ = [
    "Artifact",
    "BytecodeEvidence",
    "AbiSurfaceMarks",
    "RiskRecord",
    "RiskTier",
    "ScanMode",
    "ScanSummary",
    "ScanResult",
    "find_artifacts",
    "read_artifact",
    "Bytecode",
    "strip_metadata",
    "METADATA_MARKER",
    "Disassembler",
    "CastDisassembler",
    "BytecodeEvidenceExtractor",
    "AbiSurfaceAnalyzer",
    "SourcePatternMatcher",
    "classify",
]
