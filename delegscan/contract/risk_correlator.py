"""
风险关联

把字节码证据、ABI 表面和源码佐证组合成单一风险等级。
判定表自上而下，首个命中即返回：

1. LIKELY-REACHABLE: 运行时可达 DELEGATECALL
                     且 (转发形态函数 或 fallback/receive)
                     且 (主源文件命中 或 导入文件命中)
2. MEDIUM:           运行时可达 DELEGATECALL
                     且 (转发形态函数 或 主源文件命中 或 导入文件命中)
3. LOW:              其他
"""

from typing import Sequence

from delegscan.contract.contract_model import (
    AbiSurfaceMarks,
    BytecodeEvidence,
    RiskTier,
)


def classify(
    evidence: BytecodeEvidence,
    abi_marks: AbiSurfaceMarks,
    source_hit: bool,
    import_hits: Sequence[str],
) -> RiskTier:
    """计算风险等级"""
    if not evidence.runtime_has_delegate_stripped:
        return RiskTier.LOW

    corroborated = source_hit or bool(import_hits)
    call_surface = abi_marks.has_forwarder_like_function or abi_marks.has_fallback_or_receive

    if call_surface and corroborated:
        return RiskTier.LIKELY_REACHABLE

    if abi_marks.has_forwarder_like_function or corroborated:
        return RiskTier.MEDIUM

    return RiskTier.LOW
