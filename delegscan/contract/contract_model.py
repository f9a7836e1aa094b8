"""
合约产物数据模型

定义 DELEGATECALL 风险扫描相关的数据结构：
- 构建产物 (Artifact)
- 字节码证据 (BytecodeEvidence)
- ABI 表面标记 (AbiSurfaceMarks)
- 风险记录与扫描汇总
"""

from dataclasses import dataclass, field as dc_field
from typing import Dict, List, Optional, Any, Tuple
from enum import Enum


class RiskTier(str, Enum):
    """风险等级（由低到高）"""
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    LIKELY_REACHABLE = "LIKELY-REACHABLE"


class ScanMode(str, Enum):
    """输出过滤模式"""
    ALL = "all"                  # 输出全部产物
    ONLY_DELEG = "only-deleg"    # 仅输出剥离后字节码含 DELEGATECALL 的产物
    STRICT = "strict"            # 仅输出 LIKELY-REACHABLE


@dataclass(frozen=True)
class Artifact:
    """编译产物（只读一次，之后不再修改）"""
    artifact_path: str
    contract_name: str = "UNKNOWN"

    # 十六进制字节码，None 表示字段不存在
    runtime_bytecode: Optional[str] = None
    creation_bytecode: Optional[str] = None

    abi_entries: Tuple[Any, ...] = ()

    # 源文件
    primary_source_path: Optional[str] = None
    imported_source_paths: Tuple[str, ...] = ()

    @property
    def is_candidate(self) -> bool:
        """没有运行时字节码字段的产物不参与扫描"""
        return self.runtime_bytecode is not None


@dataclass(frozen=True)
class BytecodeEvidence:
    """字节码证据

    stripped: 剥离元数据尾部后的字节码（可达部分）
    full: 完整字节码（包含元数据尾部）
    """
    runtime_has_delegate_stripped: bool = False
    creation_has_delegate_stripped: bool = False
    runtime_has_delegate_full: bool = False
    creation_has_delegate_full: bool = False

    @property
    def metadata_only(self) -> bool:
        """DELEGATECALL 仅出现在元数据尾部（任一侧）"""
        runtime_only = self.runtime_has_delegate_full and not self.runtime_has_delegate_stripped
        creation_only = self.creation_has_delegate_full and not self.creation_has_delegate_stripped
        return runtime_only or creation_only

    @property
    def has_stripped_hit(self) -> bool:
        return self.runtime_has_delegate_stripped or self.creation_has_delegate_stripped

    def to_dict(self) -> Dict[str, Any]:
        return {
            "runtime_has_delegate_stripped": self.runtime_has_delegate_stripped,
            "creation_has_delegate_stripped": self.creation_has_delegate_stripped,
            "runtime_has_delegate_full": self.runtime_has_delegate_full,
            "creation_has_delegate_full": self.creation_has_delegate_full,
            "metadata_only": self.metadata_only,
        }


@dataclass(frozen=True)
class AbiSurfaceMarks:
    """ABI 表面标记"""
    has_forwarder_like_function: bool = False
    has_fallback_or_receive: bool = False

    # 触发转发标记的函数，如 "upgradeTo(address) 0x3659cfe6"
    forwarder_functions: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "has_forwarder_like_function": self.has_forwarder_like_function,
            "has_fallback_or_receive": self.has_fallback_or_receive,
            "forwarder_functions": list(self.forwarder_functions),
        }


@dataclass(frozen=True)
class RiskRecord:
    """单个产物的风险记录（输出单元）"""
    contract_name: str
    primary_source_path: Optional[str]
    evidence: BytecodeEvidence
    abi_marks: AbiSurfaceMarks
    source_hit: bool
    import_hits: Tuple[str, ...]
    tier: RiskTier
    artifact_path: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artifact_path": self.artifact_path,
            "contract_name": self.contract_name,
            "primary_source_path": self.primary_source_path,
            "evidence": self.evidence.to_dict(),
            "abi": self.abi_marks.to_dict(),
            "source_hit": self.source_hit,
            "import_hits": list(self.import_hits),
            "risk": self.tier.value,
        }


@dataclass
class ScanSummary:
    """扫描计数（由扫描循环返回，不使用全局状态）"""
    scanned: int = 0
    with_deployed: int = 0
    printed: int = 0
    failed: int = 0

    def merge(self, other: "ScanSummary") -> "ScanSummary":
        """合并两个汇总（逐产物计数的归约）"""
        return ScanSummary(
            scanned=self.scanned + other.scanned,
            with_deployed=self.with_deployed + other.with_deployed,
            printed=self.printed + other.printed,
            failed=self.failed + other.failed,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scanned": self.scanned,
            "with_deployed": self.with_deployed,
            "printed": self.printed,
            "failed": self.failed,
        }


@dataclass
class ScanResult:
    """一次目录扫描的结果"""
    artifact_root: str
    mode: ScanMode
    records: List[RiskRecord] = dc_field(default_factory=list)
    summary: ScanSummary = dc_field(default_factory=ScanSummary)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "artifact_root": self.artifact_root,
            "mode": self.mode.value,
            "records": [r.to_dict() for r in self.records],
            "summary": self.summary.to_dict(),
        }
