"""
产物扫描流程

逐个产物执行：
  定位 -> 读取 -> 字节码证据 -> (模式过滤) -> ABI 表面 + 源码佐证 -> 风险判定

单个产物失败（JSON 损坏、反汇编失败、源文件不可读）只会跳过该产物，
不会中断整个扫描。计数通过 ScanSummary 返回，不使用全局变量。
"""

from pathlib import Path
from typing import Callable, Optional, Tuple, Union
import logging

from delegscan.contract.abi_surface import AbiSurfaceAnalyzer
from delegscan.contract.artifact_reader import find_artifacts, read_artifact
from delegscan.contract.bytecode_evidence import BytecodeEvidenceExtractor
from delegscan.contract.contract_model import (
    Artifact,
    RiskRecord,
    RiskTier,
    ScanMode,
    ScanResult,
    ScanSummary,
)
from delegscan.contract.disassembler import Disassembler
from delegscan.contract.risk_correlator import classify
from delegscan.contract.source_patterns import SourcePatternMatcher
from delegscan.errors import ArtifactReadError
from delegscan.rules.rule_tables import RuleTables

logger = logging.getLogger(__name__)


class ArtifactScanner:
    """构建产物 DELEGATECALL 风险扫描器"""

    def __init__(
        self,
        disassembler: Disassembler,
        source_root: Union[str, Path] = ".",
        rules: Optional[RuleTables] = None,
        mode: ScanMode = ScanMode.ONLY_DELEG,
    ):
        rules = rules or RuleTables()
        self.mode = mode
        self.evidence_extractor = BytecodeEvidenceExtractor(disassembler)
        self.abi_analyzer = AbiSurfaceAnalyzer(rules.forwarder)
        self.source_matcher = SourcePatternMatcher(source_root, rules.source_patterns)

    def assess(self, artifact: Artifact) -> Optional[RiskRecord]:
        """评估单个产物；被模式过滤掉时返回 None"""
        evidence = self.evidence_extractor.evaluate(artifact)

        # 过滤在 ABI/源码分析之前进行，避免无谓的文件扫描
        if self.mode != ScanMode.ALL and not evidence.has_stripped_hit:
            logger.debug(f"skip(no delegatecall in stripped creation/runtime): {artifact.artifact_path}")
            return None

        abi_marks = self.abi_analyzer.analyze(artifact.abi_entries)
        source_hit = self.source_matcher.matches(artifact.primary_source_path)
        import_hits = self.source_matcher.import_hits(artifact.imported_source_paths)

        tier = classify(evidence, abi_marks, source_hit, import_hits)

        if self.mode == ScanMode.STRICT and tier != RiskTier.LIKELY_REACHABLE:
            logger.debug(f"skip(strict mode): {artifact.artifact_path} risk={tier.value}")
            return None

        return RiskRecord(
            contract_name=artifact.contract_name,
            primary_source_path=artifact.primary_source_path,
            evidence=evidence,
            abi_marks=abi_marks,
            source_hit=source_hit,
            import_hits=tuple(import_hits),
            tier=tier,
            artifact_path=artifact.artifact_path,
        )

    def scan_one(self, path: Union[str, Path]) -> Tuple[Optional[RiskRecord], ScanSummary]:
        """处理单个产物文件，返回记录（可能为 None）与该文件的计数"""
        counts = ScanSummary(scanned=1)

        try:
            artifact = read_artifact(path)
        except ArtifactReadError as e:
            counts.failed += 1
            logger.debug(f"skip(unreadable artifact): {e}")
            return None, counts

        if not artifact.is_candidate:
            logger.debug(f"skip(no deployedBytecode): {path}")
            return None, counts
        counts.with_deployed += 1

        try:
            record = self.assess(artifact)
        except Exception as e:
            counts.failed += 1
            logger.warning(f"Failed to assess {path}: {e}")
            return None, counts

        if record is not None:
            counts.printed += 1
        return record, counts

    def scan(
        self,
        artifact_root: Union[str, Path],
        callback: Optional[Callable[[RiskRecord], None]] = None,
    ) -> ScanResult:
        """扫描目录

        Args:
            artifact_root: 构建产物根目录
            callback: 每产生一条记录时调用（用于流式输出）

        Returns:
            ScanResult
        """
        result = ScanResult(artifact_root=str(artifact_root), mode=self.mode)

        for path in find_artifacts(artifact_root):
            record, counts = self.scan_one(path)
            result.summary = result.summary.merge(counts)
            if record is None:
                continue
            result.records.append(record)
            if callback:
                callback(record)

        summary = result.summary

        logger.info(
            f"Scan completed: {artifact_root}, scanned={summary.scanned}, "
            f"with_deployed={summary.with_deployed}, printed={summary.printed}"
        )
        return result
