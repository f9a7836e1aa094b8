"""
扫描报告输出

- 定宽文本表格（逐行流式输出）
- 汇总行与图例
- JSON 报告
"""

from typing import Optional
import json

from rich.console import Console

from delegscan.contract.contract_model import RiskRecord, ScanMode, ScanResult


COLUMNS = [
    "RUNTIME_F4",
    "CREATION_F4",
    "META_ONLY",
    "ABI_FWD",
    "ABI_FALL",
    "SRC_DELEG",
    "RISK_HINT",
    "SOURCE_PATH",
    "CONTRACT",
]

HEADER_RULE = "---------- ---------- --------- ------ ------- -------- ---------- ---------- ----------------"

ROW_FORMAT = "%-10s %-10s %-9s %-6s %-7s %-8s %-16s %-10s %s"

LEGEND = [
    "  RUNTIME_F4 : runtime contains a real DELEGATECALL (metadata stripped)",
    "  CREATION_F4: creation contains a DELEGATECALL (metadata stripped)",
    "  META_ONLY  : DELEGATECALL exists only in metadata tail (unreachable)",
    "  ABI_FWD    : ABI exposes forward/upgrader-like fn (attacker-steerable)",
    "  ABI_FALL   : ABI has fallback/receive",
    "  SRC_DELEG  : primary source contains delegatecall patterns",
    "  RISK_HINT  : LIKELY-REACHABLE > MEDIUM > LOW (combination of the above)",
]


def yes_no(value: bool) -> str:
    return "yes" if value else "no"


def format_row(record: RiskRecord) -> str:
    """格式化单行"""
    return ROW_FORMAT % (
        yes_no(record.evidence.runtime_has_delegate_stripped),
        yes_no(record.evidence.creation_has_delegate_stripped),
        yes_no(record.evidence.metadata_only),
        yes_no(record.abi_marks.has_forwarder_like_function),
        yes_no(record.abi_marks.has_fallback_or_receive),
        yes_no(record.source_hit),
        record.tier.value,
        record.primary_source_path or "<unknown>",
        record.contract_name or "UNKNOWN",
    )


def format_imports(record: RiskRecord) -> Optional[str]:
    if not record.import_hits:
        return None
    return f"FROM_IMPORTS[{','.join(record.import_hits)}]"


class ScanReporter:
    """扫描结果输出器"""

    def __init__(self, console: Optional[Console] = None):
        # 关闭 markup 与高亮，保证定宽列原样输出
        self.console = console or Console(highlight=False, soft_wrap=True)

    def _line(self, text: str = ""):
        self.console.print(text, markup=False, highlight=False, emoji=False, soft_wrap=True)

    def print_header(self, artifact_root: str):
        self._line(f"==> Scanning artifacts in: {artifact_root}")
        self._line()
        self._line(" ".join(COLUMNS))
        self._line(HEADER_RULE)

    def print_record(self, record: RiskRecord):
        self._line(format_row(record))
        imports = format_imports(record)
        if imports:
            self._line(imports)

    def print_footer(self, result: ScanResult):
        summary = result.summary
        if summary.printed == 0 and result.mode != ScanMode.ALL:
            self._line()
            self._line("No delegatecall found in creation/runtime.")

        self._line()
        self._line(
            f"Summary: scanned={summary.scanned} artifacts, "
            f"with_deployed={summary.with_deployed}, printed={summary.printed}"
        )
        self._line()
        self._line("Legend:")
        for line in LEGEND:
            self._line(line)

    def print_report(self, result: ScanResult):
        """一次性输出完整表格（非流式）"""
        self.print_header(result.artifact_root)
        for record in result.records:
            self.print_record(record)
        self.print_footer(result)

    def render_json(self, result: ScanResult) -> str:
        return json.dumps(result.to_dict(), indent=2, ensure_ascii=False)

    def print_json(self, result: ScanResult):
        self._line(self.render_json(result))
