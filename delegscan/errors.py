"""
异常定义

- 环境错误（外部工具缺失）：扫描前终止
- 单个产物错误（JSON损坏、反汇编失败等）：记录后跳过，继续扫描
"""


class DelegScanError(Exception):
    """所有 delegscan 异常的基类"""


class ToolNotFoundError(DelegScanError):
    """必需的外部工具（cast / forge）不可用"""

    def __init__(self, tool: str, hint: str = ""):
        self.tool = tool
        self.hint = hint
        super().__init__(f"missing: {tool}" + (f" ({hint})" if hint else ""))


class ArtifactReadError(DelegScanError):
    """构建产物无法读取或不是合法的 JSON 对象"""


class BytecodeDecodeError(DelegScanError):
    """十六进制字节码无法解码（奇数长度、未链接的库占位符等）"""


class DisassemblyError(DelegScanError):
    """反汇编器调用失败、超时或返回非零状态"""


class RuleTableError(DelegScanError):
    """规则表文件内容非法"""
