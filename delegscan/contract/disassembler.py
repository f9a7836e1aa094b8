"""
反汇编适配器

delegscan 自身不解码操作码，只对外部反汇编器返回的助记符文本做匹配。
这里把外部工具收敛为一个窄接口：

    disassemble(code: bytes) -> List[str]

默认实现调用 Foundry 的 `cast disassemble`；测试中可替换为返回固定输出
或抛出异常的假实现。
"""

from abc import ABC, abstractmethod
from typing import List, Optional
import logging
import shutil
import subprocess

from delegscan.errors import DisassemblyError, ToolNotFoundError

logger = logging.getLogger(__name__)


class Disassembler(ABC):
    """反汇编器接口"""

    name: str = "disassembler"

    @abstractmethod
    def disassemble(self, code: bytes) -> List[str]:
        """把字节码转换为有序的助记符行

        Raises:
            DisassemblyError: 反汇编失败
        """
        pass

    def is_available(self) -> bool:
        return True

    def ensure_available(self):
        if not self.is_available():
            raise ToolNotFoundError(self.name)


class CastDisassembler(Disassembler):
    """基于 `cast disassemble` 的反汇编器"""

    name = "cast"

    def __init__(self, cast_bin: str = "cast", timeout: Optional[float] = 60.0):
        """
        Args:
            cast_bin: cast 可执行文件名或路径
            timeout: 单次调用超时（秒），None 表示不限制
        """
        self.cast_bin = cast_bin
        self.timeout = timeout

    def is_available(self) -> bool:
        return shutil.which(self.cast_bin) is not None

    def ensure_available(self):
        if not self.is_available():
            raise ToolNotFoundError(self.cast_bin, "Install foundry (foundryup).")

    def disassemble(self, code: bytes) -> List[str]:
        if not code:
            return []

        try:
            result = subprocess.run(
                [self.cast_bin, "disassemble"],
                input="0x" + code.hex(),
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as e:
            raise DisassemblyError(f"{self.cast_bin} not found") from e
        except subprocess.TimeoutExpired as e:
            raise DisassemblyError(f"{self.cast_bin} disassemble timed out after {self.timeout}s") from e

        if result.returncode != 0:
            stderr = result.stderr.strip().splitlines()
            reason = stderr[-1] if stderr else f"exit code {result.returncode}"
            raise DisassemblyError(f"{self.cast_bin} disassemble failed: {reason}")

        return result.stdout.splitlines()
