"""
源码模式匹配

对产物声明的源文件做粗粒度的文本扫描，寻找 delegatecall 惯用写法。
这只是佐证信号，不是解析器：
- 混淆或别名调用会漏报
- 注释、字符串里出现的 delegatecall 会误报（有意保留）
"""

from pathlib import Path
from typing import Iterable, List, Optional, Union
import logging

from delegscan.rules.rule_tables import SourcePatternTable, DEFAULT_SOURCE_PATTERNS

logger = logging.getLogger(__name__)


class SourcePatternMatcher:
    """源码 delegatecall 模式匹配器"""

    def __init__(
        self,
        source_root: Union[str, Path] = ".",
        patterns: Optional[SourcePatternTable] = None,
    ):
        """
        Args:
            source_root: 相对源路径的解析根目录（通常是项目根目录）
            patterns: 源码模式规则表
        """
        self.source_root = Path(source_root)
        self.patterns = patterns or DEFAULT_SOURCE_PATTERNS

    def _file_matches(self, path: Path) -> bool:
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as f:
                for line in f:
                    if self.patterns.search(line):
                        return True
        except OSError as e:
            logger.debug(f"cannot read source {path}: {e}")
        return False

    def candidate_files(self, source_path: str) -> List[Path]:
        """解析源路径

        精确路径存在时只返回它；否则在 source_root 下按文件名查找
        所有同名文件（例如 remapping 后的依赖路径）。
        """
        path = Path(source_path)
        if not path.is_absolute():
            path = self.source_root / path
        if path.is_file():
            return [path]

        name = Path(source_path).name
        if not name:
            return []
        try:
            return sorted(p for p in self.source_root.rglob(name) if p.is_file())
        except OSError as e:
            logger.debug(f"filename search for {name} failed: {e}")
            return []

    def matches(self, source_path: Optional[str]) -> bool:
        """源文件是否包含 delegatecall 模式"""
        if not source_path:
            return False
        for candidate in self.candidate_files(source_path):
            if self._file_matches(candidate):
                logger.debug(f"source delegatecall pattern: {candidate}")
                return True
        return False

    def import_hits(self, source_paths: Iterable[str]) -> List[str]:
        """编译单元中命中模式的 .sol 文件（保持声明顺序，去重）"""
        hits: List[str] = []
        for source_path in source_paths:
            if not source_path.endswith(".sol") or source_path in hits:
                continue
            if self.matches(source_path):
                hits.append(source_path)
        return hits
