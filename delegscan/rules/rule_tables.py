"""
启发式规则表

把 ABI 名单/参数形状规则和源码正则集中为带版本号的规则表，
可以从 JSON 文件覆盖，而不修改风险判定逻辑：

{
  "forwarder": {
    "version": "2",
    "names": ["upgradeTo", ...],
    "exact_signatures": ["address", "bytes", "bytes,bytes"],
    "cooccurring_types": [["address", "bytes"]]
  },
  "source_patterns": {
    "version": "2",
    "patterns": ["\\.delegatecall\\s*\\(", ...]
  }
}

缺省的部分沿用内置规则。
"""

from dataclasses import dataclass, field as dc_field
from typing import Dict, List, Optional, Any, FrozenSet, Pattern, Tuple
import json
import logging
import re

from delegscan.errors import RuleTableError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ForwarderRuleTable:
    """转发/升级类函数识别规则"""
    version: str
    names: FrozenSet[str]
    # 参数类型签名（逗号拼接）完全等于其中之一
    exact_signatures: FrozenSet[str]
    # 参数类型签名同时包含组内所有类型（子串匹配）
    cooccurring_types: Tuple[Tuple[str, ...], ...]

    def name_matches(self, name: str) -> bool:
        return name in self.names

    def signature_matches(self, type_signature: str) -> bool:
        if type_signature in self.exact_signatures:
            return True
        return any(
            all(t in type_signature for t in group)
            for group in self.cooccurring_types
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "names": sorted(self.names),
            "exact_signatures": sorted(self.exact_signatures),
            "cooccurring_types": [list(g) for g in self.cooccurring_types],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["ForwarderRuleTable"] = None) -> "ForwarderRuleTable":
        base = base or DEFAULT_FORWARDER_RULES
        groups = data.get("cooccurring_types", base.cooccurring_types)
        if isinstance(groups, str):
            raise RuleTableError("cooccurring_types must be a list of type lists")
        return cls(
            version=str(data.get("version", base.version)),
            names=frozenset(_string_list(data.get("names", base.names), "names")),
            exact_signatures=frozenset(
                _string_list(data.get("exact_signatures", base.exact_signatures), "exact_signatures")
            ),
            cooccurring_types=tuple(
                tuple(_string_list(group, "cooccurring_types")) for group in groups
            ),
        )


@dataclass(frozen=True)
class SourcePatternTable:
    """源码 delegatecall 模式（逐行匹配）"""
    version: str
    patterns: Tuple[str, ...]
    _compiled: Tuple[Pattern, ...] = dc_field(default=(), init=False, compare=False, repr=False)

    def __post_init__(self):
        try:
            compiled = tuple(re.compile(p) for p in self.patterns)
        except re.error as e:
            raise RuleTableError(f"invalid source pattern: {e}") from e
        object.__setattr__(self, "_compiled", compiled)

    def search(self, line: str) -> bool:
        return any(p.search(line) for p in self._compiled)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "patterns": list(self.patterns),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any], base: Optional["SourcePatternTable"] = None) -> "SourcePatternTable":
        base = base or DEFAULT_SOURCE_PATTERNS
        return cls(
            version=str(data.get("version", base.version)),
            patterns=tuple(_string_list(data.get("patterns", base.patterns), "patterns")),
        )


def _string_list(value: Any, key: str) -> List[str]:
    if isinstance(value, str) or not isinstance(value, (list, tuple, set, frozenset)):
        raise RuleTableError(f"{key} must be a list of strings")
    if not all(isinstance(v, str) for v in value):
        raise RuleTableError(f"{key} must be a list of strings")
    return list(value)


DEFAULT_FORWARDER_RULES = ForwarderRuleTable(
    version="1",
    names=frozenset({
        "upgrade",
        "upgradeTo",
        "upgradeToAndCall",
        "upgradeImplementation",
        "upgradeImpl",
        "setImplementation",
        "setCode",
        "setCodeAndCall",
        "execute",
        "forward",
        "delegateCall",
        "delegateExecute",
        "routerExecute",
        "multicallDelegate",
        "impl",
        "implementation",
    }),
    exact_signatures=frozenset({"address", "bytes", "bytes,bytes"}),
    cooccurring_types=(("address", "bytes"),),
)

DEFAULT_SOURCE_PATTERNS = SourcePatternTable(
    version="1",
    patterns=(
        r"\.delegatecall\s*\(",                  # target.delegatecall(data)
        r"functionDelegateCall\s*\(",            # OpenZeppelin Address.functionDelegateCall
        r"assembly\s*\{[^}]*delegatecall",       # 内联汇编（同一行内）
    ),
)


@dataclass(frozen=True)
class RuleTables:
    forwarder: ForwarderRuleTable = DEFAULT_FORWARDER_RULES
    source_patterns: SourcePatternTable = DEFAULT_SOURCE_PATTERNS

    def to_dict(self) -> Dict[str, Any]:
        return {
            "forwarder": self.forwarder.to_dict(),
            "source_patterns": self.source_patterns.to_dict(),
        }


def load_rule_tables(filepath: Optional[str] = None) -> RuleTables:
    """加载规则表

    Args:
        filepath: JSON 规则文件，None 时返回内置规则

    Raises:
        RuleTableError: 文件无法读取或内容非法
    """
    if not filepath:
        return RuleTables()

    try:
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise RuleTableError(f"Failed to load rule tables from {filepath}: {e}") from e

    if not isinstance(data, dict):
        raise RuleTableError(f"Rule table file must contain a JSON object: {filepath}")

    sections = {}
    for key in ("forwarder", "source_patterns"):
        section = data.get(key) or {}
        if not isinstance(section, dict):
            raise RuleTableError(f"'{key}' section must be a JSON object: {filepath}")
        sections[key] = section

    tables = RuleTables(
        forwarder=ForwarderRuleTable.from_dict(sections["forwarder"]),
        source_patterns=SourcePatternTable.from_dict(sections["source_patterns"]),
    )
    logger.info(
        f"Loaded rule tables from {filepath}: "
        f"forwarder v{tables.forwarder.version}, source patterns v{tables.source_patterns.version}"
    )
    return tables
