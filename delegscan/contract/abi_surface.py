"""
ABI 表面分析

从合约声明的接口推断攻击者可触达的调用面：
- fallback / receive 是否存在
- 是否暴露"转发/升级"形态的可变函数（名称命中名单，或参数形如 (target, data)）

ABI 条目可能不完整，缺失字段一律按空值处理，不抛异常。
"""

from typing import Any, Dict, List, Optional, Sequence
import logging

from eth_utils import collapse_if_tuple, function_signature_to_4byte_selector

from delegscan.contract.contract_model import AbiSurfaceMarks
from delegscan.rules.rule_tables import ForwarderRuleTable, DEFAULT_FORWARDER_RULES

logger = logging.getLogger(__name__)


READONLY_MUTABILITY = {"pure", "view"}


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def input_types(entry: Dict[str, Any]) -> List[str]:
    """参数类型列表（声明顺序），缺失的类型记为空串"""
    inputs = entry.get("inputs")
    if not isinstance(inputs, list):
        return []
    return [_text(i.get("type")) if isinstance(i, dict) else "" for i in inputs]


def canonical_signature(entry: Dict[str, Any]) -> str:
    """name(type1,type2)，tuple 参数展开为 (..)"""
    name = _text(entry.get("name"))
    inputs = entry.get("inputs")
    types = []
    for param in inputs if isinstance(inputs, list) else []:
        try:
            types.append(collapse_if_tuple(param))
        except (KeyError, TypeError, ValueError):
            types.append(_text(param.get("type")) if isinstance(param, dict) else "")
    return f"{name}({','.join(types)})"


def selector_for(signature: str) -> str:
    return "0x" + function_signature_to_4byte_selector(signature).hex()


class AbiSurfaceAnalyzer:
    """ABI 表面分析器"""

    def __init__(self, rules: Optional[ForwarderRuleTable] = None):
        self.rules = rules or DEFAULT_FORWARDER_RULES

    def is_forwarder_like(self, entry: Dict[str, Any]) -> bool:
        """单个 function 条目是否为转发形态（不检查可变性）"""
        if self.rules.name_matches(_text(entry.get("name"))):
            return True
        return self.rules.signature_matches(",".join(input_types(entry)))

    def analyze(self, abi_entries: Sequence[Any]) -> AbiSurfaceMarks:
        """分析 ABI

        Args:
            abi_entries: ABI 条目列表

        Returns:
            AbiSurfaceMarks
        """
        has_fallback = False
        forwarders: List[str] = []

        for entry in abi_entries or ():
            if not isinstance(entry, dict):
                logger.debug(f"skipping malformed ABI entry: {entry!r}")
                continue

            entry_type = _text(entry.get("type"))
            if entry_type in ("fallback", "receive"):
                has_fallback = True
                continue
            if entry_type != "function":
                continue
            if _text(entry.get("stateMutability")) in READONLY_MUTABILITY:
                continue

            if self.is_forwarder_like(entry):
                signature = canonical_signature(entry)
                forwarders.append(f"{signature} {selector_for(signature)}")
                logger.debug(f"forwarder-like ABI function: {signature}")

        return AbiSurfaceMarks(
            has_forwarder_like_function=bool(forwarders),
            has_fallback_or_receive=has_fallback,
            forwarder_functions=tuple(forwarders),
        )
