"""
启发式规则表

模块：
- rule_tables: ABI 转发函数规则、源码模式规则及其加载
"""

from delegscan.rules.rule_tables import (
    ForwarderRuleTable,
    SourcePatternTable,
    RuleTables,
    DEFAULT_FORWARDER_RULES,
    DEFAULT_SOURCE_PATTERNS,
    load_rule_tables,
)

__all__ = [
    "ForwarderRuleTable",
    "SourcePatternTable",
    "RuleTables",
    "DEFAULT_FORWARDER_RULES",
    "DEFAULT_SOURCE_PATTERNS",
    "load_rule_tables",
]
