"""
delegscan: 构建产物 DELEGATECALL 可达性风险扫描

子包：
- contract: 产物读取、元数据剥离、字节码证据、ABI/源码分析、风险判定
- rules: 启发式规则表
- report: 表格与 JSON 输出
"""

__version__ = "0.1.0"
