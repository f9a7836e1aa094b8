"""
构建产物定位与读取

支持两种常见布局：
- Foundry:  out/<File>.sol/<Contract>.json
            bytecode.object / deployedBytecode.object / metadata(对象或字符串) / rawMetadata
- Hardhat:  artifacts/.../<Contract>.json
            bytecode / deployedBytecode (字符串) / contractName / sourceName
"""

from pathlib import Path
from typing import Any, Dict, List, Optional, Union
import json
import logging

from delegscan.contract.contract_model import Artifact
from delegscan.errors import ArtifactReadError

logger = logging.getLogger(__name__)


UNKNOWN_CONTRACT = "UNKNOWN"


def find_artifacts(root: Union[str, Path]) -> List[Path]:
    """递归列出 root 下所有 .json 文件（排序以保证输出稳定）"""
    root = Path(root)
    if not root.is_dir():
        logger.debug(f"artifact root does not exist: {root}")
        return []
    return sorted(p for p in root.rglob("*.json") if p.is_file())


def _bytecode_field(value: Any) -> Optional[str]:
    """{"object": "0x.."} 或 "0x.." -> 十六进制字符串；字段缺失返回 None"""
    if value is None or value is False:
        return None
    if isinstance(value, dict):
        obj = value.get("object")
        return obj if isinstance(obj, str) else ""
    if isinstance(value, str):
        return value
    return ""


def _metadata(data: Dict[str, Any]) -> Dict[str, Any]:
    """metadata 可能是对象，也可能是 JSON 字符串（rawMetadata）"""
    for key in ("metadata", "rawMetadata"):
        value = data.get(key)
        if isinstance(value, str):
            try:
                value = json.loads(value)
            except (ValueError, RecursionError):
                logger.debug(f"unparseable {key} string")
                continue
        if isinstance(value, dict):
            return value
    return {}


def _compilation_target(metadata: Dict[str, Any]) -> Dict[str, str]:
    settings = metadata.get("settings")
    if not isinstance(settings, dict):
        return {}
    target = settings.get("compilationTarget")
    if not isinstance(target, dict):
        return {}
    return {str(k): str(v) for k, v in target.items()}


def contract_name_for(data: Dict[str, Any], metadata: Dict[str, Any]) -> str:
    name = data.get("contractName")
    if isinstance(name, str) and name:
        return name
    target = _compilation_target(metadata)
    if target:
        return next(iter(target.values()))
    return UNKNOWN_CONTRACT


def primary_source_for(data: Dict[str, Any], metadata: Dict[str, Any], contract_name: str) -> Optional[str]:
    """主源文件：compilationTarget 中对应合约名的键 > sourceName > sourcePath > 第一个 source"""
    target = _compilation_target(metadata)
    if target:
        for source, name in target.items():
            if name == contract_name:
                return source
        return None

    for key in ("sourceName", "sourcePath"):
        value = data.get(key)
        if isinstance(value, str) and value:
            return value

    sources = imported_sources_for(metadata)
    return sources[0] if sources else None


def imported_sources_for(metadata: Dict[str, Any]) -> List[str]:
    sources = metadata.get("sources")
    if not isinstance(sources, dict):
        return []
    return [str(k) for k in sources.keys()]


def parse_artifact(data: Dict[str, Any], artifact_path: str = "") -> Artifact:
    """从已解析的 JSON 对象构建 Artifact"""
    metadata = _metadata(data)
    contract_name = contract_name_for(data, metadata)

    abi = data.get("abi")
    if not isinstance(abi, list):
        abi = []

    return Artifact(
        artifact_path=artifact_path,
        contract_name=contract_name,
        runtime_bytecode=_bytecode_field(data.get("deployedBytecode")),
        creation_bytecode=_bytecode_field(data.get("bytecode")),
        abi_entries=tuple(abi),
        primary_source_path=primary_source_for(data, metadata, contract_name),
        imported_source_paths=tuple(imported_sources_for(metadata)),
    )


def read_artifact(path: Union[str, Path]) -> Artifact:
    """读取单个构建产物

    Raises:
        ArtifactReadError: 文件无法读取、JSON 损坏（含超长整数、嵌套过深）或顶层不是对象
    """
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError, RecursionError) as e:
        # ValueError 包括 JSONDecodeError、编码错误和超长整数
        raise ArtifactReadError(f"{path}: {e}") from e

    if not isinstance(data, dict):
        raise ArtifactReadError(f"{path}: top-level JSON value is not an object")

    return parse_artifact(data, str(path))
