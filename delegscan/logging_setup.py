"""日志配置（命令行入口使用）"""

import logging
import sys

DEBUG_FORMAT = "[DBG] %(message)s"


def setup_logging(debug: bool = False):
    """--debug 时把 DEBUG 级别诊断输出到 stderr，否则只输出警告以上"""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(DEBUG_FORMAT if debug else "%(levelname)s: %(message)s"))

    root = logging.getLogger("delegscan")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if debug else logging.WARNING)
    root.propagate = False
