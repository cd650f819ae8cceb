from __future__ import annotations

from .ydl_client import YdlClient, parse_info
from .ydl_config import YdlConfig
from .ydl_process import ProcessResult, YdlProcessRunner, YdlProcessSpec

__all__ = ["YdlClient", "YdlConfig", "ProcessResult", "YdlProcessRunner", "YdlProcessSpec", "parse_info"]
