# sandboxfs/logging.py
import logging
import re
from typing import Any, Dict, Optional

PII_RE = re.compile(r"([\w\.-]+)@([\w\.-]+)")  # naive email redaction


def configure_logging(level: Optional[str] = None):
    logging.basicConfig(
        level=(level or "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )


def redact_str(s: str, max_chars: int = 200) -> str:
    s = PII_RE.sub("[redacted-email]", s)
    if len(s) > max_chars:
        return f"{s[:max_chars]}...({len(s)} chars)"
    return s


def redact_args(args: Dict[str, Any], max_chars: int = 200) -> Dict[str, Any]:
    safe = dict(args)
    for k, v in safe.items():
        if isinstance(v, str):
            safe[k] = redact_str(v, max_chars)
        elif isinstance(v, bytes):
            safe[k] = f"<{len(v)} bytes>"
    return safe


def log_tool_call(logger: logging.Logger, name: str, args: Dict[str, Any], max_chars: int = 200):
    logger.info("tool_call %s %s", name, redact_args(args, max_chars))
