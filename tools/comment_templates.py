# tools/comment_templates.py
from __future__ import annotations
import os, re
from typing import Any, Dict
import yaml
from core.logging import logger

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), "templates")
_VAR = re.compile(r"{{\s*([a-zA-Z0-9_]+)\s*}}")

def load_templates(name: str = "audit_comments") -> Dict[str, str]:
    """
    Load comment templates by name from tools/templates/<name>.yml
    """
    path = os.path.join(TEMPLATES_DIR, f"{name}.yml")
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}
    logger.debug(f"Loaded comment templates: {name}")
    return data

def render(template: str, ctx: Dict[str, Any]) -> str:
    """
    Replace {{ var }} with values from ctx. Unknown vars render empty.
    """
    def _lookup(key: str) -> str:
        val = ctx.get(key)
        return "" if val is None else str(val)

    return _VAR.sub(lambda m: _lookup(m.group(1)), template or "").strip()
