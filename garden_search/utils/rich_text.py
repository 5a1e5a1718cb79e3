"""
Rich text helpers
"""
from typing import Any, Dict, List, Optional


def extract_text(document: Optional[Dict[str, Any]]) -> str:
    """
    Flatten a CMS rich text document into plain text

    Args:
        document: Rich text node tree ({"nodeType": ..., "content": [...]})

    Returns:
        Text content with whitespace collapsed
    """
    if not document or not document.get("content"):
        return ""

    return " ".join(_extract_nodes(document["content"]).split())


def _extract_nodes(nodes: List[Dict[str, Any]]) -> str:
    parts = []
    for node in nodes:
        if node.get("nodeType") == "text":
            parts.append(node.get("value") or "")
        elif node.get("content"):
            parts.append(_extract_nodes(node["content"]))
    return " ".join(parts)


def make_excerpt(text: Optional[str], length: int) -> str:
    """Trim text to at most `length` characters on a word boundary"""
    text = " ".join((text or "").split())
    if len(text) <= length:
        return text

    cut = text[:length].rsplit(" ", 1)[0]
    return f"{cut}…"
