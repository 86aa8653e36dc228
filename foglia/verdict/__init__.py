"""Verdict decoding and rendering."""

from foglia.verdict.parser import extract_json_object, parse_verdict
from foglia.verdict.renderer import render_title, render_unstructured, render_verdict

__all__ = [
    "extract_json_object",
    "parse_verdict",
    "render_title",
    "render_unstructured",
    "render_verdict",
]
