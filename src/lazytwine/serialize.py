"""Serialization of Twine trees to JSON-compatible dicts."""

from __future__ import annotations

import json

from .leaf import Arguments, Leaf
from .twine import Twine


def leaf_to_dict(leaf: Leaf) -> dict[str, object]:
    """Convert a Leaf to a serializable dict."""
    if leaf.kind == "twine":
        return {"kind": "twine", "value": to_dict(leaf.value)}
    if leaf.kind == "fmt":
        args: Arguments = leaf.value
        return {
            "kind": "fmt",
            "value": args.template,
            "args": len(args.args) + len(args.kwargs),
        }
    return {"kind": leaf.kind, "value": leaf.value}


def to_dict(twine: Twine) -> dict[str, object]:
    """Convert a Twine to a serializable dict, one level per node."""
    d: dict[str, object] = {"kind": twine.kind}
    if twine.lhs is not None:
        d["lhs"] = leaf_to_dict(twine.lhs)
    if twine.rhs is not None:
        d["rhs"] = leaf_to_dict(twine.rhs)
    return d


def to_json(twine: Twine) -> str:
    """Serialize a Twine's structure to pretty-printed JSON."""
    return json.dumps(to_dict(twine), indent=2, ensure_ascii=False)
