from typing import Optional, Sequence

from stager.styles import find_style_profile

MAX_FURNITURE_NAMES = 4

CLOSING_CLAUSE = (
    "Professional interior photography, natural daylight, realistic furniture placement, "
    "photorealistic, 8k quality, wide angle"
)


def compile_prompt(
    style: Optional[str],
    room_type: Optional[str] = None,
    wall_color_name: Optional[str] = None,
    wall_color_hex: Optional[str] = None,
    furniture_names: Sequence[str] = (),
    hint: Optional[str] = None
) -> str:
    """
    Build the synthesis prompt.

    Deterministic: the same inputs always give the same string, which keeps
    fallback URLs reproducible. Blank fields contribute no clause.
    """
    clauses = [
        _style_clause(style),
        f"A {room_type.strip()} interior" if _present(room_type) else "",
        _wall_clause(wall_color_name, wall_color_hex),
        _furniture_clause(furniture_names),
        hint.strip().rstrip(".").strip() if _present(hint) else "",
        CLOSING_CLAUSE,
    ]
    return ". ".join(clause for clause in clauses if clause) + "."


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _style_clause(style: Optional[str]) -> str:
    if not _present(style):
        return ""
    profile = find_style_profile(style)
    if profile:
        return profile.vocabulary
    return f"{style.strip()} interior design"


def _wall_clause(name: Optional[str], hex_code: Optional[str]) -> str:
    if _present(name) and _present(hex_code):
        return f"walls painted {name.strip()} ({hex_code.strip()})"
    if _present(name):
        return f"walls painted {name.strip()}"
    if _present(hex_code):
        return f"walls painted {hex_code.strip()}"
    return ""


def _furniture_clause(names: Sequence[str]) -> str:
    kept = [n.strip() for n in names if _present(n)][:MAX_FURNITURE_NAMES]
    if not kept:
        return ""
    return "featuring " + ", ".join(kept)
