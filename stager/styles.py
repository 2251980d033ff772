"""
Interior style profiles: palette, materials, principles and mood per style,
plus the visual vocabulary used to open a synthesis prompt.
"""

import re
import logging
from typing import List, Optional

from pydantic import BaseModel

from stager.models.design import BudgetGuidelines, DesignPreferences, DesignProfile

logger = logging.getLogger(__name__)

DEFAULT_STYLE = "scandinavian"

# Share of the total budget per furniture group
BUDGET_SHARES = {
    "seating": 0.25,
    "tables": 0.15,
    "storage": 0.20,
    "lighting": 0.10,
    "decor": 0.30,
}


class StyleProfile(BaseModel):
    style: str
    colors: List[str]
    materials: List[str]
    principles: List[str]
    mood: List[str]
    vocabulary: str


# Insertion order matters for substring lookup: compound names before "modern"
STYLE_PROFILES = {
    "scandinavian": StyleProfile(
        style="scandinavian",
        colors=["#f5f5f5", "#e8e8e8", "#333333", "#c0a080"],
        materials=["light wood", "metal", "linen", "wool"],
        principles=["minimalism", "functionality", "natural light"],
        mood=["clean", "bright", "calm"],
        vocabulary="Scandinavian interior with light oak, pale neutral tones, soft wool textiles and airy uncluttered space",
    ),
    "industrial": StyleProfile(
        style="industrial",
        colors=["#2a2a2a", "#666666", "#888888", "#cc4400"],
        materials=["metal", "brick", "concrete", "dark wood"],
        principles=["raw materials", "exposed structure", "utilitarian"],
        mood=["bold", "edgy", "urban"],
        vocabulary="Industrial loft interior with exposed brick, black steel, polished concrete and reclaimed dark wood",
    ),
    "minimalist": StyleProfile(
        style="minimalist",
        colors=["#ffffff", "#000000", "#cccccc"],
        materials=["steel", "glass", "light wood"],
        principles=["essential elements only", "negative space"],
        mood=["zen", "spacious", "peaceful"],
        vocabulary="Minimalist interior with clean lines, a restrained monochrome palette and generous negative space",
    ),
    "eclectic": StyleProfile(
        style="eclectic",
        colors=["#ff6b6b", "#4ecdc4", "#45b7d1", "#96ceb4"],
        materials=["mixed", "vintage", "colorful textiles"],
        principles=["personality", "mix and match", "artistic"],
        mood=["vibrant", "creative", "unique"],
        vocabulary="Eclectic interior mixing vintage finds, bold colour accents, layered patterns and curated art",
    ),
    "mid century modern": StyleProfile(
        style="mid century modern",
        colors=["#d9a441", "#2f4f4f", "#8b4513", "#f0e6d2"],
        materials=["walnut", "teak", "molded plastic", "brass"],
        principles=["organic curves", "tapered legs", "form follows function"],
        mood=["retro", "warm", "optimistic"],
        vocabulary="Mid-century modern interior with walnut furniture, tapered legs, mustard and teal accents",
    ),
    "japandi": StyleProfile(
        style="japandi",
        colors=["#ede6db", "#b9a68d", "#5b5347", "#2e2b28"],
        materials=["ash wood", "rattan", "paper", "ceramic"],
        principles=["wabi-sabi", "craftsmanship", "restraint"],
        mood=["serene", "grounded", "natural"],
        vocabulary="Japandi interior with low wooden furniture, muted earth tones, paper lanterns and handmade ceramics",
    ),
    "bohemian": StyleProfile(
        style="bohemian",
        colors=["#c1440e", "#e6b655", "#6b8e23", "#8e4585"],
        materials=["rattan", "macrame", "kilim", "plants"],
        principles=["layering", "global influences", "collected over time"],
        mood=["relaxed", "free-spirited", "cozy"],
        vocabulary="Bohemian interior with layered rugs, rattan, macrame, abundant plants and warm terracotta tones",
    ),
    "coastal": StyleProfile(
        style="coastal",
        colors=["#ffffff", "#a7c7e7", "#1e3f66", "#e8dcc4"],
        materials=["whitewashed wood", "linen", "jute", "rope"],
        principles=["light and airy", "natural textures", "ocean palette"],
        mood=["breezy", "fresh", "relaxed"],
        vocabulary="Coastal interior with whitewashed wood, soft blues, linen slipcovers and natural jute textures",
    ),
    "traditional": StyleProfile(
        style="traditional",
        colors=["#7b1e1e", "#1f3a5f", "#c9a66b", "#f5efe0"],
        materials=["mahogany", "velvet", "brass", "damask"],
        principles=["symmetry", "classic detailing", "rich finishes"],
        mood=["elegant", "formal", "timeless"],
        vocabulary="Traditional interior with carved dark wood, rich upholstery, symmetrical arrangement and classic moulding",
    ),
    "modern": StyleProfile(
        style="modern",
        colors=["#ffffff", "#1c1c1c", "#9e9e9e", "#d4b483"],
        materials=["lacquer", "chrome", "leather", "glass"],
        principles=["clean lines", "open plan", "neutral base"],
        mood=["sleek", "sophisticated", "uncluttered"],
        vocabulary="Modern interior with sleek low-profile furniture, neutral tones and crisp architectural lines",
    ),
}


def normalize_style(style: Optional[str]) -> str:
    """Lower-case, '-'/'_' to spaces, whitespace collapsed."""
    return re.sub(r"\s+", " ", re.sub(r"[-_]", " ", (style or "").lower())).strip()


def find_style_profile(style: Optional[str]) -> Optional[StyleProfile]:
    """Exact match on the normalized token, then the first table key contained in it."""
    token = normalize_style(style)
    if not token:
        return None
    if token in STYLE_PROFILES:
        return STYLE_PROFILES[token]
    for key, profile in STYLE_PROFILES.items():
        if key in token:
            return profile
    return None


def get_style_profile(style: Optional[str]) -> StyleProfile:
    profile = find_style_profile(style)
    if profile is None:
        logger.info(f"Unknown style {style!r}, using {DEFAULT_STYLE}")
        return STYLE_PROFILES[DEFAULT_STYLE]
    return profile


def build_budget_guidelines(budget: Optional[float]) -> Optional[BudgetGuidelines]:
    if not budget:
        return None
    return BudgetGuidelines(
        total=budget,
        perCategory={group: round(budget * share, 2) for group, share in BUDGET_SHARES.items()}
    )


def build_design_profile(
    style: Optional[str],
    budget: Optional[float] = None,
    preferences: Optional[DesignPreferences] = None
) -> DesignProfile:
    """
    Combine a style profile with caller preferences.

    Non-empty preferred colors or materials replace the style's own; brands
    and constraints are carried through as given. A zero or missing budget
    yields no budget guidelines.
    """
    profile = get_style_profile(style)
    preferences = preferences or DesignPreferences()

    return DesignProfile(
        style=profile.style,
        colorPalette=preferences.colors or profile.colors,
        materialProfile=preferences.materials or profile.materials,
        designPrinciples=profile.principles,
        brandAffinity=preferences.brands,
        moodKeywords=profile.mood,
        constraints=preferences.constraints,
        budgetGuidelines=build_budget_guidelines(budget)
    )
