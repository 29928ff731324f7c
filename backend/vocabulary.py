"""
Tag vocabulary: the closed catalog of canonical tags and their display metadata.

Tags outside the catalog are still valid opaque strings; lookups fall back
to a neutral entry instead of failing.
"""
from enum import Enum
from types import MappingProxyType
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class TagCategory(str, Enum):
    HEADSPACE = "headspace"  # Mental state required
    ENERGY = "energy"  # Effort / friction
    DURATION = "duration"
    DOMAIN = "domain"  # Life domain


class TagMetadata(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    color: str
    category: TagCategory
    description: Optional[str] = None


TAG_CATEGORIES = MappingProxyType({
    TagCategory.HEADSPACE: ("DeepFocus", "Admin", "Creative", "Social"),
    TagCategory.ENERGY: ("QuickWin", "HeavyLift", "Braindead"),
    TagCategory.DURATION: ("Minutes", "Hours", "Multi-Session"),
    TagCategory.DOMAIN: (
        "Finance", "Health", "Tech", "People", "Growth",
        "Work", "Personal", "Errand", "Fun", "Offline",
    ),
})

_H, _E, _D, _DOM = TagCategory.HEADSPACE, TagCategory.ENERGY, TagCategory.DURATION, TagCategory.DOMAIN

TAG_METADATA = MappingProxyType({
    "DeepFocus": TagMetadata(label="Deep Focus", color="indigo", category=_H,
                             description="Coding, writing, complex strategy"),
    "Admin": TagMetadata(label="Admin", color="gray", category=_H,
                         description="Forms, emails, logistics - low brain power"),
    "Creative": TagMetadata(label="Creative", color="pink", category=_H,
                            description="Brainstorming, designing"),
    "Social": TagMetadata(label="Social", color="purple", category=_H,
                          description="Networking, calling, meeting"),

    "QuickWin": TagMetadata(label="Quick Win", color="emerald", category=_E,
                            description="Takes < 5 mins, low friction"),
    "HeavyLift": TagMetadata(label="Heavy Lift", color="rose", category=_E,
                             description="Requires mental preparation and stamina"),
    "Braindead": TagMetadata(label="Braindead", color="amber", category=_E,
                             description="Can do while tired/sick"),

    "Minutes": TagMetadata(label="Minutes", color="sky", category=_D),
    "Hours": TagMetadata(label="Hours", color="blue", category=_D),
    "Multi-Session": TagMetadata(label="Multi-Session", color="navy", category=_D),

    "Finance": TagMetadata(label="Finance", color="green", category=_DOM),
    "Health": TagMetadata(label="Health", color="red", category=_DOM),
    "Tech": TagMetadata(label="Tech", color="cyan", category=_DOM),
    "People": TagMetadata(label="People", color="purple", category=_DOM),
    "Growth": TagMetadata(label="Growth", color="yellow", category=_DOM),
    "Work": TagMetadata(label="Work", color="blue", category=_DOM),
    "Personal": TagMetadata(label="Personal", color="teal", category=_DOM),
    "Errand": TagMetadata(label="Errand", color="orange", category=_DOM),
    "Fun": TagMetadata(label="Fun", color="pink", category=_DOM),
    "Offline": TagMetadata(label="Offline", color="slate", category=_DOM),
})

FALLBACK_COLOR = "gray"


def get_tag_metadata(tag: str) -> TagMetadata:
    """Metadata for a tag, with a neutral domain entry for custom tags."""
    metadata = TAG_METADATA.get(tag)
    if metadata is None:
        return TagMetadata(label=tag, color=FALLBACK_COLOR, category=TagCategory.DOMAIN)
    return metadata


def tags_by_category(category: Union[TagCategory, str]) -> list[str]:
    return list(TAG_CATEGORIES[TagCategory(category)])


def all_tags() -> list[str]:
    return [tag for tags in TAG_CATEGORIES.values() for tag in tags]


def is_known_tag(tag: str) -> bool:
    return tag in TAG_METADATA


def category_of(tag: str) -> Optional[TagCategory]:
    metadata = TAG_METADATA.get(tag)
    return metadata.category if metadata else None
