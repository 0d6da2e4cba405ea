"""Module/section name registry: which modules exist, their section keys and fallback content"""

from pathlib import Path
from typing import Any, Protocol

import yaml
from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError


SECTION_KEYS: tuple[str, ...] = ("end-vision", "progress", "roadmap")

SECTION_LABELS: dict[str, str] = {
    "end-vision": "End vision",
    "progress": "Progress",
    "roadmap": "Roadmap",
}


class SectionConfig(BaseModel):
    label: str
    blocks: list[dict[str, Any]] = Field(default_factory=list, description="Fallback content when nothing is published")


class ModuleConfig(BaseModel):
    slug: str
    title: str
    description: str = ""
    sections: dict[str, SectionConfig] = Field(default_factory=dict)


class ModuleRegistry(Protocol):
    def is_known_module(self, slug: str) -> bool: ...

    def is_known_section_key(self, key: str) -> bool: ...

    def get_module(self, slug: str) -> ModuleConfig | None: ...


class StaticRegistry:
    """In-process registry over a fixed module catalogue."""

    def __init__(self, modules: list[ModuleConfig], section_keys: tuple[str, ...] = SECTION_KEYS):
        self._modules = {m.slug: m for m in modules}
        self.section_keys = tuple(section_keys)

    def is_known_module(self, slug: str) -> bool:
        return slug in self._modules

    def is_known_section_key(self, key: str) -> bool:
        return key in self.section_keys

    def get_module(self, slug: str) -> ModuleConfig | None:
        return self._modules.get(slug)

    @property
    def modules(self) -> list[ModuleConfig]:
        return list(self._modules.values())


def make_module(slug: str, title: str, description: str = "", **bullets: list[str]) -> ModuleConfig:
    """Build a module whose sections each hold one bullets block.

    bullets maps section keys with '-' written as '_' (end_vision=...) to items.
    """
    sections = {}
    for key in SECTION_KEYS:
        items = bullets.get(key.replace("-", "_"), [])
        blocks = [{"type": "bullets", "items": items}] if items else []
        sections[key] = SectionConfig(label=SECTION_LABELS[key], blocks=blocks)
    return ModuleConfig(slug=slug, title=title, description=description, sections=sections)


DEFAULT_MODULES: list[ModuleConfig] = [
    make_module(
        "big-and-bulky", "Big and Bulky",
        "Oversized, high-touch delivery flows and network design.",
        end_vision=[
            "Predictable appointment-aware delivery with room-of-choice options.",
            "Damage prevention playbook (packaging, handling, exception routing).",
        ],
        progress=["Baseline current-state flow and exception taxonomy."],
        roadmap=["Month 1: lane selection, assumptions, pilot design."],
    ),
    make_module(
        "sfs", "SFS",
        "Ship-from-store fulfillment and inventory-aware routing.",
        end_vision=["Dynamic routing based on inventory confidence and promised delivery date."],
        progress=["Define store readiness signals and compliance checks."],
        roadmap=["Month 1: select stores/regions, define readiness checklist."],
    ),
    make_module(
        "middle-mile-to-spokes", "Middle Mile to spokes",
        "Linehaul moves from hubs to spokes with tight cutoff control.",
        end_vision=["Scheduled linehauls with dynamic capacity based on forecasted volume."],
        progress=["Identify candidate spokes and daily volume profiles."],
        roadmap=["Month 1: select lanes, set cutoffs and measurement."],
    ),
    make_module(
        "first-mile-to-hubs-or-spokes", "First-mile to hubs or spokes",
        "Origin pickups and consolidation into the network.",
        end_vision=["Pickup SLAs aligned to merchant operating hours and dock capacity."],
        progress=["Define pickup windows and appointment mechanisms."],
        roadmap=["Month 1: merchant selection + readiness checklist."],
    ),
    make_module(
        "returns", "Returns",
        "Reverse logistics with fast disposition and visibility.",
        end_vision=["Customer-friendly dropoff/pickup options with clear tracking."],
        progress=["Define return reason taxonomy and required data capture."],
        roadmap=["Month 1: select return categories and intake locations."],
    ),
    make_module(
        "store-replenishments", "Store replenishments",
        "Inbound flows that keep stores in stock with tight scheduling.",
    ),
]


def default_registry() -> StaticRegistry:
    return StaticRegistry(DEFAULT_MODULES)


def load_registry(path: str | Path) -> StaticRegistry:
    """Load a module catalogue from YAML: a top-level `modules:` list, optional `section_keys:`."""
    try:
        data = yaml.safe_load(Path(path).read_text()) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid registry file {path}: {e}") from e
    if not isinstance(data, dict) or not isinstance(data.get("modules"), list):
        raise ValueError(f"Invalid registry file {path}: expected a 'modules' list")
    try:
        modules = [ModuleConfig.model_validate(m) for m in data["modules"]]
    except PydanticValidationError as e:
        raise ValueError(f"Invalid registry file {path}: {e}") from e
    keys = data.get("section_keys") or SECTION_KEYS
    return StaticRegistry(modules, tuple(keys))
