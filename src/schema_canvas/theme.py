from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

# ============================================================================
# Types
# ============================================================================


@dataclass(frozen=True, slots=True)
class VisualConfig:
    """Connector colors per relationship type.

    Unrecognized types (anything outside 1:1 / 1:N / N:M) use ``default``.
    """

    one_to_one: str = "#10b981"
    one_to_many: str = "#6366f1"
    many_to_many: str = "#f43f5e"
    default: str = "#64748b"

    def color_for(self, relation_type: str | None) -> str:
        return resolve_relationship_color(self, relation_type)


# ============================================================================
# Defaults
# ============================================================================

DEFAULT_VISUAL_CONFIG = VisualConfig()

# Relationship type -> VisualConfig field
_TYPE_FIELDS = {
    "1:1": "one_to_one",
    "1:N": "one_to_many",
    "N:M": "many_to_many",
}


def resolve_relationship_color(config: VisualConfig, relation_type: str | None) -> str:
    """Pick the connector color for a relationship type."""
    field_name = _TYPE_FIELDS.get(relation_type or "")
    if field_name is None:
        return config.default
    return getattr(config, field_name) or config.default


# ============================================================================
# Plain-data extraction
# ============================================================================


def visual_config_from_mapping(data: Mapping[str, Any]) -> VisualConfig:
    """Build a VisualConfig from a JSON-shaped mapping.

    Accepts either ``{"relationshipColors": {"1:1": ..., "default": ...}}``
    or the inner color mapping directly. Missing entries keep the default
    palette.
    """
    colors = data.get("relationshipColors", data)
    if not isinstance(colors, Mapping):
        colors = {}

    def pick(key: str, fallback: str) -> str:
        value = colors.get(key)
        return value if isinstance(value, str) and value else fallback

    return VisualConfig(
        one_to_one=pick("1:1", DEFAULT_VISUAL_CONFIG.one_to_one),
        one_to_many=pick("1:N", DEFAULT_VISUAL_CONFIG.one_to_many),
        many_to_many=pick("N:M", DEFAULT_VISUAL_CONFIG.many_to_many),
        default=pick("default", DEFAULT_VISUAL_CONFIG.default),
    )
