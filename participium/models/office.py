"""
Office routing configuration: which municipal office owns which category.

The table is an immutable value injected into the office directory, so a
deployment (or a test) can swap it without touching module state.
"""

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator
from types import MappingProxyType
from typing import Dict, List, Mapping
import json

from participium.models.report import Category

FALLBACK_OFFICE = "municipal administrator"


class OfficeRouting(BaseModel):
    """
    Category -> office role name, one office per category.

    Categories missing from ``offices`` are routed to ``fallback_office``,
    which also serves Category.OTHER.
    """
    model_config = ConfigDict(frozen=True)

    offices: Mapping[Category, str] = Field(default_factory=dict, validate_default=True)
    fallback_office: str = FALLBACK_OFFICE

    @field_validator("offices")
    @classmethod
    def _no_blank_office_names(cls, value: Mapping[Category, str]) -> Mapping[Category, str]:
        for category, office in value.items():
            if not office or not office.strip():
                raise ValueError(f"Office name for {category.value} must not be blank")
        # Read-only view over a private copy
        return MappingProxyType(dict(value))

    @field_serializer("offices")
    def _offices_as_dict(self, value: Mapping[Category, str]) -> Dict[Category, str]:
        return dict(value)

    @field_validator("fallback_office")
    @classmethod
    def _fallback_not_blank(cls, value: str) -> str:
        if not value or not value.strip():
            raise ValueError("fallback_office must not be blank")
        return value

    def office_for(self, category: Category) -> str:
        if category == Category.OTHER:
            return self.fallback_office
        return self.offices.get(category, self.fallback_office)

    def all_offices(self) -> List[str]:
        """Distinct office names, fallback first, then in table order."""
        seen = [self.fallback_office]
        for office in self.offices.values():
            if office not in seen:
                seen.append(office)
        return seen

    @classmethod
    def default(cls) -> "OfficeRouting":
        return cls(
            offices={
                Category.WATER_SUPPLY_DRINKING_WATER: "environmental protection officer",
                Category.ARCHITECTURAL_BARRIERS: "urban planning specialist",
                Category.SEWER_SYSTEM: "public works project manager",
                Category.PUBLIC_LIGHTING: "public works project manager",
                Category.WASTE: "sanitation and waste management officer",
                Category.ROAD_SIGNS_TRAFFIC_LIGHTS: "traffic and mobility coordinator",
                Category.ROADS_URBAN_FURNISHINGS: "public works project manager",
                Category.PUBLIC_GREEN_AREAS_PLAYGROUNDS: "parks and green spaces officer",
            },
            fallback_office=FALLBACK_OFFICE,
        )

    @classmethod
    def from_json_file(cls, path: str) -> "OfficeRouting":
        """
        Load a routing table from JSON:

            {"fallback_office": "...", "offices": {"WASTE": "...", ...}}

        Raises ValueError for unknown categories or malformed content.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return cls.model_validate(data)
