"""
catalog/models.py - Persisted catalog schema
=============================================

Pydantic models for the two JSON files the service loads at startup:

- resources.json: a list of resource records with nested phones, contact,
  service area and eligibility blocks
- question_bank.json: a mapping of category -> list of questions

Keys are camelCase on disk (``serviceArea``, ``languagesOffered``,
``useAfterRapport``); snake_case is accepted too. Unknown keys are ignored so
catalogs can carry fields this service does not use.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from matching.models import Question, Resource


class CatalogModel(BaseModel):
    """Base for every catalog record: camelCase aliases, immutable, lenient."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
        extra="ignore",
    )


# =============================================================================
# RESOURCE RECORDS
# =============================================================================

class PhoneNumber(CatalogModel):
    number: Optional[str] = None
    type: Optional[str] = None


class Phones(CatalogModel):
    primary: Optional[PhoneNumber] = None
    secondary: Optional[PhoneNumber] = None
    third: Optional[PhoneNumber] = None
    fourth: Optional[PhoneNumber] = None
    toll_free: Optional[PhoneNumber] = None
    hotline: Optional[PhoneNumber] = None
    business: Optional[PhoneNumber] = None

    @property
    def display_number(self) -> Optional[str]:
        """Primary number, else the hotline number."""
        for phone in (self.primary, self.hotline):
            if phone is not None and phone.number:
                return phone.number
        return None


class Contact(CatalogModel):
    email: Optional[str] = None
    website: Optional[str] = None


class Location(CatalogModel):
    address1: Optional[str] = None
    address2: Optional[str] = None
    city: Optional[str] = None
    county: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None


class ServiceArea(CatalogModel):
    areas_covered: list[str] = Field(default_factory=list)
    coverage_by_county: list[str] = Field(default_factory=list)


class Eligibility(CatalogModel):
    """Free-text eligibility plus the catalog's audience flags."""
    general: Optional[str] = None
    adults: Optional[bool] = None
    children: Optional[bool] = None
    families: Optional[bool] = None
    females: Optional[bool] = None
    males: Optional[bool] = None
    teens: Optional[bool] = None


class CatalogResource(CatalogModel):
    """One resource exactly as stored in resources.json."""
    name: str
    title: Optional[str] = None
    parent_agency: Optional[str] = None
    categories: list[str] = Field(default_factory=list)
    description: Optional[str] = None
    location: Optional[Location] = None
    hours: Optional[str] = None
    phones: Optional[Phones] = None
    contact: Optional[Contact] = None
    service_area: Optional[ServiceArea] = None
    eligibility: Optional[Eligibility] = None
    fees: Optional[str] = None
    application_process: Optional[str] = None
    languages_offered: list[str] = Field(default_factory=list)
    status: Optional[str] = None

    @property
    def phone(self) -> Optional[str]:
        return self.phones.display_number if self.phones else None

    @property
    def website(self) -> Optional[str]:
        return self.contact.website if self.contact else None

    @property
    def counties(self) -> list[str]:
        return list(self.service_area.coverage_by_county) if self.service_area else []

    def to_resource(self) -> Resource:
        """
        Flatten this record into the matching engine's Resource.

        List fields are comma-joined; an empty list becomes None so the
        engine treats it as "not stated" rather than as an empty constraint.
        """
        areas = self.service_area.areas_covered if self.service_area else []
        return Resource(
            name=self.name,
            title=self.title,
            category=_join(self.categories),
            description=self.description,
            service_area=_join(areas),
            eligibility=self.eligibility.general if self.eligibility else None,
            cost=self.fees,
            hours=self.hours,
            language=_join(self.languages_offered),
            status=self.status,
            phone=self.phone,
            website=self.website,
        )


def _join(values: list[str]) -> Optional[str]:
    return ", ".join(values) if values else None


# =============================================================================
# QUESTION RECORDS
# =============================================================================

class CatalogQuestion(CatalogModel):
    """One interview question as stored in question_bank.json."""
    id: int
    question: str
    tone: Optional[str] = None
    risk_level: Optional[str] = None
    escalation_tier: int = 1
    use_after_rapport: bool = False
    notes: Optional[str] = None

    def to_question(self) -> Question:
        return Question(**self.model_dump())
