"""
matching/safety.py - Imminent-risk safety override
===================================================

When a transcript signals imminent risk, emergency contacts are pinned to
the top of the shortlist before any scoring happens:

1. 911 emergency services
2. 988 Suicide & Crisis Lifeline

The catalog's own 911/988 entries are used when the filtered candidates
contain them. Otherwise placeholder resources are synthesized so the crisis
path never returns an empty shortlist, even with an empty catalog.
"""

from dataclasses import dataclass
from typing import Optional, Sequence

from loguru import logger

from matching.models import NeedsProfile, RankedResource, Resource


@dataclass(frozen=True)
class EmergencyContact:
    """
    One pinned emergency entry.

    Attributes:
        marker: Text that identifies the contact in a resource name or title
        fallback_name: Name of the synthesized placeholder
        fallback_description: Description of the synthesized placeholder
        justification: Fixed justification shown with the entry
    """
    marker: str
    fallback_name: str
    fallback_description: str
    justification: str

    def placeholder(self) -> Resource:
        return Resource(name=self.fallback_name, description=self.fallback_description)


# =============================================================================
# EMERGENCY CONTACTS (order is the output order)
# =============================================================================

EMERGENCY_911 = EmergencyContact(
    marker="911",
    fallback_name="911 Emergency Services",
    fallback_description="Call 911 for immediate emergency assistance.",
    justification=(
        "Transcript indicates imminent risk; 911 Emergency should be called "
        "for immediate assistance."
    ),
)

EMERGENCY_988 = EmergencyContact(
    marker="988",
    fallback_name="988 Suicide & Crisis Lifeline",
    fallback_description="Contact 988 for immediate crisis and suicide prevention assistance.",
    justification=(
        "For immediate suicide and crisis prevention support, the 988 Lifeline "
        "should be offered in all cases of potential imminent danger."
    ),
)

EMERGENCY_CONTACTS = (EMERGENCY_911, EMERGENCY_988)


# =============================================================================
# OVERRIDE
# =============================================================================

def find_emergency_resource(candidates: Sequence[Resource], contact: EmergencyContact) -> Optional[Resource]:
    """First candidate whose name or title carries the contact's marker."""
    for resource in candidates:
        if resource.labelled(contact.marker):
            return resource
    return None


def is_emergency_contact(resource: Resource) -> bool:
    return any(resource.labelled(c.marker) for c in EMERGENCY_CONTACTS)


def apply_safety_override(
    profile: NeedsProfile,
    candidates: Sequence[Resource],
) -> tuple[list[RankedResource], list[Resource]]:
    """
    Pin emergency contacts when the profile signals imminent risk.

    Args:
        profile: Needs profile of the transcript
        candidates: Filtered candidate resources

    Returns:
        tuple: (pinned safety entries, remaining candidates)
            - With imminent risk: the 911 and 988 entries, and the candidates
              minus every resource labelled 911 or 988
            - Otherwise: an empty list and the candidates unchanged
    """
    if not profile.imminent_risk:
        return [], list(candidates)

    pinned = []
    for contact in EMERGENCY_CONTACTS:
        resource = find_emergency_resource(candidates, contact)
        if resource is None:
            logger.warning("No '{}' resource in candidates; using placeholder", contact.marker)
            resource = contact.placeholder()
        pinned.append(RankedResource(resource=resource, justification=contact.justification, is_safety=True))

    remaining = [r for r in candidates if not is_emergency_contact(r)]
    logger.info("Imminent risk detected; pinned {} emergency contacts", len(pinned))
    return pinned, remaining
