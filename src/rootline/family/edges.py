"""Edge kind constants and pair helpers.

Relationships between people are typed edges. ``parent_of`` is directed
(parent is participant A). Every other kind is undirected and stored with
its participants in canonical order.
"""

from __future__ import annotations

PARENT_OF = "parent_of"  # Person → Person (A is the parent of B)
SPOUSE_OF = "spouse_of"  # couple status, status column carries married/partner
DIVORCED_FROM = "divorced_from"  # couple status
SEPARATED_FROM = "separated_from"  # couple status
AFFAIR_WITH = "affair_with"  # independent of couple status

# Requested intent that collapses to SPOUSE_OF with STATUS_PARTNER
PARTNER_OF = "partner_of"

STATUS_MARRIED = "married"
STATUS_PARTNER = "partner"

# At most one of these exists for an unordered pair
COUPLE_STATUS_KINDS = (SPOUSE_OF, DIVORCED_FROM, SEPARATED_FROM)

RELATIONSHIP_KINDS = frozenset(
    {PARENT_OF, SPOUSE_OF, PARTNER_OF, DIVORCED_FROM, SEPARATED_FROM, AFFAIR_WITH}
)


def canonical_pair(a_id: str, b_id: str) -> tuple[str, str]:
    """Order two participant ids so (A, B) and (B, A) share one record."""
    return (a_id, b_id) if a_id <= b_id else (b_id, a_id)
