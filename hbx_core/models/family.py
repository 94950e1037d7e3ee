"""
Family Relationship Rules.
"""

from typing import Union

from hbx_core.core.enums import RelationshipKind

# Relationship kinds counted as a primary applicant's immediate family
IMMEDIATE_FAMILY = frozenset(
    {
        RelationshipKind.SELF,
        RelationshipKind.SPOUSE,
        RelationshipKind.LIFE_PARTNER,
        RelationshipKind.CHILD,
        RelationshipKind.WARD,
        RelationshipKind.FOSTER_CHILD,
        RelationshipKind.ADOPTED_CHILD,
        RelationshipKind.STEPSON_OR_STEPDAUGHTER,
        RelationshipKind.STEPCHILD,
        RelationshipKind.DOMESTIC_PARTNER,
    }
)


def is_immediate_family(kind: Union[str, RelationshipKind, None]) -> bool:
    """Whether a relationship of `kind` is immediate family; unknown kinds are not."""
    if kind is None:
        return False
    try:
        return RelationshipKind(kind) in IMMEDIATE_FAMILY
    except ValueError:
        return False
