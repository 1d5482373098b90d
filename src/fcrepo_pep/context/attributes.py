"""Attribute models - the normalized shape of an authorization request.

Structure:
- Attribute: (attribute_id, data_type, value) triple
- AttributeSet: attributes describing one subject, action or resource
- Request: exactly one subject set, one action set, one resource set

All models are frozen. Sets are built fresh per request by the wrappers
in wrappers.py and never mutated afterwards.
"""

from __future__ import annotations

__all__ = [
    "Attribute",
    "AttributeSet",
    "Request",
]

from pydantic import BaseModel, ConfigDict, Field, field_validator

from fcrepo_pep.constants import STRING_TYPE_URI


class Attribute(BaseModel):
    """A single named, typed value.

    Attributes:
        attribute_id: Attribute name URI (e.g. the login-id URI).
        data_type: Value type URI. Always XML Schema string here.
        value: String value. Empty string is meaningful, not "missing".
    """

    attribute_id: str = Field(min_length=1)
    data_type: str = STRING_TYPE_URI
    value: str

    model_config = ConfigDict(frozen=True)


class AttributeSet(BaseModel):
    """Attributes describing one request category.

    Attribute ids are unique within a set. Order is irrelevant to policy
    evaluation but preserved for readable logs.
    """

    attributes: tuple[Attribute, ...]

    model_config = ConfigDict(frozen=True)

    @field_validator("attributes", mode="after")
    @classmethod
    def reject_duplicate_ids(cls, v: tuple[Attribute, ...]) -> tuple[Attribute, ...]:
        seen: set[str] = set()
        for attribute in v:
            if attribute.attribute_id in seen:
                raise ValueError(f"Duplicate attribute id: {attribute.attribute_id}")
            seen.add(attribute.attribute_id)
        return v

    @property
    def attribute_ids(self) -> frozenset[str]:
        """Ids of all attributes in this set."""
        return frozenset(a.attribute_id for a in self.attributes)

    def get(self, attribute_id: str) -> Attribute | None:
        """Return the attribute with this id, or None."""
        for attribute in self.attributes:
            if attribute.attribute_id == attribute_id:
                return attribute
        return None

    def value_of(self, attribute_id: str) -> str | None:
        """Return the value of the attribute with this id, or None if absent."""
        attribute = self.get(attribute_id)
        return attribute.value if attribute is not None else None

    def as_dict(self) -> dict[str, str]:
        """Map of attribute id to value, for logging."""
        return {a.attribute_id: a.value for a in self.attributes}

    def __len__(self) -> int:
        return len(self.attributes)

    def __contains__(self, attribute_id: object) -> bool:
        return any(a.attribute_id == attribute_id for a in self.attributes)


class Request(BaseModel):
    """One authorization request submitted to the decision engine.

    A call covering several resources produces one Request per resource,
    sharing the same subject and action sets.
    """

    subject: AttributeSet
    action: AttributeSet
    resource: AttributeSet

    model_config = ConfigDict(frozen=True)
