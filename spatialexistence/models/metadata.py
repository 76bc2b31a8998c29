from dataclasses import dataclass, field
from typing import Any


@dataclass
class TokenMetadata:
    """
    Metadata document for one (token, phase) combination.

    Attributes:
        name: Display name (e.g., "Spatial Existence #1")
        description: Collection description
        image: Embedded data locator for the artwork
        attributes: Trait list; always carries "Type" and "Phase"
    """

    name: str
    description: str
    image: str
    attributes: list[dict[str, str]] = field(default_factory=list)

    def trait(self, trait_type: str) -> str | None:
        """Value of a trait, or None if absent."""
        for attr in self.attributes:
            if attr.get("trait_type") == trait_type:
                return attr.get("value")
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "image": self.image,
            "attributes": [dict(a) for a in self.attributes],
        }
