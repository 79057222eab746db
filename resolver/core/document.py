"""
Base model for every part of the battle and progression documents.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class DocumentModel(BaseModel):
    """
    Base class of the JSON documents exchanged with the host.

    Fields are addressed by their snake_case names in Python and written
    back under their wire aliases. Fields the resolver does not know about
    (portraits, descriptions, presentation flags) are kept and round-trip
    untouched.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        extra="allow",
        validate_assignment=False,
    )

    def to_document(self) -> dict[str, Any]:
        """
        Serializes the model to its JSON wire form.

        Returns:
            dict[str, Any]: The JSON-compatible dictionary, using aliases and
            leaving out unset optional fields.

        """
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
