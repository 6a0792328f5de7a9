"""
Client-side data models for the quote relay application.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class QuoteBid(BaseModel):
    """The part of a served quote the client relays."""

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )

    bid: Annotated[str, Field(description="Bid price as served, unparsed")]
