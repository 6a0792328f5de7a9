"""
Storage data models for the quote relay application.
"""

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field


class Quote(BaseModel):
    """
    Currency pair quotation as published by the upstream provider.

    Every value is kept as the provider's text so decimal precision survives
    storage and relaying untouched. Aliases are the provider's field names,
    which are also the column names and the names used on the wire.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
    )

    base_code: Annotated[str, Field(alias="code", description="Base currency code")]
    quote_code: Annotated[str, Field(alias="codein", description="Quote currency code")]
    name: Annotated[str, Field(description="Human-readable pair name")]
    high: Annotated[str, Field(description="Day high")]
    low: Annotated[str, Field(description="Day low")]
    change_abs: Annotated[str, Field(alias="varBid", description="Absolute bid change")]
    change_pct: Annotated[str, Field(alias="pctChange", description="Percent change")]
    bid: Annotated[str, Field(description="Bid price")]
    ask: Annotated[str, Field(description="Ask price")]
    timestamp: Annotated[str, Field(description="Provider epoch timestamp")]
    created_at: Annotated[str, Field(alias="create_date", description="Provider creation date")]

    @property
    def pair(self) -> str:
        """Pair key the provider nests the quote under, e.g. ``USDBRL``."""
        return f"{self.base_code}{self.quote_code}"

    def to_wire(self) -> dict[str, str]:
        """Serialize using the provider's field names."""
        return self.model_dump(by_alias=True)
