"""Division pricing DTOs.

This module provides immutable data transfer objects describing the
price schedule of a competition division.
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class PricingTier:
    """A single price tier.

    Attributes:
        price: Price per participant.
        deadline: Last calendar day the tier applies ("YYYY-MM-DD").
            Only meaningful for the early-bird tier.
    """

    price: float
    deadline: str | None = None


@dataclass(frozen=True)
class DivisionPricing:
    """Price schedule for one competition division.

    Attributes:
        name: Division label, unique within an event's schedule.
        regular: The regular tier.
        early_bird: Optional discounted tier with a deadline.
    """

    name: str
    regular: PricingTier
    early_bird: PricingTier | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "DivisionPricing":
        """camelCase形式の辞書からDivisionPricingを生成する

        regularが欠けている場合はearlyBirdの価格、それもなければ0を通常価格とする。

        Args:
            data: {"name", "regular": {"price"}, "earlyBird": {"price", "deadline"}}

        Returns:
            DivisionPricing
        """
        early_raw = data.get("earlyBird") or data.get("early_bird")
        early_bird = None
        if isinstance(early_raw, dict) and early_raw.get("price") is not None:
            early_bird = PricingTier(
                price=float(early_raw["price"]),
                deadline=early_raw.get("deadline") or None,
            )

        regular_raw = data.get("regular")
        if isinstance(regular_raw, dict) and regular_raw.get("price") is not None:
            regular = PricingTier(price=float(regular_raw["price"]))
        elif early_bird is not None:
            regular = PricingTier(price=early_bird.price)
        else:
            regular = PricingTier(price=0.0)

        return cls(name=str(data.get("name", "")), regular=regular, early_bird=early_bird)

    def to_dict(self) -> dict:
        result: dict = {"name": self.name, "regular": {"price": self.regular.price}}
        if self.early_bird is not None:
            result["earlyBird"] = {
                "price": self.early_bird.price,
                "deadline": self.early_bird.deadline,
            }
        return result


@dataclass(frozen=True)
class ActiveDivisionRate:
    """The price currently in effect for a division.

    Attributes:
        price: Resolved unit price.
        tier: "earlyBird" or "regular".
    """

    price: float
    tier: str
