"""Request body models."""

from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field

from affiliate.config.tiers import TierType


class RequestModel(BaseModel):
    """Base for JSON bodies: camelCase on the wire, unknown keys ignored."""

    model_config = ConfigDict(
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )


class BootstrapRequest(RequestModel):
    """First sign-in of a participant."""

    full_name: str | None = Field(
        default=None, alias="fullName", min_length=2, description="Display name"
    )
    referrer_code: str | None = Field(
        default=None,
        alias="referrerCode",
        min_length=3,
        description="Referral code used at signup",
    )


class UpgradeRequest(RequestModel):
    """Tier change requested by the participant."""

    plan: TierType = Field(..., description="Target tier")


class SaleRequest(RequestModel):
    """Paid bundle sale reported by the payment integration."""

    external_id: str | None = Field(
        default=None,
        alias="externalId",
        min_length=3,
        description="Idempotency key; generated when omitted",
    )
    buyer_email: str = Field(
        ...,
        alias="buyerEmail",
        pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$",
        description="Buyer reference",
    )
    amount_pen: Decimal = Field(
        ..., alias="amountPen", gt=0, description="Gross amount in PEN"
    )
    referral_code: str | None = Field(
        default=None, alias="referralCode", min_length=3, max_length=64
    )
    source: str | None = Field(default=None, max_length=64)


class AdminUpdateRequest(RequestModel):
    """Administrative participant changes."""

    plan: TierType | None = None
    disabled: bool | None = None
    full_name: str | None = Field(default=None, alias="fullName", min_length=2)
