"""Destination phone number validation."""

from __future__ import annotations

from smsdispatch.validation.phone import (
    NumberingPlan,
    PhoneNumber,
    PhoneValidator,
    mask_phone,
)

__all__ = [
    "NumberingPlan",
    "PhoneNumber",
    "PhoneValidator",
    "mask_phone",
]
