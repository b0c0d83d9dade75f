"""Destination phone number validation and E.164 normalization.

The default numbering plan accepts North American 10-digit numbers with an
optional ``+``/``1`` prefix and the usual separators, e.g. ``555-123-4567``,
``(555) 123-4567`` or ``+1 555.123.4567``. All accepted numbers normalize to
``+15551234567``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

from smsdispatch.common.config import SmsDispatchConfig
from smsdispatch.common.constants import DEFAULT_COUNTRY_CODE, NANP_PATTERN
from smsdispatch.common.errors import EmptyInput, FormatError

_E164 = re.compile(r"^\+[1-9][0-9]{7,14}$")
_NON_DIGITS = re.compile(r"[^0-9]")


def mask_phone(value: str | None) -> str:
    """Mask all but the last four digits, for log lines."""
    if not value:
        return "<empty>"
    digits = _NON_DIGITS.sub("", value)
    return f"***{digits[-4:]}" if len(digits) > 4 else "***"


@dataclass(frozen=True)
class PhoneNumber:
    """A validated destination in E.164 form."""

    e164: str
    country_code: str = DEFAULT_COUNTRY_CODE
    national_number: str = ""

    def __post_init__(self) -> None:
        if not _E164.match(self.e164):
            raise FormatError(self.e164, f"Not an E.164 number: {self.e164!r}")
        if not self.e164.startswith("+" + self.country_code):
            raise FormatError(
                self.e164, f"{self.e164!r} does not start with country code {self.country_code}",
            )
        if not self.national_number:
            object.__setattr__(
                self, "national_number", self.e164[len(self.country_code) + 1:],
            )

    def __str__(self) -> str:
        return self.e164


@dataclass(frozen=True)
class NumberingPlan:
    """Pattern and country code that destinations are checked against."""

    pattern: str = NANP_PATTERN
    country_code: str = DEFAULT_COUNTRY_CODE
    _regex: re.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_regex", re.compile(self.pattern))

    @classmethod
    def from_settings(cls, settings: SmsDispatchConfig) -> NumberingPlan:
        return cls(pattern=settings.phone_pattern, country_code=settings.default_country_code)

    def match(self, candidate: str) -> re.Match[str] | None:
        return self._regex.match(candidate)


class PhoneValidator:
    """Validate raw destination strings against a numbering plan."""

    def __init__(self, plan: NumberingPlan | None = None) -> None:
        self._plan = plan or NumberingPlan()

    @property
    def plan(self) -> NumberingPlan:
        return self._plan

    def validate(self, raw: str | None) -> PhoneNumber:
        """Return the normalized number or raise EmptyInput / FormatError."""
        if raw is None or not raw.strip():
            raise EmptyInput()

        candidate = raw.strip()
        match = self._plan.match(candidate)
        if match is None:
            raise FormatError(raw)

        national = self._national_digits(candidate, match)
        if candidate.startswith("+") and not match.groupdict():
            # Custom plans without named groups: trust an explicit international prefix
            return PhoneNumber(
                e164="+" + national, country_code=self._plan.country_code,
            )
        return PhoneNumber(
            e164=f"+{self._plan.country_code}{national}",
            country_code=self._plan.country_code,
            national_number=national,
        )

    def is_valid(self, raw: str | None) -> bool:
        try:
            self.validate(raw)
        except (EmptyInput, FormatError):
            return False
        return True

    @staticmethod
    def _national_digits(candidate: str, match: re.Match[str]) -> str:
        groups = match.groupdict()
        if groups:
            return "".join(groups[name] or "" for name in groups)
        return _NON_DIGITS.sub("", candidate)


__all__ = ["PhoneNumber", "NumberingPlan", "PhoneValidator", "mask_phone"]
