"""
Static access-code table.

Each starting letter of a username maps to two plans (three-month and
seven-month), each holding an `initial` code (no active subscription) and a
`renewal` code (subscription still active). The table is plain JSON data,
validated once at startup.
"""
import json
import string
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from stings.core.errors import ValidationError

THREE_MONTHS = "threeMonths"
SEVEN_MONTHS = "sevenMonths"


class PlanCodes(BaseModel):
    initial: str = Field(min_length=1)
    renewal: str = Field(min_length=1)


class LetterCodes(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    three_months: PlanCodes = Field(alias=THREE_MONTHS)
    seven_months: PlanCodes = Field(alias=SEVEN_MONTHS)

    def plan(self, key: str) -> PlanCodes:
        return self.three_months if key == THREE_MONTHS else self.seven_months


_TABLE_ADAPTER = TypeAdapter(dict[str, LetterCodes])


def plan_key(subscription_months: int) -> str:
    """3 selects the three-month entry; any other length selects seven-month."""
    return THREE_MONTHS if subscription_months == 3 else SEVEN_MONTHS


class AccessCodeTable:
    """Lookup of the code a user must present for a plan."""

    def __init__(self, entries: dict[str, LetterCodes]):
        unknown = sorted(k for k in entries if k not in string.ascii_uppercase or len(k) != 1)
        if unknown:
            raise ValueError(f"access code table has invalid letters: {', '.join(unknown)}")
        missing = [c for c in string.ascii_uppercase if c not in entries]
        if missing:
            raise ValueError(f"access code table is missing letters: {', '.join(missing)}")
        self._entries = dict(entries)

    @classmethod
    def from_mapping(cls, raw: dict) -> "AccessCodeTable":
        return cls(_TABLE_ADAPTER.validate_python(raw))

    @classmethod
    def load(cls, path: str | Path) -> "AccessCodeTable":
        with open(path, "r", encoding="utf-8") as fh:
            return cls.from_mapping(json.load(fh))

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, letter: object) -> bool:
        return isinstance(letter, str) and letter.upper() in self._entries

    def letter_codes(self, letter: str) -> LetterCodes:
        entry = self._entries.get(letter.upper()) if len(letter) == 1 else None
        if entry is None:
            raise ValidationError("Invalid username: First letter must be A-Z")
        return entry

    def expected_code(self, letter: str, subscription_months: int, renewing: bool) -> str:
        """
        Resolve the code for a username's first letter and plan length.

        Args:
            letter: First character of the username (case-insensitive)
            subscription_months: Plan length being purchased
            renewing: True when the user's subscription is still active

        Raises:
            ValidationError: If the letter is not A-Z
        """
        codes = self.letter_codes(letter).plan(plan_key(subscription_months))
        return codes.renewal if renewing else codes.initial
