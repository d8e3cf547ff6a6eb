"""Raw record types read from the business store.

Rows come from an external store with loosely typed, partially filled
columns. Each record kind is validated here, at the repository boundary,
so the metrics modules only ever see typed values.
"""

from datetime import date, datetime
from typing import Annotated, Literal, Optional

from pydantic import AliasChoices, BaseModel, BeforeValidator, Field, field_validator

Gender = Literal["male", "female"]

_GENDER_ALIASES = {
    "m": "male", "male": "male", "公": "male", "雄": "male",
    "f": "female", "female": "female", "母": "female", "雌": "female",
}


def _to_date(value):
    """Accept dates, datetimes and ISO strings with an optional time part."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str):
        return value.strip()[:10]
    return value


def _to_gender(value):
    if isinstance(value, str):
        return _GENDER_ALIASES.get(value.strip().lower(), value)
    return value


LooseDate = Annotated[date, BeforeValidator(_to_date)]
OptionalDate = Annotated[Optional[date], BeforeValidator(_to_date)]


class RecordBase(BaseModel):
    """Common config: ignore unknown columns, coerce numeric ids to str."""

    model_config = {"extra": "ignore", "coerce_numbers_to_str": True}


class Animal(RecordBase):
    id: str
    name: str
    breed: str = "unknown"
    gender: Annotated[Gender, BeforeValidator(_to_gender)]
    birth_date: LooseDate
    status: str = "owned"
    weight: Optional[float] = Field(None, ge=0)
    created_at: OptionalDate = None

    @field_validator("breed", "status", mode="before")
    @classmethod
    def _blank_to_default(cls, v, info):
        if v is None or (isinstance(v, str) and not v.strip()):
            return cls.model_fields[info.field_name].default
        return v


class Purchase(RecordBase):
    dog_id: str
    amount: float = Field(..., ge=0, validation_alias=AliasChoices("amount", "price"))
    purchase_date: LooseDate


class Sale(RecordBase):
    dog_id: str
    amount: float = Field(..., ge=0, validation_alias=AliasChoices("amount", "price"))
    sale_date: LooseDate
    litter_id: Optional[str] = None


class Expense(RecordBase):
    dog_id: Optional[str] = None
    amount: float = Field(..., ge=0)
    category: str = "other"
    expense_date: LooseDate = Field(..., validation_alias=AliasChoices("expense_date", "date"))
    description: Optional[str] = Field(None, validation_alias=AliasChoices("description", "notes"))
    litter_id: Optional[str] = None

    @field_validator("category", mode="before")
    @classmethod
    def _blank_category(cls, v):
        return v or "other"


class HealthEvent(RecordBase):
    dog_id: str
    record_type: str = Field(..., validation_alias=AliasChoices("record_type", "type"))
    treatment_type: Optional[str] = None
    description: Optional[str] = None
    record_date: LooseDate = Field(..., validation_alias=AliasChoices("record_date", "date"))
    veterinarian: Optional[str] = None
    cost: float = 0.0

    @field_validator("record_type", mode="before")
    @classmethod
    def _normalize_type(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("cost", mode="before")
    @classmethod
    def _null_cost(cls, v):
        return 0.0 if v is None else v

    @property
    def label(self) -> str:
        """Vaccine or treatment name, falling back to the free-text description."""
        return self.treatment_type or self.description or "unknown"


class LitterEvent(RecordBase):
    id: Optional[str] = None
    mother_id: str = Field(..., validation_alias=AliasChoices("mother_id", "dam_id"))
    father_id: str = Field(..., validation_alias=AliasChoices("father_id", "sire_id"))
    mating_date: LooseDate
    birth_date: OptionalDate = None
    expected_birth_date: OptionalDate = None
    puppies_count: int = Field(0, ge=0, validation_alias=AliasChoices("puppies_count", "puppy_count"))
    notes: Optional[str] = None

    @field_validator("puppies_count", mode="before")
    @classmethod
    def _null_count(cls, v):
        return 0 if v is None else v
