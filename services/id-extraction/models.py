"""Pydantic models for the extract-id-data request, extraction result and responses."""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, field_validator, model_validator
from pydantic.alias_generators import to_camel

from errors import MissingParameter

REQUIRED_PARAMETERS = ("imageUrl", "idType", "userId")

# Residual key holding model values that a named field cannot hold
UNMAPPED_KEY = "unmappedFields"

TEXT_FIELDS = (
    "id_type", "id_number", "issue_date", "expiry_date",
    "first_name", "middle_name", "last_name", "birth_date", "birth_place",
    "nationality", "province_of_origin", "gender",
    "address", "city", "province", "country", "phone", "email",
)

_GENDER_ALIASES = {
    "m": "M",
    "masculin": "M",
    "male": "M",
    "homme": "M",
    "f": "F",
    "féminin": "F",
    "feminin": "F",
    "female": "F",
    "femme": "F",
}

_UNFIT = object()


def _as_text(value: Any) -> Any:
    """Text form of a model value, or _UNFIT when it has none."""
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bool):
        return _UNFIT
    if isinstance(value, (int, float)):
        return str(value)
    # Address lines sometimes come back as a list
    if isinstance(value, list) and all(
        isinstance(v, (str, int, float)) and not isinstance(v, bool) for v in value
    ):
        return ", ".join(str(v) for v in value)
    return _UNFIT


class ExtractionRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    image_url: str
    id_type: str
    user_id: str

    @classmethod
    def from_payload(cls, payload: Any) -> "ExtractionRequest":
        """Validate the inbound JSON body, rejecting absent or empty parameters."""
        if not isinstance(payload, dict):
            payload = {}

        values = {}
        for name in REQUIRED_PARAMETERS:
            value = payload.get(name)
            if isinstance(value, (int, float)) and not isinstance(value, bool):
                value = str(value)
            elif value is not None and not isinstance(value, str):
                raise MissingParameter(f"Invalid parameter: {name} must be a string")

            if not value or not value.strip():
                raise MissingParameter(
                    "Missing required parameters: imageUrl, idType, userId"
                )
            values[name] = value.strip()

        return cls.model_validate(values)


class ExtractedFields(BaseModel):
    """Fields read from the document.

    Every named field is always serialized (null when absent). Keys outside the
    schema are kept as-is alongside ``rawData``; values a named field cannot
    hold are moved under ``unmappedFields``.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    id_type: str | None = None
    id_number: str | None = None
    issue_date: str | None = None
    expiry_date: str | None = None

    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    birth_date: str | None = None
    birth_place: str | None = None
    nationality: str | None = None
    province_of_origin: str | None = None
    gender: str | None = None

    address: str | None = None
    city: str | None = None
    province: str | None = None
    country: str | None = None

    phone: str | None = None
    email: str | None = None

    raw_data: Any = None

    @model_validator(mode="before")
    @classmethod
    def _split_unfit_values(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data

        data = dict(data)
        unmapped: dict[str, Any] = {}
        for name in TEXT_FIELDS:
            for key in dict.fromkeys((to_camel(name), name)):
                if key not in data:
                    continue
                text = _as_text(data[key])
                if text is _UNFIT:
                    unmapped[key] = data[key]
                    data[key] = None
                else:
                    data[key] = text

        if unmapped:
            existing = data.get(UNMAPPED_KEY)
            if isinstance(existing, dict):
                unmapped = {**existing, **unmapped}
            elif existing is not None:
                unmapped[UNMAPPED_KEY] = existing
            data[UNMAPPED_KEY] = unmapped
        return data

    @field_validator("gender")
    @classmethod
    def _normalize_gender(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return _GENDER_ALIASES.get(value.strip().lower(), value.strip())

    def value_of(self, name: str) -> str | None:
        """Return a named field as a stripped string, or None when absent or blank."""
        value = getattr(self, name)
        if value is None:
            return None
        value = str(value).strip()
        return value or None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class ExtractionSuccess(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    success: Literal[True] = True
    data: dict[str, Any]
    personal_data_action: Literal["inserted", "updated"]
    personal_data_result: dict[str, Any] | None
    message: str


class ExtractionFailure(BaseModel):
    success: Literal[False] = False
    error: str
