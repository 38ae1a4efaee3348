# foodbank/schemas.py
from typing import Annotated, Optional, List, Literal, Union
from datetime import datetime

from pydantic import BaseModel, Field, StringConstraints, computed_field, model_validator

# --------------------------
# User & Auth Models
# --------------------------
Role = Literal["donor", "recipient"]

class User(BaseModel):
    id: int
    name: str
    email: str
    role: Role

class RegisterIn(BaseModel):
    name: str
    email: str
    password: str
    role: Role = "recipient"

class LoginIn(BaseModel):
    email: str
    password: str

class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: User

# --------------------------
# Donations
# --------------------------
# Form values may arrive as text; the engine coerces and validates them.
FormNumber = Union[float, str]

class DonationIn(BaseModel):
    title: str = ""
    description: Optional[str] = None
    quantity: Optional[FormNumber] = None
    lat: Optional[FormNumber] = None
    lon: Optional[FormNumber] = None
    expires_in_minutes: Optional[FormNumber] = None
    # resolved to lat/lon by the API layer when coordinates are missing
    address: Optional[str] = None

class Donation(BaseModel):
    id: int
    title: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    description: Optional[str] = None
    quantity: int = Field(1, ge=1)
    lat: float = Field(..., allow_inf_nan=False)
    lon: float = Field(..., allow_inf_nan=False)
    donor_id: int
    donor_name: str
    created_at: datetime
    expires_at: Optional[datetime] = None
    claimed: bool = False
    claimed_by: Optional[int] = None
    claimed_by_name: Optional[str] = None

    @model_validator(mode="after")
    def _claimant_matches_flag(self):
        if self.claimed and self.claimed_by is None:
            raise ValueError("claimed donation has no claimant")
        if not self.claimed and self.claimed_by is not None:
            raise ValueError("unclaimed donation has a claimant")
        return self

class NearbyDonation(Donation):
    # full precision; None when the search had no usable origin
    distance_km: Optional[float] = None

    @computed_field
    @property
    def distance_km_display(self) -> Optional[float]:
        if self.distance_km is None:
            return None
        return round(self.distance_km, 2)

class Snapshot(BaseModel):
    donations: List[Donation]

class ImportOut(BaseModel):
    ok: bool = True
    imported: int

# --------------------------
# Location
# --------------------------
class LatLon(BaseModel):
    lat: float
    lon: float
