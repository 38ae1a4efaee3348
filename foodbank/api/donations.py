# foodbank/api/donations.py
from typing import Any, List, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from foodbank.core.errors import NotFoundError
from foodbank.deps import get_current_user, get_engine, get_geocoder
from foodbank.schemas import Donation, DonationIn, ImportOut, NearbyDonation, User
from foodbank.services.geo import as_finite
from foodbank.services.location import Geocoder, GeocodeLocationSource
from foodbank.services.matching import DonationEngine

router = APIRouter(prefix="/api/donations", tags=["donations"])

@router.get("", response_model=List[Donation])
def list_donations(engine: DonationEngine = Depends(get_engine)):
    return engine.donations

@router.post("", status_code=status.HTTP_201_CREATED, response_model=Donation)
def create_donation(
    body: DonationIn,
    engine: DonationEngine = Depends(get_engine),
    geocoder: Geocoder = Depends(get_geocoder),
    user: Optional[User] = Depends(get_current_user),
):
    # no coords but an address: resolve it before handing over to the engine
    if user is not None and body.address and (as_finite(body.lat) is None or as_finite(body.lon) is None):
        lat, lon = GeocodeLocationSource(body.address, geocoder).request_current_location()
        body = body.model_copy(update={"lat": lat, "lon": lon})
    return engine.create(body, user)

@router.get("/nearby", response_model=List[NearbyDonation])
def nearby_donations(
    lat: Optional[str] = Query(None),
    lon: Optional[str] = Query(None),
    radius_km: Optional[str] = Query(None),
    address: Optional[str] = Query(None),
    engine: DonationEngine = Depends(get_engine),
    geocoder: Geocoder = Depends(get_geocoder),
):
    if address and (as_finite(lat) is None or as_finite(lon) is None):
        lat, lon = GeocodeLocationSource(address, geocoder).request_current_location()
    return engine.find_nearby(lat, lon, radius_km)

@router.get("/export")
def export_donations(engine: DonationEngine = Depends(get_engine)):
    return engine.export_snapshot()

@router.post("/import", response_model=ImportOut)
def import_donations(payload: Any = Body(...), engine: DonationEngine = Depends(get_engine)):
    return ImportOut(imported=engine.import_snapshot(payload))

@router.delete("")
def clear_donations(engine: DonationEngine = Depends(get_engine)):
    engine.clear_all()
    return {"ok": True}

@router.get("/{donation_id}", response_model=Donation)
def get_donation(donation_id: int, engine: DonationEngine = Depends(get_engine)):
    d = engine.get(donation_id)
    if d is None:
        raise NotFoundError(f"Donation {donation_id} not found")
    return d

@router.post("/{donation_id}/claim", response_model=Donation)
def claim_donation(
    donation_id: int,
    engine: DonationEngine = Depends(get_engine),
    user: Optional[User] = Depends(get_current_user),
):
    return engine.claim(donation_id, user)
