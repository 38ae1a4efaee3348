# foodbank/api/location.py
from fastapi import APIRouter, Depends, Query

from foodbank.deps import get_geocoder
from foodbank.schemas import LatLon
from foodbank.services.location import Geocoder, GeocodeLocationSource

router = APIRouter(prefix="/api/location", tags=["location"])

@router.get("", response_model=LatLon)
def locate(address: str = Query(..., min_length=1), geocoder: Geocoder = Depends(get_geocoder)):
    lat, lon = GeocodeLocationSource(address, geocoder).request_current_location()
    return LatLon(lat=lat, lon=lon)
