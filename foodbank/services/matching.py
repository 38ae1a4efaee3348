# foodbank/services/matching.py
import json
import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from foodbank.core.config import settings
from foodbank.core.errors import (
    AlreadyClaimedError, AuthError, MalformedDataError, NotFoundError, ValidationError,
)
from foodbank.schemas import Donation, DonationIn, NearbyDonation, Snapshot, User
from foodbank.services.geo import as_finite, haversine_km

logger = logging.getLogger(__name__)

def _utcnow() -> datetime:
    return datetime.now(timezone.utc)

def _aware(dt: datetime) -> datetime:
    # naive timestamps from older snapshots are taken as UTC
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)

def is_expired(d: Donation, now: datetime) -> bool:
    return d.expires_at is not None and _aware(d.expires_at) < now

def is_available(d: Donation, now: datetime) -> bool:
    return not d.claimed and not is_expired(d, now)

def coerce_quantity(value: Any) -> int:
    q = as_finite(value)
    if q is None or q < 1:
        return 1
    return int(q)

def find_nearby(donations: Iterable[Donation], lat: Any, lon: Any, radius_km: Any,
                now: datetime, default_radius_km: Optional[float] = None) -> List[NearbyDonation]:
    """
    Available (unclaimed, not expired) donations within radius_km of (lat, lon),
    closest first. Ties keep collection order.
    Without a usable origin every available donation is returned unranked.
    """
    valid = [d for d in donations if is_available(d, now)]

    o_lat, o_lon = as_finite(lat), as_finite(lon)
    if o_lat is None or o_lon is None:
        return [NearbyDonation(**d.model_dump()) for d in valid]

    radius = as_finite(radius_km)
    if radius is None or radius < 0:
        radius = settings.default_radius_km if default_radius_km is None else default_radius_km

    ranked = []
    for d in valid:
        dist = haversine_km(o_lat, o_lon, d.lat, d.lon)
        if dist <= radius:
            ranked.append(NearbyDonation(**d.model_dump(), distance_km=dist))
    # list.sort is stable
    ranked.sort(key=lambda x: x.distance_km)
    return ranked

class DonationEngine:
    """
    Owns the donation collection (most recent first) and mirrors every
    mutation to a blob store exposing load()/save(snapshot).

    Mutations build the new collection, save it, and only then swap it in,
    so a failing store leaves the engine as it was.
    """

    def __init__(self, store=None, donations: Optional[List[Donation]] = None,
                 clock: Callable[[], datetime] = _utcnow,
                 default_radius_km: Optional[float] = None):
        self.store = store
        self.clock = clock
        self.default_radius_km = settings.default_radius_km if default_radius_km is None else default_radius_km
        if donations is None and store is not None:
            blob = store.load()
            donations = self._parse(blob).donations if blob else []
        self._donations: List[Donation] = list(donations or [])
        self._last_id = max((d.id for d in self._donations), default=0)

    @property
    def donations(self) -> List[Donation]:
        return list(self._donations)

    def get(self, donation_id: int) -> Optional[Donation]:
        return next((d for d in self._donations if d.id == donation_id), None)

    def _commit(self, donations: List[Donation]) -> None:
        if self.store is not None:
            self.store.save(self._dump(donations))
        self._donations = donations

    @staticmethod
    def _dump(donations: List[Donation]) -> Dict[str, Any]:
        return {"donations": [d.model_dump(mode="json") for d in donations]}

    @staticmethod
    def _parse(data: Union[Dict[str, Any], str, bytes]) -> Snapshot:
        try:
            if isinstance(data, (str, bytes)):
                snap = Snapshot.model_validate_json(data)
            else:
                snap = Snapshot.model_validate(data)
        except (PydanticValidationError, json.JSONDecodeError) as ex:
            raise MalformedDataError(f"Not a donation snapshot: {ex}") from ex
        ids = [d.id for d in snap.donations]
        if len(ids) != len(set(ids)):
            raise MalformedDataError("Duplicate donation ids in snapshot")
        return snap

    # ---------- operations ----------
    def create(self, params: DonationIn, user: Optional[User]) -> Donation:
        if user is None:
            logger.warning("create rejected: no authenticated user")
            raise AuthError("Login required to donate")

        title = (params.title or "").strip()
        lat, lon = as_finite(params.lat), as_finite(params.lon)
        if not title:
            raise ValidationError("Title is required")
        if lat is None or lon is None:
            raise ValidationError("Latitude and longitude must be finite numbers")

        now = self.clock()
        minutes = as_finite(params.expires_in_minutes)
        expires_at = None
        if minutes and minutes > 0:
            try:
                expires_at = now + timedelta(minutes=minutes)
            except (OverflowError, ValueError) as ex:
                raise ValidationError("Expiry out of range") from ex

        new_id = max(self._last_id, max((d.id for d in self._donations), default=0)) + 1
        d = Donation(
            id=new_id,
            title=title,
            description=params.description,
            quantity=coerce_quantity(params.quantity),
            lat=lat,
            lon=lon,
            donor_id=user.id,
            donor_name=user.name,
            created_at=now,
            expires_at=expires_at,
        )
        self._commit([d, *self._donations])
        self._last_id = new_id
        logger.info("donation %s created by user %s", d.id, user.id)
        return d

    def claim(self, donation_id: int, user: Optional[User]) -> Donation:
        # Expiry is not re-checked here: an expired donation can still be
        # claimed by id, it is only hidden from search.
        if user is None or user.role != "recipient":
            logger.warning("claim of %s rejected: not a recipient", donation_id)
            raise AuthError("Only recipients can claim")

        idx = next((i for i, d in enumerate(self._donations) if d.id == donation_id), None)
        if idx is None:
            raise NotFoundError(f"Donation {donation_id} not found")
        current = self._donations[idx]
        if current.claimed:
            logger.warning("donation %s already claimed by %s", donation_id, current.claimed_by)
            raise AlreadyClaimedError(f"Donation {donation_id} already claimed")

        updated = current.model_copy(update={
            "claimed": True,
            "claimed_by": user.id,
            "claimed_by_name": user.name,
        })
        donations = list(self._donations)
        donations[idx] = updated
        self._commit(donations)
        logger.info("donation %s claimed by user %s", donation_id, user.id)
        return updated

    def find_nearby(self, lat: Any, lon: Any, radius_km: Any = None,
                    donations: Optional[Iterable[Donation]] = None) -> List[NearbyDonation]:
        source = self._donations if donations is None else donations
        return find_nearby(source, lat, lon, radius_km, self.clock(), self.default_radius_km)

    def clear_all(self) -> None:
        self._commit([])
        logger.info("all donations cleared")

    def export_snapshot(self) -> Dict[str, Any]:
        return self._dump(self._donations)

    def import_snapshot(self, data: Union[Dict[str, Any], str, bytes]) -> int:
        snap = self._parse(data)
        self._commit(list(snap.donations))
        self._last_id = max([self._last_id, *(d.id for d in snap.donations)])
        logger.info("imported %d donations", len(snap.donations))
        return len(snap.donations)
