from pathlib import Path

from foodbank.core.config import settings
from foodbank.repos.blob import JsonFileBlobStore
from foodbank.schemas import DonationIn, User
from foodbank.services.matching import DonationEngine

DONOR = User(id=1, name="Alice Donor", email="alice@donor", role="donor")

DEMO = [
    {"title": "Bread loaves", "quantity": 12, "lat": -1.286389, "lon": 36.817223, "expires_in_minutes": 240},
    {"title": "Sukuma wiki", "description": "fresh, 3 bunches", "quantity": 3, "lat": -1.2921, "lon": 36.8219},
    {"title": "Rice (2kg bags)", "quantity": 5, "lat": -1.3032, "lon": 36.7073, "expires_in_minutes": 1440},
]

def main():
    path = settings.storage_path or Path("donations.json")
    engine = DonationEngine(store=JsonFileBlobStore(path))
    for row in DEMO:
        d = engine.create(DonationIn(**row), DONOR)
        print(f"Seeded #{d.id}: {d.title}")
    print(f"{len(engine.donations)} donations in {path}")

if __name__ == "__main__":
    main()
