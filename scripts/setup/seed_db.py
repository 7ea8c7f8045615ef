"""
Seed a development database with a handful of actors and one pending alert.
Usage: python scripts/setup/seed_db.py
       python scripts/setup/seed_db.py --neighbours 8
"""

import sys
import os
import argparse
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import SessionLocal, create_tables
from app.services import alert_service, identity_service
from app.services.errors import ValidationError


def ensure_actor(db, actor_id: str, name: str, is_admin: bool = False):
    existing = identity_service.get_actor_record(db, actor_id)
    if existing:
        print(f"   • {actor_id} already exists")
        return existing
    try:
        actor = identity_service.create_actor(db, name, is_admin=is_admin, actor_id=actor_id)
    except ValidationError as e:
        print(f"   ❌ {actor_id}: {e}")
        return None
    print(f"   ✓ {actor_id} ({name}{', admin' if is_admin else ''})")
    return actor


def main():
    parser = argparse.ArgumentParser(description="Seed actors and a sample alert")
    parser.add_argument("--neighbours", type=int, default=5, help="Number of voting neighbours to create")
    args = parser.parse_args()

    create_tables()
    db = SessionLocal()
    try:
        print("👤 Actors")
        author = ensure_actor(db, "author-1", "Hery Rakoto")
        ensure_actor(db, "admin-1", "Moderator", is_admin=True)
        for n in range(1, args.neighbours + 1):
            ensure_actor(db, f"neighbour-{n}", f"Neighbour {n}")

        if author is None:
            sys.exit(1)

        print("\n🚨 Sample alert")
        alert = alert_service.create_alert(db, author.id, {
            "reason": "Suspicious vehicle",
            "description": "Grey van circling the school gate since 7am",
            "location": "Rue Ratsimilaho, Antaninarenina",
            "urgency": "medium",
            "latitude": -18.9100,
            "longitude": 47.5250,
            "media": [],
        })
        print(f"   ✓ {alert.id} ({alert.status})")
    finally:
        db.close()

    print("\n🎉 Seed complete. Try: python scripts/test/simulate_votes.py --alert <id>")


if __name__ == "__main__":
    main()
