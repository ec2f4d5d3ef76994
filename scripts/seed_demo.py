"""
Seed a demo day: pilots, tags, availability and a few bookings.

    python scripts/seed_demo.py 2026-10-19
"""

import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from datetime import date

from tandemboard.database import SessionLocal, init_db
from tandemboard.models.generated import Bookings, PilotAvailability, Pilots, Tags
from tandemboard.services.grid import TIME_SLOTS

PILOTS = ["John Smith", "Sarah Johnson", "Mike Wilson", "Ana Costa"]
TAGS = [("Paid", "#22c55e"), ("Voucher", "#3b82f6"), ("Pending", "#f59e0b")]


def main():
    day = date.fromisoformat(sys.argv[1]) if len(sys.argv) > 1 else date.today()

    init_db()
    db = SessionLocal()
    try:
        if db.query(Pilots).count() == 0:
            db.add_all([Pilots(display_name=name) for name in PILOTS])
        if db.query(Tags).count() == 0:
            db.add_all([Tags(name=name, color=color) for name, color in TAGS])
        db.commit()

        pilots = db.query(Pilots).order_by(Pilots.id).all()
        tags = db.query(Tags).order_by(Tags.id).all()

        for i, pilot in enumerate(pilots):
            # Stagger availability so rows differ
            for time_slot in TIME_SLOTS[i % 2::1 + i % 2]:
                exists = (
                    db.query(PilotAvailability)
                    .filter_by(pilot_id=pilot.id, day=day.isoformat(), time_slot=time_slot)
                    .first()
                )
                if not exists:
                    db.add(PilotAvailability(pilot_id=pilot.id, day=day.isoformat(), time_slot=time_slot))

        db.add_all([
            Bookings(name="Müller family", pickup_location="Hotel Alpina", number_of_people=2,
                     booking_date=day.isoformat(), time_slot="9:45", tag_id=tags[0].id),
            Bookings(name="Lee", pickup_location="Main square", number_of_people=1,
                     booking_date=day.isoformat(), time_slot="9:45", tag_id=tags[1].id),
            Bookings(name="School group", pickup_location="Station", number_of_people=3,
                     booking_date=day.isoformat(), time_slot="11:00"),
        ])
        db.commit()
        print(f"Seeded {day}: {len(pilots)} pilots, {len(tags)} tags")
    finally:
        db.close()


if __name__ == "__main__":
    main()
