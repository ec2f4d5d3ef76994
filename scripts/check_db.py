import sys, pathlib
sys.path.append(str(pathlib.Path(__file__).resolve().parents[1] / "backend"))

from sqlalchemy import text
from tandemboard.database import SessionLocal, init_db
from tandemboard.models.generated import Bookings, PilotAvailability, Pilots, Tags


def main():
    init_db()
    db = SessionLocal()
    try:
        print("DB OK:", db.execute(text("SELECT 1")).scalar())
        print("Pilots:", db.query(Pilots).count())
        print("Availability marks:", db.query(PilotAvailability).count())
        print("Bookings:", db.query(Bookings).count())
        print("Tags:", db.query(Tags).count())
    finally:
        db.close()


if __name__ == "__main__":
    main()
