from __future__ import annotations

from guestmeals.application.use_cases.seed_time_slots import SeedTimeSlots
from guestmeals.infrastructure.db.repositories.time_slot_repo import SqlAlchemyTimeSlotRepository
from guestmeals.infrastructure.db.schema import migrate_schema
from guestmeals.infrastructure.db.session import get_engine


def main() -> None:
    engine = get_engine(timeout_seconds=2.0)
    migrate_schema(engine)

    seeded = SeedTimeSlots(SqlAlchemyTimeSlotRepository(engine)).execute()
    if seeded:
        print(f"seeded {seeded} time slots")
    else:
        print("time slots already present")
    print("seed complete")


if __name__ == "__main__":
    main()
