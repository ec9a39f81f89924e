import threading
from datetime import datetime, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sportbook.core.errors import ConflictError
from sportbook.db import models
from sportbook.db.session import Base
from sportbook.services.booking_service import BookingService

from factories import FrozenClock, create_slot, create_user, create_venue, ctx_for

RACERS = 8


def test_concurrent_bookings_for_one_slot_admit_exactly_one(tmp_path):
    engine = create_engine(
        f"sqlite+pysqlite:///{tmp_path / 'race.db'}",
        connect_args={"check_same_thread": False, "timeout": 30},
        future=True,
    )
    SessionLocal = sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as setup:
        slot = create_slot(setup, create_venue(setup))
        contexts = [
            ctx_for(create_user(setup, email=f"racer{i}@example.com")) for i in range(RACERS)
        ]
        slot_id = slot.id

    clock = FrozenClock(datetime(2030, 6, 1, 8, 0, tzinfo=timezone.utc))
    barrier = threading.Barrier(RACERS)
    outcomes = []
    lock = threading.Lock()

    def race(ctx):
        with SessionLocal() as session:
            service = BookingService(session, clock=clock, tz=timezone.utc)
            barrier.wait()
            try:
                service.create_booking(ctx, slot_id)
                outcome = "booked"
            except ConflictError:
                outcome = "conflict"
            except Exception as exc:  # surfaced through the assertion below
                outcome = repr(exc)
            with lock:
                outcomes.append(outcome)

    threads = [threading.Thread(target=race, args=(ctx,)) for ctx in contexts]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join(timeout=60)

    assert sorted(outcomes) == ["booked"] + ["conflict"] * (RACERS - 1)
    with SessionLocal() as check:
        active = (
            check.query(models.Booking)
            .filter(models.Booking.slot_id == slot_id)
            .filter(models.Booking.status.in_(models.ACTIVE_BOOKING_STATUSES))
            .count()
        )
        assert active == 1
        assert check.get(models.Slot, slot_id).status == models.SlotStatus.booked
    engine.dispose()
