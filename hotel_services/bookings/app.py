from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session, selectinload

from hotel_common.booking_flow import BookingDraft, submit_booking
from hotel_common.config import get_settings
from hotel_common.database import Base, engine, get_db
from hotel_common.dependencies import allow_roles, get_current_user, get_store
from hotel_common.exceptions import register_exception_handlers
from hotel_common.logging_middleware import add_audit_middleware
from hotel_common.models import STAFF_ROLES, Booking, Profile, RoleEnum, Room
from hotel_common.rate_limit import apply_rate_limiter, limiter
from hotel_common.schemas import (
    BookingCreate,
    BookingDetailRead,
    BookingRead,
    BookingStatusUpdate,
    BookingSubmissionRead,
)
from hotel_common.store import TableStore

settings = get_settings()
staff_only = allow_roles(RoleEnum.RECEPTIONIST, RoleEnum.ADMIN)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Bookings Service", version="0.1.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    register_exception_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "bookings")
    return fastapi_app


app = create_app()


def _with_details(db: Session):
    return db.query(Booking).options(
        selectinload(Booking.room),
        selectinload(Booking.payments),
        selectinload(Booking.service_links),
    )


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "bookings"}


@app.post("/bookings", response_model=BookingSubmissionRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("20/minute")
def create_booking(
    request: Request,
    booking_in: BookingCreate,
    current_user: Profile = Depends(get_current_user),
    store: TableStore = Depends(get_store),
) -> BookingSubmissionRead:
    room = store.select(Room, filters={"id": booking_in.room_id}, single=True)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")

    draft = BookingDraft(
        check_in=booking_in.check_in,
        check_out=booking_in.check_out,
        guests=booking_in.guests,
        service_ids=booking_in.service_ids,
        special_requests=booking_in.special_requests,
    )
    submission = submit_booking(store, draft, room, current_user.id)
    return BookingSubmissionRead(
        booking=BookingRead.model_validate(submission.booking),
        payment_path=submission.payment_path,
    )


@app.get("/bookings", response_model=List[BookingDetailRead])
@limiter.limit("30/minute")
def list_my_bookings(
    request: Request,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> List[Booking]:
    return (
        _with_details(db)
        .filter(Booking.user_id == current_user.id)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .all()
    )


@app.get("/bookings/all", response_model=List[BookingDetailRead])
@limiter.limit("30/minute")
def list_all_bookings(
    request: Request,
    _: Profile = Depends(staff_only),
    db: Session = Depends(get_db),
) -> List[Booking]:
    return _with_details(db).order_by(Booking.created_at.desc(), Booking.id.desc()).all()


@app.get("/bookings/{booking_id}", response_model=BookingDetailRead)
@limiter.limit("60/minute")
def get_booking(
    request: Request,
    booking_id: int,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> Booking:
    booking = _with_details(db).filter(Booking.id == booking_id).first()
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    if booking.user_id != current_user.id and not current_user.has_role(*STAFF_ROLES):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")
    return booking


@app.patch("/bookings/{booking_id}/status", response_model=BookingRead)
@limiter.limit("20/minute")
def update_booking_status(
    request: Request,
    booking_id: int,
    status_update: BookingStatusUpdate,
    _: Profile = Depends(staff_only),
    store: TableStore = Depends(get_store),
) -> Booking:
    booking = store.select(Booking, filters={"id": booking_id}, single=True)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    store.update(Booking, {"status": status_update.status}, filters={"id": booking_id})
    return booking
