from contextlib import asynccontextmanager
from typing import List

from fastapi import Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from hotel_common.config import get_settings
from hotel_common.database import Base, engine, get_db
from hotel_common.dependencies import get_current_user, get_store
from hotel_common.exceptions import register_exception_handlers
from hotel_common.logging_middleware import add_audit_middleware
from hotel_common.models import Booking, Payment, Profile
from hotel_common.payment_flow import process_payment
from hotel_common.rate_limit import apply_rate_limiter, limiter
from hotel_common.schemas import BookingDetailRead, PaymentCreate, PaymentRead
from hotel_common.store import TableStore

settings = get_settings()


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Payments Service", version="0.1.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    register_exception_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "payments")
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "payments"}


@app.post("/payments", response_model=PaymentRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def pay_booking(
    request: Request,
    payment_in: PaymentCreate,
    current_user: Profile = Depends(get_current_user),
    store: TableStore = Depends(get_store),
) -> Payment:
    booking = store.select(Booking, filters={"id": payment_in.booking_id}, single=True)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return process_payment(store, booking, current_user.id, payment_in.payment_method)


@app.get("/payments", response_model=List[PaymentRead])
@limiter.limit("30/minute")
def list_my_payments(
    request: Request,
    current_user: Profile = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> List[Payment]:
    return (
        db.query(Payment)
        .filter(Payment.user_id == current_user.id)
        .order_by(Payment.created_at.desc(), Payment.id.desc())
        .all()
    )


@app.get("/payments/{booking_id}", response_model=BookingDetailRead)
@limiter.limit("30/minute")
def checkout_summary(
    request: Request,
    booking_id: int,
    current_user: Profile = Depends(get_current_user),
    store: TableStore = Depends(get_store),
) -> Booking:
    booking = store.select(Booking, filters={"id": booking_id, "user_id": current_user.id}, single=True)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking
