from contextlib import asynccontextmanager
from datetime import date
from typing import List, Optional

from circuitbreaker import circuit
from fastapi import Depends, FastAPI, HTTPException, Query, Request, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session

from hotel_common.cache import CatalogCache
from hotel_common.config import get_settings
from hotel_common.database import Base, SessionLocal, engine, get_db
from hotel_common.dependencies import allow_roles
from hotel_common.exceptions import register_exception_handlers
from hotel_common.logging_middleware import add_audit_middleware
from hotel_common.models import AdditionalService, Profile, RoleEnum, Room, RoomStatus, RoomType
from hotel_common.pricing import quote_booking
from hotel_common.rate_limit import apply_rate_limiter, limiter
from hotel_common.schemas import (
    QuoteRead,
    RoomCreate,
    RoomRead,
    RoomUpdate,
    ServiceCreate,
    ServiceRead,
    ServiceUpdate,
)
from hotel_common.seed import seed_catalog

settings = get_settings()
catalog_cache: CatalogCache[list] = CatalogCache(ttl=settings.room_cache_ttl)
staff_only = allow_roles(RoleEnum.RECEPTIONIST, RoleEnum.ADMIN)


@asynccontextmanager
async def lifespan(_: FastAPI):
    if settings.run_db_migrations:
        Base.metadata.create_all(bind=engine)
    if settings.seed_catalog_on_startup:
        db = SessionLocal()
        try:
            seed_catalog(db)
        finally:
            db.close()
    yield


def create_app() -> FastAPI:
    fastapi_app = FastAPI(title="Rooms Service", version="0.1.0", lifespan=lifespan)
    fastapi_app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    apply_rate_limiter(fastapi_app)
    register_exception_handlers(fastapi_app)
    add_audit_middleware(fastapi_app, "rooms")
    return fastapi_app


app = create_app()


@app.get("/health", tags=["health"])
def health() -> dict[str, str]:
    return {"status": "ok", "service": "rooms"}


@app.get("/rooms", response_model=List[RoomRead])
@circuit(failure_threshold=5, recovery_timeout=60)
def list_rooms(
    request: Request,
    room_type: Optional[RoomType] = None,
    guests: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
) -> List[RoomRead]:
    cache_key = CatalogCache.key("rooms", room_type=room_type.value if room_type else None, guests=guests)
    cached = catalog_cache.get(cache_key)
    if cached is not None:
        return cached

    query = db.query(Room).filter(Room.status == RoomStatus.AVAILABLE)
    if room_type:
        query = query.filter(Room.type == room_type)
    if guests:
        query = query.filter(Room.capacity >= guests)
    rooms = [RoomRead.model_validate(room) for room in query.order_by(Room.price_per_night.asc()).all()]
    catalog_cache.set(cache_key, rooms)
    return rooms


@app.post("/rooms", response_model=RoomRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def add_room(
    request: Request,
    room_in: RoomCreate,
    _: Profile = Depends(staff_only),
    db: Session = Depends(get_db),
) -> Room:
    room = Room(**room_in.model_dump())
    db.add(room)
    db.commit()
    db.refresh(room)
    catalog_cache.invalidate("rooms")
    return room


@app.get("/rooms/{room_id}", response_model=RoomRead)
@limiter.limit("60/minute")
def get_room(request: Request, room_id: int, db: Session = Depends(get_db)) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return room


@app.put("/rooms/{room_id}", response_model=RoomRead)
@limiter.limit("15/minute")
def update_room(
    request: Request,
    room_id: int,
    room_update: RoomUpdate,
    _: Profile = Depends(staff_only),
    db: Session = Depends(get_db),
) -> Room:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")

    for key, value in room_update.model_dump(exclude_unset=True).items():
        setattr(room, key, value)
    db.commit()
    db.refresh(room)
    catalog_cache.invalidate("rooms")
    return room


@app.delete("/rooms/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
@limiter.limit("15/minute")
def delete_room(
    request: Request,
    room_id: int,
    _: Profile = Depends(staff_only),
    db: Session = Depends(get_db),
) -> None:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    db.delete(room)
    db.commit()
    catalog_cache.invalidate("rooms")


@app.get("/rooms/{room_id}/quote", response_model=QuoteRead)
@limiter.limit("60/minute")
def quote_room(
    request: Request,
    room_id: int,
    check_in: Optional[date] = None,
    check_out: Optional[date] = None,
    service_ids: Optional[List[int]] = Query(default=None),
    db: Session = Depends(get_db),
) -> QuoteRead:
    room = db.query(Room).filter(Room.id == room_id).first()
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    services: list[AdditionalService] = []
    if service_ids:
        services = (
            db.query(AdditionalService)
            .filter(AdditionalService.id.in_(service_ids), AdditionalService.active.is_(True))
            .all()
        )
    quote = quote_booking(room, services, check_in, check_out)
    return QuoteRead(
        room_id=room.id,
        nights=quote.nights,
        room_subtotal=quote.room_subtotal,
        services_subtotal=quote.services_subtotal,
        total=quote.total,
    )


@app.get("/services", response_model=List[ServiceRead])
def list_services(request: Request, db: Session = Depends(get_db)) -> List[ServiceRead]:
    cache_key = CatalogCache.key("services")
    cached = catalog_cache.get(cache_key)
    if cached is not None:
        return cached
    services = [
        ServiceRead.model_validate(service)
        for service in db.query(AdditionalService)
        .filter(AdditionalService.active.is_(True))
        .order_by(AdditionalService.price.asc())
        .all()
    ]
    catalog_cache.set(cache_key, services)
    return services


@app.post("/services", response_model=ServiceRead, status_code=status.HTTP_201_CREATED)
@limiter.limit("10/minute")
def add_service(
    request: Request,
    service_in: ServiceCreate,
    _: Profile = Depends(staff_only),
    db: Session = Depends(get_db),
) -> AdditionalService:
    service = AdditionalService(**service_in.model_dump())
    db.add(service)
    db.commit()
    db.refresh(service)
    catalog_cache.invalidate("services")
    return service


@app.put("/services/{service_id}", response_model=ServiceRead)
@limiter.limit("15/minute")
def update_service(
    request: Request,
    service_id: int,
    service_update: ServiceUpdate,
    _: Profile = Depends(staff_only),
    db: Session = Depends(get_db),
) -> AdditionalService:
    service = db.query(AdditionalService).filter(AdditionalService.id == service_id).first()
    if not service:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Service not found")

    for key, value in service_update.model_dump(exclude_unset=True).items():
        setattr(service, key, value)
    db.commit()
    db.refresh(service)
    catalog_cache.invalidate("services")
    return service
