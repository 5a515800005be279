#!/usr/bin/env python3
"""Create the tables and load the default rooms and additional services."""
from hotel_common.database import Base, SessionLocal, engine
from hotel_common.seed import seed_catalog


def main() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        added = seed_catalog(db)
    finally:
        db.close()
    print(f"Catalogue seeded: {added['rooms']} rooms, {added['additional_services']} additional services.")


if __name__ == "__main__":
    main()
