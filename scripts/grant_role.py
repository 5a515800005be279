#!/usr/bin/env python3
"""Grant a role (receptionist or admin) to an existing profile by email."""
import argparse
import sys

from hotel_common.database import SessionLocal
from hotel_common.models import Profile, RoleEnum, UserRole


def main() -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email")
    parser.add_argument("role", choices=[role.value for role in RoleEnum])
    args = parser.parse_args()

    db = SessionLocal()
    try:
        profile = db.query(Profile).filter(Profile.email == args.email.lower()).first()
        if profile is None:
            print(f"No profile registered with {args.email}", file=sys.stderr)
            return 1
        role = RoleEnum(args.role)
        if role not in profile.role_values:
            db.add(UserRole(user_id=profile.id, role=role))
            db.commit()
        print(f"{profile.email} now has roles: {', '.join(sorted(r.value for r in profile.role_values | {role}))}")
    finally:
        db.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
