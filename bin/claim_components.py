# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Assign components that have no owner to an existing user.

Rows created before migration 0003 have user_id = NULL.  No API request can
see them, because every query filters on the caller's id.  This script hands
all of them to one account:

    python bin/claim_components.py owner@example.com
    python bin/claim_components.py owner@example.com --dry-run
"""

import argparse
import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from database import SessionLocal         # noqa: E402
from models.user import User              # noqa: E402
from models.component import Component    # noqa: E402


def claim(email: str, dry_run: bool = False) -> int:
    db = SessionLocal()
    try:
        owner = db.query(User).filter(User.email == email).first()
        if not owner:
            print(f"[claim_components] No user with email '{email}'.")
            return 1

        orphans = db.query(Component).filter(Component.user_id.is_(None))
        count = orphans.count()
        if dry_run:
            print(f"[claim_components] {count} unowned component(s) would be assigned to user {owner.id}.")
            return 0

        orphans.update({Component.user_id: owner.id}, synchronize_session=False)
        db.commit()
        print(f"[claim_components] Assigned {count} component(s) to user {owner.id}.")
        return 0
    finally:
        db.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Assign unowned components to a user.")
    parser.add_argument("email", help="email of the receiving account (exact match)")
    parser.add_argument("--dry-run", action="store_true", help="only report how many rows would change")
    args = parser.parse_args()
    sys.exit(claim(args.email, args.dry_run))
