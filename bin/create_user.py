# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Bootstrap script – creates the first user account.

Run once after the migrations:
    python bin/create_user.py

Reads FIRST_USER_NAME, FIRST_USER_EMAIL and FIRST_USER_PASSWORD from
etc/app.conf (or the environment).  It goes through AuthService, so it
applies the same rules as POST /auth/signup.
"""

import sys
import os

# ---------------------------------------------------------------------------
# Path setup so backend modules are importable
# ---------------------------------------------------------------------------
# bin/create_user.py  →  ../  →  project root
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
_BACKEND_DIR  = os.path.join(_PROJECT_ROOT, "backend")
if _BACKEND_DIR not in sys.path:
    sys.path.insert(0, _BACKEND_DIR)
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from core.config import settings          # noqa: E402
from core.errors import AppError          # noqa: E402
from database import SessionLocal         # noqa: E402
from auth.service import AuthService      # noqa: E402


def seed():
    if not settings.first_user_email or not settings.first_user_password:
        print("[create_user] FIRST_USER_EMAIL or FIRST_USER_PASSWORD not set in etc/app.conf – nothing to do.")
        return

    name = settings.first_user_name or settings.first_user_email.split("@")[0]

    db = SessionLocal()
    try:
        user = AuthService(db).signup(name, settings.first_user_email, settings.first_user_password)
    except AppError as exc:
        print(f"[create_user] {exc.message} – skipping.")
        return
    finally:
        db.close()
    print(f"[create_user] User '{user.email}' created with id {user.id}.")


if __name__ == "__main__":
    seed()
