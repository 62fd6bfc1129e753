"""
Snippy — Donor Codes, Insult Moderation & Announcements Backend
================================================================
Issues and verifies donor unlock codes for the Snippy browser extension,
runs the moderation queue for user-submitted insults, and serves
time-boxed announcements.

Package layout::

    snippy/
    ├── config.py          # YAML → typed Python config
    ├── constants.py       # Bot identity, labels, fixed reasons
    ├── errors.py          # ValidationError / NotFoundError / ...
    ├── database/
    │   ├── engine.py      # SQLAlchemy engine, migrations, session helper
    │   ├── models.py      # Donor, Insult, Announcement
    │   └── migrations/    # Alembic revision chain
    ├── engine/
    │   └── sanitizer.py   # Allow-list HTML filter
    ├── services/
    │   ├── donor_service.py         # Identity store
    │   ├── authorization.py         # (email, code) → access level
    │   ├── insult_service.py        # Moderation engine
    │   ├── announcement_service.py  # Date-windowed announcements
    │   ├── notification_service.py  # Outbound SMTP email
    │   └── feedback_service.py      # CAPTCHA check + routing
    └── api/
        ├── main.py        # FastAPI app
        ├── deps.py        # Engine/config providers, operator secret
        └── routes/        # Donor, insult, announcement, feedback endpoints
"""

__version__ = "0.1.0"
