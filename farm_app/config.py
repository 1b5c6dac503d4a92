from __future__ import annotations

import os

# Every setting can be overridden from the environment, e.g.
#     DATABASE_URL=sqlite:////data/farm_manager.db
#     LOG_LEVEL=DEBUG
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./farm_manager.db")

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "False") == "True"
LOG_FILE_PATH = os.getenv("LOG_FILE_PATH", "logs/farm_app.log")

CORS_ALLOW_ORIGINS = [
    o.strip() for o in os.getenv("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()
]
CORS_ALLOW_HEADERS = ["authorization", "x-client-info", "apikey", "content-type"]

FARM_NAME = os.getenv("FARM_NAME", "JEFF TRICKS FARM LTD")
FARM_LOCATION = os.getenv("FARM_LOCATION", "Nyeri, Kenya")
CURRENCY_SYMBOL = "KSh"

ROLE_ADMIN = "admin"
ROLE_STAFF = "staff"
ROLE_FARMER = "farmer"

# Writers without a bearer token are recorded under this id
SYSTEM_USER_ID = "system"
