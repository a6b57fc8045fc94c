import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

# Ensure all SQLAlchemy models are imported so relationships resolve
import portal.models  # noqa: F401

from portal import config
from portal.errors import install_error_handlers
from portal.api import (
    churches,    # /churches
    secretary,   # /secretary (login, own participants)
    organizer,   # /organizer (passkey login, roster, export)
    members,     # /members (hosted-auth accounts)
)

# Ops/system endpoints (/health, /version)
from portal.api.system import router as system_router

logging.basicConfig(
    level=config.log_level(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title=config.APP_NAME)

# --- CORS for the frontend ---
app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

install_error_handlers(app)

# Routers
app.include_router(system_router)     # /health, /version
app.include_router(churches.router)   # /churches
app.include_router(secretary.router)  # /secretary
app.include_router(organizer.router)  # /organizer
app.include_router(members.router)    # /members
