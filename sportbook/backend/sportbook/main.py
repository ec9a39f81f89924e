import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from .api.errors import register_error_handlers
from .api.routes import auth, venues, slots, bookings, reviews, misc
from .db.session import Base, engine, SessionLocal
from .config import get_settings
from .services.admin import ensure_admin_exists


settings = get_settings()
logging.basicConfig(level=settings.log_level)

app = FastAPI(title="SportBook API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
register_error_handlers(app)

app.include_router(auth.router, prefix="/api/v1")
app.include_router(venues.router, prefix="/api/v1")
app.include_router(slots.router, prefix="/api/v1")
app.include_router(bookings.router, prefix="/api/v1")
app.include_router(reviews.router, prefix="/api/v1")
app.include_router(misc.router, prefix="/api/v1")


@app.on_event("startup")
async def startup_event() -> None:
    Base.metadata.create_all(bind=engine)
    with SessionLocal() as session:
        ensure_admin_exists(session, settings.default_admin_email, settings.default_admin_password)
