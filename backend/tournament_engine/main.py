import logging
import os

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tournament_engine import __version__
from tournament_engine.database import init_db
from tournament_engine.routes import generation, matches, reports, standings, tournaments

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

app = FastAPI(title="Tournament Structure Engine API", version=__version__)

_cors_origins = [
    "http://localhost:3000",
    "http://127.0.0.1:3000",
]
_extra = os.getenv("CORS_ORIGINS", "")
if _extra:
    _cors_origins.extend(o.strip() for o in _extra.split(",") if o.strip())

app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(tournaments.router, prefix="/api", tags=["tournaments"])
app.include_router(generation.router, prefix="/api", tags=["generation"])
app.include_router(matches.router, prefix="/api", tags=["matches"])
app.include_router(standings.router, prefix="/api", tags=["standings"])
app.include_router(reports.router, prefix="/api", tags=["reports"])


@app.on_event("startup")
def on_startup():
    init_db()  # Use centralized init_db() which imports models and creates tables

    # Print all registered routes for debugging
    print("\n" + "=" * 80)
    print("REGISTERED ROUTES")
    print("=" * 80)
    route_count = 0
    for r in app.routes:
        methods = getattr(r, "methods", None)
        path = getattr(r, "path", None)
        if path:
            methods_str = ", ".join(sorted(methods)) if methods else "N/A"
            print(f"{methods_str:20} {path}")
            route_count += 1
    print("=" * 80)
    print(f"Total routes: {route_count}")
    print(f"Version: {__version__}")
    print("=" * 80 + "\n")


@app.get("/api/health")
def health_check():
    return {"app_name": "Tournament Structure Engine API", "version": __version__, "status": "healthy"}
