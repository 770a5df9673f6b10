import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import LOG_LEVEL
from app.core.exceptions import RegistrationError
from app.database.db import Base, engine
from app.routes import events, registrations, teams

logging.basicConfig(level=LOG_LEVEL, format="[%(levelname)s] %(asctime)s - %(name)s - %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="EventSphere")

# Configure CORS
origins = [
    "*"
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Create all tables (in production, use migrations such as Alembic)
Base.metadata.create_all(bind=engine)


@app.exception_handler(RegistrationError)
async def registration_error_handler(request: Request, exc: RegistrationError):
    logger.warning("%s %s -> %s: %s", request.method, request.url.path, exc.code, exc.message)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "error": exc.code})


@app.get("/")
def health():
    return {"status": "EventSphere backend is running"}


# Include the routers
app.include_router(events.router)
app.include_router(registrations.router)
app.include_router(teams.router)
