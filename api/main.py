from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from auth import router as auth_router
from core import db, errors, log, settings
from crafts import router as crafts_router
from intake import router as intake_router
from participants import router as participants_router
from registration import router as registration_router


@asynccontextmanager
async def lifespan(_: FastAPI):
    # Initialize the DB pool once per process.
    await db.init_pool()
    try:
        yield
    finally:
        await db.close_pool()


log.configure()

app = FastAPI(title="Competition Registration API", lifespan=lifespan)
errors.install_handlers(app)

# Allow the registration frontend to call this API from the browser.
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(auth_router.router, prefix="/api", tags=["users"])
app.include_router(registration_router.router, prefix="/api", tags=["teams"])
app.include_router(participants_router.router, prefix="/api", tags=["participants"])
app.include_router(crafts_router.router, prefix="/api", tags=["crafts"])
app.include_router(intake_router.router, prefix="/api", tags=["uploads"])


@app.get("/health")
def health() -> dict:
    return {"status": "ok"}


@app.get("/")
def root() -> dict:
    return {"message": "competition registration api"}


def run() -> None:
    """
    Serve the app with uvicorn; HOST and PORT come from the environment.
    """
    uvicorn.run(
        "main:app",
        host=settings.env_str("HOST", "127.0.0.1"),
        port=settings.env_int("PORT", 8000),
        log_level=settings.log_level().lower(),
    )


if __name__ == "__main__":
    run()
