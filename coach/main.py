from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from coach.agents.suggester import SuggestionAgent
from coach.api.sessions import router as sessions_router
from coach.database import create_tables, dispose_engine
from coach.progression.registry import SessionRegistry
from coach.settings import settings


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler - runs on startup/shutdown."""
    # Startup: database tables for snapshots
    if settings.DATABASE_URL:
        print("🗄️ Initializing database...")
        await create_tables()
        print("✅ Database tables ready")
    else:
        print("⚠️ DATABASE_URL not set - sessions live in memory only")

    if not settings.GEMINI_API_KEY:
        print("⚠️ GEMINI_API_KEY not set - suggestions will be unavailable")

    # Ceilings are validated here so a bad .env fails the boot, not a request
    app.state.registry = SessionRegistry(settings.ceiling_config())
    app.state.suggester = SuggestionAgent()

    yield

    await dispose_engine()
    print("👋 Shutting down...")


app = FastAPI(title="ALF Coach Progression Engine", lifespan=lifespan)

# Allow CORS for frontend
app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(sessions_router)


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "database": bool(settings.DATABASE_URL),
        "suggestions": bool(settings.GEMINI_API_KEY),
    }


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
