"""
Microcredit Assessment Core - FastAPI Application

Main entry point for the assessment backend of the WhatsApp assistant.

Architecture:
- Inbound reply → dispatcher → QuizEngine | CapacityInterview
- Capacity answers → RPC calculator → capacity score
- Activity log → engagement tracker → engagement score
- character + capacity + literacy + engagement → A-Score → risk zone
"""
import asyncio
import contextlib
import logging
import random
from contextlib import asynccontextmanager
from datetime import timedelta

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .config import LOG_LEVEL, SESSION_SWEEP_INTERVAL_SECONDS, SESSION_TIMEOUT_MINUTES
from .database import init_db
from .models.assessment import SessionKind
from .routers import assessment_router
from .services.assessment import SessionStore

logging.basicConfig(
    level=LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def sweep_expired_sessions(app: FastAPI, interval_seconds: int):
    """Periodically drop idle sessions. Reads already expire them lazily."""
    while True:
        await asyncio.sleep(interval_seconds)
        app.state.quiz_sessions.cleanup()
        app.state.capacity_sessions.cleanup()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Initialize database and start the session sweeper."""
    init_db()
    sweeper = asyncio.create_task(sweep_expired_sessions(app, SESSION_SWEEP_INTERVAL_SECONDS))
    logger.info("Assessment core started")
    yield
    sweeper.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await sweeper


# Create FastAPI app
app = FastAPI(
    lifespan=lifespan,
    title="Microcredit Assessment Core",
    description="""
    Conversational assessment and credit scoring for a microfinance
    WhatsApp assistant.

    ## Flows
    1. **Literacy quiz**: 4 questions per week, 15 weeks
    2. **Capacity interview**: 5 free-text questions → repayment capacity
    3. **Engagement**: activity streaks and weighted interactions
    4. **A-Score**: weighted composite score and risk zone (A-D)

    ## Key Principles
    - Dialogue sessions are in memory and expire after inactivity
    - Invalid answers are retried, never raised
    - Scoring weights are fixed, not learned
    """,
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc"
)

# Session stores are process-wide; one per dialogue kind
session_timeout = timedelta(minutes=SESSION_TIMEOUT_MINUTES)
app.state.quiz_sessions = SessionStore(SessionKind.QUIZ, timeout=session_timeout)
app.state.capacity_sessions = SessionStore(SessionKind.CAPACITY, timeout=session_timeout)
app.state.quiz_rng = random.Random()

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Configure appropriately for production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(assessment_router)


@app.get("/")
async def root():
    """Root endpoint - API information."""
    return {
        "name": "Microcredit Assessment Core",
        "version": "1.0.0",
        "description": "Literacy quiz, capacity interview and A-Score",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "version": "1.0.0"}


# For running with: python -m microcredit.main
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8001)
