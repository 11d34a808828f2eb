# nosabos/main.py - Application entry point

import logging
import time
from datetime import datetime
from typing import Dict

import uvicorn
from fastapi import FastAPI, Request, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from nosabos import __version__
from nosabos.config import settings

from nosabos.managers.cache_manager import CacheManager
from nosabos.managers.firestore_manager import FirestoreManager
from nosabos.managers.llm_manager import LLMManager
from nosabos.managers.notes_manager import NotesManager
from nosabos.managers.nostr_manager import NostrManager
from nosabos.managers.progress_manager import ProgressManager
from nosabos.managers.team_manager import TeamManager
from nosabos.content.skill_tree import SkillTreeLoader
from nosabos.exercises.generator import ExerciseGenerator
from nosabos.utils.audio import AudioProcessor

from nosabos.api.websocket_handler import WebSocketHandler

from nosabos.api.endpoints import router as api_router
from nosabos.api.endpoints import get_managers as router_get_managers
from nosabos.api.team_endpoints import team_router
from nosabos.api.exercise_endpoints import exercise_router, proxy_router

# Configure logging with UTF-8 encoding to handle emojis
logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(),
        logging.FileHandler(settings.log_file, encoding='utf-8')
    ]
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Nosabos Language Learning Server",
    description="Skill tree, LLM-generated exercises, teams and Nostr identity for the nosabos app",
    version=__version__
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)

# Global managers storage
managers: Dict[str, any] = {}
server_start_time = time.time()


def get_managers_instance():
    """Get the global managers instance"""
    return managers


async def initialize_managers():
    """Initialize all managers with proper error handling"""
    try:
        logger.info("Initializing managers...")

        # 1. Cache (Redis or in-memory)
        logger.info("  Initializing cache manager...")
        managers['cache'] = CacheManager()

        # 2. Firestore
        logger.info("  Initializing Firestore manager...")
        managers['firestore'] = FirestoreManager(settings.firebase_credentials_path)
        managers['teams'] = TeamManager(managers['firestore'])
        managers['progress'] = ProgressManager(managers['firestore'])

        # 3. LLM
        logger.info("  Initializing LLM manager...")
        managers['llm'] = LLMManager()
        managers['generator'] = ExerciseGenerator(managers['llm'], managers['cache'])

        # 4. Notes database
        logger.info("  Initializing notes manager...")
        managers['notes'] = NotesManager(settings.database_url, managers['llm'])
        await managers['notes'].initialize()

        # 5. Content and tools
        logger.info("  Initializing skill tree and tools...")
        managers['skill_tree'] = SkillTreeLoader(managers['cache'])
        managers['nostr'] = NostrManager()
        managers['audio'] = AudioProcessor()

        # 6. WebSocket handler
        logger.info("  Initializing websocket handler...")
        managers['websocket'] = WebSocketHandler(managers)

        logger.info("  All managers initialized successfully")
        return True

    except Exception as e:
        logger.error(f"  Failed to initialize managers: {e}")
        raise


# Health check endpoints
@app.get("/health")
async def health_check():
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "uptime_seconds": time.time() - server_start_time,
        "managers": {name: name in managers for name in (
            "cache", "firestore", "teams", "progress", "llm", "generator",
            "notes", "skill_tree", "nostr", "audio", "websocket")},
        "version": __version__,
        "service": "Nosabos Language Learning Server"
    }


@app.get("/status")
async def server_status():
    cache_status = "unknown"
    if 'cache' in managers:
        try:
            cache_info = await managers['cache'].get_connection_status()
            cache_status = cache_info['type']
        except Exception as e:
            logger.warning(f"Cache status unavailable: {e}")
            cache_status = "error"

    connections = {}
    if 'websocket' in managers:
        connections = managers['websocket'].get_connection_stats()

    return {
        "status": "healthy",
        "uptime_seconds": time.time() - server_start_time,
        "cache": cache_status,
        "firebase": "connected" if 'firestore' in managers and managers['firestore'].connected else "not_configured",
        "gemini": "configured" if 'llm' in managers and managers['llm'].gemini_available else "not_configured",
        "responses_proxy": "configured" if settings.openai_api_key else "not_configured",
        "skill_tree": managers['skill_tree'].cache_stats() if 'skill_tree' in managers else None,
        "connections": connections,
        "config_issues": settings.validate_config(),
    }


@app.websocket("/ws/exercises/{npub}")
async def websocket_endpoint(websocket: WebSocket, npub: str):
    """Live exercise session for one learner"""
    logger.info(f"New exercise session from {npub}")
    try:
        await managers['websocket'].handle_connection(websocket, npub)
    except WebSocketDisconnect:
        logger.info(f"Learner {npub} disconnected")
    except Exception as e:
        logger.error(f"Connection error for {npub}: {e}")


@app.exception_handler(404)
async def not_found_handler(request: Request, exc):
    """Handle 404 errors with proper JSON response"""
    detail = getattr(exc, "detail", None)
    return JSONResponse(
        status_code=404,
        content={"error": detail or "Endpoint not found", "path": str(request.url)}
    )


@app.exception_handler(500)
async def internal_error_handler(request: Request, exc):
    """Handle 500 errors with proper JSON response"""
    logger.error(f"Internal server error: {exc}")
    return JSONResponse(
        status_code=500,
        content={"error": "Internal server error", "details": str(exc)}
    )


@app.on_event("startup")
async def startup_event():
    logger.info("Nosabos server starting up...")

    try:
        for issue in settings.validate_config():
            logger.warning(f"  {issue}")

        await initialize_managers()

        logger.info("  Setting up API dependency injection...")
        app.dependency_overrides[router_get_managers] = get_managers_instance

        logger.info("  Including API routers...")
        app.include_router(api_router)
        app.include_router(team_router)
        app.include_router(exercise_router)
        app.include_router(proxy_router)

        logger.info("System startup complete")

    except Exception as e:
        logger.error(f"Startup failed: {e}")
        raise


@app.on_event("shutdown")
async def shutdown_event():
    logger.info("Nosabos server shutting down...")

    if 'cache' in managers:
        try:
            await managers['cache'].close()
        except Exception as e:
            logger.warning(f"Error closing cache manager: {e}")

    if 'notes' in managers:
        try:
            await managers['notes'].close()
        except Exception as e:
            logger.warning(f"Error closing notes database: {e}")

    logger.info("Shutdown complete")


if __name__ == "__main__":
    logger.info("=" * 60)
    logger.info("NOSABOS LANGUAGE LEARNING SERVER")
    logger.info("=" * 60)
    logger.info(f"Starting server on {settings.server_host}:{settings.server_port}")
    logger.info(f"Gemini API Key: {'Configured' if settings.gemini_api_key else 'Missing'}")
    logger.info(f"API Docs: http://localhost:{settings.server_port}/docs")
    logger.info(f"WebSocket: ws://localhost:{settings.server_port}/ws/exercises/{{npub}}")
    logger.info("=" * 60)

    uvicorn.run(
        "nosabos.main:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level=settings.log_level.lower(),
        reload=False,
        access_log=True
    )
