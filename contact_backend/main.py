#run it with python -m contact_backend.server (or uvicorn contact_backend.main:app --reload)
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from contact_backend.api.v1.api_router import api_router
from dotenv import load_dotenv
import logging

# Set up logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Load environment variables from .env file
load_dotenv()


async def startup_event():
    """Start the scheduler and make the first database connection attempt"""
    from contact_backend.core.config import get_settings
    from contact_backend.core.scheduler import init_scheduler
    from contact_backend.db.init_db import initialize_database
    from contact_backend.db.mongo import MongoConnector, set_connector
    from contact_backend.server import request_exit

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info("🔧 Initializing scheduler...")
    init_scheduler()

    connector = MongoConnector(
        uri=settings.mongo_uri,
        database_name=settings.mongo_db_name,
        max_retries=settings.max_retries,
        base_delay_ms=settings.retry_base_delay_ms,
        max_delay_ms=settings.retry_max_delay_ms,
        server_selection_timeout_ms=settings.mongo_server_selection_timeout_ms,
        on_connected=initialize_database,
        on_exhausted=lambda: request_exit(1),
    )
    set_connector(connector)

    logger.info("🚀 Connecting to database...")
    await connector.connect()


async def shutdown_event():
    """Clean up resources on application shutdown"""
    from contact_backend.core.scheduler import shutdown
    from contact_backend.db.mongo import connector

    # Close MongoDB connections and drop any pending reconnect job
    if connector is not None:
        try:
            connector.close()
        except Exception as e:
            logger.error(f"Error closing MongoDB connections: {str(e)}")

    # Shutdown the scheduler gracefully
    shutdown()


@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup_event()
    yield
    await shutdown_event()


app = FastAPI(title="Contact Form Backend", version="1.0.0", lifespan=lifespan)

# CORS setup (adjust origins as needed)
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Change to your frontend domain in production
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(api_router)


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies (e.g. invalid JSON) get the same 400 shape as field errors."""
    errors = [
        {
            "field": ".".join(str(part) for part in error["loc"] if part != "body") or "body",
            "message": "Request body must be valid JSON" if error["type"] == "json_invalid" else error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"success": False, "errors": errors},
    )


@app.get("/", response_class=PlainTextResponse)
def index():
    return "Hello from the contact form backend!"


@app.get("/api/health")
def health_check():
    """Health check endpoint."""
    from contact_backend.db.mongo import connector

    return {
        "status": "ok",
        "database": {
            "connected": bool(connector and connector.connected),
        },
    }
