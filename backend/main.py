import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from src.config import settings
from src.db.main import engine
from src.health import router as health_router
from src.clients.routes import router as clients_router
from src.products.routes import router as products_router
from src.documents.routes import invoices_router, quotes_router
from src.extraction.routes import router as extraction_router
from src.profiles.routes import router as profiles_router
from src.error_handler import exception_handler

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)

# Set log level for application modules to INFO
logging.getLogger('src').setLevel(logging.INFO)

# Keep external libraries at WARNING to reduce noise
logging.getLogger('uvicorn').setLevel(logging.WARNING)
logging.getLogger('uvicorn.access').setLevel(logging.WARNING)
logging.getLogger('httpx').setLevel(logging.WARNING)

logger = logging.getLogger(__name__)

@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"Starting Invoicing API ({settings.ENV})")
    yield
    # Shutdown: close pooled database connections
    await engine.dispose()
    logger.info("Invoicing API stopped")

app = FastAPI(
    title="Invoicing API",
    version="1.0.0",
    docs_url="/docs" if settings.ENV == "development" else None,
    lifespan=lifespan
)

# CORS Configuration
if settings.ENV == "development":
    origins = ["http://localhost:3000", "http://localhost:4321"]
else:
    origins = [settings.WEB_APP_URL]  # Production domain

app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

exception_handler(app)

app.include_router(health_router, tags=["health"])
app.include_router(clients_router, prefix="/api/clients", tags=["clients"])
app.include_router(products_router, prefix="/api/products", tags=["products"])
app.include_router(profiles_router, prefix="/api/profile", tags=["profile"])
app.include_router(invoices_router, prefix="/api/invoices", tags=["invoices"])
app.include_router(quotes_router, prefix="/api/quotes", tags=["quotes"])
app.include_router(extraction_router, prefix="/api/extraction", tags=["extraction"])
