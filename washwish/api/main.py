from fastapi import FastAPI
import logging

from washwish.api import dependencies
from washwish.api.orders import router as orders_router
from washwish.api.payments import router as payments_router
from washwish.services.pricing import price_catalog
from washwish.utils.config import get_settings

settings = get_settings()

# Configure logging
handlers = [logging.StreamHandler()]
if settings.log_file:
    handlers.append(logging.FileHandler(settings.log_file))
logging.basicConfig(
    level=settings.log_level,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=handlers
)
logger = logging.getLogger(__name__)

app = FastAPI(title="WashWish API")

# Include routers
app.include_router(orders_router, prefix="/orders", tags=["orders"])
app.include_router(payments_router, prefix="/payments", tags=["payments"])


@app.on_event("startup")
def startup_event():
    dependencies.init_services(settings)
    logger.info(f"WashWish API started with {settings.storage} storage")


@app.get("/")
def read_root():
    return {"message": "WashWish backend running"}


@app.get("/pricing")
def get_pricing():
    """Unit prices, delivery fees and treatment fees shown at checkout."""
    return price_catalog()


def run():
    import uvicorn
    uvicorn.run("washwish.api.main:app", host=settings.api_host, port=settings.api_port)


if __name__ == "__main__":
    run()
