from fastapi import FastAPI
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from parkflow.infrastructure.config import settings
from parkflow.infrastructure.database import create_db_and_tables
from parkflow.infrastructure.logger_config import configure_logging
from parkflow.presentation.routers import router
from parkflow.services.parking_service import remote_engine

configure_logging(settings.log_level)

app = FastAPI(title="Parkflow Reservations API", version="0.1.0")


@app.on_event("startup")
async def _create_tables_on_startup() -> None:
    """
    Create the remote `reservations` table when configured to. If the remote store
    cannot be reached the app still starts and reservation calls fall back locally.
    """
    engine = remote_engine()
    if not settings.create_tables or engine is None:
        return
    try:
        await create_db_and_tables(engine)
    except (SQLAlchemyError, OSError) as e:
        logger.warning("Could not create remote tables: {}", e)


app.include_router(router)
