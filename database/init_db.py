import logging

from sqlalchemy import inspect
from tenacity import retry, stop_after_attempt, wait_fixed, before_sleep_log

from database.database import Store

logger = logging.getLogger(__name__)


@retry(stop=stop_after_attempt(5), wait=wait_fixed(2), reraise=True,
       before_sleep=before_sleep_log(logger, logging.WARNING))
def init_db(store: Store) -> None:
    """Create any missing tables. Retried while the database comes up."""
    logger.info("Initializing database...")
    try:
        store.create_all()
        tables = inspect(store.engine).get_table_names()
        logger.info(f"Tables created or verified: {', '.join(sorted(tables))}")
    except Exception as e:
        logger.error(f"Error initializing DB: {e}")
        raise
