"""
RQ Worker bootstrap
"""

from rq import Worker, Queue
from elitestock.infrastructure.logging_config import setup_logging
from elitestock.infrastructure.redis_client import get_redis
from elitestock.infrastructure.settings import get_settings
from elitestock.workers import jobs  # noqa: F401  Import jobs to register them

settings = get_settings()
listen = [settings.NOTIFICATION_QUEUE]

if __name__ == "__main__":
    setup_logging(settings.LOG_LEVEL)
    redis_conn = get_redis()
    worker = Worker([Queue(name, connection=redis_conn) for name in listen], connection=redis_conn)
    worker.work()
