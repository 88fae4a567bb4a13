"""arq worker settings module.

Import path for arq CLI: arq skillforge.workers.settings.WorkerSettings
"""

from __future__ import annotations

from arq import cron
from arq.connections import RedisSettings

from skillforge.config import get_settings
from skillforge.workers.daily_sets import generate_daily_sets, shutdown, startup

_settings = get_settings()


class WorkerSettings:
    """arq worker settings for daily set pre-generation."""

    functions = [generate_daily_sets]
    cron_jobs = [
        # UTC hour; sets are keyed by each learner's local date
        cron(generate_daily_sets, hour={_settings.daily_set_cron_hour}, minute={0}, run_at_startup=False),
    ]
    on_startup = startup
    on_shutdown = shutdown
    redis_settings = RedisSettings.from_dsn(_settings.arq_redis_url)
    max_jobs = 2
    job_timeout = 1800
