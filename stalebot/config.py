import os

from celery.schedules import crontab


def sweep_schedule():
    """
    How often Celery beat should run the escalation sweep.

    ``STALEBOT_SWEEP_MINUTES`` must divide an hour or a day evenly; the
    default is once an hour.
    """
    minutes = int(os.environ.get("STALEBOT_SWEEP_MINUTES", "60"))
    if minutes >= 60:
        return crontab(minute=0, hour=f"*/{minutes // 60}")
    return crontab(minute=f"*/{minutes}")


class DefaultConfig:
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "secrettoeveryone")
    GITHUB_WEBHOOKS_SECRET = os.environ.get("GITHUB_WEBHOOKS_SECRET")
    CELERY_ACCEPT_CONTENT = ["json"]
    CELERY_TASK_SERIALIZER = "json"
    CELERY_RESULT_SERIALIZER = "json"
    CELERY_EAGER_PROPAGATES = True
    BROKER_URL = os.environ.get('REDIS_TLS_URL', os.environ.get("REDIS_URL", "redis://"))
    CELERY_RESULT_BACKEND = os.environ.get('REDIS_TLS_URL', os.environ.get("REDIS_URL", "redis://"))

    def __init__(self):
        # Heroku redis over TLS uses self-signed certs.
        # https://help.heroku.com/HC0F8CUS/redis-connection-issues
        redis_tls_options = "?ssl_cert_reqs=none"
        if self.BROKER_URL.startswith("rediss"):
            self.BROKER_URL += redis_tls_options
            self.CELERY_RESULT_BACKEND += redis_tls_options


class WorkerConfig(DefaultConfig):
    CELERY_IMPORTS = (
        'stalebot.tasks.github',
    )
    CELERYBEAT_SCHEDULE = {
        "escalation-sweep": {
            "task": "stalebot.tasks.github.sweep_configured_repos_task",
            "schedule": sweep_schedule(),
        },
    }


class DevelopmentConfig(DefaultConfig):
    DEBUG = True


class TestingConfig(DefaultConfig):
    TESTING = True
    GITHUB_WEBHOOKS_SECRET = "testing-secret"
