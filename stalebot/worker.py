"""
This file only exists because celery can't handle a factory function
being passed as the application instance, like this:

  $ celery worker --app=stalebot.create_celery_app()

Run the worker with ``celery --app=stalebot.worker worker --beat`` so the
scheduled sweep runs too.
"""

from stalebot import create_celery_app

application = create_celery_app(config="worker")
