import os

# Gunicorn configuration for the SynergySphere API (UvicornWorker)

bind = os.getenv("BIND", "0.0.0.0:8000")

# The live-connection registry lives in each worker's memory, so a push only
# reaches sockets held by the same worker. Keep one worker unless clients are
# pinned to a worker (sticky sessions).
workers = int(os.getenv("WEB_CONCURRENCY", "1"))
worker_class = "uvicorn.workers.UvicornWorker"

# WebSockets stay open far longer than a request
timeout = 120
graceful_timeout = 30
keepalive = 5

accesslog = "-"
errorlog = "-"
loglevel = os.getenv("LOG_LEVEL", "info")

name = "synergysphere_api"
reload = False
