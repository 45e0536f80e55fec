import multiprocessing
import os

# Gunicorn configuration file
# Serve with: gunicorn -c gunicorn_conf.py app.main:app

host = os.getenv("HOST", "0.0.0.0")
port = os.getenv("PORT", "8000")
bind = f"{host}:{port}"

# Worker configuration
# WEB_CONCURRENCY wins; otherwise (2 x num_cores) + 1
workers = int(os.getenv("WEB_CONCURRENCY", multiprocessing.cpu_count() * 2 + 1))
worker_class = "uvicorn.workers.UvicornWorker"

# Requests are short CRUD calls; anything slower is a stuck worker
timeout = int(os.getenv("WORKER_TIMEOUT", "30"))
graceful_timeout = 30
keepalive = 5

# Logging
accesslog = "-" # Log to stdout
errorlog = "-"  # Log to stderr
loglevel = os.getenv("LOG_LEVEL", "info").lower()

# Process management
proc_name = "project_management_api"
# Each worker runs the app lifespan (schema creation is idempotent)
preload_app = False
