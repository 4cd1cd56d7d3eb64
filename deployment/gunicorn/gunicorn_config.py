import multiprocessing
import os

bind = os.getenv("GUNICORN_BIND", "unix:/var/www/banana-marketplace/backend/gunicorn.sock")
workers = int(os.getenv("GUNICORN_WORKERS", multiprocessing.cpu_count() * 2 + 1))
worker_class = "sync"
worker_tmp_dir = "/dev/shm"
max_requests = 1000
max_requests_jitter = 100
# Longer than DB_TIMEOUT_SECONDS so a slow query fails as a 503 before the worker is killed
timeout = 60
keepalive = 5

# Logging
accesslog = "/var/log/banana-marketplace/access.log"
errorlog = "/var/log/banana-marketplace/error.log"
loglevel = os.getenv("GUNICORN_LOG_LEVEL", "info")
access_log_format = '%(h)s %(l)s %(u)s %(t)s "%(r)s" %(s)s %(b)s "%(f)s" "%(a)s" %(D)s'

# Process naming
proc_name = "banana-marketplace"

# Server mechanics
daemon = False
pidfile = "/var/run/banana-marketplace/gunicorn.pid"
user = "deploy"
group = "deploy"
umask = 0o007


# Server hooks
def on_starting(server):
    server.log.info("Starting banana marketplace API")


def when_ready(server):
    server.log.info("Gunicorn server is ready. Spawning workers")


def worker_abort(worker):
    """Called when a worker receives the SIGABRT signal (usually a timeout)."""
    worker.log.warning(f"Worker {worker.pid} aborted")
