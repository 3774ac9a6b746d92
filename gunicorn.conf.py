"""
Gunicorn configuration for production deployment.
"""
import logging
import multiprocessing
import os

# Server socket
PORT = int(os.environ.get("PORT", 3000))
bind = f"0.0.0.0:{PORT}"

# Worker processes
# Requests are handled synchronously; each thread holds at most one pooled
# DB connection, so threads per worker should not exceed DB_POOL_SIZE.
workers = int(os.environ.get("WEB_CONCURRENCY", min(multiprocessing.cpu_count(), 4)))
worker_class = "gthread"
threads = int(os.environ.get("GUNICORN_THREADS", 4))
timeout = 60
graceful_timeout = 30

# Access log to stdout alongside the app log
accesslog = "-"

# Process naming
proc_name = "wordnest-api"


def worker_int(worker):
    logging.warning(f"wordnest-api worker {worker.pid} interrupted; open DB connections are dropped")
