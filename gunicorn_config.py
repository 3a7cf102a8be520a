"""
Gunicorn config: bind to 0.0.0.0 and PORT.
The JSON record store is single-writer, so exactly one worker process is run;
requests inside it are served on threads and serialized per collection.
"""
import os

bind = "0.0.0.0:{}".format(os.environ.get("PORT", "3000"))
workers = 1
threads = 4
timeout = 60
