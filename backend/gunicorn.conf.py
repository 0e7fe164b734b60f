# Bind & workers
bind = "0.0.0.0:8000"
wsgi_app = "authgate:create_app()"
workers = 2  # override with GUNICORN_WORKERS
# One thread per worker: the token issuer's default TTL is per-process state.
threads = 1
timeout = 60
graceful_timeout = 30
keepalive = 5

# Logs to stdout/stderr for container collection
accesslog = "-"
errorlog = "-"
loglevel = "info"

# Trust proxy headers (ProxyFix handles the rest)
forwarded_allow_ips = "*"
proxy_protocol = False
