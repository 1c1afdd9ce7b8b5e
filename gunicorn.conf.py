# Gunicorn configuration for LaserZone Hub
# Video uploads arrive in chunks, so requests stay short

# Worker settings
workers = 2
worker_class = 'sync'  # Use sync for reliability

# Timeout settings - a single upload chunk on a slow venue connection
timeout = 120
graceful_timeout = 60
keepalive = 5

# Logging
accesslog = '-'
errorlog = '-'
loglevel = 'info'

# Request handling
max_requests = 1000  # Restart workers after 1000 requests to prevent memory leaks
max_requests_jitter = 50  # Random jitter to prevent all workers restarting at once

# Bind
bind = '0.0.0.0:5000'
