"""
WSGI entry point for the RSS feed API.

Usage:
    Development:
        python wsgi.py

    Production with gunicorn (graceful shutdown on SIGTERM, 30s timeout):
        gunicorn -w 4 -b 0.0.0.0:8080 --graceful-timeout 30 wsgi:app

    Schema setup:
        flask --app wsgi init-db
"""

import os
from rssapp import create_app

# Create application instance
# Environment determined by RSSAPP_ENV (default: development)
env = os.getenv('RSSAPP_ENV', 'development')
app = create_app(env)

if __name__ == '__main__':
    # Run development server
    app.run(
        host='0.0.0.0',
        port=app.config['PORT'],
        debug=app.config['DEBUG'],
        threaded=True
    )
