"""
WSGI entry point for the bill calculator API.

Elastic Beanstalk (and gunicorn: `gunicorn application:application`) look
for a module-level callable named `application`.

Run locally with `python application.py`; HOST, PORT and FLASK_DEBUG
choose where and how the development server listens.
"""
import os

from backend.app import app as application


def main():
    host = os.getenv('HOST', '127.0.0.1')
    port = int(os.getenv('PORT', '5000'))
    debug = os.getenv('FLASK_DEBUG', 'false').lower() == 'true'
    application.run(host=host, port=port, debug=debug)


if __name__ == "__main__":
    main()
