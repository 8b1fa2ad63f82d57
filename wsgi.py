"""WSGI entrypoint for Gunicorn.

Usage:
  gunicorn -w 1 --threads 4 -b 0.0.0.0:8000 wsgi:app

Run a single worker: each worker process holds its own pipeline and snapshot.
"""

from lotto_analyzer import create_app

app = create_app()


if __name__ == "__main__":
    app.run(host="127.0.0.1", port=8000, debug=False)
