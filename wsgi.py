#wsgi.py
"""
wsgi.py – DanceUp Studio Dashboard Entry Point
────────────────────────────────────────────
Used by Gunicorn (`gunicorn wsgi:app`) or run directly for local dev.
────────────────────────────────────────────
"""

import os
from danceup import create_app

# Flask application factory
app = create_app()

if __name__ == "__main__":
    port = int(os.environ.get("PORT", 5000))
    print(f"🚀 Starting DanceUp Studio Dashboard on port {port}")
    app.run(host="0.0.0.0", port=port)
