"""
Entry point for running the wellbeing quiz backend locally.

This module loads a ``.env`` file, builds the application with the
factory and starts the development server when executed directly. In
production a WSGI server like gunicorn should serve ``wsgi:app``
instead.
"""

import os

from dotenv import load_dotenv

load_dotenv()

from wellbeing_quiz import create_app, db  # noqa: E402

app = create_app()

if __name__ == "__main__":
    # Only create the database tables automatically in local
    # development when running this module directly.
    with app.app_context():
        db.create_all()
    app.run(host="0.0.0.0", port=int(os.environ.get("PORT", 8080)), debug=True)
