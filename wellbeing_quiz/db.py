"""Database setup utilities.

This module exposes the ``db`` object used by the models and the
assessment store. The application factory initialises it with the
Flask app; the store wraps it in a ``StoreConnection`` so that the
rest of the code never touches the database without first checking
connectivity.
"""
from __future__ import annotations

from flask_sqlalchemy import SQLAlchemy

db = SQLAlchemy()
