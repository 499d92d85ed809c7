# Overview: Shared extension instances; bound to the app in create_app().

from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy

# Request-scoped session via db.session; services receive it explicitly
db = SQLAlchemy()

# Alembic revisions live in backend/migrations/versions
migrate = Migrate()
