# activity_sessions/db/base_class.py

from sqlalchemy.orm import declarative_base

# Single declarative base; every model in the service inherits from it.
Base = declarative_base()
