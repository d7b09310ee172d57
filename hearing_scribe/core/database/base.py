# File: hearing_scribe/core/database/base.py

from sqlalchemy.orm import declarative_base

# The shared registry. Jobs and Utterances both inherit from this.
Base = declarative_base()
