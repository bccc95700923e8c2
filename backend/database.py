"""
Database Configuration Module

This module handles the database configuration and connection setup for the billing
payment service. It uses SQLAlchemy for ORM (Object-Relational Mapping) with PostgreSQL
as the database.

The module includes:
- Database connection setup
- Session management
- Base model class definition
- Soft delete filter implementation
- The transactional unit-of-work helper used by every payment mutation
"""

import logging

from sqlalchemy import create_engine, event
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import declarative_base, sessionmaker, Session, with_loader_criteria
from sqlalchemy.orm.exc import StaleDataError
from sqlalchemy.pool import StaticPool

import config
from exceptions import InternalError, PaymentError

logger = logging.getLogger("database")

# An in-memory SQLite URL gets one shared connection so every session sees the
# same database (tests and local demos).
if config.DATABASE_URL.startswith("sqlite"):
    engine = create_engine(
        config.DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
else:
    engine = create_engine(config.DATABASE_URL, pool_pre_ping=True)

# autocommit=False means we need to explicitly commit transactions
# autoflush=False means we need to explicitly flush changes to the database
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


@event.listens_for(Session, "do_orm_execute")
def add_soft_delete_filter(execute_state):
    """
    Event listener that automatically filters out "soft-deleted" records.

    This function adds a filter to all SELECT queries to exclude records
    where the 'deleted_at' field is not NULL. Payments are soft-deleted, so
    this also keeps deleted payments out of every aggregate computed from
    an ORM query.

    Args:
        execute_state: The current execution state of the query
    """
    if (
        execute_state.is_select
        and not execute_state.is_relationship_load
    ):
        for entity in execute_state.statement.column_descriptions:
            if hasattr(entity['type'], 'deleted_at'):
                execute_state.statement = execute_state.statement.options(
                    with_loader_criteria(
                        entity['type'],
                        lambda cls: cls.deleted_at.is_(None),
                        include_aliases=True
                    )
                )


def run_in_transaction(db: Session, work, description: str = "payment operation", retries: int = None):
    """
    Run ``work()`` as one atomic unit and commit once.

    The payment write and the parent document's aggregate write must land
    together. Domain errors roll back and propagate unchanged. An optimistic
    version conflict on the parent (StaleDataError) or a lock/serialization
    failure rolls back and re-runs the whole unit; ``work`` must therefore
    re-read everything it needs. Any other database failure rolls back and is
    reported as InternalError.

    Args:
        db: The request's database session
        work: A zero-argument callable performing the writes (without committing)
        description: Used in log lines
        retries: Extra attempts after a conflict, defaults to RECONCILE_MAX_RETRIES

    Returns:
        Whatever ``work`` returns.
    """
    max_retries = config.RECONCILE_MAX_RETRIES if retries is None else retries
    attempt = 0
    while True:
        attempt += 1
        try:
            result = work()
            db.commit()
            return result
        except PaymentError:
            db.rollback()
            raise
        except (StaleDataError, OperationalError) as e:
            db.rollback()
            if attempt > max_retries:
                logger.exception(f"{description} failed after {attempt} attempts due to concurrent updates")
                raise InternalError() from e
            logger.warning(f"{description} hit a concurrent update (attempt {attempt}), retrying: {e}")
        except SQLAlchemyError as e:
            db.rollback()
            logger.exception(f"{description} failed")
            raise InternalError() from e


# Dependency to get database session
def get_db():
    """
    Dependency function that provides a database session.

    This function creates a new database session for each request and ensures
    that the session is properly closed after the request is completed.

    Yields:
        Session: A SQLAlchemy database session
    """
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
