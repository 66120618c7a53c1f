"""
Workspace-scoped access to the relational store.

Every read and write goes through a StoreGateway bound to one SQLAlchemy
session, and every call takes the caller's workspace_id, so a query can
never touch another tenant's rows. Driver failures surface as
PersistenceError; a missing row looked up by id surfaces as NotFoundError.
"""
import logging
from contextlib import contextmanager

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from careops.exceptions import NotFoundError, PersistenceError
from careops.models.workspace import Workspace
from careops.utils.validation import require_ids

logger = logging.getLogger(__name__)


@contextmanager
def _store_errors(action: str):
    try:
        yield
    except SQLAlchemyError as e:
        logger.error(f"Store {action} failed: {e}")
        raise PersistenceError(f"Store {action} failed") from e


class StoreGateway:

    def __init__(self, db: Session):
        self.db = db

    def _query(self, model, workspace_id, criteria, filters):
        require_ids(workspace_id=workspace_id)
        query = self.db.query(model).filter(model.workspace_id == workspace_id)
        if criteria:
            query = query.filter(*criteria)
        if filters:
            query = query.filter_by(**filters)
        return query

    def workspace(self, workspace_id) -> Workspace:
        require_ids(workspace_id=workspace_id)
        with _store_errors("read"):
            workspace = self.db.query(Workspace).filter(Workspace.id == workspace_id).first()
        if not workspace:
            raise NotFoundError("Workspace", workspace_id)
        return workspace

    def select(self, model, workspace_id, *criteria, order_by=None, limit=None, **filters) -> list:
        """Rows of `model` in the workspace matching every criterion and filter."""
        with _store_errors("read"):
            query = self._query(model, workspace_id, criteria, filters)
            if order_by is not None:
                query = query.order_by(*order_by) if isinstance(order_by, (list, tuple)) else query.order_by(order_by)
            if limit is not None:
                query = query.limit(limit)
            return query.all()

    def first(self, model, workspace_id, *criteria, **filters):
        with _store_errors("read"):
            return self._query(model, workspace_id, criteria, filters).first()

    def get(self, model, workspace_id, row_id):
        row = self.first(model, workspace_id, model.id == row_id)
        if row is None:
            raise NotFoundError(model.__name__, row_id)
        return row

    def insert(self, model, workspace_id, **values):
        require_ids(workspace_id=workspace_id)
        with _store_errors("insert"):
            row = model(workspace_id=workspace_id, **values)
            self.db.add(row)
            self.db.flush()
        return row

    def insert_if_absent(self, model, workspace_id, **values):
        """
        Insert a row unless a unique constraint already covers it.

        The insert runs in its own savepoint; a constraint violation rolls
        back just that savepoint and returns None.
        """
        require_ids(workspace_id=workspace_id)
        try:
            with self.db.begin_nested():
                row = model(workspace_id=workspace_id, **values)
                self.db.add(row)
                self.db.flush()
        except IntegrityError:
            logger.info(f"{model.__name__} already exists in workspace {workspace_id}, insert skipped")
            return None
        except SQLAlchemyError as e:
            logger.error(f"Store insert failed: {e}")
            raise PersistenceError("Store insert failed") from e
        return row

    def update(self, model, workspace_id, values: dict, *criteria, **filters) -> int:
        """Patch matching rows; returns the number of rows changed."""
        with _store_errors("update"):
            return self._query(model, workspace_id, criteria, filters).update(
                values, synchronize_session="fetch"
            )

    def delete(self, model, workspace_id, *criteria, **filters) -> int:
        with _store_errors("delete"):
            return self._query(model, workspace_id, criteria, filters).delete(
                synchronize_session="fetch"
            )

    @contextmanager
    def savepoint(self):
        """Run a unit of work that rolls back on its own if it fails."""
        with _store_errors("savepoint"):
            with self.db.begin_nested():
                yield self

    def commit(self):
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Store commit failed: {e}")
            raise PersistenceError("Store commit failed") from e

    def rollback(self):
        self.db.rollback()
