"""Relational persistence for products edited through the web UI."""
from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, List, Optional

from loguru import logger
from sqlalchemy import create_engine, select, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from ..config import StoreConfig
from ..data.records import ExistingTarget, ProductRecord, ProductSummary, Target
from ..data.tables import Base, ProductRow
from ..errors import ProductNotFound, ProductValidationError, StoreClosedError
from ..validation.rules import validate_product


class ProductStore:
    """SQLAlchemy-backed product store with an explicit open/close lifecycle.

    Every public operation runs in its own transaction. Concurrent writers are
    not coordinated: the later write wins.
    """

    def __init__(self, config: StoreConfig) -> None:
        self.config = config
        self._engine: Optional[Engine] = None
        self._sessions: Optional[sessionmaker] = None

    @property
    def is_open(self) -> bool:
        return self._engine is not None

    def open(self) -> "ProductStore":
        if self.is_open:
            return self
        logger.info("Opening product store at {}", self.config.database_url)
        sqlite_path = self.config.sqlite_path
        if sqlite_path is not None:
            sqlite_path.parent.mkdir(parents=True, exist_ok=True)
        self._engine = create_engine(
            self.config.database_url, echo=self.config.echo, **self._engine_kwargs()
        )
        Base.metadata.create_all(self._engine)
        self._sessions = sessionmaker(bind=self._engine, expire_on_commit=False)
        return self

    def close(self) -> None:
        if self._engine is None:
            return
        logger.info("Closing product store at {}", self.config.database_url)
        self._engine.dispose()
        self._engine = None
        self._sessions = None

    def __enter__(self) -> "ProductStore":
        return self.open()

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def _engine_kwargs(self) -> Dict[str, Any]:
        url = self.config.database_url
        if not url.startswith("sqlite"):
            return {"pool_pre_ping": True}
        kwargs: Dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if self.config.sqlite_path is None:
            # In-memory databases live and die with a single connection.
            kwargs["poolclass"] = StaticPool
        return kwargs

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        if self._sessions is None:
            raise StoreClosedError("Product store is not open")
        session = self._sessions()
        try:
            yield session
            session.commit()
        except SQLAlchemyError as exc:
            session.rollback()
            logger.error(
                "Database transaction failed: {}: {}", type(exc).__name__, exc
            )
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def list_all(self) -> List[ProductSummary]:
        with self.session_scope() as session:
            rows = session.scalars(
                select(ProductRow).order_by(
                    ProductRow.created_at.desc(), ProductRow.row_id.desc()
                )
            )
            return [row.to_record().summary() for row in rows]

    def get_by_id(self, product_id: str) -> ProductRecord:
        with self.session_scope() as session:
            return self._require(session, product_id).to_record()

    def upsert(self, target: Target, title: str, quantity: int) -> ProductRecord:
        """Create a product for a new target or overwrite an existing one.

        The field rules are checked before any database work so an invalid
        write never reaches storage.
        """
        errors = validate_product(title, quantity)
        if errors.any():
            raise ProductValidationError(errors)

        with self.session_scope() as session:
            if isinstance(target, ExistingTarget):
                row = self._require(session, target.product_id)
                row.title = title
                row.quantity = quantity
                action = "Updated"
            else:
                row = ProductRow(title=title, quantity=quantity)
                session.add(row)
                action = "Created"
            session.flush()
            record = row.to_record()
        logger.info("{} product {} (quantity={})", action, record.id, record.quantity)
        return record

    def delete(self, product_id: str) -> None:
        with self.session_scope() as session:
            session.delete(self._require(session, product_id))
        logger.info("Deleted product {}", product_id)

    def health_check(self) -> bool:
        try:
            with self.session_scope() as session:
                session.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, StoreClosedError) as exc:
            logger.error("Product store health check failed: {}", exc)
            return False

    @staticmethod
    def _require(session: Session, product_id: str) -> ProductRow:
        row = session.scalar(select(ProductRow).where(ProductRow.id == product_id))
        if row is None:
            raise ProductNotFound(product_id)
        return row
