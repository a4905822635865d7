import logging

from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func

from .database import create_db_engine
from .exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)

# Base class for SQLAlchemy models
Base = declarative_base()

ORDER_STATUSES = ("pending", "approved", "canceled", "returned")


class Order(Base):
    """Order database model"""
    __tablename__ = "orders"
    __table_args__ = (
        CheckConstraint(
            "status IN (%s)" % ", ".join(f"'{s}'" for s in ORDER_STATUSES),
            name="ck_orders_status",
        ),
    )

    order_id = Column(Integer, primary_key=True, autoincrement=True)
    status = Column(String(20), nullable=False, default="pending", server_default="pending")
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), onupdate=func.now())


class Product(Base):
    """Product database model"""
    __tablename__ = "products"

    product_id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    stock_quantity = Column(Integer, nullable=False, default=0, server_default="0")


class OrderItem(Base):
    """Order item database model"""
    __tablename__ = "order_items"

    order_id = Column(Integer, ForeignKey("orders.order_id"), primary_key=True)
    product_id = Column(Integer, ForeignKey("products.product_id"), primary_key=True)
    quantity = Column(Integer, nullable=False)


def init_db(database_url: str) -> None:
    """Create the shop tables if they do not exist"""
    try:
        engine = create_db_engine(database_url)
    except (SQLAlchemyError, ImportError) as e:
        logger.error(f"Failed to create database engine: {e}")
        raise DatabaseConnectionError(f"Failed to create database engine: {e}") from e
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError as e:
        logger.error(f"Failed to create database schema: {e}")
        raise DatabaseConnectionError(f"Failed to create database schema: {e}") from e
    finally:
        engine.dispose()
    logger.info("Database schema is ready")
