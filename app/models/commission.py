from sqlalchemy import Column, Integer, String, DateTime, Numeric, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base_class import Base

COMMISSION_STATUSES = ("pending", "completed", "refunded", "cancelled")


class Commission(Base):
    """Append-only ledger row: the platform's cut of one seller-attributed order line."""
    __tablename__ = "commission"
    __table_args__ = (UniqueConstraint("order_id", "product_id", name="_commission_order_product_uc"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey("order.id"), nullable=False, index=True)
    product_id = Column(Integer, nullable=False, index=True) # Products may be hard-deleted, the ledger row stays
    seller_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True) # Seller the commission is charged to
    buyer_id = Column(Integer, ForeignKey("user.id"), nullable=False, index=True)

    amount = Column(Numeric(19, 4), nullable=False, default=0)
    status = Column(String(20), nullable=False, default="pending", index=True) # pending, completed, refunded, cancelled

    created_at = Column(DateTime, server_default=func.now(), nullable=False, index=True)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    # Relationships
    order = relationship("Order", backref="commissions")
    seller = relationship("User", foreign_keys=[seller_id])
    buyer = relationship("User", foreign_keys=[buyer_id])

    def __repr__(self):
        return f"<Commission(id={self.id}, order_id={self.order_id}, product_id={self.product_id}, seller_id={self.seller_id}, amount={self.amount}, status='{self.status}')>"
