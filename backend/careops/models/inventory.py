from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, Numeric
from sqlalchemy.orm import relationship
from careops.database import Base
from careops.utils.dates import utcnow

class InventoryItem(Base):
    __tablename__ = "inventory"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(100))
    quantity = Column(Integer, default=0, nullable=False)
    min_quantity = Column(Integer, default=0, nullable=False)  # reorder threshold
    unit = Column(String(50))  # e.g., "pieces", "boxes", etc.
    cost_per_unit = Column(Numeric(10, 2), default=0)

    workspace_id = Column(Integer, ForeignKey("workspaces.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    workspace = relationship("Workspace", back_populates="inventory_items")

    @property
    def is_low_stock(self) -> bool:
        return self.quantity <= self.min_quantity
