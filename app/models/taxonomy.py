from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, UniqueConstraint, func
from sqlalchemy.orm import relationship
from app.db.base_class import Base

class AttributeTaxonomy(Base):
    """A global product attribute whose values are shared terms (e.g. pole_diameter)."""
    __tablename__ = "attribute_taxonomy"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    slug = Column(String(100), unique=True, index=True, nullable=False)
    label = Column(String(255), nullable=False)
    type = Column(String(50), nullable=False, default="select")
    description = Column(String(255), nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)

    terms = relationship("AttributeTerm", back_populates="taxonomy", cascade="all, delete-orphan", order_by="AttributeTerm.id")

    def __repr__(self):
        return f"<AttributeTaxonomy(id={self.id}, slug='{self.slug}')>"


class AttributeTerm(Base):
    __tablename__ = "attribute_term"
    __table_args__ = (UniqueConstraint("taxonomy_id", "name", name="_taxonomy_term_name_uc"),)

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    taxonomy_id = Column(Integer, ForeignKey("attribute_taxonomy.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), nullable=False)

    taxonomy = relationship("AttributeTaxonomy", back_populates="terms")

    def __repr__(self):
        return f"<AttributeTerm(id={self.id}, taxonomy_id={self.taxonomy_id}, name='{self.name}')>"
