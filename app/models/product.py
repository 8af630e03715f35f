from sqlalchemy import Column, Integer, String, Text, Boolean, DateTime, Numeric, ForeignKey, JSON, Table
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from app.db.base_class import Base

product_category_link = Table(
    "product_category_link",
    Base.metadata,
    Column("product_id", Integer, ForeignKey("product.id", ondelete="CASCADE"), primary_key=True),
    Column("category_id", Integer, ForeignKey("product_category.id", ondelete="CASCADE"), primary_key=True),
)

product_attribute_term_link = Table(
    "product_attribute_term_link",
    Base.metadata,
    Column("product_attribute_id", Integer, ForeignKey("product_attribute.id", ondelete="CASCADE"), primary_key=True),
    Column("term_id", Integer, ForeignKey("attribute_term.id", ondelete="CASCADE"), primary_key=True),
)


class ProductCategory(Base):
    __tablename__ = "product_category"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    slug = Column(String(255), unique=True, index=True, nullable=False)

    def __repr__(self):
        return f"<ProductCategory(id={self.id}, slug='{self.slug}')>"


class Product(Base):
    __tablename__ = "product"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    name = Column(String(255), nullable=False, index=True)
    slug = Column(String(255), nullable=False, index=True)
    status = Column(String(20), nullable=False, default="published", index=True) # published, draft, pending, private
    description = Column(Text, nullable=True)
    short_description = Column(Text, nullable=True)
    regular_price = Column(Numeric(10, 2), nullable=False)
    sale_price = Column(Numeric(10, 2), nullable=True)
    price = Column(Numeric(10, 2), nullable=False, index=True) # Effective price: sale price when set
    seller_id = Column(Integer, ForeignKey("user.id", ondelete="SET NULL"), nullable=True, index=True)
    image_id = Column(Integer, nullable=True)
    gallery_image_ids = Column(JSON, nullable=True)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now(), nullable=False)

    seller = relationship("User")
    categories = relationship("ProductCategory", secondary=product_category_link, order_by="ProductCategory.name")
    attributes = relationship(
        "ProductAttribute", back_populates="product", cascade="all, delete-orphan", order_by="ProductAttribute.position"
    )

    @property
    def on_sale(self):
        return self.sale_price is not None and self.sale_price < self.regular_price

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', seller_id={self.seller_id})>"


class ProductAttribute(Base):
    """
    A marketplace attribute on a product (material, diameter, grip...).
    Taxonomy-backed attributes reference shared terms; custom ones keep a flat value string.
    """
    __tablename__ = "product_attribute"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    product_id = Column(Integer, ForeignKey("product.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    value = Column(Text, nullable=False, default="")
    position = Column(Integer, nullable=False, default=0)
    is_visible = Column(Boolean, nullable=False, default=True)
    is_taxonomy = Column(Boolean, nullable=False, default=False)
    taxonomy_id = Column(Integer, ForeignKey("attribute_taxonomy.id", ondelete="SET NULL"), nullable=True)

    product = relationship("Product", back_populates="attributes")
    taxonomy = relationship("AttributeTaxonomy")
    terms = relationship("AttributeTerm", secondary=product_attribute_term_link, order_by="AttributeTerm.id")

    @property
    def values(self):
        if self.is_taxonomy:
            return [term.name for term in self.terms]
        return [v.strip() for v in self.value.split(",") if v.strip()] if self.value else []

    @property
    def label(self):
        if self.is_taxonomy and self.taxonomy is not None:
            return self.taxonomy.label
        return self.name

    def __repr__(self):
        return f"<ProductAttribute(id={self.id}, product_id={self.product_id}, name='{self.name}')>"
