import logging
import math
from decimal import Decimal
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import Optional, List, Tuple, Dict, Any, Union

from app.core.errors import AuthenticationError, NotFoundError, ValidationError, PersistenceError
from app.core.ownership import ensure_can_modify_product
from app.core.principal import Principal
from app.crud import crud_attribute, crud_product, crud_user
from app.models.product import Product, ProductAttribute

logger = logging.getLogger(__name__)

Fields = Union[BaseModel, Dict[str, Any]]

# Plain columns copied straight from the request onto the product row
SIMPLE_FIELDS = ("name", "status", "description", "short_description", "regular_price", "sale_price")
MISSING_NAME = "Product name is required."


def _as_dict(fields: Fields) -> Dict[str, Any]:
    if isinstance(fields, BaseModel):
        return fields.model_dump(exclude_unset=True)
    return dict(fields or {})


def normalize_attributes(attributes) -> List[Tuple[str, List[str]]]:
    """
    Accepts either {"name": value | [values]} or [{"name": ..., "options": [...]}]
    and returns (name, values) pairs in input order, dropping empty attributes.
    """
    if isinstance(attributes, dict):
        pairs = list(attributes.items())
    else:
        pairs = []
        for attr in attributes or []:
            if isinstance(attr, BaseModel):
                attr = attr.model_dump()
            if isinstance(attr, dict) and attr.get("name"):
                pairs.append((attr["name"], attr.get("options")))

    normalized = []
    for name, value in pairs:
        if isinstance(value, (list, tuple)):
            values = [str(v).strip() for v in value if v is not None and str(v).strip()]
        elif value is None:
            values = []
        else:
            values = [str(value).strip()] if str(value).strip() else []
        if not name or not values:
            continue
        normalized.append((name, values))
    return normalized


class ProductCatalog:
    """Seller-attributed product operations on top of the product crud layer."""

    def create(self, db: Session, principal: Optional[Principal], fields: Fields) -> Product:
        if principal is None:
            raise AuthenticationError()
        data = _as_dict(fields)

        if not data.get("name") or not str(data["name"]).strip():
            raise ValidationError(MISSING_NAME, code="poleplace_missing_name")
        if data.get("regular_price") is None:
            raise ValidationError("Product price is required.", code="poleplace_missing_price")

        seller_id = principal.user_id
        if principal.is_admin and data.get("seller_id"):
            seller_id = data["seller_id"]
            if crud_user.get_user(db, seller_id) is None:
                raise NotFoundError("Invalid user.", code="poleplace_invalid_user")

        columns = {field: data[field] for field in SIMPLE_FIELDS if data.get(field) is not None}
        columns.setdefault("status", "published")
        columns["slug"] = crud_attribute.slugify(columns["name"])
        columns["price"] = self._effective_price(columns["regular_price"], columns.get("sale_price"))
        columns["seller_id"] = seller_id
        columns.update(self._image_columns(data.get("images")))

        try:
            product = crud_product.create_product(db, obj_in=columns, commit=False)
            if data.get("categories") is not None:
                product.categories = self._resolve_categories(db, data["categories"])
            if data.get("attributes") is not None:
                self._apply_attributes(db, product, data["attributes"])
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to create product.") from exc

        logger.info(f"Product {product.id} '{product.name}' created for seller {seller_id}")
        return crud_product.get_product(db, product.id)

    def update(self, db: Session, principal: Optional[Principal], product_id: int, fields: Fields) -> Product:
        if principal is None:
            raise AuthenticationError()
        product = crud_product.get_product(db, product_id)
        if product is None:
            raise NotFoundError("Invalid product.", code="poleplace_invalid_product")
        ensure_can_modify_product(principal, product)

        data = _as_dict(fields)
        if "name" in data and (data["name"] is None or not str(data["name"]).strip()):
            raise ValidationError(MISSING_NAME, code="poleplace_missing_name")
        update_data = {field: data[field] for field in SIMPLE_FIELDS if data.get(field) is not None}
        if "name" in update_data:
            update_data["slug"] = crud_attribute.slugify(update_data["name"])
        update_data.update(self._image_columns(data.get("images")))
        if "regular_price" in update_data or "sale_price" in update_data:
            update_data["price"] = self._effective_price(
                update_data.get("regular_price", product.regular_price),
                update_data.get("sale_price", product.sale_price),
            )

        try:
            product = crud_product.update_product(db, db_obj=product, update_data=update_data, commit=False)
            if data.get("categories") is not None:
                product.categories = self._resolve_categories(db, data["categories"])
            if data.get("attributes") is not None:
                self._apply_attributes(db, product, data["attributes"])
            db.commit()
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to update product.") from exc

        logger.info(f"Product {product_id} updated by user {principal.user_id}: {sorted(data)}")
        db.expire_all()
        return crud_product.get_product(db, product_id)

    def delete(self, db: Session, principal: Optional[Principal], product_id: int) -> int:
        if principal is None:
            raise AuthenticationError()
        product = crud_product.get_product(db, product_id)
        if product is None:
            raise NotFoundError("Invalid product.", code="poleplace_invalid_product")
        ensure_can_modify_product(principal, product)

        try:
            crud_product.hard_delete_product(db, product_id=product_id)
        except SQLAlchemyError as exc:
            db.rollback()
            raise PersistenceError("Failed to delete product.") from exc
        logger.info(f"Product {product_id} deleted by user {principal.user_id}")
        return product_id

    def list_for_seller(
        self, db: Session, seller_id: int, status: Optional[str] = None, skip: int = 0, limit: Optional[int] = None
    ) -> List[Product]:
        return crud_product.get_products_by_seller(db, seller_id=seller_id, status=status, skip=skip, limit=limit)

    def count_for_seller(self, db: Session, seller_id: int, status: Optional[str] = None) -> int:
        return crud_product.count_products(db, seller_id=seller_id, status=status)

    def get(self, db: Session, product_id: int, *, published_only: bool = False) -> Product:
        product = crud_product.get_product(db, product_id, status="published" if published_only else None)
        if product is None:
            raise NotFoundError("Invalid product.", code="poleplace_invalid_product")
        return product

    def search(
        self,
        db: Session,
        *,
        page: int = 1,
        per_page: int = 10,
        category: Optional[str] = None,
        search: Optional[str] = None,
        min_price: Optional[Decimal] = None,
        max_price: Optional[Decimal] = None,
        orderby: str = "date",
        order: str = "desc",
    ) -> Dict[str, Any]:
        """Public catalog page: published products only."""
        page = max(page, 1)
        products, total = crud_product.search_products(
            db,
            category=category,
            search=search,
            min_price=min_price,
            max_price=max_price,
            orderby=orderby,
            order=order,
            skip=(page - 1) * per_page,
            limit=per_page,
        )
        pages = math.ceil(total / per_page) if per_page else 0
        return {"products": products, "total": total, "pages": pages}

    @staticmethod
    def _effective_price(regular_price, sale_price) -> Decimal:
        if sale_price is not None:
            return sale_price
        return regular_price

    @staticmethod
    def _image_columns(images: Optional[List[int]]) -> Dict[str, Any]:
        if not images:
            return {}
        return {"image_id": images[0], "gallery_image_ids": list(images[1:])}

    @staticmethod
    def _resolve_categories(db: Session, category_ids: List[int]):
        categories = crud_attribute.get_categories_by_ids(db, category_ids)
        missing = set(category_ids) - {c.id for c in categories}
        if missing:
            logger.warning(f"Ignoring unknown category ids {sorted(missing)}")
        return categories

    @staticmethod
    def _apply_attributes(db: Session, product: Product, attributes) -> None:
        """Replaces the product's attribute set."""
        rows = []
        for position, (name, values) in enumerate(normalize_attributes(attributes)):
            taxonomy = crud_attribute.get_taxonomy_for_attribute(db, name)
            if taxonomy is not None:
                terms = [crud_attribute.get_or_create_term(db, taxonomy=taxonomy, name=value) for value in values]
                rows.append(ProductAttribute(
                    name=taxonomy.slug,
                    value="",
                    position=position,
                    is_taxonomy=True,
                    taxonomy_id=taxonomy.id,
                    taxonomy=taxonomy,
                    terms=terms,
                ))
            else:
                rows.append(ProductAttribute(name=name, value=", ".join(values), position=position, is_taxonomy=False))
        product.attributes = rows
        db.flush()
