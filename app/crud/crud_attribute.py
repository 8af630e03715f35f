import re
from sqlalchemy.orm import Session
from typing import Optional, List, Iterable

from app.models.taxonomy import AttributeTaxonomy, AttributeTerm
from app.models.product import ProductCategory

def slugify(value: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", value.strip().lower()).strip("-")
    return slug or "item"

def taxonomy_slug(name: str) -> str:
    """Attribute names map to taxonomy slugs the way the catalog stores them ("Pole Diameter" -> "pole_diameter")."""
    return slugify(name).replace("-", "_")

def get_taxonomy_by_slug(db: Session, slug: str) -> Optional[AttributeTaxonomy]:
    return db.query(AttributeTaxonomy).filter(AttributeTaxonomy.slug == slug).first()

def get_taxonomy_for_attribute(db: Session, name: str) -> Optional[AttributeTaxonomy]:
    """Resolve an attribute name (slug or label) to its taxonomy, if it is taxonomy-backed."""
    return get_taxonomy_by_slug(db, taxonomy_slug(name))

def create_taxonomy(
    db: Session, *, slug: str, label: str, type: str = "select", description: Optional[str] = None, commit: bool = True
) -> AttributeTaxonomy:
    db_obj = AttributeTaxonomy(slug=slug, label=label, type=type, description=description)
    db.add(db_obj)
    if commit:
        db.commit()
        db.refresh(db_obj)
    else:
        db.flush()
    return db_obj

def get_term_by_name(db: Session, *, taxonomy_id: int, name: str) -> Optional[AttributeTerm]:
    return (
        db.query(AttributeTerm)
        .filter(AttributeTerm.taxonomy_id == taxonomy_id, AttributeTerm.name == name)
        .first()
    )

def get_or_create_term(db: Session, *, taxonomy: AttributeTaxonomy, name: str) -> AttributeTerm:
    """Flushes but does not commit; callers own the transaction."""
    term = get_term_by_name(db, taxonomy_id=taxonomy.id, name=name)
    if term is None:
        term = AttributeTerm(taxonomy_id=taxonomy.id, name=name, slug=slugify(name))
        db.add(term)
        db.flush()
    return term

def get_categories_by_ids(db: Session, category_ids: Iterable[int]) -> List[ProductCategory]:
    ids = list(category_ids)
    if not ids:
        return []
    return db.query(ProductCategory).filter(ProductCategory.id.in_(ids)).all()

def create_category(db: Session, *, name: str, slug: Optional[str] = None) -> ProductCategory:
    db_obj = ProductCategory(name=name, slug=slug or slugify(name))
    db.add(db_obj)
    db.commit()
    db.refresh(db_obj)
    return db_obj
