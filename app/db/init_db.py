import logging
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session

from app.db import base # noqa: F401 - registers every model on Base.metadata
from app.db.base_class import Base
from app.crud import crud_attribute

logger = logging.getLogger(__name__)

# slug -> (label, terms)
DEFAULT_ATTRIBUTE_TAXONOMIES = {
    "pole_diameter": ("Pole Diameter", ["38mm", "40mm", "42mm", "45mm", "50mm"]),
    "pole_material": ("Material", ["Chrome", "Stainless Steel", "Brass", "Titanium Gold", "Powder Coated"]),
    "grip_type": ("Grip Type", ["Standard", "Powder Coated", "Silicone", "Brass", "Titanium Gold"]),
    "pole_height": ("Height", ["2.2m", "2.5m", "2.7m", "3.0m", "Adjustable"]),
    "mounting_type": ("Mounting Type", ["Static", "Spinning", "Convertible", "Portable", "Permanent"]),
}


def init_db(engine: Engine) -> None:
    Base.metadata.create_all(bind=engine)


def seed_attribute_taxonomies(db: Session) -> int:
    """
    Create the default pole-gear taxonomies and their terms.
    Safe to run repeatedly; returns the number of taxonomies created.
    """
    created = 0
    for slug, (label, terms) in DEFAULT_ATTRIBUTE_TAXONOMIES.items():
        taxonomy = crud_attribute.get_taxonomy_by_slug(db, slug)
        if taxonomy is None:
            taxonomy = crud_attribute.create_taxonomy(db, slug=slug, label=label, commit=False)
            created += 1
        for term in terms:
            crud_attribute.get_or_create_term(db, taxonomy=taxonomy, name=term)
    db.commit()
    if created:
        logger.info(f"Seeded {created} attribute taxonomies")
    return created
