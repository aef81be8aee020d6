"""
Category repository functions.
"""
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from franchisehub.db import models

# Default tree inserted by seed_restaurant_categories
RESTAURANT_CATEGORIES = {
    "Hygiène & Sécurité": ["Procédures HACCP", "Plans de nettoyage", "Fiches de sécurité"],
    "Ressources Humaines": ["Contrats", "Plannings", "Formations"],
    "Marketing": ["Campagnes", "Charte graphique", "Promotions"],
    "Opérations": ["Recettes", "Fiches techniques", "Fournisseurs"],
    "Juridique": ["Réglementation", "Licences"],
}


def create_category(db: Session, name: str, parent_id: Optional[uuid.UUID] = None):
    db_category = models.Category(name=name, parent_id=parent_id)
    db.add(db_category)
    db.commit()
    db.refresh(db_category)
    return db_category


def get_category(db: Session, category_id: uuid.UUID):
    return db.query(models.Category).filter(models.Category.id == category_id).first()


def get_root_categories(db: Session):
    return (
        db.query(models.Category)
        .filter(models.Category.parent_id.is_(None))
        .order_by(models.Category.name)
        .all()
    )


def get_children(db: Session, parent_id: uuid.UUID):
    return (
        db.query(models.Category)
        .filter(models.Category.parent_id == parent_id)
        .order_by(models.Category.name)
        .all()
    )


def update_category(db: Session, category_id: uuid.UUID, name: str):
    db_category = get_category(db, category_id)
    if db_category:
        db_category.name = name
        db.commit()
        db.refresh(db_category)
    return db_category


def delete_category(db: Session, category_id: uuid.UUID) -> bool:
    db_category = get_category(db, category_id)
    if not db_category:
        return False
    # Mirror ON DELETE SET NULL for children and documents
    db.query(models.Category).filter(models.Category.parent_id == category_id).update(
        {models.Category.parent_id: None}, synchronize_session=False
    )
    db.query(models.Document).filter(models.Document.category_id == category_id).update(
        {models.Document.category_id: None}, synchronize_session=False
    )
    db.delete(db_category)
    db.commit()
    return True


def seed_restaurant_categories(db: Session) -> int:
    """Insert the default category tree unless any category exists. Returns rows created."""
    if db.query(models.Category).count() > 0:
        return 0
    created = 0
    for parent_name, children in RESTAURANT_CATEGORIES.items():
        parent = models.Category(name=parent_name)
        db.add(parent)
        db.flush()
        created += 1
        for child_name in children:
            db.add(models.Category(name=child_name, parent_id=parent.id))
            created += 1
    db.commit()
    return created
