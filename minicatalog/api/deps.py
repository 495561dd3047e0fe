"""FastAPI dependencies.

Services are built per request around the request's own Session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from minicatalog.config import Settings, settings
from minicatalog.db.database import get_db
from minicatalog.services.image_service import ImageService
from minicatalog.services.mini_reader import MiniReader
from minicatalog.services.mini_service import MiniService
from minicatalog.services.reference_service import ReferenceService
from minicatalog.services.tag_service import TagService


def get_settings() -> Settings:
    return settings


def get_image_service(config: Settings = Depends(get_settings)) -> ImageService:
    return ImageService(config)


def get_mini_reader(
    db: Session = Depends(get_db), config: Settings = Depends(get_settings)
) -> MiniReader:
    return MiniReader(db, config)


def get_tag_service(db: Session = Depends(get_db)) -> TagService:
    return TagService(db)


def get_mini_service(
    db: Session = Depends(get_db),
    config: Settings = Depends(get_settings),
    images: ImageService = Depends(get_image_service),
) -> MiniService:
    return MiniService(db, config, images=images)


def get_reference_service(db: Session = Depends(get_db)) -> ReferenceService:
    return ReferenceService(db)
