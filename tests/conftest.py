"""Shared test fixtures."""

import base64
import io
from dataclasses import dataclass

import pytest
from fastapi.testclient import TestClient
from PIL import Image
from sqlalchemy import create_engine, event as sa_event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from minicatalog.api.deps import get_settings
from minicatalog.config import Settings
from minicatalog.db.database import get_db
from minicatalog.db.models import (
    Base,
    CategoryModel,
    ManufacturerModel,
    ProductLineModel,
    ProductSetModel,
    TypeModel,
)
from minicatalog.db.seed import seed_lookups
from minicatalog.main import app
from minicatalog.services.image_service import ImageService
from minicatalog.services.mini_reader import MiniReader
from minicatalog.services.mini_service import MiniService
from minicatalog.services.tag_service import TagService


@pytest.fixture()
def engine():
    """In-memory SQLite engine with foreign keys enforced."""
    eng = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @sa_event.listens_for(eng, "connect")
    def _set_fk(dbapi_conn, connection_record):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(eng)
    return eng


@pytest.fixture()
def session_factory(engine):
    factory = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    db = factory()
    seed_lookups(db)
    db.close()
    return factory


@pytest.fixture()
def db_session(session_factory) -> Session:
    """Raw database session for direct DB assertions."""
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def settings(tmp_path) -> Settings:
    return Settings(
        DATABASE_URL="sqlite:///:memory:",
        IMAGE_ROOT=str(tmp_path / "images" / "minis"),
    )


@pytest.fixture()
def image_service(settings) -> ImageService:
    return ImageService(settings)


@pytest.fixture()
def tag_service(db_session) -> TagService:
    return TagService(db_session)


@pytest.fixture()
def reader(db_session, settings) -> MiniReader:
    return MiniReader(db_session, settings)


@pytest.fixture()
def mini_service(db_session, settings, image_service) -> MiniService:
    return MiniService(db_session, settings, images=image_service)


# ── Reference data ───────────────────────────────────────


@dataclass
class Catalog:
    """Ids of the reference rows created by the ``catalog`` fixture."""

    hero: int
    monster: int
    terrain: int
    fighter: int
    wizard: int
    dragon: int
    manufacturer: int
    product_line: int
    product_set: int


@pytest.fixture()
def catalog(db_session) -> Catalog:
    hero = CategoryModel(name="Heroes")
    monster = CategoryModel(name="Monsters")
    terrain = CategoryModel(name="Terrain")
    db_session.add_all([hero, monster, terrain])
    db_session.flush()

    fighter = TypeModel(name="Fighter", category_id=hero.id)
    wizard = TypeModel(name="Wizard", category_id=hero.id)
    dragon = TypeModel(name="Dragon", category_id=monster.id)
    db_session.add_all([fighter, wizard, dragon])

    manufacturer = ManufacturerModel(name="WizKids")
    db_session.add(manufacturer)
    db_session.flush()
    line = ProductLineModel(name="Nolzur's Marvelous Miniatures", company_id=manufacturer.id)
    db_session.add(line)
    db_session.flush()
    product_set = ProductSetModel(name="Wave 1", product_line_id=line.id)
    db_session.add(product_set)
    db_session.commit()

    return Catalog(
        hero=hero.id,
        monster=monster.id,
        terrain=terrain.id,
        fighter=fighter.id,
        wizard=wizard.id,
        dragon=dragon.id,
        manufacturer=manufacturer.id,
        product_line=line.id,
        product_set=product_set.id,
    )


# ── Images ───────────────────────────────────────────────


def make_image_bytes(size=(120, 60), color=(200, 30, 30), fmt="PNG", mode="RGB") -> bytes:
    image = Image.new(mode, size, color)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    return buffer.getvalue()


@pytest.fixture()
def make_image():
    return make_image_bytes


@pytest.fixture()
def png_bytes() -> bytes:
    return make_image_bytes()


@pytest.fixture()
def png_data_url(png_bytes) -> str:
    return "data:image/png;base64," + base64.b64encode(png_bytes).decode("ascii")


# ── API ──────────────────────────────────────────────────


@pytest.fixture()
def client(session_factory, settings) -> TestClient:
    """FastAPI TestClient wired to the in-memory database and a tmp image root."""

    def _override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    yield TestClient(app)
    app.dependency_overrides.clear()
