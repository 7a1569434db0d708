"""Pytest configuration and fixtures for engine and service layer tests."""

from decimal import Decimal

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, scoped_session

from src.models.base import Base
from src.services.dto import MasterIngredientData, RecipeData, RecipeIngredientLine


@pytest.fixture(scope="function")
def test_db():
    """Provide a clean test database for each test function.

    This fixture:
    1. Creates an in-memory SQLite database
    2. Creates all tables
    3. Provides the database to the test
    4. Drops all tables after the test completes
    """
    engine = create_engine("sqlite:///:memory:", echo=False)

    # Registers every model with Base.metadata
    import src.models  # noqa: F401

    Base.metadata.create_all(engine)

    session_factory = sessionmaker(bind=engine, expire_on_commit=False)
    Session = scoped_session(session_factory)

    # Monkey-patch the global session factory for tests
    import src.services.database as db_module

    original_get_session_factory = db_module.get_session_factory
    db_module.get_session_factory = lambda: Session

    yield Session

    Session.remove()
    Base.metadata.drop_all(engine)
    engine.dispose()

    db_module.get_session_factory = original_get_session_factory


@pytest.fixture
def drop_tables(test_db):
    """Drop tables from the test database so service calls hit a database error."""

    def _drop(*table_names):
        test_db.remove()
        engine = test_db().get_bind()
        for name in table_names:
            Base.metadata.tables[name].drop(engine)

    return _drop


@pytest.fixture
def coriander():
    """Coriander Seeds at 120 per kg."""
    return MasterIngredientData(name="Coriander Seeds", price_per_kg=Decimal("120"))


@pytest.fixture
def master_list(coriander):
    """A small master price list."""
    return [
        coriander,
        MasterIngredientData(name="Red Chilli", price_per_kg=Decimal("300"), brand="Guntur"),
        MasterIngredientData(name="Toor Dal", price_per_kg=Decimal("140")),
        MasterIngredientData(name="Hing", price_per_kg=Decimal("2000")),
    ]


@pytest.fixture
def sambar_powder():
    """Sambar Powder: 200 g coriander, 100 g chilli, 50 g dal, overheads 20."""
    return RecipeData(
        id=1,
        name="Sambar Powder",
        overheads=Decimal("20"),
        selling_price=Decimal("148"),
        ingredients=(
            RecipeIngredientLine("Coriander Seeds", Decimal("200"), "g"),
            RecipeIngredientLine("Red Chilli", Decimal("100"), "g"),
            RecipeIngredientLine("Toor Dal", Decimal("50"), "g"),
        ),
    )


@pytest.fixture
def rasam_powder():
    """Rasam Powder: 300 g coriander, 0.05 kg chilli, no overheads."""
    return RecipeData(
        id=2,
        name="Rasam Powder",
        overheads=Decimal("0"),
        ingredients=(
            RecipeIngredientLine("Coriander Seeds", Decimal("300"), "g"),
            RecipeIngredientLine("Red Chilli", Decimal("0.05"), "kg"),
        ),
    )
