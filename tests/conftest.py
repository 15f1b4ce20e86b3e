import pytest
from datetime import date, time
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from gymschedule.db.base import Base
from gymschedule.db.session import get_db
from gymschedule.main import app
from gymschedule.models.schedule import (
    ClassSeries,
    ClassInstance,
    ClassCategory,
    ClassType,
    ClassInstanceStatus
)


# Usar una base de datos en memoria para pruebas
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# Crear las tablas en la base de datos de prueba
@pytest.fixture(scope="session")
def db_engine():
    Base.metadata.create_all(bind=engine)

    yield engine

    # Limpiar
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db(db_engine):
    """
    Crea una sesión de base de datos para cada test y vacía las tablas al
    finalizar. Los servicios hacen commit por su cuenta, así que la limpieza
    se hace borrando filas en lugar de con un rollback externo.
    """
    session = TestingSessionLocal()

    yield session

    session.rollback()
    session.close()
    with db_engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())


@pytest.fixture(scope="function")
def client(db):
    """
    Crea un cliente de prueba usando una sesión de base de datos de prueba.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def make_series(db):
    """
    Fábrica de series: devuelve una función que crea y persiste una serie
    con valores por defecto razonables.
    """
    def _make_series(**overrides):
        values = {
            "title": "Yoga Matutino",
            "weekday": 1,
            "start_time": time(9, 0),
            "end_time": time(10, 0),
            "category": ClassCategory.ADULT,
            "class_type": ClassType.GROUP,
            "instructor": "Laura Pérez",
            "max_capacity": 15,
            "active": True,
            "period_start": date(2024, 1, 1),
            "period_end": None,
        }
        values.update(overrides)
        series = ClassSeries(**values)
        db.add(series)
        db.commit()
        db.refresh(series)
        return series

    return _make_series


@pytest.fixture(scope="function")
def make_instance(db):
    """Fábrica de clases sueltas (o ligadas a una serie si se indica series_id)."""
    def _make_instance(**overrides):
        values = {
            "title": "Boxeo Intensivo",
            "date": date(2030, 5, 6),
            "start_time": time(18, 0),
            "end_time": time(19, 0),
            "instructor": "Carlos Ruiz",
            "max_capacity": 10,
            "status": ClassInstanceStatus.SCHEDULED,
            "category": ClassCategory.ADULT,
            "class_type": ClassType.GROUP,
            "series_id": None,
        }
        values.update(overrides)
        instance = ClassInstance(**values)
        db.add(instance)
        db.commit()
        db.refresh(instance)
        return instance

    return _make_instance
