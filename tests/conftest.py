"""Test configuration."""
import os
from collections.abc import AsyncIterator, Callable, Iterator
from pathlib import Path
from uuid import uuid4

from alembic import command
from alembic.config import Config
import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker

# --- Default test environment
os.environ.setdefault("DATABASE_URL", "sqlite:///./hydrowatch_test.db")
os.environ.setdefault("API_KEY", "test-secret-key")
os.environ.setdefault("HYDRO_ENV", "test")
os.environ.setdefault("PROMETHEUS_ENABLED", "false")

from app.main import app  # noqa: E402
from app.db import get_db  # noqa: E402
from app.models import (  # noqa: E402
    AlertConfiguration,
    AlertType,
    Dam,
    GroundwaterWell,
    NotificationChannel,
    RainfallStation,
    Station,
    ThresholdOperator,
    User,
)
from app.models.api_key import ApiKey, ApiScope  # noqa: E402
from app.utils.apikey import hash_key  # noqa: E402

DB_PATH = Path("./hydrowatch_test.db")


def _run_migrations() -> None:
    cfg = Config(str(Path(__file__).resolve().parents[1] / "alembic.ini"))
    cfg.set_main_option("sqlalchemy.url", os.environ["DATABASE_URL"])
    command.upgrade(cfg, "head")


# --- (1) Fresh database file per session
if DB_PATH.exists():
    DB_PATH.unlink()

engine = create_engine(
    os.environ["DATABASE_URL"],
    connect_args={"check_same_thread": False},
    future=True,
)


# pysqlite defers BEGIN until the first DML; emit it eagerly so SAVEPOINTs nest inside the test transaction.
@event.listens_for(engine, "connect")
def _disable_pysqlite_begin(dbapi_connection, connection_record) -> None:
    dbapi_connection.isolation_level = None


@event.listens_for(engine, "begin")
def _emit_begin(conn) -> None:
    conn.exec_driver_sql("BEGIN")


TestingSessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True, expire_on_commit=False)

# --- (2) Schema comes from Alembic only
_run_migrations()


@pytest.fixture
def db_session() -> Iterator[Session]:
    connection = engine.connect()
    transaction = connection.begin()
    session = TestingSessionLocal(bind=connection)
    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


@pytest.fixture(autouse=True)
def override_db_dependency(db_session: Session) -> Iterator[None]:
    def _get_db() -> Iterator[Session]:
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.pop(get_db, None)


@pytest.fixture
async def client() -> AsyncIterator[AsyncClient]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as async_client:
        yield async_client


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_user(db_session: Session) -> Callable[..., User]:
    def _factory(*, phone_number: str | None = "+911234567890", is_active: bool = True) -> User:
        suffix = uuid4().hex[:8]
        user = User(
            username=f"user-{suffix}",
            email=f"user-{suffix}@example.com",
            phone_number=phone_number,
            is_active=is_active,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _factory


@pytest.fixture
def make_api_key(db_session: Session) -> Callable[..., ApiKey]:
    def _factory(
        name: str,
        key: str,
        scope: ApiScope = ApiScope.viewer,
        is_active: bool = True,
        user_id: int | None = None,
    ) -> ApiKey:
        api_key = ApiKey(
            name=name,
            prefix="test_" + scope.value,
            key_hash=hash_key(key),
            scope=scope,
            is_active=is_active,
            user_id=user_id,
        )
        db_session.add(api_key)
        db_session.commit()
        db_session.refresh(api_key)
        return api_key

    return _factory


@pytest.fixture
def headers_for(make_api_key: Callable[..., ApiKey]) -> Callable[..., dict[str, str]]:
    def _factory(scope: ApiScope = ApiScope.viewer, user: User | None = None) -> dict[str, str]:
        token = f"{scope.value}-{uuid4().hex}"
        make_api_key(
            name=f"{scope.value}-{uuid4().hex}",
            key=token,
            scope=scope,
            user_id=user.id if user is not None else None,
        )
        return {"Authorization": f"Bearer {token}"}

    return _factory


@pytest.fixture
def viewer_headers(headers_for) -> dict[str, str]:
    return headers_for(ApiScope.viewer)


@pytest.fixture
def operator_headers(headers_for) -> dict[str, str]:
    return headers_for(ApiScope.operator)


@pytest.fixture
def admin_headers(headers_for) -> dict[str, str]:
    return headers_for(ApiScope.admin)


@pytest.fixture
def user(make_user) -> User:
    return make_user()


@pytest.fixture
def user_headers(headers_for, user: User) -> dict[str, str]:
    return headers_for(ApiScope.viewer, user)


@pytest.fixture
def make_station(db_session: Session) -> Callable[..., Station]:
    def _factory(
        *,
        name: str | None = None,
        river_name: str = "Ganga",
        danger_level: float = 10.0,
        flood_level: float = 12.0,
        region: str | None = "North",
    ) -> Station:
        station = Station(
            name=name or f"station-{uuid4().hex[:8]}",
            river_name=river_name,
            location={"lat": 25.3, "lng": 83.0},
            danger_level=danger_level,
            flood_level=flood_level,
            region=region,
        )
        db_session.add(station)
        db_session.commit()
        db_session.refresh(station)
        return station

    return _factory


@pytest.fixture
def make_dam(db_session: Session) -> Callable[..., Dam]:
    def _factory(*, name: str | None = None, total_capacity: float = 1000.0, region: str | None = "West") -> Dam:
        dam = Dam(
            name=name or f"dam-{uuid4().hex[:8]}",
            location={"lat": 21.8, "lng": 73.7},
            total_capacity=total_capacity,
            region=region,
        )
        db_session.add(dam)
        db_session.commit()
        db_session.refresh(dam)
        return dam

    return _factory


@pytest.fixture
def make_well(db_session: Session) -> Callable[..., GroundwaterWell]:
    def _factory(*, name: str | None = None, region: str | None = "Deccan") -> GroundwaterWell:
        well = GroundwaterWell(
            name=name or f"well-{uuid4().hex[:8]}",
            location={"lat": 17.4, "lng": 78.5},
            region=region,
        )
        db_session.add(well)
        db_session.commit()
        db_session.refresh(well)
        return well

    return _factory


@pytest.fixture
def make_rain_station(db_session: Session) -> Callable[..., RainfallStation]:
    def _factory(*, name: str | None = None, region: str | None = "Coast") -> RainfallStation:
        station = RainfallStation(
            name=name or f"gauge-{uuid4().hex[:8]}",
            location={"lat": 19.1, "lng": 72.9},
            region=region,
        )
        db_session.add(station)
        db_session.commit()
        db_session.refresh(station)
        return station

    return _factory


@pytest.fixture
def make_configuration(db_session: Session) -> Callable[..., AlertConfiguration]:
    def _factory(
        user: User,
        *,
        entity_type: AlertType = AlertType.RIVER,
        entity_id: str = "1",
        operator: ThresholdOperator = ThresholdOperator.GT,
        threshold: float = 10.0,
        channels: list[NotificationChannel] | None = None,
        enabled: bool = True,
    ) -> AlertConfiguration:
        configuration = AlertConfiguration(
            user_id=user.id,
            entity_type=entity_type,
            entity_id=entity_id,
            threshold_operator=operator,
            threshold_value=threshold,
            channels=[channel.value for channel in (channels or [NotificationChannel.EMAIL])],
            enabled=enabled,
        )
        db_session.add(configuration)
        db_session.commit()
        db_session.refresh(configuration)
        return configuration

    return _factory
