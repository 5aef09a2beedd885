from __future__ import annotations

import typing as t
from pathlib import Path

import alembic.config
import sqlalchemy
import sqlalchemy.event
import sqlalchemy.orm
import sqlalchemy.pool
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Factory, Object, Provider, Resource, Singleton
from sqlalchemy.engine.url import URL as DSN
from sqlalchemy.engine.url import make_url

import assessor.lib.json as json

from ..config.secrets import PostgresqlSecrets
from ..config.storage import PersistentSettings
from ..di import NotReady
from ..provider import LoggingProvider

SessionFactory = t.Callable[[], sqlalchemy.orm.Session]


def provide_dsn(cf: dict[str, t.Any], secrets: PostgresqlSecrets) -> DSN:
    config = PersistentSettings(cf)
    if config.url is not None:
        return make_url(config.url)

    assert config.postgresql is not None
    pg = config.postgresql
    return DSN.create(
        pg.driver,
        database=pg.database,
        username=secrets.username.get_secret_value() if secrets.username else None,
        password=secrets.password.get_secret_value() if secrets.password else None,
        port=pg.port,
        host=str(pg.host) if pg.host else None,
    )


def provide_alembic_conf(migration_path: Path, dsn: DSN, root: Path | NotReady) -> alembic.config.Config:
    if isinstance(root, NotReady):
        raise RuntimeError("root path is unavailable")

    escaped_str = dsn.render_as_string(hide_password=False).replace("%", "%%")

    ac = alembic.config.Config()
    ac.set_main_option("script_location", str(root / migration_path))
    ac.set_section_option("alembic", "sqlalchemy.url", escaped_str)
    ac.set_section_option("alembic", "file_template", "%%(year)d-%%(month).2d-%%(day).2d-%%(slug)s-%%(rev)s")
    return ac


def provide_engine(dsn: DSN, echo: bool, logging: LoggingProvider) -> sqlalchemy.Engine:
    logger = logging.get_logger()

    kwargs: dict[str, t.Any] = {}
    if dsn.get_backend_name() == "sqlite":
        kwargs["connect_args"] = {"check_same_thread": False}
        if dsn.database in (None, "", ":memory:"):
            # one shared connection, otherwise every checkout sees an empty database
            kwargs["poolclass"] = sqlalchemy.pool.StaticPool

    engine = sqlalchemy.create_engine(dsn, echo=echo, json_serializer=json.dumps, json_deserializer=json.loads, **kwargs)
    if dsn.get_backend_name() == "postgresql":
        sqlalchemy.event.listen(engine, "connect", register_timezone)
    logger.info(
        "initialized SQLAlchemy engine",
        extra={
            "driver": dsn.drivername,
            "database": dsn.database,
            "host": dsn.host,
            "port": dsn.port,
        },
    )
    return engine


def provide_session_factory(engine: sqlalchemy.Engine) -> SessionFactory:
    maker = sqlalchemy.orm.sessionmaker(engine, expire_on_commit=False, autoflush=False)
    return lambda: maker(autobegin=False)


def provide_session(factory: SessionFactory) -> sqlalchemy.orm.Session:
    """Create a new session. Caller is responsible for closing it (via di.Manage)."""
    return factory()


class PersistentContainer(DeclarativeContainer):
    config = Configuration()
    secrets = Configuration()
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()

    dsn: Provider[DSN] = Singleton(
        provide_dsn,
        cf=config,
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
    )
    alembic_config: Provider[alembic.config.Config] = Singleton(
        provide_alembic_conf, migration_path=Path("migrations/"), dsn=dsn, root=root
    )
    engine: Provider[sqlalchemy.Engine] = Singleton(provide_engine, dsn=dsn, echo=config.echo, logging=logging)
    session_factory: Provider[SessionFactory] = Singleton(provide_session_factory, engine=engine)
    session: Provider[sqlalchemy.orm.Session] = Factory(provide_session, factory=session_factory)


class StorageContainer(DeclarativeContainer):
    config = Configuration(strict=True)
    secrets = Configuration(strict=True)
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()

    persistent: Provider[PersistentContainer] = Container(
        PersistentContainer, config=config.persistent, secrets=secrets, logging=logging, root=root
    )


def register_timezone(dbapi_conn: t.Any, _: t.Any) -> None:
    """Set connection timezone to UTC for consistent datetime handling."""
    cursor = dbapi_conn.cursor()
    cursor.execute("SET TIMEZONE TO 'UTC'")
    cursor.close()
