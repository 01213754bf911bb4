from __future__ import annotations

import typing as t
from pathlib import Path

import alembic.config
import sqlalchemy
import sqlalchemy.event
import sqlalchemy.orm
import xdg_base_dirs as xdg
from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Configuration, Container, Factory, Object, Provider, Resource, Singleton
from sqlalchemy.engine.url import URL as DSN

import tubely.lib.json as json
from tubely.storage.object import LocalObjectStore, ObjectStore, S3ObjectStore

from ..config.secrets import PostgresqlSecrets, S3Secrets
from ..config.storage import ObjectSettings, PostgresqlSettings, StorageSettings
from ..di import NotReady
from ..provider import LoggingProvider


def _dsn(config: PostgresqlSettings, secrets: PostgresqlSecrets) -> DSN:
    return DSN.create(
        config.driver,
        port=config.port,
        host=str(config.host) if config.host else None,
        username=secrets.username.get_secret_value() if secrets.username else None,
        password=secrets.password.get_secret_value() if secrets.password else None,
        database=config.database,
    )


def provide_alembic_conf(
    migration_path: Path, config: PostgresqlSettings, secrets: PostgresqlSecrets, root: Path | NotReady
) -> alembic.config.Config:
    if isinstance(root, NotReady):
        raise RuntimeError("root path is unavailable")

    escaped_str = _dsn(config, secrets).render_as_string(hide_password=False).replace("%", "%%")

    ac = alembic.config.Config()
    ac.set_main_option("script_location", str(root / migration_path))
    ac.set_section_option("alembic", "sqlalchemy.url", escaped_str)
    ac.set_section_option("alembic", "file_template", "%%(year)d-%%(month).2d-%%(day).2d-%%(slug)s-%%(rev)s")
    return ac


def provide_engine(
    config: PostgresqlSettings, secrets: PostgresqlSecrets, logging: LoggingProvider
) -> sqlalchemy.Engine:
    logger = logging.get_logger()

    engine = sqlalchemy.create_engine(_dsn(config, secrets), json_serializer=json.dumps, json_deserializer=json.loads)
    sqlalchemy.event.listen(engine, "connect", register_timezone)
    logger.info(
        "initialized SQLAlchemy engine",
        extra={
            "driver": config.driver,
            "database": config.database,
            "host": config.host,
            "port": config.port,
        },
    )
    return engine


def provide_session(engine: sqlalchemy.Engine) -> sqlalchemy.orm.Session:
    """Create a new session. Caller is responsible for closing it (via di.Manage)."""
    maker = sqlalchemy.orm.sessionmaker(engine, expire_on_commit=False, autoflush=False)
    return maker(autobegin=False)


def provide_object_store(config: ObjectSettings, secrets: S3Secrets, logging: LoggingProvider) -> ObjectStore:
    logger = logging.get_logger()

    if config.backend == "s3":
        assert config.s3_bucket and config.s3_region
        store: ObjectStore = S3ObjectStore(
            bucket=config.s3_bucket,
            region=config.s3_region,
            endpoint_url=config.s3_endpoint,
            access_key_id=secrets.access_key_id.get_secret_value() if secrets.access_key_id else None,
            secret_access_key=secrets.secret_access_key.get_secret_value() if secrets.secret_access_key else None,
        )
        logger.info("using S3 object store", extra={"bucket": config.s3_bucket, "region": config.s3_region})
        return store

    base_path = config.local_path or (xdg.xdg_data_home() / "tubely" / "assets")
    logger.info("using local object store", extra={"path": base_path})
    return LocalObjectStore(base_path, url_prefix=config.local_url_prefix)


class PersistentContainer(DeclarativeContainer):
    config = Configuration()
    secrets = Configuration()
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()

    alembic_config: Provider[alembic.config.Config] = Singleton(
        provide_alembic_conf,
        migration_path=Path("migrations/"),
        config=config.postgresql.as_(PostgresqlSettings),
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        root=root,
    )
    engine: Provider[sqlalchemy.Engine] = Singleton(
        provide_engine,
        config=config.postgresql.as_(PostgresqlSettings),
        secrets=secrets.postgresql.as_(PostgresqlSecrets),
        logging=logging,
    )
    session: Provider[sqlalchemy.orm.Session] = Factory(provide_session, engine=engine)


class StorageContainer(DeclarativeContainer):
    config: Provider[StorageSettings] = Configuration(strict=True)
    secrets: Provider[StorageSettings] = Configuration(strict=True)
    logging: Provider[LoggingProvider] = Resource()
    root: Provider[Path | NotReady] = Object()

    persistent: Provider[PersistentContainer] = Container(
        PersistentContainer, config=config.persistent, secrets=secrets, logging=logging, root=root
    )
    object: Provider[ObjectStore] = Singleton(
        provide_object_store,
        config=config.object.as_(ObjectSettings),
        secrets=secrets.s3.as_(S3Secrets),
        logging=logging,
    )


def register_timezone(dbapi_conn: t.Any, _: t.Any) -> None:
    """Set connection timezone to UTC so timestamps come back timezone-aware in UTC."""
    cursor = dbapi_conn.cursor()
    cursor.execute("SET TIMEZONE TO 'UTC'")
    cursor.close()
