"""Database schema migrations for the evaluation store."""

from __future__ import annotations

import alembic.command
import alembic.config
import alembic.util

import assessor.lib.cli as click
from assessor.core import di

AlembicConfig = alembic.config.Config


@click.group("schema")
def schema(): ...


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def current(verbose: bool, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    """Show the revision the database is at."""
    alembic.command.current(alembic_conf, verbose=verbose)


@schema.command()
@click.argument("message")
@click.option("--autogenerate/--empty", default=True, help="diff the table definitions against the database")
@di.inject
def generate(
    message: str,
    autogenerate: bool,
    alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"],
):
    """Write a new revision for changes to `assessor.storage.table`."""
    alembic.command.revision(alembic_conf, message, autogenerate=autogenerate)


@schema.command()
@di.inject
def check(alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    """Fail if the table definitions have changes no revision covers."""
    try:
        alembic.command.check(alembic_conf)
    except alembic.util.AutogenerateDiffsDetected as e:
        raise click.ClickException(str(e)) from e


@schema.command()
@click.argument("revision", default="head")
@di.inject
def up(revision: str, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.upgrade(alembic_conf, revision)


@schema.command()
@click.argument("revision", default="-1")
@di.inject
def down(revision: str, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.downgrade(alembic_conf, revision)


@schema.command()
@click.option("--verbose", "-v", is_flag=True, default=False)
@di.inject
def history(verbose: bool, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    alembic.command.history(alembic_conf, verbose=verbose, indicate_current=True)


@schema.command()
@click.argument("revision")
@di.inject
def stamp(revision: str, alembic_conf: AlembicConfig = di.Provide["storage.persistent.alembic_config"]):
    """Record `revision` as applied without running it, e.g. for a database created by `create_all`."""
    alembic.command.stamp(alembic_conf, revision)
