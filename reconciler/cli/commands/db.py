# reconciler/cli/commands/db.py

"""
Database CLI Commands

Alembic migrations for the reconciler schema. Only RECONCILER_DB_URL is
required.
"""

import click


@click.group()
def db():
    """Database schema management"""
    pass


@db.command()
@click.option('--revision', default='head', show_default=True, help='Target revision')
@click.pass_context
def upgrade(ctx, revision):
    """Apply migrations up to REVISION"""
    cli_context = ctx.obj['cli_context']
    try:
        cli_context.migration_manager.upgrade(revision)
    except Exception as e:
        raise click.ClickException(f"Upgrade failed: {e}")
    click.echo(f"✅ Database upgraded to {revision}")


@db.command()
@click.argument('revision')
@click.pass_context
def downgrade(ctx, revision):
    """Revert migrations down to REVISION

    Examples:
        db downgrade base
    """
    cli_context = ctx.obj['cli_context']
    try:
        cli_context.migration_manager.downgrade(revision)
    except Exception as e:
        raise click.ClickException(f"Downgrade failed: {e}")
    click.echo(f"✅ Database downgraded to {revision}")


@db.command()
@click.pass_context
def current(ctx):
    """Show the applied migration revision"""
    cli_context = ctx.obj['cli_context']
    try:
        revision = cli_context.migration_manager.current_revision()
    except Exception as e:
        raise click.ClickException(f"Could not read revision: {e}")
    click.echo(f"Current revision: {revision or 'none'}")


@db.command('create-tables')
@click.pass_context
def create_tables(ctx):
    """Create all tables directly from the models, bypassing migrations"""
    cli_context = ctx.obj['cli_context']
    try:
        cli_context.db_manager.create_tables()
    except Exception as e:
        raise click.ClickException(f"Table creation failed: {e}")
    click.echo("✅ Tables created")
