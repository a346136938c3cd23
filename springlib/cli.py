import click
from flask import current_app
from flask.cli import with_appcontext

from springlib.extensions import db
from springlib.models.user import Role
from springlib.repositories.book_repo import BookRepo
from springlib.repositories.user_repo import UserRepo
from springlib.services.auth_service import AuthService
from springlib.services.catalog_service import CatalogService
from springlib.tasks.pending_sweep import sweep_pending

DEMO_BOOKS = [
    {"title": "Clean Code", "author": "Robert C. Martin", "isbn": "9780132350884",
     "publisher": "Prentice Hall", "publicationYear": 2008, "totalCopies": 2},
    {"title": "Flask Web Development", "author": "Miguel Grinberg", "isbn": "9781491991732",
     "publisher": "O'Reilly", "publicationYear": 2018, "totalCopies": 3},
    {"title": "Dune", "author": "Frank Herbert", "isbn": "9780441172719",
     "publisher": "Ace", "publicationYear": 1965, "totalCopies": 1},
]


@click.command("seed")
@click.option("--with-books/--no-books", default=True, help="Also insert a few demo books.")
@with_appcontext
def seed_command(with_books):
    """Create the tables, the admin account and (optionally) demo books."""
    db.create_all()
    cfg = current_app.config

    if UserRepo.get_by_username(cfg["ADMIN_USERNAME"]):
        click.echo(f"admin '{cfg['ADMIN_USERNAME']}' already exists")
    else:
        AuthService.register(
            username=cfg["ADMIN_USERNAME"],
            email=cfg["ADMIN_EMAIL"],
            password=cfg["ADMIN_PASSWORD"],
            full_name="Library Administrator",
            role=Role.ADMIN,
        )
        click.echo(f"admin '{cfg['ADMIN_USERNAME']}' created")

    if with_books:
        created = 0
        for data in DEMO_BOOKS:
            if BookRepo.get_by_isbn(data["isbn"]):
                continue
            CatalogService.create_book(data)
            created += 1
        click.echo(f"{created} demo book(s) inserted")


@click.command("sweep-pending")
@with_appcontext
def sweep_pending_command():
    """Run the pending-request sweep once."""
    summary = sweep_pending()
    click.echo(
        f"rejected={summary['rejected']} failed={summary['failed']} violations={summary['violations']}"
    )


def register_commands(app):
    app.cli.add_command(seed_command)
    app.cli.add_command(sweep_pending_command)
