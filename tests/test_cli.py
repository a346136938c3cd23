from springlib.cli import DEMO_BOOKS
from springlib.models.user import Role
from springlib.repositories.book_repo import BookRepo
from springlib.repositories.user_repo import UserRepo


def test_seed_creates_admin_and_books(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed"])

    assert result.exit_code == 0
    assert "admin 'admin' created" in result.output
    assert f"{len(DEMO_BOOKS)} demo book(s) inserted" in result.output
    assert UserRepo.get_by_username("admin").role == Role.ADMIN
    dune = BookRepo.get_by_isbn("9780441172719")
    assert dune.available_copies == dune.total_copies == 1


def test_seed_is_idempotent(app):
    runner = app.test_cli_runner()
    runner.invoke(args=["seed"])

    result = runner.invoke(args=["seed"])

    assert "already exists" in result.output
    assert "0 demo book(s) inserted" in result.output
    assert len(BookRepo.list_all()) == len(DEMO_BOOKS)


def test_seed_without_books(app):
    result = app.test_cli_runner().invoke(args=["seed", "--no-books"])

    assert result.exit_code == 0
    assert BookRepo.list_all() == []


def test_sweep_pending_command(app):
    result = app.test_cli_runner().invoke(args=["sweep-pending"])

    assert result.exit_code == 0
    assert "rejected=0 failed=0 violations=0" in result.output
