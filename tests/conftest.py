from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from inkwell.adapters.auth.crypto import JWTAuthAdapter
from inkwell.adapters.sqlite.migrator import SQLiteMigrator
from inkwell.adapters.sqlite.repos import (
    SQLiteArticleRepo,
    SQLiteCategoryRepo,
    SQLiteStatsRepo,
    SQLiteUserRepo,
)
from inkwell.api.deps import Settings, get_rules, get_settings, reset_singletons
from inkwell.api.main import app
from inkwell.domain.entities import Article, Category, User
from inkwell.rules.models import Rules

MIGRATIONS_DIR = str(Path(__file__).resolve().parent.parent / "migrations")
TEST_SECRET = "test-secret"


@pytest.fixture
def db_path(tmp_path: Path) -> str:
    """Fresh SQLite database with every migration applied."""
    path = str(tmp_path / "inkwell.db")
    SQLiteMigrator(path, MIGRATIONS_DIR).run_migrations()
    return path


@pytest.fixture
def settings(tmp_path: Path, db_path: str) -> Settings:
    s = Settings()
    s.data_dir = tmp_path
    s.db_path = db_path
    s.migrations_dir = MIGRATIONS_DIR
    s.secret_key = TEST_SECRET
    return s


@pytest.fixture
def rules() -> Rules:
    return Rules()


@pytest.fixture
def client(settings: Settings, rules: Rules) -> Iterator[TestClient]:
    """API client wired to the temporary database. Lifespan is not run."""
    reset_singletons()
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_rules] = lambda: rules
    yield TestClient(app)
    app.dependency_overrides.clear()
    reset_singletons()


# --- Seed data ---


@pytest.fixture
def user_repo(db_path: str) -> SQLiteUserRepo:
    return SQLiteUserRepo(db_path)


def _make_user(repo: SQLiteUserRepo, email: str, role: str) -> User:
    user = User(
        email=email,
        display_name=email.split("@")[0],
        password_hash=JWTAuthAdapter().hash_password("secret-pw"),
        role=role,  # type: ignore[arg-type]
    )
    return repo.save(user)


@pytest.fixture
def admin_user(user_repo: SQLiteUserRepo) -> User:
    return _make_user(user_repo, "admin@example.com", "admin")


@pytest.fixture
def author_user(user_repo: SQLiteUserRepo) -> User:
    return _make_user(user_repo, "author@example.com", "author")


@pytest.fixture
def other_author(user_repo: SQLiteUserRepo) -> User:
    return _make_user(user_repo, "other@example.com", "author")


@pytest.fixture
def auth_headers() -> Callable[[User], dict[str, str]]:
    """Bearer header for a user, signed with the test secret."""

    def _headers(user: User) -> dict[str, str]:
        token = JWTAuthAdapter(secret_key=TEST_SECRET).create_token(
            user.id, 60, email=user.email
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers


@pytest.fixture
def category(db_path: str) -> Category:
    return SQLiteCategoryRepo(db_path).create(
        Category(name="Technology", slug="technology", description="Tech news")
    )


@pytest.fixture
def article_repo(db_path: str) -> SQLiteArticleRepo:
    return SQLiteArticleRepo(db_path)


@pytest.fixture
def authored_article(article_repo: SQLiteArticleRepo, category: Category, author_user: User):
    assert category.id is not None
    return article_repo.create(
        Article(
            title="Hello World",
            slug="hello-world",
            summary="A first post",
            content="Body text about python and sqlite.",
            image="/img/hello.png",
            category_id=category.id,
            author_id=author_user.id,
            tags=["intro"],
        )
    )


@pytest.fixture
def stats_repo(db_path: str) -> SQLiteStatsRepo:
    return SQLiteStatsRepo(db_path)
