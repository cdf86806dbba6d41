import pytest

from config import TestingConfig
from post_manager import create_app, db
from post_manager.services import PostService


@pytest.fixture
def app():
    app = create_app(config_class=TestingConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def service(app):
    return PostService(db.session)


@pytest.fixture
def make_post(service):
    def _make(**fields):
        fields.setdefault('title', 'Hello')
        fields.setdefault('content', 'World')
        return service.create(fields)
    return _make
