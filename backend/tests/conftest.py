import os, sys, pytest
# Ensure the backend directory is on path so 'domaindesk' and 'tests' can be imported
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
import domaindesk
from domaindesk import create_app
from domaindesk.models.accounts import Base
# Import all model modules to ensure tables are registered before create_all
import domaindesk.models.task  # noqa: F401
import domaindesk.models.audit  # noqa: F401

TEST_CONFIG = {
    'DATABASE_URL': 'sqlite+pysqlite:///:memory:',
    'SECRET_KEY': 'test-secret',
    'JWT_SECRET_KEY': 'test-jwt-secret-with-enough-length-for-hs256',
    # form posts in tests carry the auth cookie but no double-submit token
    'JWT_COOKIE_CSRF_PROTECT': False,
    'TESTING': True,
}


@pytest.fixture(scope='session', autouse=True)
def app_instance():
    os.environ['DATABASE_URL'] = TEST_CONFIG['DATABASE_URL']
    app = create_app(TEST_CONFIG)
    with app.app_context():
        Base.metadata.create_all(domaindesk.db_engine)
    yield app


@pytest.fixture(autouse=True)
def fresh_tables(app_instance):
    """Every test starts from empty tables."""
    domaindesk.SessionLocal.remove()
    Base.metadata.drop_all(domaindesk.db_engine)
    Base.metadata.create_all(domaindesk.db_engine)
    yield
    domaindesk.SessionLocal.remove()


@pytest.fixture()
def client(app_instance):
    return app_instance.test_client()


@pytest.fixture()
def app_context(app_instance):
    with app_instance.test_request_context():
        yield app_instance
