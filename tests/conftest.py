"""Pytest configuration and fixtures."""

import pytest

from app import create_app
from config import load_settings
from utils.extension_policy import ExtensionPolicy
from utils.safe_path import Root


@pytest.fixture
def root_dir(tmp_path):
    """Empty editor root inside the test's temporary directory."""
    directory = tmp_path / 'site'
    directory.mkdir()
    return directory


@pytest.fixture
def root(root_dir):
    return Root.at(root_dir)


@pytest.fixture
def policy():
    return ExtensionPolicy(deny=['php'], allow=['ico', 'jpg', 'jpeg', 'png', 'gif', 'webp', 'svg'])


@pytest.fixture
def settings(root_dir):
    return load_settings(root=str(root_dir))


@pytest.fixture
def app(settings):
    """Create application for testing."""
    application = create_app(settings)
    application.config['TESTING'] = True
    return application


@pytest.fixture
def client(app):
    """Create test client."""
    return app.test_client()
