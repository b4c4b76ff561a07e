import pytest

from studio import db
from studio.workspace import workspace


@pytest.fixture(autouse=True)
def clean_state():
    """Each test starts with an empty key-value store and no open projects"""
    db.clear()
    workspace.close()
    yield
    workspace.close()
    db.clear()
