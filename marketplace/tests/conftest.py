import pytest

from infrastructure.container import container


@pytest.fixture(autouse=True)
def reset_container():
    """Every test starts from fresh services bound to the in-memory export queue."""
    container.configure_for_testing()
    yield
    container.reset()
