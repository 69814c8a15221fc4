import pandas
import pytest


@pytest.fixture
def dependent_data():
    """B copies A; C is exactly balanced within every state of A and B."""
    a = [0, 1] * 150
    return pandas.DataFrame({
        'A': a,
        'B': list(a),
        'C': [0, 0, 1, 1] * 75,
    })
