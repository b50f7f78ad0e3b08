import pytest

from sentiment_table.data.binding import DataBinding

REVIEW_PAYLOAD = {
    "state": "success",
    "metadata": {
        "dimensions": {"d1": {"description": "Review"}},
        "mainStructureMembers": {"m1": {"description": "Score"}},
    },
    "data": [
        {"d1": {"label": "Great product"}, "m1": {"formatted": "5"}},
        {"d1": {"label": "Bad"}, "m1": {"formatted": "1"}},
    ],
}


@pytest.fixture
def review_binding():
    return DataBinding.from_mapping(REVIEW_PAYLOAD)
