import pytest

from gateway.services.negotiation import wants_documentation


@pytest.mark.parametrize(
    "accept, expected",
    [
        ("text/html", True),
        ("text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8", True),
        ("application/json", False),
        ("text/html, application/json", False),
        ("application/json;q=0.1, text/html", False),
        ("*/*", False),
        ("text/plain", False),
        ("", False),
        (None, False),
    ],
)
def test_wants_documentation(accept, expected):
    assert wants_documentation(accept) is expected
