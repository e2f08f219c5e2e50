import pytest

from core.domains import DomainInfo, extract_tenant_from_host, post_signup_redirect_url


@pytest.mark.parametrize("hostname,expected", [
    ("app.agenditapp.com", DomainInfo("signup")),
    ("agenditapp.com", DomainInfo("landing")),
    ("www.agenditapp.com", DomainInfo("landing")),
    ("salon-ana.agenditapp.com", DomainInfo("tenant", "salon-ana")),
    ("SALON.AgenditApp.com", DomainInfo("tenant", "salon")),
    ("localhost", DomainInfo("tenant")),
    ("reservas.mysalon.co", DomainInfo("custom")),
    ("-bad-.agenditapp.com", DomainInfo("custom")),
])
def test_extract_tenant_from_host(hostname, expected):
    assert extract_tenant_from_host(hostname, "agenditapp.com") == expected


def test_redirect_after_signup():
    assert post_signup_redirect_url("ana", "xyz", "app.agenditapp.com") == "https://ana.agenditapp.com/exchange?code=xyz"
    assert post_signup_redirect_url("ana", "xyz", "localhost", 5173) == "http://localhost:5173/exchange?code=xyz&slug=ana"
