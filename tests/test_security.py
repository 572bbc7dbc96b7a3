import ssl

import httpx
import pytest

from regsec.config import BasicAuthConfig, SecurityConfig, Settings, TLSConfig
from regsec.credentials import EMPTY_IDENTITY, TOKEN_USERNAME, PasswordCredential, TokenCredential
from regsec.errors import CredentialResolutionError, TLSBuildError
from regsec.helpers import HelperCredentials
from regsec.security import get_http_option
from regsec.send_option import SendNoop, SendTLS, SendTLSTransport
from regsec.tls import build_client_context
from regsec.transport import BasicAuthTransport

from conftest import FakeFactory, FakeHelper


def test_empty_config_is_noop_without_helper_call(addr):
    factory = FakeFactory(FakeHelper({}))
    option = get_http_option(SecurityConfig(), addr, "lib/app", helper_factory=factory)
    assert option == SendNoop()
    assert factory.names == []


def test_tls_only(addr, ca_dir):
    cfg = SecurityConfig(tls=TLSConfig(ca_cert_path=str(ca_dir)))
    option = get_http_option(cfg, addr, "lib/app")
    assert isinstance(option, SendTLS)
    direct = build_client_context(cfg.tls)
    assert option.context.verify_mode == direct.verify_mode == ssl.CERT_REQUIRED
    assert option.context.check_hostname == direct.check_hostname


def test_defaulted_config_with_disabled_client_is_tls_with_default_context(addr):
    cfg = SecurityConfig(tls=TLSConfig(client_disabled=True)).apply_defaults(environ={})
    assert get_http_option(cfg, addr, "lib/app") == SendTLS(None)


def test_malformed_tls_fails(addr, tmp_path):
    cfg = SecurityConfig(tls=TLSConfig(ca_cert_path=str(tmp_path / "missing.pem")))
    with pytest.raises(TLSBuildError):
        get_http_option(cfg, addr, "lib/app")


def test_tls_error_surfaces_before_credentials(addr, tmp_path):
    factory = FakeFactory(FakeHelper({}))
    cfg = SecurityConfig(tls=TLSConfig(ca_cert_path=str(tmp_path / "missing.pem")), creds_store="pass")
    with pytest.raises(TLSBuildError):
        get_http_option(cfg, addr, "lib/app", helper_factory=factory)
    assert factory.names == []


def test_static_basic_auth_wraps_transport(addr):
    cfg = SecurityConfig(basic=BasicAuthConfig(username="u", password="p"))
    option = get_http_option(cfg, addr, "lib/app")
    assert isinstance(option, SendTLSTransport)
    assert isinstance(option.transport, BasicAuthTransport)
    assert option.transport.identity == PasswordCredential(username="u", password="p", server_address="")
    assert option.transport.addr == addr
    assert option.transport.repo == "lib/app"


def test_helper_token_mode(addr, ca_dir):
    factory = FakeFactory(FakeHelper({addr: HelperCredentials(TOKEN_USERNAME, "abc123")}))
    cfg = SecurityConfig(tls=TLSConfig(ca_cert_path=str(ca_dir)), creds_store="ecr-login")
    option = get_http_option(cfg, addr, "lib/app", helper_factory=factory)
    assert isinstance(option, SendTLSTransport)
    assert option.transport.identity == TokenCredential(identity_token="abc123", server_address=addr)
    assert factory.names == ["ecr-login"]


def test_implied_but_empty_identity_still_wraps(addr):
    cfg = SecurityConfig(basic=BasicAuthConfig())
    option = get_http_option(cfg, addr, "lib/app")
    assert isinstance(option, SendTLSTransport)
    assert option.transport.identity == EMPTY_IDENTITY


def test_helper_failure_fails_composition(addr):
    cfg = SecurityConfig(basic=BasicAuthConfig(username="u", password="p"), creds_store="pass")
    with pytest.raises(CredentialResolutionError):
        get_http_option(cfg, addr, "lib/app", helper_factory=FakeFactory(FakeHelper({})))


def test_composition_is_idempotent(addr, tmp_path):
    pw = tmp_path / "pw"
    pw.write_text("secret")
    cfg = SecurityConfig(basic=BasicAuthConfig(username="u", password_file=str(pw)))
    first = get_http_option(cfg, addr, "lib/app")
    second = get_http_option(cfg, addr, "lib/app")
    assert type(first) is type(second)
    assert first.transport.identity == second.transport.identity
    assert first.transport.scope == second.transport.scope
    assert first.transport is not second.transport


def test_send_options_feed_httpx_client(addr, ca_dir):
    cfg = SecurityConfig(tls=TLSConfig(ca_cert_path=str(ca_dir)), creds_store="pass")
    factory = FakeFactory(FakeHelper({addr: HelperCredentials("u", "p")}))
    option = get_http_option(cfg, addr, "lib/app", helper_factory=factory)
    kwargs = option.client_kwargs(Settings())
    assert set(kwargs) == {"transport"}
    with httpx.Client(**kwargs) as client:
        assert client._transport is option.transport
