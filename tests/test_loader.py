import json

import pytest

from regsec.config import BasicAuthConfig, SecurityConfig, TLSConfig
from regsec.errors import ConfigError
from regsec.loader import config_to_dict, load_config_file, load_config_json, load_config_yaml

YAML_DOC = """
tls:
  name: registry
  ca:
    cert:
      path: /etc/registry/ca.pem
  client:
    cert:
      path: /etc/registry/client.pem
    key:
      path: /etc/registry/client-key.pem
basic:
  username: u
  password: p
  password_file: /run/secrets/pw
credsStore: ecr-login
"""


def test_yaml_document():
    cfg = load_config_yaml(YAML_DOC)
    assert cfg.creds_store == "ecr-login"
    assert cfg.basic == BasicAuthConfig(username="u", password="p", password_file="/run/secrets/pw")
    assert cfg.tls == TLSConfig(
        name="registry",
        ca_cert_path="/etc/registry/ca.pem",
        client_cert_path="/etc/registry/client.pem",
        client_key_path="/etc/registry/client-key.pem",
    )


def test_json_document_matches_yaml():
    doc = {
        "tls": {"ca": {"cert": {"path": "/ca"}}},
        "basic": {"username": "u", "identitytoken": "tok", "serveraddress": "r"},
        "credsStore": "pass",
    }
    cfg = load_config_json(json.dumps(doc))
    assert cfg == SecurityConfig(
        tls=TLSConfig(ca_cert_path="/ca"),
        basic=BasicAuthConfig(username="u", identitytoken="tok", serveraddress="r"),
        creds_store="pass",
    )


def test_empty_documents():
    assert load_config_yaml("") == SecurityConfig()
    assert load_config_json("{}") == SecurityConfig()


def test_absent_sections_stay_none():
    cfg = load_config_yaml("credsStore: pass\n")
    assert cfg.tls is None
    assert cfg.basic is None


def test_round_trip_through_dict():
    cfg = load_config_yaml(YAML_DOC)
    assert load_config_json(json.dumps(config_to_dict(cfg))) == cfg


@pytest.mark.parametrize(
    "text",
    ["tls: [1, 2", "- a\n- b\n", "credsStore: [1]\n", "basic:\n  username: {a: 1}\n"],
)
def test_invalid_yaml(text):
    with pytest.raises(ConfigError):
        load_config_yaml(text)


@pytest.mark.parametrize("text", ["{", "[]"])
def test_invalid_json(text):
    with pytest.raises(ConfigError):
        load_config_json(text)


def test_load_file_by_extension(tmp_path):
    j = tmp_path / "security.json"
    j.write_text('{"credsStore": "pass"}')
    y = tmp_path / "security.yaml"
    y.write_text("credsStore: pass\n")
    assert load_config_file(j) == load_config_file(y) == SecurityConfig(creds_store="pass")


def test_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="read config"):
        load_config_file(tmp_path / "nope.yaml")
