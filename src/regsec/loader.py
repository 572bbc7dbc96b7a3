from __future__ import annotations
import json
from dataclasses import asdict
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import BasicAuthConfig, SecurityConfig, TLSConfig
from .errors import ConfigError

log = logging.getLogger("regsec.loader")


class _Document(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class _PathDoc(_Document):
    path: str = ""


class _CADoc(_Document):
    cert: _PathDoc = Field(default_factory=_PathDoc)


class _ClientDoc(_Document):
    cert: _PathDoc = Field(default_factory=_PathDoc)
    key: _PathDoc = Field(default_factory=_PathDoc)
    passphrase: _PathDoc = Field(default_factory=_PathDoc)
    disabled: bool = False


class TLSDoc(_Document):
    name: str = ""
    ca: _CADoc = Field(default_factory=_CADoc)
    client: _ClientDoc = Field(default_factory=_ClientDoc)
    insecure_skip_verify: bool = False

    def to_config(self) -> TLSConfig:
        return TLSConfig(
            name=self.name,
            ca_cert_path=self.ca.cert.path,
            client_cert_path=self.client.cert.path,
            client_key_path=self.client.key.path,
            client_passphrase_path=self.client.passphrase.path,
            client_disabled=self.client.disabled,
            insecure_skip_verify=self.insecure_skip_verify,
        )


class BasicAuthDoc(_Document):
    username: str = ""
    password: str = ""
    auth: str = ""
    email: str = ""
    serveraddress: str = ""
    identitytoken: str = ""
    registrytoken: str = ""
    password_file: str = ""

    def to_config(self) -> BasicAuthConfig:
        return BasicAuthConfig(**self.model_dump())


class SecurityDoc(_Document):
    """Serialized security configuration shared by the YAML and JSON forms."""

    tls: Optional[TLSDoc] = None
    basic: Optional[BasicAuthDoc] = None
    creds_store: str = Field(default="", alias="credsStore")

    def to_config(self) -> SecurityConfig:
        return SecurityConfig(
            tls=self.tls.to_config() if self.tls is not None else None,
            basic=self.basic.to_config() if self.basic is not None else None,
            creds_store=self.creds_store,
        )


def config_from_dict(data: Optional[Dict[str, Any]]) -> SecurityConfig:
    try:
        doc = SecurityDoc.model_validate(data or {})
    except ValidationError as e:
        raise ConfigError(f"invalid security config: {e}") from e
    return doc.to_config()


def config_to_dict(cfg: SecurityConfig) -> Dict[str, Any]:
    """Inverse of config_from_dict, in the serialized field layout."""
    out: Dict[str, Any] = {"credsStore": cfg.creds_store}
    if cfg.tls is not None:
        t = cfg.tls
        out["tls"] = {
            "name": t.name,
            "ca": {"cert": {"path": t.ca_cert_path}},
            "client": {
                "cert": {"path": t.client_cert_path},
                "key": {"path": t.client_key_path},
                "passphrase": {"path": t.client_passphrase_path},
                "disabled": t.client_disabled,
            },
            "insecure_skip_verify": t.insecure_skip_verify,
        }
    if cfg.basic is not None:
        out["basic"] = asdict(cfg.basic)
    return out


def load_config_yaml(text: str) -> SecurityConfig:
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise ConfigError(f"parse yaml: {e}") from e
    if data is not None and not isinstance(data, dict):
        raise ConfigError("parse yaml: top level must be a mapping")
    return config_from_dict(data)


def load_config_json(text: str) -> SecurityConfig:
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ConfigError(f"parse json: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError("parse json: top level must be an object")
    return config_from_dict(data)


def load_config_file(path: Union[str, Path]) -> SecurityConfig:
    """Load a config file, picking the format from its extension."""
    p = Path(path)
    try:
        text = p.read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"read config {p}: {e}") from e
    log.debug("loading security config from %s", p)
    if p.suffix.lower() == ".json":
        return load_config_json(text)
    return load_config_yaml(text)
