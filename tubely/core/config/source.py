import functools
import getpass
import os
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from ansible.parsing.vault import VaultLib, VaultSecret
from pydantic_settings import PydanticBaseSettingsSource, SettingsError

import tubely.lib.util as util
from tubely.model import DeploymentEnvironment

VAULT_PASSWORD_VAR = "TUBELY_VAULT_PASSWORD"


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.AnyUrl]
    env: t.Required[DeploymentEnvironment]


class SettingsCurrentState(CurrentState, total=False):
    override: t.Required[tuple[str, ...]]


def _env_root(root: p.AnyUrl, env: DeploymentEnvironment) -> list[Path]:
    assert root.scheme == "file" and root.path is not None, "root is not a legible location of YAML files"
    paths = [Path(root.path)]
    if env is not DeploymentEnvironment.Local:
        # local/ has no directory of its own, it is just the root
        paths.append(Path(root.path) / "env.d" / env.value)
    return paths


class SettingsSource(PydanticBaseSettingsSource):
    skip_keys: t.ClassVar[frozenset[str]] = frozenset({"env", "root", "override"})

    def __call__(self) -> dict[str, t.Any]:
        data: dict[str, t.Any] = {}

        for field_name, field in self.settings_cls.model_fields.items():
            try:
                field_value, field_key, value_is_complex = self.get_field_value(field, field_name)
                field_value = self.prepare_field_value(field_name, field, field_value, value_is_complex)
            except KeyError:
                continue
            except ValueError as e:
                raise SettingsError(f"error parsing value for field {field_name!r} from source {self!r}") from e
            except Exception as e:
                raise SettingsError(f"error getting value for field {field_name!r} from source {self!r}") from e

            data[field_key] = field_value
        return data


class OverrideSettingsSource(SettingsSource):
    """Apply ``-o section.key=value`` overrides on top of the YAML sections."""

    @functools.cached_property
    def parsed_options(self) -> dict[str, t.Any]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        od: dict[str, t.Any] = {}
        for o in current_state["override"]:
            k, v = [s.strip() for s in o.split("=", 1)]

            target = od
            *path, key = k.split(".")
            for part in path:
                target = target.setdefault(part, {})
            target[key] = yaml.safe_load(v)
        return od

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        if field_name in self.skip_keys or field_name not in self.parsed_options:
            raise KeyError(field_name)
        val = self.parsed_options[field_name]
        return val, field_name, isinstance(val, dict)

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value


class YAMLCascadingSettingsSource(SettingsSource):
    """Read ``<section>.yaml`` from the config root, then from ``env.d/<env>/``, deep-merging."""

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        current_state = t.cast(SettingsCurrentState, self.current_state)
        return _env_root(current_state["root"], current_state["env"])

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        yamls: list[str] = []
        for path in self.load_paths:
            fn = path / f"{field_name}.yaml"
            if fn.exists():
                yamls.append(fn.read_text(encoding="utf8"))
        if not yamls:
            raise KeyError(field_name)
        return yamls, field_name, True

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        if not isinstance(value, list):
            raise ValueError(field_name)

        merged: dict[t.Any, t.Any] = {}
        for doc in t.cast(list[str], value):
            loaded = yaml.safe_load(doc) or {}
            if not isinstance(loaded, dict):
                raise ValueError(f"{field_name}.yaml must contain a mapping")
            merged = util.deep_update(merged, t.cast(dict[t.Any, t.Any], loaded))
        return merged


class AnsibleVaultSecretsSource(SettingsSource):
    @functools.cached_property
    def load_path(self) -> Path:
        current_state = t.cast(CurrentState, self.current_state)
        return _env_root(current_state["root"], current_state["env"])[-1]

    @functools.cached_property
    def secrets(self) -> dict[str, t.Any]:
        current_state = t.cast(CurrentState, self.current_state)
        env = current_state["env"]
        vp = self.load_path / "secrets.vault.yaml"

        # no vault file means no secrets, and no reason to prompt
        if not vp.exists():
            return {}

        key = os.environ.get(VAULT_PASSWORD_VAR) or getpass.getpass(f"provide vault key ({env.value}) ")

        # None is the vault-id; a named vault id would have to be given here
        vault = VaultLib(secrets=[(None, VaultSecret(key.encode()))])
        with vp.open() as f:
            content = vault.decrypt(f.read())
        return yaml.safe_load(content) or {}

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        # checked before touching self.secrets, which itself needs root/env
        if field_name in self.skip_keys or field_name not in self.secrets:
            raise KeyError(field_name)
        val = self.secrets[field_name]
        return val, field_name, isinstance(val, dict)

    def prepare_field_value(
        self, field_name: str, field: p.fields.FieldInfo, value: t.Any, value_is_complex: bool
    ) -> t.Any:
        return value
