import functools
import typing as t
from pathlib import Path

import pydantic as p
import yaml
from pydantic_settings import PydanticBaseSettingsSource
from pydantic_settings import SettingsError

import assessor.lib.util as util
from assessor.model import DeploymentEnvironment

# supplied by init kwargs, never by a file or an override
BootKeys = frozenset({"env", "root", "override"})


class CurrentState(t.TypedDict, total=False):
    root: t.Required[p.FileUrl]
    env: t.Required[DeploymentEnvironment]
    override: tuple[str, ...]


class OverrideSettingsSource(PydanticBaseSettingsSource):
    """
    `-o storage.persistent.url=sqlite://` style overrides; values are parsed
    as YAML so `-o evaluation.scorer.max_retries=0` yields an int
    """

    @functools.cached_property
    def parsed_options(self) -> dict[str, t.Any]:
        current_state = t.cast(CurrentState, self.current_state)
        od: dict[str, t.Any] = {}
        for o in current_state.get("override", ()):
            if "=" not in o:
                raise SettingsError(f"override must have the form key.path=value: {o!r}")
            k, v = [s.strip() for s in o.split("=", 1)]

            target = od
            *path, key = k.split(".")
            for part in path:
                target = target.setdefault(part, {})
            target[key] = yaml.safe_load(v)
        return od

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        return self.parsed_options.get(field_name), field_name, True

    def __call__(self) -> dict[str, t.Any]:
        return {k: v for k, v in self.parsed_options.items() if k in self.settings_cls.model_fields and k not in BootKeys}


class YAMLCascadingSettingsSource(PydanticBaseSettingsSource):
    """
    Each settings field `name` is read from `<root>/name.yaml`, then from
    `<root>/env.d/<env>/name.yaml` merged on top of it
    """

    @functools.cached_property
    def load_paths(self) -> list[Path]:
        current_state = t.cast(CurrentState, self.current_state)
        root = current_state["root"]
        if root.scheme != "file" or root.path is None:
            raise SettingsError(f"config root is not a legible location of YAML files: {root}")
        env = current_state["env"]
        paths = [Path(root.path)]
        if env is not DeploymentEnvironment.Local:
            # we don't have a special directory for local/ that's just root
            paths.append(Path(root.path) / "env.d" / env.value)
        return paths

    def get_field_value(self, field: p.fields.FieldInfo, field_name: str) -> tuple[t.Any, str, bool]:
        merged: dict[str, t.Any] | None = None
        for path in self.load_paths:
            fn = path / f"{field_name}.yaml"
            if not fn.exists():
                continue
            try:
                data = yaml.safe_load(fn.read_text(encoding="utf8")) or {}
            except yaml.YAMLError as e:
                raise SettingsError(f"could not parse {fn}") from e
            merged = data if merged is None else util.deep_update(merged, data)
        return merged, field_name, True

    def __call__(self) -> dict[str, t.Any]:
        data: dict[str, t.Any] = {}
        for field_name, field in self.settings_cls.model_fields.items():
            if field_name in BootKeys:
                continue
            value, key, _ = self.get_field_value(field, field_name)
            if value is not None:
                data[key] = value
        return data
