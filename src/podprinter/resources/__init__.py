import dataclasses

import yaml

from .registry import (
    CustomResourceRegistry,
    custom_resource_registry,
)

from .resources import (
    get_resource,
    ObjectMeta,
    Resource,
)

__all__ = [
    'custom_resource_registry',
    'CustomResourceRegistry',
    'get_resource',
    'ObjectMeta',
    'Resource',
    'resources_to_yaml',
]


def _no_empty_value_dict(items):
    """dict_factory for dataclasses.asdict that drops keys without a value."""
    return {k: v for k, v in items if v is not None and v != [] and v != {}}


_resource_key_order = ['apiVersion', 'kind', 'metadata', 'spec', 'rules', 'status']


def _resources_as_dicts(*objects):
    """Convert the given resources to dicts.
    - keys without a value are omitted
    - keys are emitted in the order kubectl users are used to
    """
    dicts = []
    for obj in objects:
        tmp = dataclasses.asdict(obj, dict_factory=_no_empty_value_dict)
        keys = dict.fromkeys(_resource_key_order + list(tmp.keys()))
        dicts.append({k: tmp[k] for k in keys if k in tmp})
    return dicts


class YamlDumper(yaml.SafeDumper):
    def ignore_aliases(self, data):
        return True


def _str_presenter(dumper, data):
    """
    Preserve multiline strings when dumping yaml.
    https://github.com/yaml/pyyaml/issues/240
    """
    if '\n' in data:
        block = '\n'.join([line.rstrip() for line in data.splitlines()])
        if data.endswith('\n'):
            block += '\n'
        return dumper.represent_scalar('tag:yaml.org,2002:str', block, style='|')
    return dumper.represent_scalar('tag:yaml.org,2002:str', data)


yaml.add_representer(str, _str_presenter, Dumper=YamlDumper)


def resources_to_yaml(*objects):
    """Serialize one or more resources to a multi document yaml string
    that kubectl understands.

    Kubernetes does not understand yaml aliases, so the dumper never emits them.
    """
    dicts = _resources_as_dicts(*objects)
    return yaml.dump_all(dicts, sort_keys=False, Dumper=YamlDumper)


def all_crds():
    """Return the CustomResourceDefinitions of all declared custom resources."""
    return custom_resource_registry.all_crds()
