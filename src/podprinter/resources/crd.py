import dataclasses

from dataclasses import dataclass
from typing import dataclass_transform

from lightkube.core import resource as lkr
from lightkube.core.schema import DictMixin
from lightkube.models import meta_v1
from lightkube.models.apiextensions_v1 import (
    CustomResourceColumnDefinition,
    CustomResourceDefinitionNames,
    CustomResourceDefinitionSpec,
)
from lightkube.resources.apiextensions_v1 import CustomResourceDefinition

from .registry import custom_resource_registry
from .resources import Resource
from .schema import SchemaAnnotation  # noqa: F401 public API


_resource_verbs = [
    'delete',
    'deletecollection',
    'get',
    'global_list',
    'global_watch',
    'list',
    'patch',
    'post',
    'put',
    'watch',
]


class ModelMixin(DictMixin):
    @classmethod
    def from_dict(cls, d, lazy=True):
        # Custom resource models are never lazy.
        if isinstance(d, cls):
            return d
        return super(ModelMixin, cls).from_dict(d, lazy=False)


def _class_dict(cls):
    # A nested __dict__ key would shadow the instance dict of the new class.
    cls_dict = dict(cls.__dict__)
    cls_dict.pop('__dict__', None)
    cls_dict.pop('__weakref__', None)
    return cls_dict


# @see https://www.brendanp.com/pretty-printing-with-kubebuilder/
def printcolumn(name, jsonpath, type='string', description=None, format=None,
    priority=None):
    """Class decorator that adds an additionalPrinterColumn to the CRD version."""
    def _wrap(cls):
        crd_version = custom_resource_registry.get_crd_version(cls)
        column = CustomResourceColumnDefinition(
            name=name,
            type=type,
            jsonPath=jsonpath,
            description=description,
            format=format,
            priority=priority,
        )
        # Decorators run bottom up, inserting at the front keeps source order.
        crd_version.additionalPrinterColumns.insert(0, column)
        return cls

    return _wrap


@dataclass_transform()
def resource(
    group,
    version,
    kind=None,
    scope='Namespaced',
    singular=None,
    plural=None,
    short_names=None,
    served=True,
    storage=True,
):
    """Class decorator that turns a dataclass model into a lightkube resource
    and registers it, with its CRD, in the custom resource registry."""
    def _wrap(model):
        if not dataclasses.is_dataclass(model):
            model = dataclass(model, kw_only=True)

        _kind = kind or model.__name__
        _singular = singular or _kind.lower()
        if plural is not None:
            _plural = plural
        elif _singular.endswith('s'):
            _plural = f'{_singular}es'
        else:
            _plural = f'{_singular}s'

        if scope == 'Cluster':
            bases = (Resource, lkr.GlobalResource, ModelMixin)
        else:
            bases = (Resource, lkr.NamespacedResourceG, ModelMixin)
        _Resource = type(_kind, bases, _class_dict(model))
        _Resource._api_info = lkr.ApiInfo(
            resource=lkr.ResourceDef(group, version, _kind),
            plural=_plural,
            verbs=_resource_verbs,
        )
        _Resource.apiVersion = _Resource._api_info.resource.api_version
        _Resource.kind = _kind

        try:
            crd = custom_resource_registry.get_crd(_Resource)
        except custom_resource_registry.ResourceNotFoundError:
            crd = CustomResourceDefinition(
                apiVersion='apiextensions.k8s.io/v1',
                kind='CustomResourceDefinition',
                metadata=meta_v1.ObjectMeta(name=f'{_plural}.{group}'),
                spec=CustomResourceDefinitionSpec(
                    group=group,
                    names=CustomResourceDefinitionNames(
                        kind=_kind,
                        listKind=f'{_kind}List',
                        plural=_plural,
                        singular=_singular,
                        shortNames=short_names,
                    ),
                    scope=scope,
                    versions=[],
                ),
            )
            custom_resource_registry.add(crd)

        crd_version = custom_resource_registry.get_crd_version(model)
        crd_version.name = version
        crd_version.served = served
        crd_version.storage = storage
        crd.spec.versions.append(crd_version)
        custom_resource_registry.register_resource(crd, crd_version, _Resource)

        return _Resource

    return _wrap


@dataclass_transform()
def model(cls=None, /):
    """Class decorator for the nested models of a custom resource."""
    def _wrap(cls):
        _model = type(cls.__name__, (ModelMixin,), _class_dict(cls))
        if not dataclasses.is_dataclass(_model):
            _model = dataclass(_model)
        return _model

    if cls is None:
        return _wrap
    return _wrap(cls)
