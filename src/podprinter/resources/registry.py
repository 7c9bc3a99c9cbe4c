from typing import Union

from lightkube.core.resource import api_info
from lightkube.models.apiextensions_v1 import CustomResourceDefinitionVersion
from lightkube.resources.apiextensions_v1 import CustomResourceDefinition

from .schema import get_schema


class ResourceNotFoundError(Exception):
    pass


class CustomResourceRegistry:
    """Keeps the CRDs and the resource classes of all declared custom resources.

    Used to render CRD manifests with a schema generated from the models.
    """

    ResourceNotFoundError = ResourceNotFoundError

    def __init__(self):
        self._crds = {}
        self._versions = {}
        self._resources = {}

    def add(self, crd: CustomResourceDefinition):
        self._crds[crd.metadata.name] = crd

    def register_resource(
        self,
        crd: CustomResourceDefinition,
        version: CustomResourceDefinitionVersion,
        resource_class: type,
    ):
        versions = self._resources.setdefault(crd.metadata.name, {})
        versions[version.name] = resource_class

    def get_crd_version(self, model: type) -> CustomResourceDefinitionVersion:
        # A model represents one specific version of a resource,
        # so the versions are keyed by the model class.
        key = f'{model.__module__}.{model.__qualname__}'
        try:
            return self._versions[key]
        except KeyError:
            crd_version = self._versions[key] = CustomResourceDefinitionVersion(
                name=None,
                served=None,
                storage=None,
                additionalPrinterColumns=[],
            )
            return crd_version

    def get_crd(
        self, resource_class_or_name: Union[str, type]
    ) -> CustomResourceDefinition:
        if isinstance(resource_class_or_name, str):
            name = resource_class_or_name
        else:
            info = api_info(resource_class_or_name)
            name = f'{info.plural}.{info.resource.group}'
        try:
            return self._crds[name]
        except KeyError as e:
            msg = f'Could not find custom resource definition for: {name}'
            raise ResourceNotFoundError(msg) from e

    def all_crds(self) -> list[CustomResourceDefinition]:
        crds = []
        for name, crd in self._crds.items():
            for version in crd.spec.versions:
                resource = self._resources[name][version.name]
                version.schema = {'openAPIV3Schema': get_schema(resource)}
            crds.append(crd)
        return crds


custom_resource_registry = CustomResourceRegistry()
