"""
Collect the RBAC rules the operator needs while controllers are declared.

The equivalent of kubebuilder's rbac markers:
https://book.kubebuilder.io/reference/markers/rbac.html
"""

import re

from lightkube.core import resource as lkr
from lightkube.models.meta_v1 import ObjectMeta
from lightkube.models.rbac_v1 import PolicyRule
from lightkube.resources.rbac_authorization_v1 import ClusterRole


READ_VERBS = ['get', 'list', 'watch']
WRITE_VERBS = ['create', 'update', 'patch', 'delete']


def _split(value):
    if isinstance(value, str):
        return re.split('[,;]', value)
    return value


class RbacRegistry:
    def __init__(self, role_name='podprinter-manager-role'):
        self.role_name = role_name
        self._rules = {}

    def add_resource(self, resource, verbs):
        """Grant the given verbs on a lightkube resource."""
        info = lkr.api_info(resource)
        self.add(groups=[info.resource.group], resources=[info.plural], verbs=verbs)

    def add(self, groups, resources, verbs):
        # Rules are merged per (group, resource) so repeated registrations
        # only widen the set of verbs.
        for group in _split(groups):
            for resource in _split(resources):
                granted = self._rules.setdefault((group, resource), set())
                granted.update(_split(verbs))

    def rules(self):
        return [
            PolicyRule(
                apiGroups=[group],
                resources=[resource],
                verbs=sorted(verbs),
            )
            for (group, resource), verbs in sorted(self._rules.items())
        ]

    def cluster_role(self):
        return ClusterRole(
            apiVersion='rbac.authorization.k8s.io/v1',
            kind='ClusterRole',
            metadata=ObjectMeta(name=self.role_name),
            rules=self.rules(),
        )


rbac_registry = RbacRegistry()


def resource_rbac(resource, verbs=READ_VERBS):
    rbac_registry.add_resource(resource, verbs)
