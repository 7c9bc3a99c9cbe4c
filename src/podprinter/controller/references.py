from lightkube.models.meta_v1 import OwnerReference

from ..exceptions import AlreadyOwnedError
from ..resources import get_resource


def set_owner_reference(owner, subject, block_owner_deletion=False, controller=False):
    """Add an owner reference to `owner` on the metadata of `subject`.

    Kubernetes garbage collects `subject` once `owner` is deleted. An existing
    reference to the same owner is updated in place instead of duplicated.
    """
    # The owner's class knows its apiVersion and kind even when the instance
    # was built locally.
    owner_resource = get_resource(type(owner))
    api_version = owner.apiVersion or owner_resource.apiVersion
    kind = owner.kind or owner_resource.kind

    if subject.metadata.ownerReferences is None:
        subject.metadata.ownerReferences = []
    refs = subject.metadata.ownerReferences

    if controller:
        for existing in refs:
            if existing.controller and existing.uid != owner.metadata.uid:
                raise AlreadyOwnedError(subject, existing)

    ref = OwnerReference(
        apiVersion=api_version,
        kind=kind,
        name=owner.metadata.name,
        uid=owner.metadata.uid,
        blockOwnerDeletion=block_owner_deletion,
        controller=controller,
    )
    for i, existing in enumerate(refs):
        if existing.uid == ref.uid:
            refs[i] = ref
            break
    else:
        refs.append(ref)
    return ref


def set_controller_reference(owner, subject):
    """Make `owner` the managing controller of `subject`."""
    return set_owner_reference(
        owner,
        subject,
        block_owner_deletion=True,
        controller=True,
    )
