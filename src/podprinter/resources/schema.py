"""
OpenAPI v3 schema generation for custom resource models.

The schema is derived from the dataclass type hints of a model. Kubernetes
does not accept `$ref` in a CRD schema, so nested models are inlined.

Field metadata is attached with `typing.Annotated`. A plain string is used as
the field description, a `SchemaAnnotation` gives full control:

```
size: Annotated[int, SchemaAnnotation(description='replicas', minimum=0)]
msg: Annotated[str, 'message to print']
```

See https://kubernetes.io/docs/tasks/extend-kubernetes/custom-resources/custom-resource-definitions/
"""

import builtins
import dataclasses
import datetime
import inspect
import numbers
import types
import typing as t

from lightkube.models import meta_v1


_MISSING = dataclasses.MISSING


@dataclasses.dataclass(frozen=True)
class SchemaAnnotation:
    title: t.Optional[str] = None
    description: t.Optional[str] = None
    pattern: t.Optional[str] = None
    format: t.Optional[str] = None
    min_length: t.Optional[int] = None
    max_length: t.Optional[int] = None
    minimum: t.Optional[numbers.Number] = None
    maximum: t.Optional[numbers.Number] = None
    min_items: t.Optional[int] = None
    max_items: t.Optional[int] = None

    _key_map = {
        'min_length': 'minLength',
        'max_length': 'maxLength',
        'min_items': 'minItems',
        'max_items': 'maxItems',
    }

    def merge(self, other):
        """Return a new annotation, values from `other` win."""
        values = dataclasses.asdict(self)
        values.update(
            {k: v for k, v in dataclasses.asdict(other).items() if v is not None}
        )
        return SchemaAnnotation(**values)

    def schema(self):
        return {
            self._key_map.get(k, k): v
            for k, v in dataclasses.asdict(self).items()
            if v is not None
        }


def get_schema(resource):
    """Return the openAPIV3Schema for the given custom resource class."""
    schema = _object_schema(resource, with_description=True)
    properties = {
        'apiVersion': {'type': 'string'},
        'kind': {'type': 'string'},
    }
    properties.update(schema['properties'])
    schema['properties'] = properties
    schema.pop('title', None)
    return schema


def _docstring(dc):
    """The dataclass doc string, unless it was generated by @dataclass."""
    if not dc.__doc__ or dc.__module__.startswith('lightkube'):
        return None
    try:
        text_sig = str(inspect.signature(dc)).replace(' -> None', '')
    except (TypeError, ValueError):
        text_sig = ''
    if dc.__doc__ == dc.__name__ + text_sig:
        return None
    return inspect.cleandoc(dc.__doc__)


def _object_schema(dc, with_description=True):
    schema = {'type': 'object', 'title': dc.__name__}
    description = _docstring(dc) if with_description else None
    if description:
        schema['description'] = description
    schema['properties'] = {}
    required = []
    type_hints = t.get_type_hints(dc, include_extras=True)
    for field in dataclasses.fields(dc):
        schema['properties'][field.name] = _field_schema(
            type_hints[field.name], field.default, SchemaAnnotation()
        )
        if field.default is _MISSING and field.default_factory is _MISSING:
            required.append(field.name)
    if required:
        schema['required'] = required
    return schema


def _with_default(schema, default):
    if default not in (_MISSING, None):
        schema['default'] = default
    return schema


def _field_schema(type_, default, annotation):
    if isinstance(type_, type) and issubclass(type_, meta_v1.ObjectMeta):
        # A CRD may not describe ObjectMeta in detail.
        return {'type': 'object'}

    if dataclasses.is_dataclass(type_):
        schema = _object_schema(type_)
        schema.pop('title')
        schema.update(annotation.schema())
        return schema

    origin = t.get_origin(type_)
    field_type = origin if origin is not None else type_

    match field_type:
        case t.Annotated:
            return _annotated_schema(type_, default, annotation)
        case t.Union | types.UnionType:
            return _union_schema(type_, default, annotation)
        case builtins.dict:
            args = t.get_args(type_)
            schema = {'type': 'object'}
            if args:
                schema['additionalProperties'] = _field_schema(
                    args[1], _MISSING, SchemaAnnotation()
                )
            return {**schema, **annotation.schema()}
        case builtins.list:
            args = t.get_args(type_)
            schema = {'type': 'array'}
            if args:
                schema['items'] = _field_schema(args[0], _MISSING, SchemaAnnotation())
            return {**schema, **annotation.schema()}
        case builtins.str | _ if issubclass(field_type, str):
            return _with_default({'type': 'string', **annotation.schema()}, default)
        case builtins.bool:
            return _with_default({'type': 'boolean', **annotation.schema()}, default)
        case builtins.int | _ if issubclass(field_type, int):
            return _with_default({'type': 'integer', **annotation.schema()}, default)
        case _ if issubclass(field_type, numbers.Number):
            return _with_default({'type': 'number', **annotation.schema()}, default)
        case _ if issubclass(field_type, datetime.datetime):
            return {'type': 'string', 'format': 'date-time', **annotation.schema()}
        case _:
            raise NotImplementedError(f"field type '{type_}' not implemented")


def _annotated_schema(type_, default, annotation):
    base, *metadata = t.get_args(type_)
    for item in metadata:
        if isinstance(item, str):
            annotation = annotation.merge(SchemaAnnotation(description=item))
        elif isinstance(item, SchemaAnnotation):
            annotation = annotation.merge(item)
    return _field_schema(base, default, annotation)


def _union_schema(type_, default, annotation):
    # Optional[X] is Union[X, None], but a CRD wants plain X for that.
    args = [arg for arg in t.get_args(type_) if arg is not types.NoneType]
    if len(args) == 1:
        return _field_schema(args[0], default, annotation)
    return _with_default(
        {
            'anyOf': [_field_schema(arg, _MISSING, SchemaAnnotation()) for arg in args],
            **annotation.schema(),
        },
        default,
    )
