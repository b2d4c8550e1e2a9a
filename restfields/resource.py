from ._util import gather_all, get_path, has_path, set_path, split_path
from .errors import FieldDefinitionError, TemplateError, ValidationErrors
from .fields import AbstractField


class _ResourceMetaClass(type):
  """
  Collects the :any:`AbstractField` attributes of :any:`Resource` classes into :samp:`fields`.
  Fields can be added after the class has been defined too.
  """

  def __init__(cls, name, bases, dct):
    super(_ResourceMetaClass, cls).__init__(name, bases, dct)

    # Attribute name -> field, inherited ones first. Overridden attributes keep their position.
    field_attrs = {}
    for klass in reversed(cls.__mro__):
      for attr_name, value in vars(klass).items():
        if isinstance(value, AbstractField):
          field_attrs[attr_name] = value
    field_attrs = {attr_name: getattr(cls, attr_name) for attr_name in field_attrs
                   if isinstance(getattr(cls, attr_name), AbstractField)}

    cls._commit_fields(field_attrs)

  def __setattr__(cls, key, value):
    field_attrs = None
    if isinstance(value, AbstractField) or key in cls._field_attrs:
      field_attrs = dict(cls._field_attrs)
      if isinstance(value, AbstractField):
        field_attrs[key] = value
      else:
        del field_attrs[key]
      # Raises before anything is changed on the class.
      cls._check_fields(field_attrs)

    super(_ResourceMetaClass, cls).__setattr__(key, value)
    if field_attrs is not None:
      cls._commit_fields(field_attrs)

  def _commit_fields(cls, field_attrs):
    fields, primary_key_field = cls._check_fields(field_attrs)
    set_attr = super(_ResourceMetaClass, cls).__setattr__
    set_attr("_field_attrs", field_attrs)
    set_attr("fields", fields)
    set_attr("primary_key_field", primary_key_field)

  def _check_fields(cls, field_attrs):
    """
    Builds the {key: field} dict and finds the primary key.

    :raises FieldDefinitionError:
      Two attributes share a key, there is more than one primary key,
      or a path is nested inside another one.
    """
    fields = {}
    for attr_name, field in field_attrs.items():
      if field.key in fields:
        raise FieldDefinitionError("Duplicate key `%s` in resource %s (attribute %s)" %
                                   (field.key, cls.__name__, attr_name))
      fields[field.key] = field

    primary_keys = [field for field in fields.values() if field.is_primary_key]
    if len(primary_keys) > 1:
      raise FieldDefinitionError("Resource %s has more than one primary key: %s" %
                                 (cls.__name__, ", ".join(field.key for field in primary_keys)))

    paths = sorted(split_path(field.path) for field in fields.values())
    for path, next_path in zip(paths, paths[1:]):
      if len(next_path) > len(path) and next_path[:len(path)] == path:
        raise FieldDefinitionError("Path `%s` of resource %s is nested inside `%s`" %
                                   (".".join(next_path), cls.__name__, ".".join(path)))

    return fields, primary_keys[0] if primary_keys else None


class Resource(metaclass=_ResourceMetaClass):
  """
  Base class for resource schemas::

    class PostResource(Resource):
      id = IntegerField("id", is_primary_key=True)
      title = StringField("title", is_required=True, is_filterable=True)
      author = ToOneField("author", to=lambda: UserResource, path="author_id")

  Resource classes are what relation fields point to.
  Transport, routing and storage are left to the code using them.
  """

  # Filled in by _ResourceMetaClass, written here for documentation.

  #: Dict {key: :any:`AbstractField`} of all fields of this resource, inherited ones included.
  fields = None

  #: The field declared with :samp:`is_primary_key`, or None.
  primary_key_field = None

  @classmethod
  def get_field(cls, key):
    return cls.fields.get(key)

  @classmethod
  def get_filtering_field(cls, keys):
    """
    Among the filterable fields listed in ``keys``, the one with the highest filtering weight.
    Ties go to the first one listed. None if no key is filterable.
    """
    best = None
    for key in keys:
      field = cls.fields.get(key)
      if field is None or not field.is_filterable:
        continue
      if best is None or field.normalized_filtering_weight > best.normalized_filtering_weight:
        best = field
    return best

  @classmethod
  def hydrate(cls, payload, partial=False):
    """
    Turns a public payload into internal data, keyed by path.

    Every writable field is hydrated, checked for presence and validated.
    Unknown keys are ignored.

    :param payload: Dict keyed by field key.
    :param partial: Skip fields missing from ``payload`` (e.g. for updates).
    :raises ValidationErrors: With one error per offending field.
    """
    data = {}
    errors = []
    for field in cls.fields.values():
      if not field.is_writable or (partial and field.key not in payload):
        continue
      try:
        value = field.hydrate(payload.get(field.key))
        if field.validate_presence(value):
          field.validate(value)
      except TemplateError as error:
        errors.append(error)
        continue
      if field.is_present(value) or field.key in payload:
        set_path(split_path(field.path), value, data)

    if errors:
      raise ValidationErrors(errors)
    return data

  @classmethod
  def dehydrate(cls, obj):
    """Opposite of :any:`hydrate`, for readable fields present in ``obj``."""
    public = {}
    for field in cls.fields.values():
      path = split_path(field.path)
      if field.is_readable and has_path(path, obj):
        public[field.key] = field.dehydrate(get_path(path, obj))
    return public

  @classmethod
  async def authenticate_permissions(cls, keys, requested_permissions, bundle):
    """
    Runs :any:`AbstractField.authenticate_permissions` for every field in ``keys``, concurrently.
    Unknown keys are skipped.
    """
    fields = [cls.fields[key] for key in keys if key in cls.fields]
    await gather_all(field.authenticate_permissions(requested_permissions, bundle) for field in fields)
    return True
