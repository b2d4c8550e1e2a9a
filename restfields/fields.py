"""
:any:`AbstractField` and its variants.

A field stores everything a resource needs to know about one of its keys:
how to read and write it, whether it can be filtered on, how to turn wire values
into internal ones and back, and who may access it. Declare them on a :any:`Resource`::

  class UserResource(Resource):
    id = IntegerField("id", is_primary_key=True)
    email = StringField("email", is_required=True, is_filterable=True)
    friends = ToManyField("friends", to=lambda: UserResource, through=FriendshipResource,
                          through_key="user_id", other_through_key="friend_id")

Fields are shared by every request, so they hold no per-request state:
the request bundle is passed in as an argument and never stored.
"""
import logging
import re
from abc import ABCMeta, abstractmethod
from datetime import date, datetime

from iso8601 import ParseError, parse_date

from . import operators
from ._util import gather_all, is_none, is_valid_number, maybe_await, to_python_value
from .errors import (BadPattern, BadType, FieldDefinitionError, FieldNotReadable,
                     FieldNotUpdatable, FieldNotWritable, Missing, NotInEnum,
                     OutOfRange, UnsupportedPermission)
from .permissions import PermissionTypes
from .relations import to_target

logger = logging.getLogger(__name__)

# Plain ASCII wire numbers only: no underscores, no other unicode digits.
_INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")
_FLOAT_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


class _AutoFilteringWeightClass(object):
  def __repr__(self):
    return "AUTO_FILTERING_WEIGHT"


AUTO_FILTERING_WEIGHT = _AutoFilteringWeightClass()
"""
Filtering weight resolved from the field itself:
:any:`MAX_FILTERING_WEIGHT` for primary keys, :any:`MIN_FILTERING_WEIGHT` otherwise.
"""
MAX_FILTERING_WEIGHT = 100
MIN_FILTERING_WEIGHT = 1


class AbstractField(metaclass=ABCMeta):
  """
  Base class for all fields. Only its subclasses can be instantiated.

  :param key: Public key of the field, as exposed through the API.
  :param path: Internal path of the field, used by storage. Defaults to ``key``.
  :param is_required:
    The field must be present when written. Also makes it writable.
  :param is_writable: The field can be written.
  :param is_writable_once:
    The field can be written on creation only.
    Also makes it required (unless ``is_required`` is passed), hence writable.
  :param is_filterable: The field can be filtered and sorted on. Also makes it readable.
  :param is_readable: The field can be selected.
  :param is_primary_key: Also makes it filterable (unless ``is_filterable`` is passed).
  :param filtering_weight:
    Between :any:`MIN_FILTERING_WEIGHT` and :any:`MAX_FILTERING_WEIGHT`.
    Query planners prefer heavier fields. Defaults to :any:`AUTO_FILTERING_WEIGHT`.
  :param default: Value used by :any:`hydrate` when none is given.
  :param to: Resource this field relates to, or a function returning it.
  :param through: Join resource of a many to many relation, or a function returning it.
    Requires ``through_key`` and ``other_through_key``.
  :param can_read:
    Callable taking the request bundle, returning a bool or an awaitable of one.
    Same for ``can_write_on_create`` and ``can_write_on_update``.

  Any other option is ignored.
  """

  AUTO_FILTERING_WEIGHT = AUTO_FILTERING_WEIGHT
  MAX_FILTERING_WEIGHT = MAX_FILTERING_WEIGHT
  MIN_FILTERING_WEIGHT = MIN_FILTERING_WEIGHT

  is_relation = False

  supported_operators = (operators.Eq,)

  def __init__(self, key, **options):
    self.key = key
    self.path = options.get("path") or key
    """Internal path of the field. Storage adapters use this rather than ``key``."""
    self.is_required = bool(options.get("is_required"))
    self.is_writable = bool(options.get("is_writable"))
    self.is_filterable = bool(options.get("is_filterable"))
    self.is_readable = bool(options.get("is_readable"))
    self.is_writable_once = bool(options.get("is_writable_once"))
    self.is_primary_key = bool(options.get("is_primary_key"))
    self.is_populable = bool(options.get("is_populable"))
    self.is_one_to_one_relation = bool(options.get("is_one_to_one_relation"))

    # Stay consistent. DO NOT change the order of those rules, each one reads the flags set above it.
    if self.is_writable_once and "is_required" not in options:
      self.is_required = True
    if self.is_required:
      self.is_writable = True
    if self.is_primary_key and "is_filterable" not in options:
      self.is_filterable = True
    if self.is_primary_key and not self.is_filterable:
      logger.warning("is_primary_key implies is_filterable for key %s", self.key)
    if self.is_filterable:
      self.is_readable = True
    self.is_updatable = False if self.is_writable_once else self.is_writable

    self._filtering_weight = None
    self.set_filtering_weight(options.get("filtering_weight", AUTO_FILTERING_WEIGHT))

    self.has_default = "default" in options
    self.default = options.get("default")

    self._has_to = False
    self._has_through = False
    self._to = None
    self._to_key = None
    self._from_key = None
    self._is_dynamic_relation = False
    self._through = None
    self.through_key = None
    self.other_through_key = None

    if "to" in options:
      self._has_to = True
      self.is_populable = True
      self._to = to_target(options["to"])
      self._to_key = options.get("to_key")
      self._from_key = options.get("from_key")
      self._is_dynamic_relation = bool(options.get("is_dynamic_relation"))

      if "through" in options:
        self._has_through = True
        self._through = to_target(options["through"])
        self.through_key = options.get("through_key")
        self.other_through_key = options.get("other_through_key")
        if not self.through_key:
          raise FieldDefinitionError("ManyToMany relation `%s` defined without a `through_key`" % self.key)
        if not self.other_through_key:
          raise FieldDefinitionError("ManyToMany relation `%s` defined without an `other_through_key`" % self.key)

    self._can_read_field = options.get("can_read")
    self._can_write_on_create_field = options.get("can_write_on_create")
    self._can_write_on_update_field = options.get("can_write_on_update")

  @property
  @abstractmethod
  def type(self):
    """Name of the type of values this field holds."""
    pass # pragma: no cover

  #region Relation properties
  @property
  def has_to(self):
    return self._has_to

  @property
  def has_through(self):
    return self._has_through

  @property
  def from_key(self):
    """Key on this side of the relation. Defaults to the field's ``key``."""
    return self._from_key if isinstance(self._from_key, str) else self.key

  @property
  def to_key(self):
    return self._to_key

  @property
  def is_dynamic_relation(self):
    return self._is_dynamic_relation
  #endregion

  #region Filtering weight
  @property
  def filtering_weight(self):
    return self._filtering_weight

  @property
  def normalized_filtering_weight(self):
    """The filtering weight on a [0, 1] scale."""
    return (self._filtering_weight or MIN_FILTERING_WEIGHT) / 100

  def set_filtering_weight(self, weight):
    if weight is AUTO_FILTERING_WEIGHT:
      self.set_filtering_weight(MAX_FILTERING_WEIGHT if self.is_primary_key else MIN_FILTERING_WEIGHT)
      return
    if not is_valid_number(weight):
      raise FieldDefinitionError("filtering_weight must be a valid number, got %r" % (weight,))
    if weight < MIN_FILTERING_WEIGHT or weight > MAX_FILTERING_WEIGHT:
      raise FieldDefinitionError("filtering_weight must be at least %s and %s at most, got %r" %
                                 (MIN_FILTERING_WEIGHT, MAX_FILTERING_WEIGHT, weight))
    self._filtering_weight = weight
  #endregion

  #region Values
  def is_present(self, value):
    """
    Checks whether or not the value is present, meaning neither :samp:`None`
    nor one of the :samp:`"null"` and :samp:`"undefined"` wire markers.
    """
    return not is_none(to_python_value(value))

  def validate_presence(self, value):
    """
    Validates that ``value`` :any:`is_present`, if the field is required.

    :raises Missing: The field is required but ``value`` is absent.
    :return: Whether ``value`` is present.
    """
    is_present = self.is_present(value)
    if self.is_required and not is_present:
      raise Missing(key=self.key, value=value)
    return is_present

  def hydrate(self, value):
    """Turns ``value`` into its internal value."""
    value = to_python_value(value)
    if not self.is_present(value) and self.has_default:
      value = self.default
    return value

  def dehydrate(self, value):
    """Turns ``value`` into its public value."""
    return value

  def validate(self, value):
    # pylint: disable=unused-argument
    return True
  #endregion

  #region Relations
  def get_to_key(self, *args):
    """
    Key on the other side of the relation.
    Falls back to the primary key of the resolved target, which may not be declared yet when this field is.
    """
    if isinstance(self._to_key, str):
      return self._to_key
    return self.get_to_resource(*args).primary_key_field.key

  def get_to_resource(self, *args):
    """The related resource. Arguments are passed to the resolver function, if ``to`` is one."""
    return self._to.resolve(*args) if self._to is not None else None

  def get_through_resource(self, *args):
    """Same as :any:`get_to_resource`, for the join resource."""
    return self._through.resolve(*args) if self._through is not None else None
  #endregion

  def get_operator_by_name(self, operator_name):
    """Returns the supported operator named ``operator_name``, or None."""
    for operator in self.supported_operators:
      if operator.string_name == operator_name:
        return operator
    return None

  #region Permissions
  def can_read(self, bundle):
    """
    Read permission on the field. Override it or pass ``can_read`` for field level authorization.
    May return an awaitable.
    """
    if self._can_read_field is not None:
      return self._can_read_field(bundle)
    return True

  def can_write_on_create(self, bundle):
    if self._can_write_on_create_field is not None:
      return self._can_write_on_create_field(bundle)
    return True

  def can_write_on_update(self, bundle):
    if self._can_write_on_update_field is not None:
      return self._can_write_on_update_field(bundle)
    return True

  async def _can_read(self, bundle):
    return await self._gate(self.can_read, FieldNotReadable, bundle)

  async def _can_write_on_create(self, bundle):
    return await self._gate(self.can_write_on_create, FieldNotWritable, bundle)

  async def _can_write_on_update(self, bundle):
    return await self._gate(self.can_write_on_update, FieldNotUpdatable, bundle)

  async def _gate(self, predicate, error_class, bundle):
    result = await maybe_await(predicate(bundle))
    if not result:
      logger.debug("%s denied for key %s", predicate.__name__, self.key)
      raise error_class(key=self.key)
    return result

  async def authenticate_permissions(self, requested_permissions, bundle):
    """
    Checks every requested permission concurrently.

    :param requested_permissions: Iterable of :any:`PermissionTypes` values.
    :param bundle: The request bundle, passed to the permission callbacks.
    :raises UnsupportedPermission: Before any check runs, if a permission is unknown.
    :raises TemplateError: The first failing check's error.
    :return: True
    """
    gates = []
    for permission in requested_permissions:
      if permission == PermissionTypes.READ:
        gates.append(self._can_read)
      elif permission == PermissionTypes.CREATE:
        gates.append(self._can_write_on_create)
      elif permission == PermissionTypes.UPDATE:
        gates.append(self._can_write_on_update)
      else:
        raise UnsupportedPermission(expected=list(PermissionTypes.SUPPORTED), value=permission)

    await gather_all(gate(bundle) for gate in gates)
    return True
  #endregion

  def __repr__(self):
    return "%s(key=%r, path=%r)" % (self.__class__.__name__, self.key, self.path)


class AnyField(AbstractField):
  """Accepts any value as is."""
  type = "any"


class StringField(AbstractField):
  """
  :param min_length: Minimum length, inclusive.
  :param max_length: Maximum length, inclusive.
  :param pattern: Regular expression (string or compiled) values must match.
  """
  type = "string"
  supported_operators = (operators.Eq, operators.Ne, operators.In, operators.Nin, operators.Like)

  def __init__(self, key, **options):
    super(StringField, self).__init__(key, **options)
    self.min_length = options.get("min_length")
    self.max_length = options.get("max_length")
    pattern = options.get("pattern")
    self.pattern = re.compile(pattern) if isinstance(pattern, str) else pattern

  def hydrate(self, value):
    value = super(StringField, self).hydrate(value)
    if is_valid_number(value):
      value = str(value)
    return value

  def validate(self, value):
    if not self.is_present(value):
      return True
    if not isinstance(value, str):
      raise BadType(key=self.key, value=value, expected=self.type)
    too_short = self.min_length is not None and len(value) < self.min_length
    too_long = self.max_length is not None and len(value) > self.max_length
    if too_short or too_long:
      raise OutOfRange(key=self.key, value=value, min=self.min_length, max=self.max_length)
    if self.pattern is not None and not self.pattern.search(value):
      raise BadPattern(key=self.key, value=value, pattern=self.pattern.pattern)
    return True


class AbstractNumberField(AbstractField):
  """
  Base for numeric fields.

  :param min: Minimum value, inclusive.
  :param max: Maximum value, inclusive.
  """

  supported_operators = (operators.Eq, operators.Ne, operators.In, operators.Nin,
                         operators.Gt, operators.Gte, operators.Lt, operators.Lte)

  def __init__(self, key, **options):
    super(AbstractNumberField, self).__init__(key, **options)
    self.min = options.get("min")
    self.max = options.get("max")

  @abstractmethod
  def _is_of_type(self, value):
    pass # pragma: no cover

  def validate(self, value):
    if not self.is_present(value):
      return True
    if isinstance(value, bool) or not self._is_of_type(value):
      raise BadType(key=self.key, value=value, expected=self.type)
    if (self.min is not None and value < self.min) or (self.max is not None and value > self.max):
      raise OutOfRange(key=self.key, value=value, min=self.min, max=self.max)
    return True


class IntegerField(AbstractNumberField):
  type = "int"

  def _is_of_type(self, value):
    return isinstance(value, int)

  def hydrate(self, value):
    value = super(IntegerField, self).hydrate(value)
    if not self.is_present(value) or (isinstance(value, int) and not isinstance(value, bool)):
      return value
    if isinstance(value, float) and value.is_integer():
      return int(value)
    if isinstance(value, str) and _INTEGER_PATTERN.fullmatch(value.strip()):
      return int(value.strip())
    raise BadType(key=self.key, value=value, expected=self.type)


class FloatField(AbstractNumberField):
  type = "float"

  def _is_of_type(self, value):
    return is_valid_number(value)

  def hydrate(self, value):
    value = super(FloatField, self).hydrate(value)
    if not self.is_present(value):
      return value
    if is_valid_number(value):
      return float(value)
    if isinstance(value, str) and _FLOAT_PATTERN.fullmatch(value.strip()):
      parsed = float(value.strip())
      if is_valid_number(parsed):
        return parsed
    raise BadType(key=self.key, value=value, expected=self.type)


class BooleanField(AbstractField):
  type = "boolean"
  supported_operators = (operators.Eq, operators.Ne)

  _TRUE_VALUES = ("true", "1")
  _FALSE_VALUES = ("false", "0")

  def hydrate(self, value):
    value = super(BooleanField, self).hydrate(value)
    if not self.is_present(value) or isinstance(value, bool):
      return value
    if isinstance(value, int) and value in (0, 1):
      return bool(value)
    if isinstance(value, str):
      lowered = value.strip().lower()
      if lowered in self._TRUE_VALUES:
        return True
      if lowered in self._FALSE_VALUES:
        return False
    raise BadType(key=self.key, value=value, expected=self.type)

  def validate(self, value):
    if self.is_present(value) and not isinstance(value, bool):
      raise BadType(key=self.key, value=value, expected=self.type)
    return True


class DateField(AbstractField):
  """Internal values are :class:`datetime`; public values are ISO 8601 strings."""
  type = "date"
  supported_operators = (operators.Eq, operators.Ne, operators.In, operators.Nin,
                         operators.Gt, operators.Gte, operators.Lt, operators.Lte)

  def hydrate(self, value):
    value = super(DateField, self).hydrate(value)
    if not self.is_present(value) or isinstance(value, datetime):
      return value
    if isinstance(value, date):
      return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
      try:
        return parse_date(value)
      except ParseError:
        pass
    raise BadType(key=self.key, value=value, expected=self.type)

  def dehydrate(self, value):
    if isinstance(value, date):
      return value.isoformat()
    return value

  def validate(self, value):
    if self.is_present(value) and not isinstance(value, datetime):
      raise BadType(key=self.key, value=value, expected=self.type)
    return True


class SelectField(AbstractField):
  """
  Only accepts one of ``values``.

  :param values: Non empty list of the accepted values.
  """
  type = "select"
  supported_operators = (operators.Eq, operators.Ne, operators.In, operators.Nin)

  def __init__(self, key, **options):
    super(SelectField, self).__init__(key, **options)
    values = options.get("values")
    if not values:
      raise FieldDefinitionError("SelectField `%s` defined without `values`" % key)
    self.values = list(values)

  def validate(self, value):
    if self.is_present(value) and value not in self.values:
      raise NotInEnum(key=self.key, value=value, expected=self.values)
    return True


class AbstractRelationField(AbstractField):
  """Base for fields that hold references to another resource. ``to`` is mandatory."""

  is_relation = True

  def __init__(self, key, **options):
    if "to" not in options:
      raise FieldDefinitionError("Relation `%s` defined without `to`" % key)
    super(AbstractRelationField, self).__init__(key, **options)


class ToOneField(AbstractRelationField):
  type = "toOne"
  supported_operators = (operators.Eq, operators.Ne, operators.In, operators.Nin)


class ToManyField(AbstractRelationField):
  """Holds a list of references. A single present value is wrapped in a list."""
  type = "toMany"
  supported_operators = (operators.In,)

  def hydrate(self, value):
    value = super(ToManyField, self).hydrate(value)
    if not self.is_present(value) or isinstance(value, list):
      return value
    if isinstance(value, tuple):
      return list(value)
    return [value]

  def validate(self, value):
    if self.is_present(value) and not isinstance(value, list):
      raise BadType(key=self.key, value=value, expected="array")
    return True
