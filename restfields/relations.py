"""
Targets of relation fields.

A relation can point straight at a resource, or at a function returning it.
The function form lets two resources reference each other::

  class UserResource(Resource):
    id = IntegerField("id", is_primary_key=True)
    posts = ToManyField("posts", to=lambda: PostResource, to_key="author_id")
"""
import logging
from functools import partial
from types import FunctionType, MethodType

logger = logging.getLogger(__name__)


class RelationTarget(object):
  """Something that yields a resource when resolved."""

  def resolve(self, *args):
    raise NotImplementedError


class DirectTarget(RelationTarget):
  def __init__(self, resource):
    self.resource = resource

  def resolve(self, *args):
    # pylint: disable=unused-argument
    return self.resource

  def __repr__(self):
    return "DirectTarget(%r)" % (self.resource,)


class DeferredTarget(RelationTarget):
  """
  Calls ``resolver`` with the resolution arguments every time it is resolved.
  The result is not cached since it may depend on those arguments.
  """

  def __init__(self, resolver):
    if not callable(resolver):
      raise TypeError("Expected a callable resolver, got: %s" % resolver)
    self.resolver = resolver

  def resolve(self, *args):
    resource = self.resolver(*args)
    logger.debug("Resolved deferred relation target to %r", resource)
    return resource

  def __repr__(self):
    return "DeferredTarget(%r)" % (self.resolver,)


def to_target(value):
  """
  Wraps a ``to`` or ``through`` option.
  Functions, methods and partials are resolvers; anything else (e.g. a resource class) is used as is.
  """
  if value is None or isinstance(value, RelationTarget):
    return value
  if isinstance(value, (FunctionType, MethodType, partial)):
    return DeferredTarget(value)
  return DirectTarget(value)
