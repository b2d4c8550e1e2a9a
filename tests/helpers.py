import asyncio
from unittest import TestCase

from restfields.fields import IntegerField
from restfields.resource import Resource


class FieldTestCase(TestCase):
  def assert_raises(self, exception_class, action):
    """Like self.assertRaises and returns the exception too."""
    with self.assertRaises(exception_class) as cm:
      action()
    return cm.exception

  def run_async(self, coroutine):
    return asyncio.run(coroutine)

  def assert_raises_async(self, exception_class, coroutine):
    """Runs ``coroutine`` to completion and returns the exception it raised."""
    return self.assert_raises(exception_class, lambda: self.run_async(coroutine))


class TagResource(Resource):
  tag_id = IntegerField("tagId", is_primary_key=True)


class ItemTagResource(Resource):
  id = IntegerField("id", is_primary_key=True)
  item_id = IntegerField("itemId", is_filterable=True)
  tag_id = IntegerField("tagId", is_filterable=True)
