from datetime import datetime, timezone

from restfields.errors import (BadType, FieldDefinitionError, FieldNotReadable, Missing,
                               ValidationErrors)
from restfields.fields import (AnyField, DateField, IntegerField, StringField, ToManyField,
                               ToOneField)
from restfields.permissions import PermissionTypes
from restfields.resource import Resource

from tests.helpers import FieldTestCase, ItemTagResource, TagResource


class UserResource(Resource):
  id = IntegerField("id", is_primary_key=True)
  email = StringField("email", is_required=True, is_filterable=True, filtering_weight=80)
  name = StringField("name", is_writable=True, is_filterable=True, path="profile.name")
  role = StringField("role", is_readable=True, default="member", is_writable=True)
  created_at = DateField("createdAt", is_readable=True, is_writable_once=True, path="created_at")
  password = StringField("password", is_writable=True, can_read=lambda bundle: False)


class ItemResource(Resource):
  id = IntegerField("id", is_primary_key=True)
  owner = ToOneField("owner", to=lambda: UserResource, from_key="ownerId")
  tags = ToManyField("tags", to=TagResource, through=ItemTagResource,
                     through_key="itemId", other_through_key="tagId")


class ResourceDefinitionTest(FieldTestCase):
  def test_fields(self):
    self.assertEqual(set(UserResource.fields),
                     {"id", "email", "name", "role", "createdAt", "password"})
    self.assertIs(UserResource.get_field("email"), UserResource.email)
    self.assertIsNone(UserResource.get_field("nope"))
    self.assertIs(UserResource.primary_key_field, UserResource.id)

  def test_no_primary_key(self):
    class NoteResource(Resource):
      body = StringField("body")
    self.assertIsNone(NoteResource.primary_key_field)

  def test_inheritance(self):
    class AdminResource(UserResource):
      level = IntegerField("level", is_writable=True)
    self.assertIn("email", AdminResource.fields)
    self.assertIn("level", AdminResource.fields)
    self.assertNotIn("level", UserResource.fields)
    self.assertIs(AdminResource.primary_key_field, UserResource.id)

  def test_field_added_later(self):
    class NodeResource(Resource):
      id = IntegerField("id", is_primary_key=True)
    NodeResource.parent = ToOneField("parent", to=NodeResource)
    self.assertIs(NodeResource.get_field("parent").get_to_resource(), NodeResource)

  def test_duplicate_key(self):
    def define():
      # pylint: disable=unused-variable
      class BrokenResource(Resource):
        a = AnyField("same")
        b = AnyField("same")
    self.assertRaises(FieldDefinitionError, define)

  def test_two_primary_keys(self):
    def define():
      # pylint: disable=unused-variable
      class BrokenResource(Resource):
        a = IntegerField("a", is_primary_key=True)
        b = IntegerField("b", is_primary_key=True)
    self.assertRaises(FieldDefinitionError, define)

  def test_override_inherited_primary_key(self):
    class ExternalUserResource(UserResource):
      id = IntegerField("uid", is_primary_key=True)

    self.assertIs(ExternalUserResource.primary_key_field, ExternalUserResource.id)
    self.assertIn("uid", ExternalUserResource.fields)
    self.assertNotIn("id", ExternalUserResource.fields)
    self.assertIn("email", ExternalUserResource.fields)
    self.assertIs(UserResource.primary_key_field, UserResource.fields["id"])

  def test_override_with_plain_attribute(self):
    class AnonymousUserResource(UserResource):
      email = None

    self.assertNotIn("email", AnonymousUserResource.fields)
    self.assertIn("email", UserResource.fields)

  def test_late_primary_key_rejected(self):
    class NodeResource(Resource):
      id = IntegerField("id", is_primary_key=True)

    def add_primary_key():
      NodeResource.other = IntegerField("other", is_primary_key=True)
    self.assertRaises(FieldDefinitionError, add_primary_key)
    self.assertEqual(list(NodeResource.fields), ["id"])
    self.assertFalse(hasattr(NodeResource, "other"))
    self.assertIs(NodeResource.primary_key_field, NodeResource.id)

    NodeResource.label = StringField("label")
    self.assertEqual(list(NodeResource.fields), ["id", "label"])

  def test_late_duplicate_key_rejected(self):
    class NodeResource(Resource):
      a = AnyField("same")

    def add_duplicate():
      NodeResource.b = AnyField("same")
    self.assertRaises(FieldDefinitionError, add_duplicate)
    self.assertIs(NodeResource.fields["same"], NodeResource.a)
    self.assertFalse(hasattr(NodeResource, "b"))

  def test_late_replacement(self):
    class NodeResource(Resource):
      a = AnyField("first")

    NodeResource.a = AnyField("second")
    self.assertEqual(list(NodeResource.fields), ["second"])

    NodeResource.a = "plain"
    self.assertEqual(NodeResource.fields, {})

  def test_nested_paths_rejected(self):
    def define():
      # pylint: disable=unused-variable
      class BrokenResource(Resource):
        profile = AnyField("profile", is_writable=True)
        email = StringField("email", is_writable=True, path="profile.email")
    self.assertRaises(FieldDefinitionError, define)

    class ProfileResource(Resource):
      name = StringField("name", path="profile.name")
      email = StringField("email", path="profile.email")
      profiles = StringField("profiles")

    def add_nested():
      ProfileResource.first = StringField("first", path="profile.name.first")
    self.assertRaises(FieldDefinitionError, add_nested)
    self.assertEqual(set(ProfileResource.fields), {"name", "email", "profiles"})

  def test_relations(self):
    self.assertIs(ItemResource.owner.get_to_resource(), UserResource)
    self.assertEqual(ItemResource.owner.get_to_key(), "id")
    self.assertEqual(ItemResource.owner.from_key, "ownerId")
    self.assertIs(ItemResource.tags.get_through_resource(), ItemTagResource)
    self.assertEqual(ItemResource.tags.get_to_key(), "tagId")


class FilteringTest(FieldTestCase):
  def test_get_filtering_field(self):
    self.assertIs(UserResource.get_filtering_field(["name", "email", "id"]), UserResource.id)
    self.assertIs(UserResource.get_filtering_field(["name", "email"]), UserResource.email)
    self.assertIs(UserResource.get_filtering_field(["name"]), UserResource.name)
    self.assertIsNone(UserResource.get_filtering_field(["role", "unknown"]))

  def test_ties(self):
    class PairResource(Resource):
      a = AnyField("a", is_filterable=True)
      b = AnyField("b", is_filterable=True)
    self.assertIs(PairResource.get_filtering_field(["b", "a"]), PairResource.b)


class HydrationTest(FieldTestCase):
  def test_hydrate(self):
    data = UserResource.hydrate({
      "email": "a@b.com",
      "name": "Alice",
      "createdAt": "2016-03-01T00:00:00Z",
      "unknown": 1,
      "id": 12,
    })
    self.assertEqual(data, {
      "email": "a@b.com",
      "profile": {"name": "Alice"},
      "role": "member",
      "created_at": datetime(2016, 3, 1, tzinfo=timezone.utc),
    })

  def test_explicit_null(self):
    data = UserResource.hydrate({"email": "a@b.com", "createdAt": "2016-03-01", "name": "null"})
    self.assertEqual(data["profile"], {"name": None})

  def test_errors_aggregated(self):
    err = self.assert_raises(ValidationErrors, lambda: UserResource.hydrate({"password": ["hunter2"]}))
    self.assertEqual(err.status_code, 400)
    self.assertIn(Missing(key="email", value=None), err.errors)
    self.assertIn(Missing(key="createdAt", value=None), err.errors)
    self.assertEqual(len([e for e in err.errors if isinstance(e, BadType)]), 1)
    self.assertEqual(len(err.errors), 3)

  def test_partial(self):
    self.assertEqual(UserResource.hydrate({"name": "Bob"}, partial=True), {"profile": {"name": "Bob"}})
    self.assertRaises(ValidationErrors, lambda: UserResource.hydrate({"email": None}, partial=True))

  def test_dehydrate(self):
    public = UserResource.dehydrate({
      "id": 1,
      "email": "a@b.com",
      "profile": {"name": "Alice"},
      "created_at": datetime(2016, 3, 1, tzinfo=timezone.utc),
      "password": "hash",
    })
    self.assertEqual(public, {
      "id": 1,
      "email": "a@b.com",
      "name": "Alice",
      "createdAt": "2016-03-01T00:00:00+00:00",
    })


class ResourcePermissionsTest(FieldTestCase):
  def test_authenticate(self):
    read = [PermissionTypes.READ]
    self.assertTrue(self.run_async(UserResource.authenticate_permissions(["id", "email", "x"], read, {})))
    err = self.assert_raises_async(
      FieldNotReadable, UserResource.authenticate_permissions(["email", "password"], read, {}))
    self.assertEqual(err.meta, {"key": "password"})
