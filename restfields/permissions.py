class PermissionTypes(object):
  """
  Kinds of access a field can be asked for.
  Each one maps to an independent gate on :any:`AbstractField`.
  """
  READ = "read"
  CREATE = "create"
  UPDATE = "update"

  SUPPORTED = (READ, CREATE, UPDATE)

  def __init__(self):
    raise TypeError
