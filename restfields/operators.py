"""
Operators that can be used to filter on a field, e.g. :samp:`?age__gte=18`.
A field lists the ones it accepts in :any:`AbstractField.supported_operators`.
"""


class Operator(object):
  """
  A named comparison.

  Operators are shared between every field and should be treated as immutable.
  """

  def __init__(self, string_name, is_array=False):
    self.string_name = string_name
    """Name used in query strings."""
    self.is_array = is_array
    """True when the operator compares against a list of values (:samp:`in`, :samp:`nin`)."""

  def __repr__(self):
    return "Operator(%s)" % self.string_name

  def __eq__(self, other):
    return isinstance(other, Operator) and self.string_name == other.string_name

  def __ne__(self, other):
    # pylint: disable=unneeded-not
    return not self == other

  def __hash__(self):
    return hash(self.string_name)


Eq = Operator("eq")
Ne = Operator("ne")
In = Operator("in", is_array=True)
Nin = Operator("nin", is_array=True)
Gt = Operator("gt")
Gte = Operator("gte")
Lt = Operator("lt")
Lte = Operator("lte")
Like = Operator("like")
