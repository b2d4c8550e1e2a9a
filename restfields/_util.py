import asyncio
import inspect
from math import isinf, isnan
from numbers import Real

_ABSENT_MARKERS = ("null", "undefined")


def to_python_value(value):
  """
  Turns the wire markers :samp:`"null"` and :samp:`"undefined"` into :samp:`None`.
  Any other value is returned untouched.
  """
  if isinstance(value, str) and value in _ABSENT_MARKERS:
    return None
  return value


def is_none(value):
  return value is None


def is_valid_number(value):
  """True for finite real numbers. Booleans are not numbers here."""
  if isinstance(value, bool) or not isinstance(value, Real):
    return False
  return not (isnan(value) or isinf(value))


def split_path(path):
  """:samp:`"a.b"` becomes :samp:`["a", "b"]`."""
  return path.split(".")


def _walk(path, data):
  """Returns :samp:`(True, value)` at the end of :samp:`path`, or :samp:`(False, None)` if it can not be reached."""
  for path_elem in path:
    if (not isinstance(data, dict)) or path_elem not in data:
      return False, None
    data = data[path_elem]
  return True, data


def get_path(path, data):
  """
  Looks for :samp:`path` in :samp:`data`.
  e.g. :samp:`get_path(["a", "b"], {"a": {"b": 1}})` is 1.

  :param path: List of dict keys, outermost to innermost.
  :param data: Dict of data (potentially nested).
  :return: The value at the end of the path, or :samp:`None` if it can not be reached.
  """
  return _walk(path, data)[1]


def has_path(path, data):
  """Like :any:`get_path`, but tells apart a missing path from a :samp:`None` value."""
  return _walk(path, data)[0]


def set_path(path, value, data):
  """
  Opposite of get_path, creating the missing dicts along the way.
  e.g. :samp:`set_path(["a", "b"], 1, {})` changes data to :samp:`{"a": {"b": 1}}`.
  """
  for path_elem in path[0:-1]:
    data = data.setdefault(path_elem, {})
    if not isinstance(data, dict):
      raise ValueError("Can not set %s inside a non dict value" % ".".join(path))
  data[path[-1]] = value


async def gather_all(awaitables):
  """
  Runs every awaitable concurrently and returns their results.
  On the first failure, the others are cancelled and waited for before the failure is raised.
  """
  tasks = [asyncio.ensure_future(awaitable) for awaitable in awaitables]
  try:
    return await asyncio.gather(*tasks)
  except BaseException:
    for task in tasks:
      task.cancel()
    await asyncio.gather(*tasks, return_exceptions=True)
    raise


async def maybe_await(value):
  if inspect.isawaitable(value):
    return await value
  return value
