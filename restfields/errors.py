"""Error types that fields and resources throw."""
from requests import codes


class RestFieldsError(Exception):
    """Base class for every error raised by this library."""
    pass


class FieldDefinitionError(RestFieldsError, ValueError):
    """
    A field or resource was declared with inconsistent options.
    Raised at definition time; these are programming errors, not request errors.
    """
    pass

# region TemplateError


class TemplateError(RestFieldsError):
    """
    Error caused by the content of a request.

    Each subclass declares a ``code``, a ``status_code`` and a ``template``.
    The message is the template formatted with the keyword arguments, which are kept as ``meta``.
    """

    code = None
    status_code = codes.bad_request
    template = "{code}"

    def __init__(self, **meta):
        self.meta = meta
        """Dict of the values that describe this error (e.g. the field ``key``)."""
        super(TemplateError, self).__init__(self.message)

    @property
    def message(self):
        return self.template.format(code=self.code, **self.meta)

    def to_dict(self):
        return {"code": self.code, "message": self.message, "meta": self.meta}

    def __repr__(self):
        meta = ", ".join("%s=%r" % (k, v) for k, v in sorted(self.meta.items()))
        return "%s(%s)" % (self.__class__.__name__, meta)

    def __eq__(self, other):
        return self.__class__ == other.__class__ and self.meta == other.meta

    def __ne__(self, other):
        # pylint: disable=unneeded-not
        return not self == other

    def __hash__(self):
        return hash((self.__class__, repr(self)))


class Missing(TemplateError):
    code = "Missing"
    template = "Missing required key `{key}`, got {value!r}"


class BadType(TemplateError):
    code = "BadType"
    template = "Expected `{key}` to be of type {expected}, got {value!r}"


class OutOfRange(TemplateError):
    code = "OutOfRange"
    template = "Expected `{key}` to be between {min} and {max}, got {value!r}"


class BadPattern(TemplateError):
    code = "BadPattern"
    template = "Expected `{key}` to match {pattern}, got {value!r}"


class NotInEnum(TemplateError):
    code = "NotInEnum"
    template = "Expected `{key}` to be one of {expected}, got {value!r}"


class UnsupportedPermission(TemplateError):
    code = "UnsupportedPermission"
    template = "Expected permission to be one of {expected}, got {value!r}"


class FieldNotReadable(TemplateError):
    code = "FieldNotReadable"
    status_code = codes.forbidden
    template = "Field `{key}` is not readable"


class FieldNotWritable(TemplateError):
    code = "FieldNotWritable"
    status_code = codes.forbidden
    template = "Field `{key}` is not writable"


class FieldNotUpdatable(TemplateError):
    code = "FieldNotUpdatable"
    status_code = codes.forbidden
    template = "Field `{key}` is not updatable"

# endregion


class ValidationErrors(RestFieldsError):
    """Every :any:`TemplateError` found while hydrating a payload."""

    status_code = codes.bad_request

    def __init__(self, errors):
        self.errors = list(errors)
        """List of :any:`TemplateError`, one per offending field."""
        super(ValidationErrors, self).__init__(self._get_description())

    def _get_description(self):
        return "; ".join(error.message for error in self.errors) if self.errors else "(empty `errors`)"

    def __repr__(self):
        return "ValidationErrors(%r)" % self.errors
