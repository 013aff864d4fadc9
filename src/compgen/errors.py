"""Custom exception hierarchy for the composite generator."""


class CompgenError(Exception):
    """Base exception for all compgen errors."""


class ParseError(CompgenError):
    """Raised when YAML parsing or schema deserialization fails."""


class ValidationError(CompgenError):
    """Raised when a composite specification fails semantic validation."""


class InvalidGeomType(ValidationError):
    """Default geom type is not allowed for the composite family."""


class InvalidPinShape(ValidationError):
    """Pin coordinate list does not hold whole (x, y) pairs."""


class InvalidCount(ValidationError):
    """A lattice count is smaller than one."""


class InsufficientSpacing(ValidationError):
    """Lattice spacing is smaller than the default geom size."""


class MissingGeometryExtent(ValidationError):
    """Cable has neither explicit vertices nor a nonzero size."""


class UnsupportedAttribute(ValidationError):
    """An attribute was set that the family does not support."""


class ConflictingVertexSpec(ValidationError):
    """Explicit vertices and a first-axis count were both given."""


class DimensionOrderError(ValidationError):
    """A singleton count precedes a non-singleton count."""


class SubgridTooSmall(ValidationError):
    """Skin subgrid requested on a lattice that is too small."""


class DeprecatedFamily(ValidationError):
    """The composite family has been removed."""


class InvalidDimension(ValidationError):
    """Lattice dimensionality does not suit the family or feature."""


class InvalidJointSet(ValidationError):
    """Several joints of one kind were declared outside the particle family."""


class InvalidRootBody(ValidationError):
    """Rope/loop root body name does not encode a valid origin."""


class InvalidAttribute(ValidationError):
    """An attribute value could not be interpreted."""


class ConfigConflict(ValidationError):
    """Plugin configuration conflicts with generated values."""


class DuplicateConfigKey(ConfigConflict):
    """A reserved plugin configuration key was already set."""


class UnresolvedReference(CompgenError):
    """A name-based cross reference does not match any model element."""


class DuplicateName(CompgenError):
    """Two model elements of one kind were given the same name."""
