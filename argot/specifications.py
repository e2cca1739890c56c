"""
Argot specifications: validated, immutable collections of descriptors.

A Specification owns the ordered option descriptors and the ordered parameter
descriptors governing a parse. It is validated once, at construction, and is
never mutated afterwards, so one specification may back any number of parses
(sequential or concurrent); parse state lives in the ParseResult of each parse.

Invariants (violations raise SpecificationError)
- every option name is non-empty and does not start with "-" (checked by the
  descriptors themselves);
- no two options share a short name or a long name;
- no two parameters share a value name;
- no required parameter follows an optional parameter;
- at most one multi-value parameter, and it is the last parameter.

Two ways to build one:
    >>> spec = Specification([iterations, verbose], [output, inputs])

    >>> builder = SpecificationBuilder()
    >>> iterations = builder.option(["i", "iterations"], "n", "Total iterations", convert="int")
    >>> output = builder.parameter("outputfile", "Output file to which to write.")
    >>> spec = builder.build()
"""
from types import MappingProxyType

from .arguments import Argument, Kind, flag, multi_option, multi_parameter, name, option, parameter
from .faults import SpecificationError


class SpecificationBuilder:
    """
    Incrementally declare descriptors, checking each one as it is added.

    Every add_* method fails fast with SpecificationError, so a bad
    declaration points at the line that made it. build() returns the
    immutable Specification.
    """

    def __init__(self):
        self._options = []
        self._parameters = []
        self._shorts = {}
        self._longs = {}
        self._names = {}

    def add_option(self, argument, /):
        if not isinstance(argument, Argument) or not argument.kind.option:
            raise SpecificationError("add_option() argument must be an option descriptor.")

        # Canonical names first: two descriptors displaying the same name would
        # overwrite each other in the usage listing.
        if (canonical := name(argument)) in self._names:
            raise SpecificationError('Option name "%s" is already in use.' % canonical.lstrip("-"))

        for alias in argument.names:
            index = self._shorts if len(alias) == 1 else self._longs
            if alias in index:
                raise SpecificationError('Option name "%s" is already in use.' % alias)

        for alias in argument.names:
            (self._shorts if len(alias) == 1 else self._longs)[alias] = argument
        self._names[canonical] = argument
        self._options.append(argument)
        return argument

    def add_parameter(self, argument, /):
        if not isinstance(argument, Argument) or not argument.kind.parameter:
            raise SpecificationError("add_parameter() argument must be a parameter descriptor.")

        if self._parameters:
            last = self._parameters[-1]
            if last.kind is Kind.MULTI_VALUE_PARAMETER:
                raise SpecificationError("Multivalue parameter must be the final parameter.")
            if last.optional and not argument.optional:
                raise SpecificationError(
                    'You can\'t follow optional parameter "%s" with required parameter "%s".'
                    % (last.value_name, argument.value_name)
                )
        if any(existing.value_name == argument.value_name for existing in self._parameters):
            raise SpecificationError('Parameter "%s" is already in use.' % argument.value_name)

        self._parameters.append(argument)
        return argument

    def option(self, *args, **kwargs):
        """Declare, add and return a single-value option (see arguments.option)."""
        return self.add_option(option(*args, **kwargs))

    def multi_option(self, *args, **kwargs):
        """Declare, add and return a multi-value option (see arguments.multi_option)."""
        return self.add_option(multi_option(*args, **kwargs))

    def flag(self, *args, **kwargs):
        """Declare, add and return a flag (see arguments.flag)."""
        return self.add_option(flag(*args, **kwargs))

    def parameter(self, *args, **kwargs):
        """Declare, add and return a single-value parameter (see arguments.parameter)."""
        return self.add_parameter(parameter(*args, **kwargs))

    def multi_parameter(self, *args, **kwargs):
        """Declare, add and return a multi-value parameter (see arguments.multi_parameter)."""
        return self.add_parameter(multi_parameter(*args, **kwargs))

    def build(self):
        return Specification(self._options, self._parameters)


class Specification:
    """
    Validated, immutable set of option and parameter descriptors.

    Attributes
    - options: tuple of option descriptors, in declaration order.
    - parameters: tuple of parameter descriptors, in declaration order.
    - shorts: read-only mapping from one-character names to descriptors.
    - longs: read-only mapping from multi-character names to descriptors.
    """

    __slots__ = ("_options", "_parameters", "_shorts", "_longs")

    def __init__(self, options=(), parameters=()):
        builder = SpecificationBuilder()
        for argument in options:
            builder.add_option(argument)
        for argument in parameters:
            builder.add_parameter(argument)

        object.__setattr__(self, "_options", tuple(builder._options))
        object.__setattr__(self, "_parameters", tuple(builder._parameters))
        object.__setattr__(self, "_shorts", MappingProxyType(dict(builder._shorts)))
        object.__setattr__(self, "_longs", MappingProxyType(dict(builder._longs)))

    def __setattr__(self, name, value, /):
        raise AttributeError("specification is immutable")

    @property
    def options(self):
        return self._options

    @property
    def parameters(self):
        return self._parameters

    @property
    def shorts(self):
        return self._shorts

    @property
    def longs(self):
        return self._longs

    @property
    def arguments(self):
        return self._options + self._parameters

    def find(self, name, /):
        """
        Look up a descriptor by name.

        Accepts "-x", "--long", a bare option name, or a parameter's value
        name. Parameters win over bare option names. Returns None when
        nothing matches.
        """
        if name.startswith("--"):
            return self._longs.get(name[2:])
        if name.startswith("-"):
            return self._shorts.get(name[1:])
        for argument in self._parameters:
            if argument.value_name == name:
                return argument
        return (self._shorts if len(name) == 1 else self._longs).get(name)

    def __repr__(self):
        return "Specification(options=%r, parameters=%r)" % (self._options, self._parameters)


__all__ = (
    "Specification",
    "SpecificationBuilder",
)
