"""
Per-parse bound value store.

A ParseResult is created fresh by every parse, filled in by the parser during
that single pass, and read-only afterwards. It maps descriptors to the values
bound for them; descriptors never supplied on the command line are absent.

Lookups accept the descriptor itself or a name:
    >>> result[iterations]        # descriptor
    >>> result["-i"]              # short option name
    >>> result["--iterations"]    # long option name
    >>> result["outputfile"]      # parameter value name (or bare option name)
    >>> result.get(users)         # [] for an unseen multi-value descriptor
"""
from collections.abc import Mapping

from .arguments import Argument


class ParseResult(Mapping):
    """
    Read-only mapping from descriptors to the values bound in one parse.

    Single-value descriptors map to their converted value, multi-value
    descriptors to a tuple of converted values in command-line order, flags to
    the value their converter produced for the last occurrence.
    """

    __slots__ = ("_specification", "_values")

    def __init__(self, specification, /):
        self._specification = specification
        self._values = {}

    @property
    def specification(self):
        return self._specification

    def _resolve(self, key, /):
        if isinstance(key, Argument):
            return key
        if isinstance(key, str) and (argument := self._specification.find(key)) is not None:
            return argument
        raise KeyError(key)

    def __getitem__(self, key, /):
        argument = self._resolve(key)
        value = self._values[argument]
        return tuple(value) if argument.kind.multiple else value

    def __contains__(self, key, /):
        try:
            return self._resolve(key) in self._values
        except KeyError:
            return False

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def get(self, key, default=None, /):
        """
        Return the bound value, or a default for an unseen descriptor.

        Without an explicit default, unseen multi-value descriptors yield an
        empty tuple and every other descriptor yields None.
        """
        try:
            return self[key]
        except KeyError:
            pass
        if default is None:
            try:
                if self._resolve(key).kind.multiple:
                    return ()
            except KeyError:
                pass
        return default

    # Mutators reserved for the parser while the parse is in progress.

    def _bind(self, argument, value, /):
        self._values[argument] = value

    def _append(self, argument, value, /):
        self._values.setdefault(argument, []).append(value)

    def _previous(self, argument, /):
        return self._values.get(argument)

    def __repr__(self):
        return "ParseResult({%s})" % ", ".join(
            "%s: %r" % (argument, self[argument]) for argument in self._values
        )


__all__ = (
    "ParseResult",
)
