"""
Argot parser: walk an argument vector against a Specification.

What this module provides
- parse(specification, args): one-shot parse returning a ParseResult or a
  UsageError (returned, not raised).
- Parser: holds a specification plus usage configuration (program name,
  width, compact/sorted listing, pre/post usage) and the last successful
  result; attaches the rendered usage to every fault it returns.
- invoke(parser, prompt): convenience runner that surfaces faults through
  trigger() (raise, or print and exit in shell mode).

State machine (left to right, first error aborts)
- start: look at the head token.
  • no tokens            → parameters with nothing left
  • "--"                 → parameters with the tokens after it
  • "--name"             → long option
  • "-x" / "-xyz"        → short option (single or grouped)
  • anything else        → parameters with every remaining token
- long option: "--name" is looked up whole (never split). Valued options take
  the next token verbatim, even when it looks like an option. Flags flip.
- short option: "-x" behaves like a long option. In a group "-xyz" the first
  character selects the option: a valued option takes the rest of the token
  as its value ("-i10"); a flag flips and "-yz" is pushed back in front of the
  remaining tokens, so the first unknown character aborts the whole group.
- parameters: consume tokens strictly in declaration order; a multi-value
  parameter takes everything left. Running out of tokens before a required
  parameter, or of parameters before tokens, is a usage fault.

Faults
- The parser never prints and never exits. Faults carry the message, a
  FaultCode, a title, a hint and (through Parser) the rendered usage text.
"""
import copy
import difflib
import os.path
import shlex
import sys
from collections import deque
from collections.abc import Iterable

from .arguments import Kind, is_on
from .faults import *
from .results import ParseResult
from .specifications import Specification
from .usage import render_usage
from .utils import *


class Parser:
    """
    Parse argument vectors against one Specification.

    The specification is shared read-only; every parse() builds its own
    ParseResult, so a Parser (or several Parsers over the same
    specification) can be reused freely.

    Parameters
    - specification: Specification
    - name: str
      Program name for the usage message. Defaults to __main__.__prog__, then
      the basename of sys.argv[0].
    - compact: bool
      Render every option on one usage line instead of one line per name.
    - width: int
      Usage output width.
    - pre_usage / post_usage: str
      Paragraphs printed before the "Usage:" line and after the sections.
    - sort: bool
      Sort options by name in the usage message.
    - shell / colorful / fancy: bool
      How trigger() surfaces faults: raise them (shell=False) or print them
      with rich and exit with status 1 (shell=True).
    """

    def __init__(
            self,
            specification,
            /,
            name=Unset,
            *,
            compact=False,
            width=79,
            pre_usage=Unset,
            post_usage=Unset,
            sort=False,
            shell=False,
            colorful=True,
            fancy=False,
    ):
        if not isinstance(specification, Specification):
            raise TypeError("Parser() first argument must be a specification")
        if not isinstance(name, str | UnsetType):
            raise TypeError("Parser() 'name' must be a string")
        if not isinstance(width, int) or width < 1:
            raise ValueError("Parser() 'width' must be a positive integer")
        for option, value in (("pre_usage", pre_usage), ("post_usage", post_usage)):
            if not isinstance(value, str | UnsetType):
                raise TypeError(f"Parser() {option!r} must be a string")

        self.specification = specification
        self.name = coalesce(
            name,
            getattr(__import__("__main__"), "__prog__", os.path.basename(sys.argv[0]) or "argot"),
        )
        self.compact = bool(compact)
        self.width = width
        self.pre_usage = pre_usage
        self.post_usage = post_usage
        self.sort = bool(sort)
        self.shell = bool(shell)
        self.colorful = bool(colorful)
        self.fancy = bool(fancy)
        self._result = ParseResult(specification)

    @property
    def result(self):
        """The result of the last successful parse (empty before or after reset())."""
        return self._result

    def reset(self):
        """Forget every value bound by previous parses."""
        self._result = ParseResult(self.specification)

    def usage(self, message=Unset, /):
        """Render the usage message, optionally headed by an error message."""
        return render_usage(
            self.specification,
            self.name,
            compact=self.compact,
            width=self.width,
            pre_usage=self.pre_usage,
            post_usage=self.post_usage,
            sort=self.sort,
            message=message,
        )

    def parse(self, args, /):
        """
        Parse an argument vector.

        Parameters
        - args: Iterable[str]
          Tokens already split by the shell (typically sys.argv[1:]).

        Returns
        - ParseResult: every supplied descriptor bound to its value. It also
          becomes self.result.
        - UsageError: the first fault met, with the rendered usage attached
          under options["usage"]. self.result is left untouched.
        """
        if isinstance(args, str):
            raise TypeError("parse() argument must be an iterable of strings, not a string")
        tokens = deque(args)
        if not all(isinstance(token, str) for token in tokens):
            raise TypeError("parse() argument must be an iterable of strings")

        result = ParseResult(self.specification)
        if (fault := self._parseargs(tokens, result)) is not None:
            return copy.replace(
                fault,
                usage=self.usage(fault.message),
                name=self.name,
                shell=self.shell,
                colorful=self.colorful,
                fancy=self.fancy,
            )
        self._result = result
        return result

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this parser's runtime options (see faults.trigger).
        """
        trigger(fault, **{
            "name": self.name,
            "shell": self.shell,
            "colorful": self.colorful,
            "fancy": self.fancy,
        } | options)

    def __invoke__(self, prompt=Unset):
        """
        Parse a prompt and surface any fault.

        Parameters
        - prompt:
          • Unset: read tokens from sys.argv[1:].
          • str: shell-like string; will be split via shlex.split.
          • Iterable[str]: pre-tokenized sequence, used verbatim.
        """
        if prompt is Unset:
            tokens = sys.argv[1:]
        elif isinstance(prompt, str):
            tokens = shlex.split(prompt)
        elif isinstance(prompt, Iterable):
            tokens = list(prompt)
        else:
            raise TypeError("__invoke__() argument must be a string or an iterable of strings")

        if isinstance(result := self.parse(tokens), UsageError):
            self.trigger(result)
        return result

    def _parseargs(self, tokens, result):
        """
        Run the option-scanning loop, then hand what is left to the parameters.

        Returns None on success, or the first fault met.
        """
        while tokens:
            token = tokens[0]

            if token == "--":
                # Terminator: everything after it is positional.
                tokens.popleft()
                break
            elif token.startswith("--") and len(token) > 2:
                tokens.popleft()
                fault = self._parse_long_option(token, tokens, result)
            elif token.startswith("-") and len(token) > 1:
                tokens.popleft()
                fault = self._parse_short_option(token, tokens, result)
            else:
                # First non-option token ends option scanning.
                break

            if fault is not None:
                return fault

        return self._parse_parameters(tokens, result)

    def _parse_long_option(self, token, tokens, result):
        try:
            argument = self.specification.longs[token[2:]]
        except KeyError:
            return self._unknown(token)
        return self._parse_option(argument, token, token[2:], tokens, result)

    def _parse_short_option(self, token, tokens, result):
        alias = token[1:]
        try:
            argument = self.specification.shorts[alias[0]]
        except KeyError:
            return self._unknown(token)

        if len(alias) == 1:
            return self._parse_option(argument, token, alias, tokens, result)

        # Grouped form: "-i10" binds "10" to -i, "-cvf" flips -c then rescans "-vf".
        if argument.kind.valued:
            return self._bind(argument, "-" + alias[0], alias[1:], result)
        fault = self._flip(argument, "-" + alias[0], alias[0], result)
        if fault is None:
            tokens.appendleft("-" + alias[1:])
        return fault

    def _parse_option(self, argument, input, alias, tokens, result):
        if not argument.kind.valued:
            return self._flip(argument, input, alias, result)
        try:
            value = tokens.popleft()
        except IndexError:
            return MissingValueError(
                "Option %s requires a value." % input,
                title="option value required",
                code=FaultCode.OPTION_VALUE_REQUIRED,
                hint="pass a %s after %s (for example: %s <%s>)" % (
                    argument.value_name, input, input, argument.value_name
                ),
                input=input,
                argument=argument,
                docs=getdoc(FaultCode.OPTION_VALUE_REQUIRED),
            )
        # Taken verbatim, even when it looks like another option.
        return self._bind(argument, input, value, result)

    def _parse_parameters(self, tokens, result):
        parameters = self.specification.parameters

        for index, argument in enumerate(parameters):
            if not tokens:
                if missing := [x.value_name for x in parameters[index:] if not x.optional]:
                    return MissingParametersError(
                        "Missing parameter(s): %s" % ", ".join(missing),
                        title="missing parameters",
                        code=FaultCode.MISSING_PARAMETERS,
                        hint="add the missing value(s) after the options",
                        missing=tuple(missing),
                        docs=getdoc(FaultCode.MISSING_PARAMETERS),
                    )
                break

            if argument.kind is Kind.MULTI_VALUE_PARAMETER:
                # Always the last parameter; it takes everything left.
                while tokens:
                    if (fault := self._bind(argument, argument.value_name, tokens.popleft(), result)) is not None:
                        return fault
            elif (fault := self._bind(argument, argument.value_name, tokens.popleft(), result)) is not None:
                return fault

        if tokens:
            return TooManyParametersError(
                "Too many parameters.",
                title="too many parameters",
                code=FaultCode.TOO_MANY_PARAMETERS,
                hint="remove %s or put '--' before values that start with '-'" % (
                    "unexpected value %r" % tokens[0] if len(tokens) == 1 else "the unexpected values"
                ),
                remaining=tuple(tokens),
                docs=getdoc(FaultCode.TOO_MANY_PARAMETERS),
            )
        return None

    def _bind(self, argument, input, raw, result):
        """
        Convert a raw value and store it (append for multi-value descriptors).
        """
        subject = ("Option %s" if argument.kind.option else "Parameter %s") % input
        value, fault = self._convert(argument, subject, input, raw, raw)
        if fault is not None:
            return fault
        if argument.kind.multiple:
            result._append(argument, value)
        else:
            result._bind(argument, value)
        return None

    def _flip(self, argument, input, alias, result):
        """
        Run a flag's converter for an on- or off-name and store the outcome.
        """
        value, fault = self._convert(
            argument, "Option %s" % input, input, None, is_on(argument, alias), result._previous(argument)
        )
        if fault is None:
            result._bind(argument, value)
        return fault

    def _convert(self, argument, subject, input, raw, /, *args):
        """
        Call the descriptor's converter, turning its failures into faults.

        Returns (value, None) on success and (Unset, fault) on failure. A
        converter may raise a UsageError itself to abort with its own message.
        """
        try:
            return argument.convert(*args), None
        except UsageError as fault:
            return Unset, fault
        except ConversionError as exception:
            message = exception.message
        except (ValueError, TypeError) as exception:
            message = str(exception) or ('Cannot convert argument "%s".' % raw)

        return Unset, InvalidValueError(
            "%s: %s" % (subject, message),
            title="invalid value",
            code=FaultCode.INVALID_VALUE,
            hint="check the value given to %s" % input,
            input=input,
            value=raw,
            argument=argument,
            docs=getdoc(FaultCode.INVALID_VALUE),
        )

    def _unknown(self, token):
        names = ["-" + alias for alias in self.specification.shorts]
        names += ["--" + alias for alias in self.specification.longs]
        suggestions = difflib.get_close_matches(token, names, 5)
        try:
            hint = "did you mean %r? you can also run '%s --help' to see all options" % (suggestions[0], self.name)
        except IndexError:
            hint = "the options this program accepts are listed below"
        return UnknownOptionError(
            "Unknown option: %s" % token,
            title="unknown option",
            code=FaultCode.UNKNOWN_OPTION,
            hint=hint,
            input=token,
            suggestions=tuple(suggestions),
            docs=getdoc(FaultCode.UNKNOWN_OPTION),
        )

    def __repr__(self):
        return "Parser(%r, name=%r)" % (self.specification, self.name)


def parse(specification, args, /, **options):
    """
    One-shot parse: Parser(specification, **options).parse(args).

    Returns a ParseResult, or the UsageError describing the first fault.
    """
    return Parser(specification, **options).parse(args)


def invoke(object, prompt=Unset, /):
    """
    Convenience runner for parsers.

    Parameters
    - object: an instance providing __invoke__(prompt) (a Parser).
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: use items as tokens.

    Returns
    - the ParseResult. Faults are surfaced through the parser's trigger():
      raised, or printed followed by sys.exit(1) in shell mode.
    """
    if hasattr(object, "__invoke__") and callable(object.__invoke__):
        return object.__invoke__(prompt)
    target = "argument" if prompt is Unset else "first argument"
    raise TypeError(f"invoke() {target} must implement __invoke__ method")


__all__ = (
    "Parser",
    "parse",
    "invoke",
)
