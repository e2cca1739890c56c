"""
Parser behavioral tests.

Scope
- Option scanning: long options, short options, grouped short options, the "--" terminator.
- Value binding: verbatim next-token values, conversion, multi-value accumulation, flag converters.
- Parameter consumption: declaration order, optional and multi-value parameters, arity faults.
- Parser facade: reuse, reset(), rendered usage on faults, trigger() and invoke().

Conventions
- Test method names follow CamelCase per project convention.
- Usage faults are returned by parse(); assertions check their type and exact message.
"""

from __future__ import annotations

import io
import unittest
from unittest import TestCase, mock

from rich.console import Console

from argot import (
    FaultCode,
    InvalidValueError,
    MissingParametersError,
    MissingValueError,
    ParseResult,
    Parser,
    Specification,
    TooManyParametersError,
    UnknownOptionError,
    UsageError,
    flag,
    invoke,
    multi_option,
    multi_parameter,
    option,
    parameter,
    parse,
)


def _verbosity(on, previous):
    return (previous or 0) + (1 if on else -1)


class TestOptionScanning(TestCase):
    """Behavioral tests for long, short and grouped options."""

    def setUp(self):
        self.noerror = flag(["n", "noerror"])
        self.verbose = flag(["v", "verbose"])
        self.iterations = option(["i", "iterations"], "n", convert="int")
        self.output = parameter("out")
        self.specification = Specification([self.noerror, self.verbose, self.iterations], [self.output])

    def testGroupingEquivalence(self):
        grouped = parse(self.specification, ["-nvi10", "out"])
        short = parse(self.specification, ["-n", "-v", "-i", "10", "out"])
        long = parse(self.specification, ["--noerror", "--verbose", "--iterations", "10", "out"])

        self.assertIsInstance(grouped, ParseResult)
        self.assertEqual(grouped, short)
        self.assertEqual(short, long)
        self.assertEqual(dict(grouped), {self.noerror: True, self.verbose: True, self.iterations: 10, self.output: "out"})

    def testValuedOptionInGroupTakesRestOfToken(self):
        result = parse(self.specification, ["-i10", "out"])
        self.assertEqual(result[self.iterations], 10)

    def testLaterOccurrenceOverwrites(self):
        result = parse(self.specification, ["-i", "1", "--iterations", "2", "out"])
        self.assertEqual(result[self.iterations], 2)

    def testUnknownLongOption(self):
        fault = parse(self.specification, ["--bogus", "out"])
        self.assertIsInstance(fault, UnknownOptionError)
        self.assertEqual(fault.message, "Unknown option: --bogus")
        self.assertEqual(fault.code, FaultCode.UNKNOWN_OPTION)

    def testUnknownOptionSuggestsCloseName(self):
        fault = parse(self.specification, ["--verbos", "out"])
        self.assertEqual(fault.options["suggestions"][0], "--verbose")

    def testUnknownShortOption(self):
        fault = parse(self.specification, ["-x", "out"])
        self.assertIsInstance(fault, UnknownOptionError)
        self.assertEqual(fault.message, "Unknown option: -x")

    def testFirstBadCharacterAbortsGroup(self):
        fault = parse(self.specification, ["-nxv", "out"])
        self.assertIsInstance(fault, UnknownOptionError)
        self.assertEqual(fault.message, "Unknown option: -xv")

    def testLongOptionIsNeverSplit(self):
        fault = parse(self.specification, ["--nv", "out"])
        self.assertIsInstance(fault, UnknownOptionError)
        self.assertEqual(fault.message, "Unknown option: --nv")

    def testMissingValue(self):
        for token in ("-i", "--iterations"):
            with self.subTest(token=token):
                fault = parse(self.specification, [token])
                self.assertIsInstance(fault, MissingValueError)
                self.assertEqual(fault.message, "Option %s requires a value." % token)
                self.assertEqual(fault.code, FaultCode.OPTION_VALUE_REQUIRED)

    def testSingleHyphenIsAParameter(self):
        result = parse(self.specification, ["-"])
        self.assertEqual(result[self.output], "-")

    def testFirstNonOptionEndsScanning(self):
        fault = parse(self.specification, ["out", "-v"])
        self.assertIsInstance(fault, TooManyParametersError)


class TestValueBinding(TestCase):
    """Behavioral tests for values, conversion and accumulation."""

    def testTerminator(self):
        specification = Specification([option("s", "something")], [parameter("out")])
        result = parse(specification, ["-s", "something", "--", "--foo"])
        self.assertEqual(result["-s"], "something")
        self.assertEqual(result["out"], "--foo")

    def testTerminatorWithoutOptions(self):
        specification = Specification([flag("v")], [multi_parameter("rest")])
        result = parse(specification, ["--", "-v", "--", "x"])
        self.assertNotIn("-v", result)
        self.assertEqual(result["rest"], ("-v", "--", "x"))

    def testValueLookingLikeOptionIsTakenVerbatim(self):
        specification = Specification([option("s", "value"), flag("v")], [parameter("out")])
        result = parse(specification, ["-s", "-v", "out"])
        self.assertEqual(result["-s"], "-v")
        self.assertNotIn("-v", result)

    def testMultiValueAccumulation(self):
        iterations = multi_option("i", "n", convert="int")
        result = parse(Specification([iterations]), ["-i", "1", "-i", "10", "-i", "1"])
        self.assertEqual(result[iterations], (1, 10, 1))

    def testMultiValueInGroups(self):
        users = multi_option(["u", "user"], "username")
        result = parse(Specification([flag("v"), users]), ["-vuann", "--user", "bob", "-ucid"])
        self.assertEqual(result[users], ("ann", "bob", "cid"))

    def testOffNamesClearFlag(self):
        verbose = flag(["v", "verbose"], ["q", "quiet"])
        specification = Specification([verbose])
        self.assertIs(parse(specification, ["-v"])[verbose], True)
        self.assertIs(parse(specification, ["--quiet"])[verbose], False)
        self.assertIs(parse(specification, ["-v", "-q"])[verbose], False)

    def testFlagConverterReceivesPreviousValue(self):
        verbosity = flag(["v"], ["q"], convert=_verbosity)
        result = parse(Specification([verbosity]), ["-vvv", "-q"])
        self.assertEqual(result[verbosity], 2)

    def testOptionConversionFault(self):
        specification = Specification([option("i", "n", convert="int")])
        for args in (["-i", "abc"], ["-iabc"]):
            with self.subTest(args=args):
                fault = parse(specification, args)
                self.assertIsInstance(fault, InvalidValueError)
                self.assertEqual(fault.message, 'Option -i: Cannot convert argument "abc" to a number.')
                self.assertEqual(fault.code, FaultCode.INVALID_VALUE)

    def testParameterConversionFault(self):
        fault = parse(Specification(parameters=[parameter("count", convert="byte")]), ["300"])
        self.assertIsInstance(fault, InvalidValueError)
        self.assertEqual(fault.message, 'Parameter count: "300" results in a number that is too large for a byte')

    def testCustomConverterValueError(self):
        def email(raw):
            if "@" not in raw:
                raise ValueError("Bad email address")
            return raw

        specification = Specification([option("email", "address", convert=email)])
        self.assertEqual(parse(specification, ["--email", "a@b"])["email"], "a@b")
        fault = parse(specification, ["--email", "nope"])
        self.assertIsInstance(fault, InvalidValueError)
        self.assertEqual(fault.message, "Option --email: Bad email address")

    def testCustomConverterUsageErrorPassesThrough(self):
        def reject(raw):
            raise UsageError("Nobody may be named %s." % raw, title="rejected")

        fault = parse(Specification(parameters=[parameter("name", convert=reject)]), ["bob"], name="tool")
        self.assertIs(type(fault), UsageError)
        self.assertEqual(fault.message, "Nobody may be named bob.")
        self.assertEqual(fault.code, FaultCode.DELEGATED_ERROR)
        self.assertEqual(fault.options["title"], "rejected")
        self.assertTrue(fault.usage.startswith("Nobody may be named bob.\nUsage: tool name"))


class TestParameters(TestCase):
    """Behavioral tests for positional parameter consumption."""

    def testMissingRequiredParameter(self):
        fault = parse(Specification(parameters=[parameter("foo")]), [])
        self.assertIsInstance(fault, MissingParametersError)
        self.assertEqual(fault.message, "Missing parameter(s): foo")
        self.assertEqual(fault.code, FaultCode.MISSING_PARAMETERS)

    def testMissingParametersAreListed(self):
        specification = Specification(parameters=[
            parameter("a"), parameter("b"), parameter("c"), parameter("d", optional=True),
        ])
        fault = parse(specification, ["x"])
        self.assertEqual(fault.message, "Missing parameter(s): b, c")

    def testTooManyParameters(self):
        fault = parse(Specification(), ["x"])
        self.assertIsInstance(fault, TooManyParametersError)
        self.assertEqual(fault.message, "Too many parameters.")
        self.assertEqual(fault.code, FaultCode.TOO_MANY_PARAMETERS)

    def testOptionalParameters(self):
        specification = Specification(parameters=[
            parameter("out"), parameter("mode", optional=True), multi_parameter("inputs", optional=True),
        ])
        result = parse(specification, ["o"])
        self.assertEqual(dict(result), {specification.parameters[0]: "o"})
        self.assertEqual(result.get("inputs"), ())

        result = parse(specification, ["o", "fast", "a", "b"])
        self.assertEqual(result["mode"], "fast")
        self.assertEqual(result["inputs"], ("a", "b"))

    def testRequiredMultiValueParameterNeedsOneValue(self):
        specification = Specification(parameters=[multi_parameter("inputs", convert="int")])
        self.assertIsInstance(parse(specification, []), MissingParametersError)
        self.assertEqual(parse(specification, ["1", "2"])["inputs"], (1, 2))

    def testEmptySpecificationAcceptsNothing(self):
        result = parse(Specification(), [])
        self.assertEqual(len(result), 0)


class TestParser(TestCase):
    """Behavioral tests for the Parser facade."""

    def setUp(self):
        self.iterations = option(["i", "iterations"], "n", "Total iterations", convert="int")
        self.output = parameter("outputfile", "Output file to which to write.")
        self.specification = Specification([self.iterations], [self.output])
        self.parser = Parser(self.specification, "prog")

    def testResetThenReparseIsIdentical(self):
        first = self.parser.parse(["-i", "3", "out"])
        self.assertIs(self.parser.result, first)
        self.parser.reset()
        self.assertEqual(len(self.parser.result), 0)
        second = self.parser.parse(["-i", "3", "out"])
        self.assertEqual(dict(first), dict(second))
        self.assertIsNot(first, second)

    def testFailedParseKeepsLastResult(self):
        first = self.parser.parse(["out"])
        self.assertIsInstance(self.parser.parse(["-x"]), UnknownOptionError)
        self.assertIs(self.parser.result, first)

    def testParsersSharingASpecificationAreIndependent(self):
        other = Parser(self.specification, "other")
        one = self.parser.parse(["-i", "1", "a"])
        two = other.parse(["-i", "2", "b"])
        self.assertEqual(one[self.iterations], 1)
        self.assertEqual(two[self.iterations], 2)

    def testFaultCarriesRenderedUsage(self):
        fault = self.parser.parse([])
        self.assertEqual(fault.usage, self.parser.usage("Missing parameter(s): outputfile"))
        self.assertEqual(fault.options["name"], "prog")
        self.assertTrue(fault.usage.startswith("Missing parameter(s): outputfile\nUsage: prog [OPTIONS] outputfile"))

    def testParseRejectsNonStringTokens(self):
        with self.assertRaises(TypeError):
            self.parser.parse(["-i", 3])

    def testParseRejectsBareString(self):
        with self.assertRaises(TypeError):
            self.parser.parse("-i 5 out")
        with self.assertRaises(TypeError):
            parse(self.specification, "out")

    def testParserRejectsBadConfiguration(self):
        with self.assertRaises(TypeError):
            Parser(object())
        with self.assertRaises(ValueError):
            Parser(self.specification, width=0)

    def testInvokeSplitsStrings(self):
        result = invoke(self.parser, "-i 7 'my file'")
        self.assertEqual(result[self.iterations], 7)
        self.assertEqual(result[self.output], "my file")

    def testInvokeAcceptsTokens(self):
        result = invoke(self.parser, ["--iterations", "7", "out"])
        self.assertEqual(result["iterations"], 7)

    def testInvokeRaisesFaultsOutsideShell(self):
        with self.assertRaises(UnknownOptionError) as context:
            invoke(self.parser, "-x out")
        self.assertEqual(context.exception.message, "Unknown option: -x")

    def testInvokeExitsInShellMode(self):
        parser = Parser(self.specification, "prog", shell=True, colorful=False)
        stream = io.StringIO()
        with mock.patch("argot.faults.console", Console(file=stream, width=80)):
            with self.assertRaises(SystemExit) as context:
                invoke(parser, "-x out")
        self.assertEqual(context.exception.code, 1)
        self.assertIn("Unknown option: -x", stream.getvalue())
        self.assertIn("Usage: prog [OPTIONS] outputfile", stream.getvalue())

    def testInvokeRequiresInvokable(self):
        with self.assertRaises(TypeError):
            invoke(object(), [])


if __name__ == "__main__":
    unittest.main()
