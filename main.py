from rich.pretty import pprint

from argot import *

builder = SpecificationBuilder()
iterations = builder.option(["i", "iterations"], "n", "Total iterations", convert="int")
users = builder.multi_option(["u", "user"], "username", "User to receive email.")
verbose = builder.flag(["v", "verbose"], ["q", "quiet"], "Be chatty (or not).")
output = builder.parameter("outputfile", "Output file to which to write.")
inputs = builder.multi_parameter("input", "Input files to read.", optional=True)

parser = Parser(builder.build(), "main", shell=True, fancy=True)


if __name__ == '__main__':
    pprint(dict(invoke(parser)))
