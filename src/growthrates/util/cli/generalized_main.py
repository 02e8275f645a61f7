import sys
import inspect
import argparse


def _add_argument(parser, name, default, required, arg_type, nargs):
    """
    Add one argument, inferred from a function parameter, to the parser.
    """

    if required:
        parser.add_argument(name, type=arg_type, nargs=nargs)
        return

    flag = f"--{name}"
    if arg_type is bool:
        action = "store_false" if default is True else "store_true"
        parser.add_argument(flag, action=action)
        return

    # Lists and tuples become multi-valued options typed by their first entry
    if isinstance(default, (list, tuple)):
        if nargs is None:
            nargs = "+"
        if arg_type in (list, tuple):
            arg_type = type(default[0]) if len(default) > 0 else str

    # An option whose default is None is typed as a string unless overridden
    if arg_type is type(None):
        arg_type = str

    parser.add_argument(flag, type=arg_type, default=default, nargs=nargs)


def generalized_main(fcn,
                     argv=None,
                     manual_arg_defaults=None,
                     manual_arg_types=None,
                     manual_arg_nargs=None):
    """
    Build a command line parser from the signature of `fcn`, parse arguments
    and call `fcn` with them.

    Parameters without defaults become positional arguments; parameters with
    defaults become `--name` options typed by their default. Boolean
    defaults become flags. List defaults become multi-valued options.
    `**kwargs` and `*args` parameters are skipped.

    Parameters
    ----------
    fcn : callable
        function to run. Its docstring is used as the program description.
    argv : list of str, optional
        arguments to parse. If None, use sys.argv[1:]
    manual_arg_defaults : dict, optional
        defaults that differ from the signature. The argument type is set to
        the type of the value specified.
    manual_arg_types : dict, optional
        argument types, overriding anything inferred
    manual_arg_nargs : dict, optional
        argparse `nargs` values, overriding anything inferred

    Returns
    -------
    object
        whatever `fcn` returns
    """

    if argv is None:
        argv = sys.argv[1:]

    manual_arg_defaults = manual_arg_defaults or {}
    manual_arg_types = manual_arg_types or {}
    manual_arg_nargs = manual_arg_nargs or {}

    parser = argparse.ArgumentParser(prog=fcn.__name__,
                                     description=inspect.getdoc(fcn),
                                     formatter_class=argparse.RawTextHelpFormatter)

    for name, param in inspect.signature(fcn).parameters.items():

        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue

        if name in manual_arg_defaults:
            default = manual_arg_defaults[name]
            required = False
        elif param.default is not param.empty:
            default = param.default
            required = False
        else:
            default = None
            required = True

        arg_type = None if required else type(default)
        arg_type = manual_arg_types.get(name, arg_type)

        _add_argument(parser,
                      name,
                      default=default,
                      required=required,
                      arg_type=arg_type,
                      nargs=manual_arg_nargs.get(name, None))

    args = parser.parse_args(argv)

    return fcn(**vars(args))
