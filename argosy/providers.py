"""
Argosy provider layer: bind command-line flags to a class and dispatch actions.

What this module provides
- Provider: base class for command definitions. Subclasses declare their
  arguments as class attributes (Argument) and their actions as methods named
  '<name>_action'. Every provider inherits two implicit switches:
  --debug (-d) and --help (-h).
- Bindings: read-only mapping of the values bound by one invocation, plus the
  quoted switch names of required arguments that were never given.
- ConfigWriter: protocol of the configuration store collaborator consumed by
  Provider.write_config().
- invoke(provider, prompt): tokenize a prompt, bind it and run the action named
  by the first positional word.
- launch(provider, prompt): invoke in shell mode and exit the process.

Lifecycle of one invocation
1. class creation: the ProviderType metaclass extracts the descriptors and builds
   the immutable flag grammar once per class.
2. init(tokens): parse the tokens, apply each value (setter first, else plain
   assignment) and record the missing required arguments. Unknown modifiers are
   fatal here.
3. run(action): resolve the action (explicit, default, single inferred, help)
   and call it. Policy problems (no action, invalid action, missing arguments)
   are reported and degrade to the help action.

Quick start
    from argosy import Provider, Argument, invoke

    class Release(Provider):
        '''Bump the version of an extension'''

        extension = Argument(str, required=True, descr="Extension key")
        increment = Argument(bool, default=False, descr="Increment the patch level")

        def bump_action(self):
            self.echo("Bumping %s", self.extension)

    if __name__ == "__main__":
        invoke(Release, "bump -e news --increment", shell=True)
"""
import os.path
import shlex
import sys
from collections.abc import Iterable, Mapping, Sequence, Set
from types import MappingProxyType
from typing import Protocol, runtime_checkable

from rich.console import Console
from rich.pretty import Pretty
from rich.text import Text

from .arguments import Argument, extract
from .faults import *
from .grammar import Grammar, tokenize
from .utils import *


@runtime_checkable
class ConfigWriter(Protocol):
    """
    Configuration store collaborator.

    write_config(key, updates) merges `updates` into the persisted settings blob
    identified by `key`. Its failure modes are its own: argosy only forwards calls.
    """

    def write_config(self, key, updates): ...


class Bindings(Mapping):
    """
    Values bound by one invocation, keyed by field name, in field order.

    `missing` holds the quoted switch names ('"tables"') of required arguments
    that never received a value; it is computed once by Provider.init().
    """
    __slots__ = ("_values", "_missing")

    def __init__(self, values=(), missing=()):
        self._values = dict(values)
        self._missing = tuple(missing)

    @property
    def missing(self):
        return self._missing

    def __getitem__(self, name):
        return self._values[name]

    def __iter__(self):
        return iter(self._values)

    def __len__(self):
        return len(self._values)

    def __repr__(self):
        return "bindings(%r, missing=%r)" % (self._values, self._missing)


class ProviderType(type):
    """
    Metaclass that compiles argument declarations into a flag grammar.

    Responsibilities
    - extract the descriptors and the free-text description of the class;
    - build the Grammar (shorthands, modifier table, mask prefixes) once;
    - collect the action names ('<name>_action' methods, help excluded).

    Declaration errors (two fields deriving the same switch, a setter name that
    is not a method) surface as TypeError when the class statement runs.
    """

    def __new__(cls, name, bases, namespace, **options):
        self = super().__new__(cls, name, bases, namespace, **options)

        descriptors, description = extract(self)
        self.__grammar__ = Grammar.build(descriptors)
        self.__description__ = description
        self.__actions__ = tuple(
            attribute[:-len("_action")]
            for attribute in dir(self)
            if attribute.endswith("_action")
            and attribute not in ("_action", "help_action")
            and callable(getattr(self, attribute, None))
        )
        return self


def _method(action):
    return action.replace("-", "_") + "_action"


def _default(value):
    # help suffix for a current value; None when there is nothing worth showing
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Mapping):
        if not value:
            return None
        return ", ".join(
            " ".join([str(key), *map(str, words if isinstance(words, list | tuple) else [words])])
            for key, words in value.items()
        )
    if isinstance(value, Sequence | Set) and not isinstance(value, str):
        if not value:
            return None
        return ", ".join(map(str, value))
    return str(value)


class Provider(metaclass=ProviderType):
    """
    Base class for command definitions.

    Subclass docstrings become the help preamble; tag lines (starting with '@')
    are left out.

    Class-level knobs
    - default_action: action run when none is given (skips inference).
    - prog: program name shown in usage lines (defaults to basename of argv[0]).

    Runtime options (keyword-only constructor parameters)
    - shell: render faults with rich and exit with status 1 on fatal ones,
      instead of raising exceptions / emitting python warnings.
    - fancy: render faults inside panels.
    - colorful: colorize fault rendering.
    - console: rich Console used for all output (stdout by default).
    - writer: ConfigWriter used by write_config().
    """
    default_action = None
    prog = None

    debug = Argument(bool, default=False, descr="Print debug information")
    help = Argument(bool, default=False, descr="Print help information")

    def __init__(self, *, shell=False, fancy=False, colorful=False, console=Unset, writer=Unset):
        if not isinstance(console, Console | UnsetType):
            raise TypeError("provider 'console' must be a rich console")
        if not isinstance(writer, ConfigWriter | UnsetType):
            raise TypeError("provider 'writer' must implement write_config()")
        self._options = MappingProxyType({
            "shell": bool(shell),
            "fancy": bool(fancy),
            "colorful": bool(colorful),
        })
        self._console = coalesce(console, Console(highlight=False))
        self._writer = coalesce(writer)
        self._bindings = Bindings()

    @property
    def console(self):
        return self._console

    @property
    def bindings(self):
        return self._bindings

    def init(self, tokens, /):
        """
        Parse `tokens` against the grammar and bind the values to this provider.

        Parameters
        - tokens: Mapping[str, Iterable[str]] | Iterable[tuple[str, Iterable[str]]]
          flag token → the words that followed it (see argosy.grammar.tokenize).

        Behavior
        - an unknown modifier is fatal (raised, or printed + exit 1 in shell mode);
        - '--debug' takes effect as soon as it is parsed, so the tracing of the
          following assignments already reflects it;
        - values are applied in field order, through the field's setter when it
          has one, else by plain assignment;
        - required arguments without a value are only recorded here; run()
          reports them.

        Returns
        - Bindings (also available as self.bindings).
        """
        grammar = type(self).__grammar__

        def notify(descriptor, value):
            if descriptor.field == "debug":
                self.debug = value

        try:
            values = grammar.parse(tokens, current=lambda descriptor: getattr(self, descriptor.field), notify=notify)
        except CommandException as fault:
            self.trigger(fault)
            raise

        bound = {}
        for index in sorted(values):
            descriptor = grammar[index]
            value = values[index]
            if descriptor.setter is not None:
                self.trace("Calling setter %s with" % getattr(descriptor.setter, "__name__", descriptor.setter), value)
                descriptor.setter(self, value)
            else:
                self.trace("Setting property %s to" % descriptor.field, value)
                setattr(self, descriptor.field, value)
            bound[descriptor.field] = value

        missing = [
            '"%s"' % (descriptor.switch or descriptor.mask)
            for descriptor in grammar.descriptors
            if descriptor.required and descriptor.index not in values
        ]
        self._bindings = Bindings(bound, missing)
        return self._bindings

    def run(self, action=None, /):
        """
        Resolve the action to run and call it; return its result.

        Resolution
        1. --help forces the help action.
        2. without an action, `default_action` is used when declared,
        3. else the only '<name>_action' method (help excluded) is inferred.
        4. still nothing: "No action provided", fall back to help.
        5. no '<action>_action' method: 'Invalid action "<action>"', fall back to help.
        6. required arguments missing (and not running help): 'Missing argument(s) ...',
           fall back to help.
        """
        if action is not None and not isinstance(action, str):
            raise TypeError("run() argument must be a string")

        cls = type(self)
        if self.help:
            action = "help"
        if not action:
            if self.default_action:
                action = self.default_action
            elif len(cls.__actions__) == 1:
                action = cls.__actions__[0]

        if not action:
            self.trigger(NoActionWarning(
                "No action provided",
                title="no action",
                code=FaultCode.NO_ACTION,
                hint="name one of: %s" % conjoin(cls.__actions__, "or") if cls.__actions__ else "see the help below",
            ))
            action = "help"

        if not callable(getattr(self, _method(action), None)):
            self.trigger(InvalidActionWarning(
                'Invalid action "%s"' % action,
                title="invalid action",
                code=FaultCode.INVALID_ACTION,
                hint="name one of: %s" % conjoin(cls.__actions__, "or") if cls.__actions__ else "see the help below",
                action=action,
            ))
            action = "help"

        if (missing := self._bindings.missing) and action != "help":
            self.trigger(MissingArgumentWarning(
                "Missing %s %s" % ("argument" if len(missing) == 1 else "arguments", conjoin(missing)),
                title="missing argument",
                code=FaultCode.MISSING_ARGUMENT,
                hint="see the help below for the required switches",
                missing=missing,
            ))
            action = "help"

        self.trace("Running action %s" % action)
        return getattr(self, _method(action))()

    def render_help(self):
        """
        Render the help listing from the argument metadata.

        Layout
        - the class description, then a blank line;
        - the usage line: program name plus every required switch;
        - a blank line, then one row per argument sorted by switch name (masks by
          their mask text): the switch column padded to the longest entry + 1,
          then ': ' and the description lines, continuation lines aligned under
          the first one. A current value is appended as (defaults to "...").
        """
        cls = type(self)
        descriptors = cls.__grammar__.descriptors

        help = ""
        if cls.__description__:
            help += "\n".join(cls.__description__) + "\n\n"

        help += self.prog or os.path.basename(sys.argv[0])
        for descriptor in descriptors:
            if not descriptor.required:
                continue
            if descriptor.mask:
                help += " --%s" % descriptor.mask
            elif descriptor.shorthand:
                help += ' -%s "%s"' % (descriptor.shorthand, descriptor.switch)
            else:
                help += ' --%s "%s"' % (descriptor.switch, descriptor.switch)
        help += "\n\n"

        longest = max((len(descriptor.label) for descriptor in descriptors), default=0)
        indent = "\n" + " " * (longest + 3)
        for descriptor in sorted(descriptors, key=lambda descriptor: descriptor.switch or descriptor.mask):
            lines = list(descriptor.descr)
            if (default := _default(getattr(self, descriptor.field))) is not None:
                lines.append('(defaults to "%s")' % default)
            help += descriptor.label.ljust(longest + 1) + ": " + indent.join(lines) + "\n"

        return help

    def help_action(self):
        """
        Output help
        """
        help = self.render_help()
        self._console.print(Text(help, end=""), soft_wrap=True)
        return help

    def echo(self, message, /, *args):
        """
        Print a %-formatted message followed by a newline.

        List and tuple arguments are rendered as natural-language lists
        ("a, b and c"); use conjoin(items, "or") for another joiner word.
        """
        args = tuple(conjoin(arg) if isinstance(arg, list | tuple) else arg for arg in args)
        self._console.print(Text(str(message) % args if args else str(message)), soft_wrap=True)

    def fail(self, message, /, *args):
        """
        Stop the command with a fatal failure (exit status 1 in shell mode).
        """
        args = tuple(conjoin(arg) if isinstance(arg, list | tuple) else arg for arg in args)
        self.trigger(CommandFailure(
            str(message) % args if args else str(message),
            title="command failed",
            code=FaultCode.COMMAND_FAILURE,
        ))

    def trace(self, message, /, *objects):
        """
        Print '[Debug] message' and pretty renderings of `objects`, only with --debug.
        """
        if not self.debug:
            return
        self._console.print(Text("[Debug] " + str(message).strip()), *map(Pretty, objects), soft_wrap=True)

    def trigger(self, fault, /, **options):
        """
        Surface a fault with this provider's console and runtime options.

        Explicit `options` (console, shell, prog, ...) override the provider's own.
        """
        trigger(fault, **{
            "prog": self.prog or os.path.basename(sys.argv[0]),
            "console": self._console,
            **self._options,
        } | options)

    def write_config(self, key, updates, /):
        """
        Merge `updates` into the persisted configuration identified by `key`.

        Delegates to the ConfigWriter given at construction.
        """
        if not isinstance(key, str) or not key:
            raise TypeError("write_config() key must be a non-empty string")
        if not isinstance(updates, Mapping):
            raise TypeError("write_config() updates must be a mapping")
        if self._writer is None:
            raise NotImplementedError("%s has no configuration writer" % type(self).__name__)
        self.trace("Writing configuration %s" % key, dict(updates))
        return self._writer.write_config(key, dict(updates))


def _argv(prompt):
    if prompt is Unset:
        return sys.argv[1:]
    if isinstance(prompt, str):
        return shlex.split(prompt)
    if isinstance(prompt, Iterable):
        argv = []
        for item in prompt:
            if not isinstance(item, str):
                raise TypeError("invoke() prompt must be a string or an iterable of strings")
            argv.append(item)
        return argv
    raise TypeError("invoke() prompt must be a string or an iterable of strings")


def invoke(object, prompt=Unset, /, **options):
    """
    Run a provider against a command line.

    Parameters
    - object: Provider subclass (instantiated with **options) or Provider instance.
    - prompt:
      • Unset: read sys.argv[1:].
      • str: split with shlex.split.
      • Iterable[str]: used as-is.

    Behavior
    - the prompt is tokenized (argosy.grammar.tokenize): the first positional
      word names the action, flags carry the words that follow them;
    - the provider is initialized with the flags, then run with the action.

    Returns
    - the result of the action.
    """
    if isinstance(object, type) and issubclass(object, Provider):
        provider = object(**options)
    elif isinstance(object, Provider):
        if options:
            raise TypeError("invoke() options are only accepted with a provider class")
        provider = object
    else:
        raise TypeError("invoke() first argument must be a provider class or instance")

    positionals, tokens = tokenize(_argv(prompt))
    provider.init(tokens)
    return provider.run(positionals[0] if positionals else None)


def launch(object, prompt=Unset, /, **options):
    """
    Invoke a provider in shell mode and exit the process with status 0.

    Fatal faults exit with status 1 before reaching this point.
    """
    invoke(object, prompt, **{"shell": True} | options)
    sys.exit(0)


__all__ = (
    "Provider",
    "Bindings",
    "ConfigWriter",
    "invoke",
    "launch",
)

# Remove the internal metaclass from the module namespace to avoid accidental
# exposure in docs, autocompletion, or star-imports. Not part of the public API.
del ProviderType
