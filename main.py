import sys

from rich.pretty import pprint

from helmsman import *
from helmsman.utils import enable_logging

__prog__ = "calc"

dispatcher = Dispatcher(colorful=True)


@dispatcher.command("math", "add")
def add(x: int, y: int = 0):
    pprint(x + y)


@dispatcher.command("math", "scale", tags=(Kind.FLOAT32, Kind.FLOAT32))
def scale(value, factor):
    pprint(value * factor)


@dispatcher.command("echo")
def echo(text, loud=False):
    pprint(text.upper() if loud else text)


dispatcher.add_alias(["math", "add"], "plus")
dispatcher.add_positional_flag(["math", "add"], 1, "-y")
dispatcher.add_default(["math", "scale"], 1, "2")
dispatcher.add_value_flag(["echo"], 1, "--loud", True)


if __name__ == '__main__':
    if "--debug" in sys.argv[1:]:
        enable_logging()
    state = dispatcher.execute([token for token in sys.argv[1:] if token != "--debug"])
    sys.exit(0 if state is State.EXECUTED else 1)
