from rich.pretty import pprint

from commandant import *

__prog__ = "demo"

tokenizer = Tokenizer("/")
commander = Commander(shell=True, fancy=True, colorful=True)


@commander.command("hurt", aliases=["dmg"], description="hurt a target")
def hurt(sender, arguments, alias):
    target, amount, unit = (
        arguments.describe()
            .then(Choice("all", "self"), required=True)
            .then(Converter(int))
            .then(Choice("hp", "armor"))
            .compile()
    )
    pprint((sender, alias, target.get(), amount.get(1), unit.get("hp")))


if __name__ == '__main__':
    pprint(commander)
    with commander:
        for line in ("/dmg all 5 armor", "/hurt self", "/hrut all"):
            if invocation := tokenizer.dissect(line):
                commander.execute_name("console", invocation.name, invocation.tokens)
