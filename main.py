from rich.pretty import pprint

from flagstaff import *

# python main.py hi -m ok

schema = Schema(
    args=[
        {
            "name": "required-arg",
            "type": "string",
            "help": "an argument for saying hello",
            "required": True,
        },
        {
            "name": "hello",
            "type": "string",
            "help": "an argument for saying hello",
            "default": "hey",
        },
        {
            "name": "integer",
            "type": "integer",
            "help": "an integer argument",
            "default": 5,
        },
    ],
    flags=[
        {
            "name": "toggle",
            "alias": "t",
            "type": "boolean",
            "help": "a boolean argument",
            "default": True,
        },
        {
            "name": "message",
            "alias": "m",
            "type": "string",
            "help": "a string argument",
            "required": True,
        },
        {
            "name": "defaultValueFunction",
            "alias": "d",
            "type": "string",
            "default": lambda: "hi",
            "help": "a string argument",
            "required": True,
        },
    ],
    shell=True,
)


if __name__ == '__main__':
    args, flags = schema.invoke()
    pprint(args)
    pprint(flags)
    schema.print_help()
